"""
Stores behind the HTTP gateway.

IdentityStore -> users and tokens
LinkRegistry  -> short links (reservation point for codes)
CodeGenerator -> proposes codes and reserves them through the registry
ClickRecorder -> append-only click log and derived stats
"""

from .identity_service import IdentityStore
from .link_registry import LinkRegistry
from .code_generator import CodeGenerator
from .click_recorder import ClickRecorder

__all__ = ["IdentityStore", "LinkRegistry", "CodeGenerator", "ClickRecorder"]
