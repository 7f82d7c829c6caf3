"""
Database models for the shortlink service.

Each store is the only writer of its own tables; rows reference each other
by opaque id or code only.
"""

from .user import User, Token
from .link import ShortLink, CodeSequence
from .click import ClickEvent

__all__ = ["User", "Token", "ShortLink", "CodeSequence", "ClickEvent"]
