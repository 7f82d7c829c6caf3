"""Shortlink service: accounts, short links and click analytics behind a FastAPI gateway."""

__version__ = "1.0.0"
