"""
Persistence adapters.

Repositories encapsulate how users are stored and read back. Services depend
on them rather than touching SQLAlchemy sessions directly.
"""

from .user_repository import DuplicateEmailError, UserRepository

__all__ = ["DuplicateEmailError", "UserRepository"]
