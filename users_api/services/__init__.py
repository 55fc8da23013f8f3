"""
High-level use cases for the users API.

Each service orchestrates one or more repositories to implement business rules
(password hashing, response shaping). Routers call these services instead of
touching repositories or sessions directly.
"""

from .user_service import UserService

__all__ = ["UserService"]
