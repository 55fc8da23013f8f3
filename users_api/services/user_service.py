"""
User management use cases (list, read, create, update, delete).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from users_api.core.security import hash_password
from users_api.domain.users import Page, UserRecord
from users_api.repositories.user_repository import DEFAULT_PER_PAGE, UserRepository

logger = logging.getLogger("users_api.services.users")


def _detail(user: UserRecord) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "email_verified_at": user.email_verified_at,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def _created(user: UserRecord) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "created_at": user.created_at,
    }


class UserService:
    """Applies password hashing and shapes users into response records."""

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def _with_hashed_password(self, data: dict[str, Any]) -> dict[str, Any]:
        payload = dict(data)
        if payload.get("password") is not None:
            payload["password"] = hash_password(payload["password"])
        return payload

    def get_all_users(self) -> list[UserRecord]:
        return self._users.all()

    def get_paginated_users(self, per_page: int = DEFAULT_PER_PAGE, page: int = 1) -> Page:
        return self._users.paginate(per_page, page)

    def get_user_by_id(self, user_id: int) -> Optional[dict[str, Any]]:
        user = self._users.find_by_id(user_id)
        if not user:
            return None
        return _detail(user)

    def create_user(self, data: dict[str, Any]) -> dict[str, Any]:
        user = self._users.create(self._with_hashed_password(data))
        logger.info("Created user %s", user.id)
        return _created(user)

    def update_user(self, user_id: int, data: dict[str, Any]) -> Optional[dict[str, Any]]:
        updated = self._users.update(user_id, self._with_hashed_password(data))
        if not updated:
            return None
        logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(data)) or "no fields")
        return self.get_user_by_id(user_id)

    def delete_user(self, user_id: int) -> bool:
        deleted = self._users.delete(user_id)
        if deleted:
            logger.info("Deleted user %s", user_id)
        return deleted

    def user_exists_by_email(self, email: str, ignore_id: Optional[int] = None) -> bool:
        user = self._users.find_by_email(email)
        if user is None:
            return False
        return ignore_id is None or user.id != ignore_id
