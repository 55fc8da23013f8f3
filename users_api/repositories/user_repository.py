"""Data access for the users table, backed by SQLAlchemy."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, ContextManager, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from users_api.db.models import User
from users_api.db.session import get_session
from users_api.domain.users import Page, UserRecord, fillable

logger = logging.getLogger("users_api.repositories.users")

DEFAULT_PER_PAGE = 15
# Largest value a signed 64-bit LIMIT/OFFSET accepts.
MAX_SQL_INT = 2**63 - 1


class DuplicateEmailError(Exception):
    """Raised when the storage unique constraint on ``users.email`` rejects a write."""

    def __init__(self, email: str | None):
        super().__init__(f"Email already registered: {email}")
        self.email = email


def _aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(entity: User) -> UserRecord:
    return UserRecord(
        id=int(entity.id),
        name=entity.name,
        email=entity.email,
        password=entity.password,
        email_verified_at=_aware(entity.email_verified_at),
        created_at=_aware(entity.created_at),
        updated_at=_aware(entity.updated_at),
    )


def _is_email_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "email" in message and ("unique" in message or "duplicate" in message)


class UserRepository:
    """CRUD helpers for users; every call opens and closes its own session."""

    def __init__(self, session_factory: Callable[[], ContextManager[Session]] = get_session) -> None:
        self._session_factory = session_factory

    def all(self) -> list[UserRecord]:
        with self._session_factory() as session:
            rows = session.execute(select(User).order_by(User.id)).scalars().all()
            return [_to_record(row) for row in rows]

    def paginate(self, per_page: int = DEFAULT_PER_PAGE, page: int = 1) -> Page:
        if isinstance(per_page, bool) or not isinstance(per_page, int) or per_page < 1:
            raise ValueError("per_page must be a positive integer")
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValueError("page must be a positive integer")
        with self._session_factory() as session:
            total = session.execute(select(func.count()).select_from(User)).scalar_one()
            offset = (page - 1) * per_page
            rows = []
            if offset < total:
                stmt = select(User).order_by(User.id).limit(min(per_page, MAX_SQL_INT)).offset(offset)
                rows = session.execute(stmt).scalars().all()
            return Page(
                current_page=page,
                data=tuple(_to_record(row) for row in rows),
                per_page=per_page,
                total=int(total),
            )

    def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        with self._session_factory() as session:
            entity = session.get(User, user_id)
            return _to_record(entity) if entity else None

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        with self._session_factory() as session:
            stmt = select(User).where(User.email == email)
            entity = session.execute(stmt).scalar_one_or_none()
            return _to_record(entity) if entity else None

    def create(self, data: dict[str, Any]) -> UserRecord:
        now = datetime.now(timezone.utc)
        entity = User(**fillable(data), created_at=now, updated_at=now)
        with self._session_factory() as session:
            session.add(entity)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if _is_email_conflict(exc):
                    logger.warning("Insert rejected by unique email constraint")
                    raise DuplicateEmailError(data.get("email")) from exc
                raise
            session.refresh(entity)
            return _to_record(entity)

    def update(self, user_id: int, data: dict[str, Any]) -> bool:
        values = fillable(data)
        with self._session_factory() as session:
            entity = session.get(User, user_id)
            if not entity:
                return False
            if not values:
                return True
            for key, value in values.items():
                setattr(entity, key, value)
            entity.updated_at = datetime.now(timezone.utc)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if _is_email_conflict(exc):
                    logger.warning("Update of user %s rejected by unique email constraint", user_id)
                    raise DuplicateEmailError(values.get("email")) from exc
                raise
            return True

    def delete(self, user_id: int) -> bool:
        with self._session_factory() as session:
            result = session.execute(delete(User).where(User.id == user_id))
            session.commit()
            return bool(result.rowcount)
