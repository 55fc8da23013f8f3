"""Plain user records and the page container returned by listings."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

# Never included in any serialised user.
HIDDEN_FIELDS = frozenset({"password"})
FILLABLE_FIELDS = ("name", "email", "password")


@dataclass(frozen=True)
class UserRecord:
    id: int
    name: str
    email: str
    password: str = field(repr=False)
    email_verified_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if key not in HIDDEN_FIELDS}


@dataclass(frozen=True)
class Page:
    """One slice of an ordered listing plus the numbers needed to walk it."""

    current_page: int
    data: tuple[UserRecord, ...]
    per_page: int
    total: int

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def first_item(self) -> Optional[int]:
        if not self.data:
            return None
        return (self.current_page - 1) * self.per_page + 1

    @property
    def last_item(self) -> Optional[int]:
        first = self.first_item
        if first is None:
            return None
        return first + len(self.data) - 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_page": self.current_page,
            "data": [record.to_dict() for record in self.data],
            "per_page": self.per_page,
            "total": self.total,
            "last_page": self.last_page,
            "from": self.first_item,
            "to": self.last_item,
        }


def fillable(data: dict[str, Any]) -> dict[str, Any]:
    """Keep only the fields callers may write."""
    return {key: data[key] for key in FILLABLE_FIELDS if key in data}
