"""Domain records shared by repositories and services."""

from .users import FILLABLE_FIELDS, HIDDEN_FIELDS, Page, UserRecord, fillable

__all__ = ["FILLABLE_FIELDS", "HIDDEN_FIELDS", "Page", "UserRecord", "fillable"]
