"""Field rules for user input, shared by the HTTP controller and the CLI."""
from __future__ import annotations

from typing import Callable

from users_api.core.validation import FieldRules


def store_rules(email_taken: Callable[[str], bool]) -> dict[str, FieldRules]:
    return {
        "name": FieldRules(required=True, string=True, max_length=255),
        "email": FieldRules(required=True, email=True, max_length=255, unique=email_taken),
        "password": FieldRules(required=True, string=True, min_length=8),
    }


def update_rules(email_taken: Callable[[str], bool]) -> dict[str, FieldRules]:
    """Same checks as :func:`store_rules`, each applied only when the field is sent."""
    return {
        "name": FieldRules(string=True, max_length=255),
        "email": FieldRules(email=True, max_length=255, unique=email_taken),
        "password": FieldRules(string=True, min_length=8),
    }
