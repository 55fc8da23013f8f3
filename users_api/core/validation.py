"""
Request validation primitives.

Rules are declared per field with :class:`FieldRules`; :func:`validate` runs
them against a payload and collects every failure, in declaration order, into
a :class:`ValidationResult` that routers turn into the ``errors`` map.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from email_validator import EmailNotValidError, validate_email


@dataclass(frozen=True)
class Failure:
    field: str
    rule: str
    message: str


@dataclass
class ValidationResult:
    failures: list[Failure] = field(default_factory=list)

    def add(self, field_name: str, rule: str, message: str) -> None:
        self.failures.append(Failure(field=field_name, rule=rule, message=message))

    @property
    def failed(self) -> bool:
        return bool(self.failures)

    def errors(self) -> dict[str, list[str]]:
        """Field -> messages, fields in the order they first failed."""
        out: dict[str, list[str]] = {}
        for failure in self.failures:
            out.setdefault(failure.field, []).append(failure.message)
        return out


@dataclass(frozen=True)
class FieldRules:
    """Rules for one input field.

    ``required=False`` means the field is only checked when present in the
    payload. ``unique`` receives the candidate value and returns True when it
    is already taken.
    """

    required: bool = False
    string: bool = False
    email: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    unique: Optional[Callable[[str], bool]] = None


def _label(field_name: str) -> str:
    return field_name.replace("_", " ")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return not value
    return False


def is_valid_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError:
        return False
    return True


def validate(data: Mapping[str, Any], rules: Mapping[str, FieldRules]) -> ValidationResult:
    result = ValidationResult()
    for name, ruleset in rules.items():
        label = _label(name)
        if name not in data:
            if ruleset.required:
                result.add(name, "required", f"The {label} field is required.")
            continue
        value = data[name]
        if ruleset.required and _is_blank(value):
            result.add(name, "required", f"The {label} field is required.")
            continue
        if ruleset.string and not isinstance(value, str):
            result.add(name, "string", f"The {label} field must be a string.")
        if ruleset.email and not is_valid_email(value):
            result.add(name, "email", f"The {label} field must be a valid email address.")
        if isinstance(value, str):
            if ruleset.unique is not None and ruleset.unique(value):
                result.add(name, "unique", f"The {label} has already been taken.")
            if ruleset.min_length is not None and len(value) < ruleset.min_length:
                result.add(name, "min", f"The {label} field must be at least {ruleset.min_length} characters.")
            if ruleset.max_length is not None and len(value) > ruleset.max_length:
                result.add(
                    name,
                    "max",
                    f"The {label} field must not be greater than {ruleset.max_length} characters.",
                )
    return result
