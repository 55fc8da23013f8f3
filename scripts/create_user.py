#!/usr/bin/env python3
"""
Create a user directly in the configured database.

Usage:
  python scripts/create_user.py --name "Jane Doe" --email jane@example.com [--password secret123]

The password is prompted for when omitted. The same field rules as
``POST /api/v1/users`` apply.
"""
from __future__ import annotations

import argparse
import getpass
import json
import sys
from pathlib import Path
from typing import Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from users_api.core.logging_config import configure_logging  # noqa: E402
from users_api.core.validation import validate  # noqa: E402
from users_api.db.create_tables import create_all  # noqa: E402
from users_api.domain.rules import store_rules  # noqa: E402
from users_api.repositories.user_repository import DuplicateEmailError, UserRepository  # noqa: E402
from users_api.services.user_service import UserService  # noqa: E402


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Create a user")
    ap.add_argument("--name", required=True, help="Display name")
    ap.add_argument("--email", required=True, help="Unique e-mail address")
    ap.add_argument("--password", help="Plain password (prompted when omitted)")
    return ap.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging()
    create_all()

    service = UserService(UserRepository())
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    data = {"name": (args.name or "").strip(), "email": (args.email or "").strip(), "password": password}
    result = validate(data, store_rules(service.user_exists_by_email))
    if result.failed:
        for failure in result.failures:
            sys.stderr.write(f"{failure.field}: {failure.message}\n")
        return 1

    try:
        user = service.create_user(data)
    except DuplicateEmailError:
        sys.stderr.write("email: The email has already been taken.\n")
        return 1
    print("OK: user created")
    print(json.dumps(user, default=str, indent=2))
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:  # pragma: no cover - CLI usage
        raise SystemExit(130)
