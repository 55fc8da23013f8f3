from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from users_api.core.validation import ValidationResult, validate
from users_api.domain.rules import store_rules, update_rules
from users_api.domain.users import fillable
from users_api.repositories.user_repository import DEFAULT_PER_PAGE, DuplicateEmailError
from users_api.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger("users_api.routers.users")

NOT_FOUND_MESSAGE = "User not found"
VALIDATION_MESSAGE = "Validation failed"
TAKEN_MESSAGE = "The email has already been taken."
# Passwords are stored exactly as sent.
UNTRIMMED_FIELDS = frozenset({"password"})
MAX_ID = 2**63 - 1


def _get_user_service(request: Request) -> UserService:
    svc = getattr(getattr(request.app, "state", None), "user_service", None)
    if not svc:
        raise RuntimeError("UserService is not configured")
    return svc


def _respond(payload: dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(jsonable_encoder(payload), status_code=status_code)


def _not_found() -> JSONResponse:
    return _respond({"success": False, "message": NOT_FOUND_MESSAGE}, status_code=404)


def _validation_failed(errors: dict[str, list[str]]) -> JSONResponse:
    return _respond({"success": False, "message": VALIDATION_MESSAGE, "errors": errors}, status_code=422)


def _parse_id(raw: str) -> Optional[int]:
    value = (raw or "").strip()
    if not (value.isascii() and value.isdigit()):
        return None
    parsed = int(value)
    return parsed if parsed <= MAX_ID else None


def _positive_int(raw: Optional[str], default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default
    return value if 0 < value <= MAX_ID else default


def _normalize(payload: dict[str, Any]) -> dict[str, Any]:
    """Trim string inputs and turn blank strings into None."""
    out: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, str) and key not in UNTRIMMED_FIELDS:
            value = value.strip()
        if value == "":
            value = None
        out[key] = value
    return out


async def _payload(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    if not isinstance(body, dict):
        return {}
    return _normalize(body)


def _email_taken() -> JSONResponse:
    result = ValidationResult()
    result.add("email", "unique", TAKEN_MESSAGE)
    return _validation_failed(result.errors())


@router.get("")
def index(request: Request):
    svc = _get_user_service(request)
    default = getattr(request.app.state, "default_per_page", DEFAULT_PER_PAGE)
    per_page = _positive_int(request.query_params.get("per_page"), default)
    page = _positive_int(request.query_params.get("page"), 1)
    users = svc.get_paginated_users(per_page, page)
    return _respond({"success": True, "data": users.to_dict()})


def _store(svc: UserService, data: dict[str, Any]) -> JSONResponse:
    result = validate(data, store_rules(svc.user_exists_by_email))
    if result.failed:
        logger.debug("Rejected user creation: %s", sorted(result.errors()))
        return _validation_failed(result.errors())
    try:
        user = svc.create_user(fillable(data))
    except DuplicateEmailError:
        return _email_taken()
    return _respond(
        {"success": True, "message": "User created successfully", "data": user},
        status_code=201,
    )


@router.post("")
async def store(request: Request):
    svc = _get_user_service(request)
    data = await _payload(request)
    # Hashing and database I/O block, so they stay off the event loop.
    return await run_in_threadpool(_store, svc, data)


@router.get("/{user_id}")
def show(user_id: str, request: Request):
    svc = _get_user_service(request)
    uid = _parse_id(user_id)
    user = svc.get_user_by_id(uid) if uid is not None else None
    if not user:
        return _not_found()
    return _respond({"success": True, "data": user})


def _update(svc: UserService, user_id: str, data: dict[str, Any]) -> JSONResponse:
    uid = _parse_id(user_id)
    result = validate(data, update_rules(lambda value: svc.user_exists_by_email(value, ignore_id=uid)))
    if result.failed:
        logger.debug("Rejected update of user %s: %s", user_id, sorted(result.errors()))
        return _validation_failed(result.errors())
    if uid is None:
        return _not_found()
    try:
        user = svc.update_user(uid, fillable(data))
    except DuplicateEmailError:
        return _email_taken()
    if not user:
        return _not_found()
    return _respond({"success": True, "message": "User updated successfully", "data": user})


@router.api_route("/{user_id}", methods=["PUT", "PATCH"])
async def update(user_id: str, request: Request):
    svc = _get_user_service(request)
    data = await _payload(request)
    return await run_in_threadpool(_update, svc, user_id, data)


@router.delete("/{user_id}")
def destroy(user_id: str, request: Request):
    svc = _get_user_service(request)
    uid = _parse_id(user_id)
    if uid is None or not svc.delete_user(uid):
        return _not_found()
    return _respond({"success": True, "message": "User deleted successfully"})
