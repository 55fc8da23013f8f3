"""FastAPI application wiring the users controller, service and repository."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from users_api.core.config import Settings, get_settings
from users_api.core.logging_config import configure_logging
from users_api.db.create_tables import create_all
from users_api.repositories.user_repository import UserRepository
from users_api.routers import users as users_router
from users_api.services.user_service import UserService

logger = logging.getLogger("users_api.app")


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"success": False, "message": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def _server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"success": False, "message": "Server Error"}, status_code=500)


def create_app(
    settings: Optional[Settings] = None,
    *,
    user_service: Optional[UserService] = None,
    create_tables: bool = False,
) -> FastAPI:
    """Build the application; the service graph is created once here."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if create_tables:
        create_all()

    app = FastAPI(title="Users API")
    app.state.user_service = user_service or UserService(UserRepository())
    app.state.default_per_page = settings.default_per_page

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _server_error)
    app.include_router(users_router.router, prefix=settings.api_prefix)
    logger.info("Users API ready under %s (%s)", settings.api_prefix, settings.app_env)
    return app
