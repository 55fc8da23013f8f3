"""Entry point for uvicorn/gunicorn: ``uvicorn users_api.app_factory:app``."""
from users_api.app import create_app

app = create_app(create_tables=True)

__all__ = ["app", "create_app"]
