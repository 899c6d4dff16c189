"""HTTP transport for repogist (FastAPI)."""

from repogist.api.main import app, create_app

__all__ = ["app", "create_app"]
