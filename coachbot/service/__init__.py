"""HTTP service: FastAPI application, chat relay routes and journal routes."""

from .app import create_app, get_app

__all__ = ["create_app", "get_app"]
