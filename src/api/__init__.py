"""API module - FastAPI server."""

from .server import app, create_app
from . import bugs, updates

__all__ = ["app", "create_app", "bugs", "updates"]
