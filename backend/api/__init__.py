"""
Cup of Sugar API package.

Provides the FastAPI application for the mutual-aid request service.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
