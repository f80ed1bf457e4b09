"""
Academy API package.

Provides the FastAPI application for the subscription-gated course platform.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
