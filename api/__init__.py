"""
Solutil API package.

Provides the FastAPI application for the Solutil access-control and provider
verification service.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
