"""ASGI application factory and dependencies for the Mealwise server."""

from mealwise.server.app import app, create_app

__all__ = ["app", "create_app"]
