"""Operator HTTP API: database health and schema lifecycle routes."""

from .app import create_app

__all__ = ["create_app"]
