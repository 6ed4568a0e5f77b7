"""JSON web API for the DNA service."""

from .app import create_app

__all__ = ['create_app']
