"""Database access for Contested."""

from .client import get_client

__all__ = ["get_client"]
