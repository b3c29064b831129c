"""Managed backend client."""

from blog.backend.client import BackendClient

__all__ = ["BackendClient"]
