"""
Domain models for the shortlink service.

Links live in a key-value store (Redis in production), so the entity is a
plain pydantic model rather than an ORM mapping.
"""

from .link import Link

__all__ = ["Link"]
