"""
FastAPI dependencies for dependency injection.

The store, dispatcher and service are built once in the application
lifespan and kept on app.state; these functions only hand them out.

Pattern: Dependency Injection
- No module-level singletons
- Easy to test (create_app with an in-memory store)
"""

from fastapi import Request

from shortlink_app.config import Settings
from shortlink_app.services.link_service import LinkService


def get_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def get_link_service(request: Request) -> LinkService:
    """
    Get the LinkService built at startup.

    Controllers depend on the service only; the service owns the store,
    allocator and click dispatcher.
    """
    return request.app.state.link_service
