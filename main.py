import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortlink_app.api.v1 import links, redirect
from shortlink_app.config import Settings, settings as default_settings
from shortlink_app.exceptions import GenerationExhaustedError, StorageError
from shortlink_app.logging_config import setup_logging
from shortlink_app.queue.dispatcher import ClickDispatcher
from shortlink_app.services.allocator import CodeAllocator
from shortlink_app.services.link_service import LinkService
from shortlink_app.services.short_code_strategies import SecureRandomShortCodeStrategy
from shortlink_app.storage.factory import LinkStoreFactory, StoreBackend
from shortlink_app.storage.strategies import LinkStore

logger = logging.getLogger("shortlink_app.main")


def create_app(settings: Optional[Settings] = None, store: Optional[LinkStore] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The store, click dispatcher and link service are created once in the
    lifespan and passed explicitly to each other. Tests pass an in-memory
    store (or memory settings) instead of Redis.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.log_file, settings.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        link_store = store
        if link_store is None:
            link_store = LinkStoreFactory.create(StoreBackend(settings.store_backend), settings)
        await link_store.connect()

        dispatcher = ClickDispatcher(
            link_store,
            workers=settings.click_workers,
            queue_size=settings.click_queue_size,
            shutdown_timeout=settings.click_shutdown_timeout,
        )
        await dispatcher.start()

        allocator = CodeAllocator(
            SecureRandomShortCodeStrategy(length=settings.short_code_length),
            max_attempts=settings.max_allocation_attempts,
        )
        app.state.settings = settings
        app.state.link_service = LinkService(
            link_store,
            allocator,
            dispatcher,
            atomic_create=settings.allocation_mode == "atomic",
        )
        logger.info(
            "%s %s started (store=%s, allocation=%s, base_url=%s)",
            settings.app_name, settings.app_version,
            settings.store_backend if store is None else type(store).__name__,
            settings.allocation_mode, settings.base_url,
        )

        try:
            yield
        finally:
            await dispatcher.stop()
            await link_store.close()
            logger.info("%s stopped", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="A URL shortener service built with FastAPI and Redis",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid request: URL is required"},
        )

    @app.exception_handler(StorageError)
    @app.exception_handler(GenerationExhaustedError)
    async def server_error_handler(request: Request, exc: Exception):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "environment": settings.environment}

    ######## Include routers
    app.include_router(links.router, prefix="/api")
    app.include_router(redirect.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
