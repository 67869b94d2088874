"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .web import redirect_router
from .errors import register_exception_handlers
from .middleware.logging import LoggingMiddleware


def create_app(
    service_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service_instance: LinkService instance (may be None until lifespan startup)
        config: Configuration instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Link Shortener API",
        description="Short links with per-owner management and click counts",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Store instances in app state for access in routes
    app.state.service = service_instance
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    @app.get("/", include_in_schema=False)
    async def index():
        return {"message": "Link Shortener API"}

    app.include_router(api_router, prefix="/api", tags=["API"])

    redirect_prefix = "/" + config.redirect_prefix.strip("/")
    app.include_router(redirect_router, prefix=redirect_prefix.rstrip("/"), tags=["Redirect"])

    return app
