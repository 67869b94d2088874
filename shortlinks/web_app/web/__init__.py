"""Public redirect endpoint."""

from .routes import router as redirect_router

__all__ = ["redirect_router"]
