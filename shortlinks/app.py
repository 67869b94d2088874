"""
Main entry point for the shortlinks service.

Concurrency: requests are served concurrently via async I/O (FastAPI +
asyncpg connection pool + redis.asyncio). The service holds no shared
in-process state, so WORKERS > 1 or several instances can share one store.

Usage:
    shortlinks-server

Environment variables:
    DATABASE_URL - postgresql://... or memory://
    DATABASE_CREATE_TABLES - Create the links table on startup
    STORE_TIMEOUT_SECONDS - Upper bound for each store operation
    REDIS_URL - Redis connection URL (optional)
    CACHE_TIMEOUT_SECONDS - Socket timeout for each Redis call
    BASE_URL - Fallback base URL for short links
    OWNER_HEADER - Header carrying the authenticated user id
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .config import load_config
from .database import create_store
from .database.cache import RedisCache
from .service import LinkService
from .shortcode import ShortCodeGenerator
from .common.logging_config import setup_logging
from .web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting shortlinks service...")

    db = create_store(config, logger=logger)
    logger.info(f"Using link store {type(db).__name__}")

    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            timeout_seconds=config.cache_timeout_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")
        cache = None

    service = LinkService(
        db=db,
        cache=cache,
        short_code_generator=ShortCodeGenerator(),
        logger=logger,
        max_allocation_attempts=config.max_allocation_attempts,
        store_timeout_seconds=config.store_timeout_seconds,
    )
    app.state.service = service

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down shortlinks service...")
    await service.close()
    logger.info("Service stopped")


def build_app(config=None, logger=None) -> FastAPI:
    """Create the application with its lifespan wired in."""
    config = config or load_config()
    logger = logger or setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    app = create_app(service_instance=None, config=config)
    app.state.logger = logger
    app.router.lifespan_context = lifespan
    return app


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Link Shortener Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'database_url', 'redis_url'})}")

    app = build_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
