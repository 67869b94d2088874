"""Pytest configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from shortlinks.config import Config
from shortlinks.database.memory import InMemoryLinkStore
from shortlinks.service import LinkService
from shortlinks.shortcode import ShortCodeGenerator
from shortlinks.common.logging_config import setup_logging
from shortlinks.web_app import create_app


OWNER = "user-1"
OTHER_OWNER = "user-2"


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def config():
    """Configuration pointing at the in-process store."""
    return Config(
        database_url="memory://",
        base_url="http://testserver",
        redis_url=None,
    )


@pytest.fixture
async def test_db(logger):
    """Create test store instance."""
    db = InMemoryLinkStore(logger=logger)

    yield db

    await db.close()


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator()


@pytest.fixture
def service(test_db, short_code_generator, logger) -> LinkService:
    """Create service instance."""
    return LinkService(
        db=test_db,
        cache=None,
        short_code_generator=short_code_generator,
        logger=logger,
    )


@pytest.fixture
def app(service, config):
    """Create test FastAPI app."""
    return create_app(service_instance=service, config=config)


@pytest.fixture
async def client(app):
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def auth():
    """Identity header for the default owner."""
    return {"X-User-Id": OWNER}


@pytest.fixture
def other_auth():
    """Identity header for a second owner."""
    return {"X-User-Id": OTHER_OWNER}


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/page",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
