"""Tests for the storage layer."""

import asyncio
import os

import asyncpg
import pytest
from redis.exceptions import TimeoutError as RedisTimeoutError

from shortlinks.config import Config
from shortlinks.database import InMemoryLinkStore, Link, PostgresLinkStore, RedisCache, create_store
from shortlinks.database import cache as cache_module
from shortlinks.errors import ShortCodeConflict, StoreUnavailable
from shortlinks.shortcode import ShortCodeGenerator


OWNER = "user-1"
INTEGRATION_OWNER = "integration-test-owner"
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")


class HangingRedis:
    """Redis client whose data commands hit the socket timeout."""

    async def ping(self):
        return True

    async def get(self, key):
        raise RedisTimeoutError("Timeout reading from socket")

    async def setex(self, key, ttl, value):
        raise RedisTimeoutError("Timeout reading from socket")

    async def delete(self, key):
        raise RedisTimeoutError("Timeout reading from socket")

    async def aclose(self):
        pass


class TestInMemoryStore:

    @pytest.mark.asyncio
    async def test_insert_and_lookup(self, test_db):
        link = await test_db.insert_link("Page", "https://example.com", "abc123", OWNER)

        assert await test_db.short_code_exists("abc123")
        assert not await test_db.short_code_exists("ABC123")

        found = await test_db.get_link_by_short_code("abc123")
        assert found.id == link.id
        assert found.clicks == 0

    @pytest.mark.asyncio
    async def test_duplicate_code_rejected(self, test_db):
        await test_db.insert_link("One", "https://example.com/1", "abc123", OWNER)

        with pytest.raises(ShortCodeConflict):
            await test_db.insert_link("Two", "https://example.com/2", "abc123", "user-2")

        assert (await test_db.get_statistics("user-2"))["total_links"] == 0

    @pytest.mark.asyncio
    async def test_returned_links_are_copies(self, test_db):
        link = await test_db.insert_link("Page", "https://example.com", "abc123", OWNER)
        link.clicks = 99
        link.original_url = "https://evil.example"

        stored = await test_db.get_link(link.id, OWNER)
        assert stored.clicks == 0
        assert stored.original_url == "https://example.com"

    @pytest.mark.asyncio
    async def test_increment_clicks(self, test_db):
        link = await test_db.insert_link("Page", "https://example.com", "abc123", OWNER)

        assert await test_db.increment_clicks(link.id)
        assert await test_db.increment_clicks(link.id)
        assert not await test_db.increment_clicks("missing")

        assert (await test_db.get_link(link.id, OWNER)).clicks == 2

    @pytest.mark.asyncio
    async def test_increment_keeps_updated_at(self, test_db):
        link = await test_db.insert_link("Page", "https://example.com", "abc123", OWNER)

        await test_db.increment_clicks(link.id)

        assert (await test_db.get_link(link.id, OWNER)).updated_at == link.updated_at

    @pytest.mark.asyncio
    async def test_update_partial(self, test_db):
        link = await test_db.insert_link("Page", "https://example.com", "abc123", OWNER, description="d")

        updated = await test_db.update_link(link.id, OWNER, name="Renamed")

        assert updated.name == "Renamed"
        assert updated.original_url == "https://example.com"
        assert updated.description == "d"
        assert updated.updated_at >= link.updated_at
        assert await test_db.update_link(link.id, "user-2", name="x") is None

    @pytest.mark.asyncio
    async def test_delete_frees_code(self, test_db):
        link = await test_db.insert_link("Page", "https://example.com", "abc123", OWNER)

        assert await test_db.delete_link(link.id, "user-2") is None
        deleted = await test_db.delete_link(link.id, OWNER)

        assert deleted.short_code == "abc123"
        assert not await test_db.short_code_exists("abc123")
        assert await test_db.get_link_by_short_code("abc123") is None

    @pytest.mark.asyncio
    async def test_statistics_empty(self, test_db):
        assert await test_db.get_statistics(OWNER) == {"total_links": 0, "total_clicks": 0}

    @pytest.mark.asyncio
    async def test_to_dict_has_iso_timestamps(self, test_db):
        link = await test_db.insert_link("Page", "https://example.com", "abc123", OWNER)

        data = link.to_dict()

        assert data["short_code"] == "abc123"
        assert data["created_at"] == link.created_at.isoformat()
        assert Link.from_record(data).short_code == "abc123"


class TestCreateStore:

    def test_memory_url(self):
        store = create_store(Config(database_url="memory://"))

        assert isinstance(store, InMemoryLinkStore)

    def test_postgres_url(self):
        config = Config(
            database_url="postgresql://u:p@db:5432/links",
            database_pool_max_size=3,
            store_timeout_seconds=2.5,
        )

        store = create_store(config)

        assert isinstance(store, PostgresLinkStore)
        assert store.pool_max_size == 3
        assert store.host == "db"
        assert store.database == "links"
        assert store.user == "u"


class TestRedisCache:

    def test_cache_key(self):
        cache = RedisCache(redis_url=None)

        assert cache.get_cache_key("abc123") == "shortlinks:code:abc123"

    @pytest.mark.asyncio
    async def test_disabled_cache_is_a_miss(self):
        cache = RedisCache(redis_url=None)
        await cache.connect()

        assert not cache.enabled
        assert await cache.get_link("abc123") is None
        assert not await cache.set_link("abc123", "id", "https://example.com")
        assert not await cache.delete("abc123")
        assert not await cache.ping()
        await cache.close()

    @pytest.mark.asyncio
    async def test_connect_sets_socket_timeouts(self, monkeypatch):
        captured = {}

        def fake_from_url(url, **kwargs):
            captured.update(kwargs, url=url)
            return HangingRedis()

        monkeypatch.setattr(cache_module.redis, "from_url", fake_from_url)
        cache = RedisCache(redis_url="redis://cache:6379/0", timeout_seconds=0.25)

        await cache.connect()

        assert cache.enabled
        assert captured["url"] == "redis://cache:6379/0"
        assert captured["socket_timeout"] == 0.25
        assert captured["socket_connect_timeout"] == 0.25

    @pytest.mark.asyncio
    async def test_timeouts_are_misses(self, monkeypatch):
        monkeypatch.setattr(cache_module.redis, "from_url", lambda url, **kwargs: HangingRedis())
        cache = RedisCache(redis_url="redis://cache:6379/0")
        await cache.connect()

        assert await cache.get_link("abc123") is None
        assert not await cache.set_link("abc123", "id", "https://example.com")
        assert not await cache.delete("abc123")

    def test_cache_timeout_comes_from_config(self):
        assert Config(database_url="memory://").cache_timeout_seconds == 0.5
        assert Config(database_url="memory://", cache_timeout_seconds=2).cache_timeout_seconds == 2


class FakeConnection:
    """Stands in for an asyncpg connection, recording each query."""

    def __init__(self, row=None, rows=None, status="UPDATE 1", error=None):
        self.row = row
        self.rows = rows or []
        self.status = status
        self.error = error
        self.calls = []

    async def _run(self, query, args, result):
        self.calls.append((query, args))
        if self.error:
            raise self.error
        return result

    async def fetchrow(self, query, *args):
        return await self._run(query, args, self.row)

    async def fetch(self, query, *args):
        return await self._run(query, args, self.rows)

    async def execute(self, query, *args):
        return await self._run(query, args, self.status)


class FakeAcquire:

    def __init__(self, pool):
        self.pool = pool

    async def __aenter__(self):
        if self.pool.acquire_error:
            raise self.pool.acquire_error
        return self.pool.conn

    async def __aexit__(self, *exc_info):
        return False


class FakePool:
    """Stands in for an asyncpg pool handing out one connection."""

    def __init__(self, conn=None, acquire_error=None):
        self.conn = conn or FakeConnection()
        self.acquire_error = acquire_error
        self.closed = False

    def acquire(self, timeout=None):
        return FakeAcquire(self)

    async def close(self):
        self.closed = True


def _row(**overrides):
    row = {
        "id": "link-1",
        "name": "Page",
        "original_url": "https://example.com/page",
        "short_code": "abc123",
        "description": None,
        "owner_id": OWNER,
        "clicks": 0,
        "created_at": None,
        "updated_at": None,
    }
    row.update(overrides)
    return row


def _postgres_store(pool):
    store = PostgresLinkStore("postgresql://u:p@db:5432/links", connection_timeout_seconds=1)
    store._pools[id(asyncio.get_running_loop())] = pool
    return store


class TestPostgresStore:
    """PostgresLinkStore against a fake asyncpg pool."""

    def test_short_code_column_compares_exactly(self):
        ddl = PostgresLinkStore.CREATE_TABLE_SQL

        assert "short_code VARCHAR(6)" in ddl
        assert "short_code CHAR(" not in ddl
        assert "UNIQUE INDEX IF NOT EXISTS links_short_code_key ON links (short_code)" in ddl

    @pytest.mark.asyncio
    async def test_insert_returns_link(self):
        conn = FakeConnection(row=_row())
        store = _postgres_store(FakePool(conn))

        link = await store.insert_link("Page", "https://example.com/page", "abc123", OWNER)

        assert link.short_code == "abc123"
        query, args = conn.calls[0]
        assert "INSERT INTO links" in query
        assert "RETURNING" in query
        assert args[1:] == ("Page", "https://example.com/page", "abc123", None, OWNER)

    @pytest.mark.asyncio
    async def test_unique_violation_is_short_code_conflict(self):
        conn = FakeConnection(error=asyncpg.UniqueViolationError("duplicate key value"))
        store = _postgres_store(FakePool(conn))

        with pytest.raises(ShortCodeConflict) as exc_info:
            await store.insert_link("Page", "https://example.com/page", "abc123", OWNER)

        assert exc_info.value.short_code == "abc123"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        asyncpg.InterfaceError("pool is closed"),
        asyncpg.PostgresError("server closed the connection"),
        asyncio.TimeoutError(),
        ConnectionRefusedError("connection refused"),
    ])
    async def test_driver_errors_are_store_unavailable(self, error):
        store = _postgres_store(FakePool(FakeConnection(error=error)))

        with pytest.raises(StoreUnavailable):
            await store.get_link_by_short_code("abc123")

        with pytest.raises(StoreUnavailable):
            await store.insert_link("Page", "https://example.com/page", "abc123", OWNER)

    @pytest.mark.asyncio
    async def test_acquire_failure_is_store_unavailable(self):
        store = _postgres_store(FakePool(acquire_error=asyncpg.InterfaceError("pool is closing")))

        with pytest.raises(StoreUnavailable):
            await store.short_code_exists("abc123")
        assert not await store.health_check()

    @pytest.mark.asyncio
    async def test_lookup_passes_code_verbatim(self):
        conn = FakeConnection(row=None)
        store = _postgres_store(FakePool(conn))

        assert await store.get_link_by_short_code("abc123 ") is None
        assert not await store.short_code_exists("abc123 ")

        assert [args for _, args in conn.calls] == [("abc123 ",), ("abc123 ",)]

    @pytest.mark.asyncio
    async def test_increment_is_single_statement(self):
        conn = FakeConnection(status="UPDATE 1")
        store = _postgres_store(FakePool(conn))

        assert await store.increment_clicks("link-1")

        query, args = conn.calls[0]
        assert "clicks = clicks + 1" in query
        assert args == ("link-1",)

    @pytest.mark.asyncio
    async def test_increment_missing_link(self):
        store = _postgres_store(FakePool(FakeConnection(status="UPDATE 0")))

        assert not await store.increment_clicks("gone")

    @pytest.mark.asyncio
    async def test_update_passes_clear_flag(self):
        conn = FakeConnection(row=_row(name="Renamed"))
        store = _postgres_store(FakePool(conn))

        link = await store.update_link("link-1", OWNER, name="Renamed", clear_description=True)

        assert link.name == "Renamed"
        query, args = conn.calls[0]
        assert "WHERE id = $1 AND owner_id = $2" in query
        assert args == ("link-1", OWNER, "Renamed", None, None, True)

    @pytest.mark.asyncio
    async def test_owner_scoped_misses(self):
        store = _postgres_store(FakePool(FakeConnection(row=None)))

        assert await store.get_link("link-1", "user-2") is None
        assert await store.update_link("link-1", "user-2", name="x") is None
        assert await store.delete_link("link-1", "user-2") is None

    @pytest.mark.asyncio
    async def test_list_and_statistics(self):
        conn = FakeConnection(rows=[_row(id="b"), _row(id="a")])
        store = _postgres_store(FakePool(conn))

        links = await store.list_links(OWNER)
        assert [link.id for link in links] == ["b", "a"]
        assert "ORDER BY created_at DESC" in conn.calls[0][0]

        conn.row = {"total_links": 2, "total_clicks": 7}
        assert await store.get_statistics(OWNER) == {"total_links": 2, "total_clicks": 7}

    @pytest.mark.asyncio
    async def test_health_and_close(self):
        pool = FakePool(FakeConnection(row={"?column?": 1}))
        store = _postgres_store(pool)

        assert await store.health_check()

        await store.close()
        assert pool.closed
        assert store._pools == {}


@pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL not set")
class TestPostgresIntegration:
    """Runs against a real PostgreSQL server."""

    @pytest.fixture
    async def pg(self):
        store = PostgresLinkStore(TEST_DATABASE_URL)
        await store.init_schema()
        async with store._get_connection() as conn:
            await conn.execute("DELETE FROM links WHERE owner_id = $1", INTEGRATION_OWNER)

        yield store

        async with store._get_connection() as conn:
            await conn.execute("DELETE FROM links WHERE owner_id = $1", INTEGRATION_OWNER)
        await store.close()

    @pytest.mark.asyncio
    async def test_exact_match_and_conflict(self, pg):
        code = ShortCodeGenerator().generate_random()
        link = await pg.insert_link("Page", "https://example.com/page", code, INTEGRATION_OWNER)

        assert (await pg.get_link_by_short_code(code)).id == link.id
        assert await pg.get_link_by_short_code(code + " ") is None
        assert not await pg.short_code_exists(code + " ")

        with pytest.raises(ShortCodeConflict):
            await pg.insert_link("Again", "https://example.com/again", code, INTEGRATION_OWNER)

    @pytest.mark.asyncio
    async def test_concurrent_increments(self, pg):
        code = ShortCodeGenerator().generate_random()
        link = await pg.insert_link("Hot", "https://example.com/hot", code, INTEGRATION_OWNER)

        await asyncio.gather(*[pg.increment_clicks(link.id) for _ in range(25)])

        assert (await pg.get_link(link.id, INTEGRATION_OWNER)).clicks == 25

    @pytest.mark.asyncio
    async def test_clear_description(self, pg):
        code = ShortCodeGenerator().generate_random()
        link = await pg.insert_link("Page", "https://example.com", code, INTEGRATION_OWNER, description="d")

        updated = await pg.update_link(link.id, INTEGRATION_OWNER, clear_description=True)

        assert updated.description is None
