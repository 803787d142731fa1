"""Integration tests paginating a real PostgreSQL table."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import asyncpg
import pytest
import pytest_asyncio

from keyset_pagination import PaginationParams, PostgresDocumentStore, find_paginated


TABLE = "keyset_pagination_it_articles"


@pytest_asyncio.fixture
async def pool(test_settings) -> AsyncGenerator[asyncpg.Pool, None]:
    """Connection pool with a freshly populated articles table."""
    try:
        pool = await asyncpg.create_pool(test_settings.database_url, min_size=1, max_size=2, command_timeout=5)
    except (OSError, asyncpg.PostgresError) as e:
        pytest.skip(f"Database not available for integration tests: {e}")
    
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    async with pool.acquire() as conn:
        await conn.execute(f"DROP TABLE IF EXISTS {TABLE}")
        await conn.execute(
            f"""CREATE TABLE {TABLE} (
                id integer PRIMARY KEY,
                section text NOT NULL,
                created_at timestamptz NOT NULL
            )"""
        )
        # 30 rows spread over 6 timestamps and 2 sections, so sort values repeat
        await conn.executemany(
            f"INSERT INTO {TABLE} (id, section, created_at) VALUES ($1, $2, $3)",
            [(i, "ab"[i % 2], base + timedelta(days=i % 6)) for i in range(1, 31)]
        )
    
    yield pool
    
    async with pool.acquire() as conn:
        await conn.execute(f"DROP TABLE IF EXISTS {TABLE}")
    await pool.close()


class TestPostgresPagination:
    """Test full traversals against PostgreSQL."""
    
    @pytest.mark.asyncio
    async def test_forward_and_backward_traversal(self, pool, test_settings):
        """Test both directions visit every row once in the declared order."""
        store = PostgresDocumentStore(TABLE, pool=pool)
        sort = [("section", "asc"), ("created_at", "desc")]
        
        async with pool.acquire() as conn:
            rows = await conn.fetch(f"SELECT id FROM {TABLE} ORDER BY section ASC, created_at DESC, id ASC")
        expected = [row["id"] for row in rows]
        
        forward, after = [], None
        while True:
            connection = await find_paginated(store, PaginationParams(first=4, after=after, sort=sort), test_settings)
            assert len(connection.edges) <= 4
            forward.extend(edge.node["_id"] for edge in connection.edges)
            if not connection.page_info.has_next_page:
                break
            after = connection.page_info.end_cursor
        
        backward, before = [], None
        while True:
            connection = await find_paginated(store, PaginationParams(last=4, before=before, sort=sort), test_settings)
            backward = [edge.node["_id"] for edge in connection.edges] + backward
            if not connection.page_info.has_previous_page:
                break
            before = connection.page_info.start_cursor
        
        assert forward == expected
        assert backward == expected
    
    @pytest.mark.asyncio
    async def test_filtered_page(self, pool, test_settings):
        """Test the base query is combined with the cursor predicate."""
        store = PostgresDocumentStore(TABLE, pool=pool)
        params = PaginationParams(first=3, query={"section": "a"}, projection={"created_at": 1})
        
        first_page = await find_paginated(store, params, test_settings)
        second_page = await find_paginated(
            store,
            PaginationParams(first=3, after=first_page.page_info.end_cursor, query={"section": "a"}),
            test_settings
        )
        
        assert [edge.node["_id"] for edge in first_page.edges] == [2, 4, 6]
        assert set(first_page.edges[0].node) == {"_id", "created_at"}
        assert [edge.node["_id"] for edge in second_page.edges] == [8, 10, 12]
        assert second_page.page_info.has_previous_page is True
