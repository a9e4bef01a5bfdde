"""Tests for list filtering and pagination of posts."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from scribe.models.category import Category
from scribe.models.post import Post
from scribe.services.post_query import (
    MAX_INT,
    Pagination,
    build_post_query,
    parse_flag,
    parse_positive_int,
)
from scribe.services.post_service import PostService

BASE_TIME = datetime(2026, 1, 1, tzinfo=UTC)


@pytest.mark.parametrize(
    ("total", "limit", "pages"),
    [(0, 10, 1), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 10, 3), (100, 100, 1)],
)
def test_page_count(total, limit, pages):
    assert Pagination.from_total(total, 1, limit).pages == pages


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, 7),
        ("", 7),
        ("abc", 7),
        ("0", 7),
        ("3", 3),
        (4, 4),
        ("-2", 1),
        ("2.5", 2),
        (" 12abc", 12),
        (str(10**19), MAX_INT),
        ("9" * 5000, MAX_INT),
    ],
)
def test_parse_positive_int(raw, expected):
    assert parse_positive_int(raw, 7) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, None), ("true", True), ("TRUE", True), ("false", False), ("1", False)],
)
def test_parse_flag(raw, expected):
    assert parse_flag(raw) is expected


class TestPlanDefaults:
    @pytest.mark.asyncio
    async def test_defaults(self, store):
        plan = build_post_query(store)
        assert plan.criteria == ()
        assert (plan.page, plan.limit, plan.offset) == (1, 10, 0)

    @pytest.mark.asyncio
    async def test_limit_capped(self, store):
        assert build_post_query(store, limit="500").limit == 100

    @pytest.mark.asyncio
    async def test_offset(self, store):
        assert build_post_query(store, page="3", limit="5").offset == 10

    @pytest.mark.asyncio
    async def test_malformed_category_ignored(self, store):
        assert build_post_query(store, category="not-an-id").criteria == ()

    @pytest.mark.asyncio
    async def test_blank_search_ignored(self, store):
        assert build_post_query(store, search="   ").criteria == ()


@pytest_asyncio.fixture
async def seeded(store, store_user, store_category):
    """Twelve posts, alternating published state, one per hour."""
    other = await store.insert(Category(name="Other", slug="other"))
    for index in range(12):
        await store.insert(
            Post(
                title=f"Post {index}",
                slug=f"post-{index}",
                content="python tips" if index % 3 == 0 else "general chatter",
                author_id=store_user.id,
                category_id=store_category.id if index < 9 else other.id,
                is_published=index % 2 == 0,
                created_at=BASE_TIME + timedelta(hours=index),
            )
        )
    return {"general": store_category, "other": other}


class TestPaginate:
    @pytest.mark.asyncio
    async def test_newest_first(self, store, seeded):
        posts, pagination = await PostService(store).paginate(
            build_post_query(store, limit="5")
        )
        assert [p.slug for p in posts] == [f"post-{i}" for i in (11, 10, 9, 8, 7)]
        assert pagination == Pagination(total=12, page=1, pages=3, limit=5)

    @pytest.mark.asyncio
    async def test_last_page_partial(self, store, seeded):
        posts, pagination = await PostService(store).paginate(
            build_post_query(store, page="3", limit="5")
        )
        assert [p.slug for p in posts] == ["post-1", "post-0"]
        assert pagination.page == 3

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, store, seeded):
        posts, pagination = await PostService(store).paginate(
            build_post_query(store, page="9", limit="5")
        )
        assert posts == []
        assert pagination.total == 12
        assert pagination.pages == 3

    @pytest.mark.asyncio
    async def test_huge_page_skips_the_page_query(self, store, seeded, monkeypatch):
        async def fail_find(*args, **kwargs):
            raise AssertionError("page past the end was queried")

        monkeypatch.setattr(store, "find", fail_find)
        posts, pagination = await PostService(store).paginate(
            build_post_query(store, page=str(10**19), limit="100")
        )
        assert posts == []
        assert pagination.page == MAX_INT
        assert pagination.total == 12

    @pytest.mark.asyncio
    async def test_category_filter(self, store, seeded):
        plan = build_post_query(store, category=str(seeded["other"].id))
        posts, pagination = await PostService(store).paginate(plan)
        assert {p.slug for p in posts} == {"post-9", "post-10", "post-11"}
        assert pagination.total == 3

    @pytest.mark.asyncio
    async def test_published_filter(self, store, seeded):
        posts, pagination = await PostService(store).paginate(
            build_post_query(store, is_published="true", limit="20")
        )
        assert pagination.total == 6
        assert all(p.is_published for p in posts)

    @pytest.mark.asyncio
    async def test_search_matches_title_or_content(self, store, seeded):
        posts, _ = await PostService(store).paginate(
            build_post_query(store, search="PYTHON", limit="20")
        )
        assert {p.slug for p in posts} == {"post-0", "post-3", "post-6", "post-9"}

    @pytest.mark.asyncio
    async def test_search_any_word(self, store, seeded):
        posts, _ = await PostService(store).paginate(
            build_post_query(store, search="tips 11", limit="20")
        )
        assert {p.slug for p in posts} == {
            "post-0",
            "post-3",
            "post-6",
            "post-9",
            "post-11",
        }

    @pytest.mark.asyncio
    async def test_search_wildcards_are_literal(self, store, seeded):
        posts, pagination = await PostService(store).paginate(
            build_post_query(store, search="%")
        )
        assert posts == []
        assert pagination.pages == 1

    @pytest.mark.asyncio
    async def test_empty_store(self, store):
        posts, pagination = await PostService(store).paginate(build_post_query(store))
        assert posts == []
        assert pagination == Pagination(total=0, page=1, pages=1, limit=10)
