"""Tests for slug derivation and collision handling."""

from __future__ import annotations

import re

import pytest

from scribe.models.category import Category
from scribe.models.post import Post
from scribe.services.slugs import (
    assign_slug,
    generate_unique_slug,
    numbered_slug,
    slugify_title,
)

SLUG_SHAPE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class TestSlugifyTitle:
    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Hello, World!!!", "hello-world"),
            ("  Leading and trailing  ", "leading-and-trailing"),
            ("Multiple   spaces\tand\nlines", "multiple-spaces-and-lines"),
            ("dash -- dash", "dash-dash"),
            ("--Already-Hyphenated--", "already-hyphenated"),
            ("Don't Panic", "dont-panic"),
            ("C++ & Python 3.12", "c-python-312"),
            ("Café au lait", "caf-au-lait"),
            ("!!!", ""),
            ("", ""),
        ],
    )
    def test_known_titles(self, title, expected):
        assert slugify_title(title) == expected

    @pytest.mark.parametrize(
        "title",
        [
            "Hello, World!!!",
            "  --  ",
            "Ünïcödé & Ëmöjï 🎉 post",
            "a - - b",
            "Title_with_underscores",
            "MiXeD CaSe 123",
        ],
    )
    def test_only_lowercase_digits_and_single_hyphens(self, title):
        slug = slugify_title(title)
        assert slug == "" or SLUG_SHAPE.match(slug)

    def test_none_title(self):
        assert slugify_title(None) == ""


def test_numbered_slug():
    assert numbered_slug("hello-world", 2) == "hello-world-2"
    assert numbered_slug("", 3) == "3"


async def _seed(store, *slugs: str) -> None:
    for slug in slugs:
        await store.insert(Category(name=slug or "blank", slug=slug))


class TestGenerateUniqueSlug:
    @pytest.mark.asyncio
    async def test_unused_base_returned_as_is(self, store):
        assert await generate_unique_slug(store, Category, "Hello, World!!!") == (
            "hello-world"
        )

    @pytest.mark.asyncio
    async def test_collision_appends_counter(self, store):
        await _seed(store, "hello-world")
        assert await generate_unique_slug(store, Category, "Hello, World!!!") == (
            "hello-world-1"
        )

    @pytest.mark.asyncio
    async def test_first_unused_counter_wins(self, store):
        await _seed(store, "news", "news-1", "news-2", "news-4")
        assert await generate_unique_slug(store, Category, "News") == "news-3"

    @pytest.mark.asyncio
    async def test_result_never_in_existing_set(self, store):
        existing = {"roadmap", "roadmap-1", "roadmap-3"}
        await _seed(store, *existing)
        slug = await generate_unique_slug(store, Category, "Roadmap")
        assert slug not in existing
        assert slug == "roadmap-2"

    @pytest.mark.asyncio
    async def test_own_record_does_not_collide(self, store):
        category = await store.insert(Category(name="Tools", slug="tools"))
        slug = await generate_unique_slug(
            store, Category, "Tools", exclude_id=category.id
        )
        assert slug == "tools"

    @pytest.mark.asyncio
    async def test_empty_base_is_disambiguated_with_counter(self, store):
        assert await generate_unique_slug(store, Category, "!!!") == "1"
        await _seed(store, "1")
        assert await generate_unique_slug(store, Category, "???") == "2"

    @pytest.mark.asyncio
    async def test_exhausted_attempts_fall_back_to_random_suffix(self, store):
        await _seed(store, "busy", "busy-1", "busy-2")
        slug = await generate_unique_slug(store, Category, "Busy", max_attempts=2)
        assert re.fullmatch(r"busy-[0-9a-f]{6}", slug)


class TestAssignSlug:
    @pytest.mark.asyncio
    async def test_new_record_gets_slug(self, store):
        category = Category(name="Hello, World!!!")
        assert await assign_slug(store, category) == "hello-world"
        assert category.slug == "hello-world"

    @pytest.mark.asyncio
    async def test_unchanged_title_keeps_existing_slug(
        self, store, store_user, store_category
    ):
        post = await store.insert(
            Post(
                title="Stable Title",
                slug="custom-slug",
                content="Body",
                author_id=store_user.id,
                category_id=store_category.id,
            )
        )
        assert await assign_slug(store, post) == "custom-slug"
        post.content = "Edited body"
        assert await assign_slug(store, post) == "custom-slug"

    @pytest.mark.asyncio
    async def test_renamed_record_gets_new_slug(
        self, store, store_user, store_category
    ):
        post = await store.insert(
            Post(
                title="Old Title",
                slug="old-title",
                content="Body",
                author_id=store_user.id,
                category_id=store_category.id,
            )
        )
        post.title = "New Title"
        assert await assign_slug(store, post) == "new-title"

    @pytest.mark.asyncio
    async def test_rename_to_same_title_is_a_noop(self, store):
        category = await store.insert(Category(name="Same", slug="same-7"))
        category.name = "Same"
        assert await assign_slug(store, category) == "same-7"
