"""Slug derivation and collision resolution for posts and categories."""

from __future__ import annotations

import logging
import re
import secrets
import uuid
from typing import Any

from slugify import slugify
from sqlalchemy import inspect

from scribe.config import settings
from scribe.observability.metrics import SLUG_FALLBACKS
from scribe.services.store import Store

logger = logging.getLogger(__name__)

# Anything outside lowercase ASCII letters, digits, whitespace and hyphens
# is dropped rather than turned into a separator.
_DISALLOWED = re.compile(r"[^a-z0-9\s-]")


def slugify_title(title: str | None) -> str:
    """Derive the base slug for a title.

    "Hello, World!!!" becomes "hello-world". A title made only of
    punctuation yields an empty string.
    """
    stripped = _DISALLOWED.sub("", (title or "").lower())
    return slugify(stripped, max_length=200)


def numbered_slug(base: str, suffix: int | str) -> str:
    """Append ``suffix`` to ``base``; an empty base yields the suffix alone."""
    return f"{base}-{suffix}" if base else str(suffix)


async def slug_taken(
    store: Store, model: type, slug: str, exclude_id: uuid.UUID | None = None
) -> bool:
    """Check whether another record already uses ``slug``.

    Args:
        store: Store to probe
        model: Mapped class with a ``slug`` column
        slug: Candidate slug
        exclude_id: Record to ignore, normally the one being saved

    Returns:
        True if some other record holds the slug
    """
    criteria = [model.slug == slug]
    if exclude_id is not None:
        criteria.append(model.id != exclude_id)
    return await store.find_one(model, *criteria) is not None


async def generate_unique_slug(
    store: Store,
    model: type,
    title: str | None,
    exclude_id: uuid.UUID | None = None,
    max_attempts: int | None = None,
) -> str:
    """Return the first unused slug among ``base``, ``base-1``, ``base-2``...

    The record being saved (``exclude_id``) never collides with itself.
    After ``max_attempts`` numbered probes a random suffix is used instead.
    """
    base = slugify_title(title)
    if base and not await slug_taken(store, model, base, exclude_id):
        return base

    attempts = max_attempts or settings.max_slug_attempts
    for counter in range(1, attempts + 1):
        candidate = numbered_slug(base, counter)
        if not await slug_taken(store, model, candidate, exclude_id):
            return candidate

    fallback = numbered_slug(base, secrets.token_hex(3))
    SLUG_FALLBACKS.inc()
    logger.warning(
        "Slug space exhausted for %r after %d attempts, using %s",
        base,
        attempts,
        fallback,
    )
    return fallback


def source_changed(record: Any) -> bool:
    """True when the attribute slugs are derived from has pending changes."""
    state = inspect(record)
    if state.transient or state.pending:
        return True
    return state.attrs[record.slug_source].history.has_changes()


async def assign_slug(store: Store, record: Any) -> str:
    """Set ``record.slug`` unless its title is unchanged and a slug exists.

    Only reads from the store; persisting the record is left to the caller.
    """
    if record.slug and not source_changed(record):
        return record.slug
    record.slug = await generate_unique_slug(
        store,
        type(record),
        getattr(record, record.slug_source),
        exclude_id=record.id,
    )
    return record.slug
