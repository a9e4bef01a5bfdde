"""Pydantic schemas for categories."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CategorySummary(BaseModel):
    """Category as embedded in a post."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str


class CategoryOut(CategorySummary):
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
