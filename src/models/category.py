"""Article/question categories shown in navigation and filters."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Category(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    slug: str
    description: str | None = None
    color: str = "#3B82F6"
    created_at: datetime | None = None


class CreateCategoryData(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: str | None = None
    color: str = Field(default="#3B82F6", pattern=r"^#[0-9A-Fa-f]{6}$")


class UpdateCategoryData(BaseModel):
    """Partial update; only fields that are set are sent."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    slug: str | None = None
    description: str | None = None
    color: str | None = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
