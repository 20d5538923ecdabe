"""Shared Pydantic base models and utilities."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BloomBase(BaseModel):
    """Base model with shared config for all Bloom schemas."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class CreatedAtMixin(BaseModel):
    created_at: datetime = Field(default_factory=utc_now)


class TimestampMixin(CreatedAtMixin):
    updated_at: datetime = Field(default_factory=utc_now)


class ErrorDetail(BaseModel):
    detail: str
