"""Pydantic models for pool store validation and serialization."""

from fixturepool.data.models.fixture import (
    FixtureRecord,
    FixtureStatus,
    PoolStore,
    TypeStatus,
)

__all__ = [
    "FixtureRecord",
    "FixtureStatus",
    "PoolStore",
    "TypeStatus",
]
