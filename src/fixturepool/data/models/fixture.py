"""Fixture pool Pydantic models.

This module defines the records tracked by a pool store and the store
document itself. The persisted layout is a flat JSON object: every pool
is a top-level array keyed by its fixture type, next to the environment
metadata keys.

Example document:
    {
      "users": [
        {"id": "qa-user1", "username": "qa_standard_user", "status": "available"},
        {"id": "qa-user2", "username": "qa_problem_user", "status": "in-use",
         "workerId": "worker-1", "acquiredAt": "2024-05-01T12:00:00Z"}
      ],
      "products": [...],
      "environment": "qa",
      "environmentName": "QA",
      "baseUrl": "https://qa.saucedemo.com",
      "apiUrl": "https://qa-api.saucedemo.com"
    }
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fixturepool.catalog.environments import EnvironmentCatalog

METADATA_KEYS = ("environment", "environmentName", "baseUrl", "apiUrl")


class FixtureStatus(str, Enum):
    """Lifecycle status of a fixture."""

    AVAILABLE = "available"
    IN_USE = "in-use"


class FixtureRecord(BaseModel):
    """A single reusable fixture.

    Role-specific fields (username/password for users, name/price/sku for
    products) are kept as extra fields and exposed through `attributes`.

    Attributes:
        id: Unique identifier within its pool.
        status: Available or in use.
        worker_id: Holder identity, set iff the fixture is in use.
        acquired_at: Acquisition time, set iff the fixture is in use.

    Example:
        record = FixtureRecord(id="qa-user1", username="qa_standard_user")
        record.mark_in_use("worker-1", datetime.now(UTC))
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(min_length=1, description="Unique identifier within its pool")
    status: FixtureStatus = Field(default=FixtureStatus.AVAILABLE)
    worker_id: str | None = Field(default=None, alias="workerId")
    acquired_at: datetime | None = Field(default=None, alias="acquiredAt")

    @model_validator(mode="after")
    def validate_holder(self) -> "FixtureRecord":
        """Holder and timestamp are present together, and only when in use."""
        has_holder = self.worker_id is not None
        has_timestamp = self.acquired_at is not None
        if has_holder != has_timestamp:
            raise ValueError(
                f"{self.id}: workerId and acquiredAt must both be set or both be absent"
            )
        if (self.status == FixtureStatus.IN_USE) != has_holder:
            raise ValueError(
                f"{self.id}: status {self.status.value!r} inconsistent with holder"
            )
        return self

    @property
    def attributes(self) -> dict[str, Any]:
        """Role-specific fields of the record."""
        return dict(self.model_extra or {})

    @property
    def is_available(self) -> bool:
        return self.status == FixtureStatus.AVAILABLE

    def mark_in_use(self, worker_id: str, acquired_at: datetime) -> None:
        self.status = FixtureStatus.IN_USE
        self.worker_id = worker_id
        self.acquired_at = acquired_at

    def mark_available(self) -> bool:
        """Reset to available. Returns True if anything changed."""
        changed = not self.is_available or self.worker_id is not None
        self.status = FixtureStatus.AVAILABLE
        self.worker_id = None
        self.acquired_at = None
        return changed

    def to_document(self) -> dict[str, Any]:
        """Serialize for the store file; holder keys are omitted when absent."""
        doc = self.model_dump(mode="json", by_alias=True)
        if self.worker_id is None:
            doc.pop("workerId", None)
            doc.pop("acquiredAt", None)
        return doc


class TypeStatus(BaseModel):
    """Aggregate status of one pool.

    Attributes:
        total: Number of records in the pool.
        available: Records currently available.
        in_use: Records currently held by a worker.
        records: Copies of the records, in stored order.
    """

    model_config = ConfigDict(populate_by_name=True)

    total: int = Field(ge=0)
    available: int = Field(ge=0)
    in_use: int = Field(ge=0, alias="inUse")
    records: list[FixtureRecord] = Field(default_factory=list, alias="items")


class PoolStore(BaseModel):
    """The persisted state of every pool of one environment.

    Attributes:
        environment: Environment code.
        environment_name: Display name of the environment.
        base_url: Application base URL.
        api_url: Application API URL.
        pools: Ordered records per fixture type.
    """

    model_config = ConfigDict(populate_by_name=True)

    environment: str
    environment_name: str = Field(alias="environmentName")
    base_url: str = Field(alias="baseUrl")
    api_url: str = Field(alias="apiUrl")
    pools: dict[str, list[FixtureRecord]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "PoolStore":
        """Record ids are unique within each pool."""
        for fixture_type, records in self.pools.items():
            seen: set[str] = set()
            for record in records:
                if record.id in seen:
                    raise ValueError(f"duplicate id {record.id!r} in pool {fixture_type!r}")
                seen.add(record.id)
        return self

    @classmethod
    def from_catalog(cls, catalog: EnvironmentCatalog) -> "PoolStore":
        """Seed a fresh store with every record available."""
        return cls(
            environment=catalog.name,
            environment_name=catalog.display_name,
            base_url=catalog.base_url,
            api_url=catalog.api_url,
            pools={
                fixture_type: [
                    FixtureRecord.model_validate(
                        {**seed, "status": FixtureStatus.AVAILABLE.value}
                    )
                    for seed in seeds
                ]
                for fixture_type, seeds in catalog.fixtures.items()
            },
        )

    @classmethod
    def from_document(cls, doc: Any) -> "PoolStore":
        """Parse the flat persisted layout.

        Raises:
            ValueError: If the document is not an object, or a key other than
                the metadata keys does not hold an array of records.
            pydantic.ValidationError: If a field or record is invalid.
        """
        if not isinstance(doc, dict):
            raise ValueError(f"expected a JSON object, got {type(doc).__name__}")
        pools = {key: value for key, value in doc.items() if key not in METADATA_KEYS}
        for fixture_type, value in pools.items():
            if not isinstance(value, list):
                raise ValueError(
                    f"pool {fixture_type!r} must be an array, got {type(value).__name__}"
                )
        metadata = {key: doc.get(key) for key in METADATA_KEYS}
        return cls.model_validate({**metadata, "pools": pools})

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            fixture_type: [record.to_document() for record in records]
            for fixture_type, records in self.pools.items()
        }
        doc.update(
            environment=self.environment,
            environmentName=self.environment_name,
            baseUrl=self.base_url,
            apiUrl=self.api_url,
        )
        return doc

    def summarize(self) -> dict[str, TypeStatus]:
        """Per-type counts plus copies of the records."""
        summary: dict[str, TypeStatus] = {}
        for fixture_type, records in self.pools.items():
            available = sum(1 for r in records if r.is_available)
            summary[fixture_type] = TypeStatus(
                total=len(records),
                available=available,
                in_use=len(records) - available,
                records=[r.model_copy(deep=True) for r in records],
            )
        return summary
