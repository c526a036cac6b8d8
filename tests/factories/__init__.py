"""Test data factories using factory_boy.

These factories generate pool records and stores for FixturePool tests.
"""

from tests.factories.fixture import (
    PoolStoreFactory,
    ProductRecordFactory,
    UserRecordFactory,
)

__all__ = [
    "PoolStoreFactory",
    "ProductRecordFactory",
    "UserRecordFactory",
]
