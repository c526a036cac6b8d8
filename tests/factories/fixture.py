"""Factories for FixtureRecord and PoolStore."""

from datetime import UTC, datetime

import factory
from faker import Faker

from fixturepool.data.models.fixture import FixtureRecord, FixtureStatus, PoolStore

fake = Faker()


class UserRecordFactory(factory.Factory):
    """Factory for user credential records.

    Usage:
        # An available user
        user = UserRecordFactory()

        # A user held by a worker
        user = UserRecordFactory(in_use=True)
    """

    class Meta:
        model = FixtureRecord

    id = factory.Sequence(lambda n: f"test-user{n}")
    username = factory.LazyFunction(fake.user_name)
    password = "secret_sauce"
    role = "standard"
    status = FixtureStatus.AVAILABLE
    worker_id = None
    acquired_at = None

    class Params:
        """Factory traits for common scenarios."""

        in_use = factory.Trait(
            status=FixtureStatus.IN_USE,
            worker_id=factory.Sequence(lambda n: f"worker-{n}"),
            acquired_at=factory.LazyFunction(lambda: datetime.now(UTC)),
        )


class ProductRecordFactory(factory.Factory):
    """Factory for product records."""

    class Meta:
        model = FixtureRecord

    id = factory.Sequence(lambda n: f"test-prod{n}")
    name = factory.LazyFunction(lambda: fake.word().title())
    price = factory.LazyFunction(
        lambda: round(fake.pyfloat(min_value=1, max_value=100), 2)
    )
    sku = factory.Sequence(lambda n: f"TEST-{n:03d}")
    status = FixtureStatus.AVAILABLE
    worker_id = None
    acquired_at = None

    class Params:
        """Factory traits for common scenarios."""

        in_use = factory.Trait(
            status=FixtureStatus.IN_USE,
            worker_id=factory.Sequence(lambda n: f"worker-{n}"),
            acquired_at=factory.LazyFunction(lambda: datetime.now(UTC)),
        )


class PoolStoreFactory(factory.Factory):
    """Factory for a qa PoolStore with three users and three products.

    Usage:
        store = PoolStoreFactory(pools={"users": [UserRecordFactory(id="A")]})
    """

    class Meta:
        model = PoolStore

    environment = "qa"
    environment_name = "QA"
    base_url = "https://qa.saucedemo.com"
    api_url = "https://qa-api.saucedemo.com"
    pools = factory.LazyFunction(
        lambda: {
            "users": UserRecordFactory.build_batch(3),
            "products": ProductRecordFactory.build_batch(3),
        }
    )
