"""Tests for the environment catalog."""

import pytest

from fixturepool.catalog.environments import get_catalog, list_environments
from fixturepool.core.exceptions import UnknownEnvironmentError


class TestListEnvironments:
    def test_lists_registered_environments_in_order(self) -> None:
        assert list_environments() == ["qa", "dev", "prod"]


class TestGetCatalog:
    """Tests for get_catalog()."""

    def test_returns_environment_metadata(self) -> None:
        """
        Given: The qa environment
        When: Its catalog is requested
        Then: Name, URLs and fixture types are returned
        """
        catalog = get_catalog("qa")

        assert catalog.name == "qa"
        assert catalog.display_name == "QA"
        assert catalog.base_url == "https://qa.saucedemo.com"
        assert catalog.api_url == "https://qa-api.saucedemo.com"
        assert catalog.fixture_types == ["users", "products", "orders"]

    @pytest.mark.parametrize(
        ("environment", "users", "products"),
        [("qa", 5, 5), ("dev", 6, 6), ("prod", 3, 3)],
    )
    def test_seed_sizes(self, environment: str, users: int, products: int) -> None:
        catalog = get_catalog(environment)
        assert len(catalog.fixtures["users"]) == users
        assert len(catalog.fixtures["products"]) == products
        assert catalog.fixtures["orders"] == []

    def test_seed_records_carry_role_specific_fields(self) -> None:
        catalog = get_catalog("prod")

        assert catalog.fixtures["users"][0] == {
            "id": "prod-user1",
            "username": "standard_user",
            "password": "secret_sauce",
            "role": "standard",
        }
        assert catalog.fixtures["products"][2]["sku"] == "PROD-TS-003"

    def test_ids_are_unique_per_type(self) -> None:
        for environment in list_environments():
            for records in get_catalog(environment).fixtures.values():
                ids = [r["id"] for r in records]
                assert len(ids) == len(set(ids))

    def test_returns_copy(self) -> None:
        """
        Given: A catalog entry
        When: The caller mutates it
        Then: Later lookups are unaffected
        """
        catalog = get_catalog("qa")
        catalog.fixtures["users"].clear()

        assert len(get_catalog("qa").fixtures["users"]) == 5

    def test_unknown_environment_raises(self) -> None:
        with pytest.raises(UnknownEnvironmentError) as exc_info:
            get_catalog("staging")
        assert exc_info.value.environment == "staging"
