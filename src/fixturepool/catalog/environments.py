"""Environment catalog.

Static seed data for each test environment:
- qa: QA environment, five users and five products
- dev: Development environment, six users and six products
- prod: Production environment, three users and three products

The catalog is read-only. Pool stores are seeded from it once, the first
time an environment is accessed; after that the persisted store is
authoritative.
"""

import copy
from typing import Any

import structlog
from pydantic import BaseModel, Field

from fixturepool.core.exceptions import UnknownEnvironmentError

log = structlog.get_logger()


class EnvironmentCatalog(BaseModel):
    """Seed data and metadata for one environment.

    Attributes:
        name: Environment code (e.g. "qa").
        display_name: Human readable name (e.g. "QA").
        base_url: Application base URL.
        api_url: Application API URL.
        color: Display color used by reporters.
        fixtures: Seed records per fixture type, in pool order.
    """

    name: str
    display_name: str
    base_url: str
    api_url: str
    color: str = "#6B7280"
    fixtures: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)

    @property
    def fixture_types(self) -> list[str]:
        """Fixture types seeded for this environment."""
        return list(self.fixtures)


def _users(prefix: str, usernames: list[tuple[str, str]]) -> list[dict[str, Any]]:
    return [
        {
            "id": f"{prefix}-user{i}",
            "username": username,
            "password": "secret_sauce",
            "role": role,
        }
        for i, (username, role) in enumerate(usernames, start=1)
    ]


def _products(
    prefix: str, products: list[tuple[str, float, str]]
) -> list[dict[str, Any]]:
    return [
        {"id": f"{prefix}-prod{i}", "name": name, "price": price, "sku": sku}
        for i, (name, price, sku) in enumerate(products, start=1)
    ]


# ============================================================================
# QA
# ============================================================================
QA = EnvironmentCatalog(
    name="qa",
    display_name="QA",
    base_url="https://qa.saucedemo.com",
    api_url="https://qa-api.saucedemo.com",
    color="#10B981",
    fixtures={
        "users": _users(
            "qa",
            [
                ("qa_standard_user", "standard"),
                ("qa_problem_user", "problem"),
                ("qa_performance_user", "performance"),
                ("qa_error_user", "error"),
                ("qa_visual_user", "visual"),
            ],
        ),
        "products": _products(
            "qa",
            [
                ("QA Backpack", 29.99, "QA-BP-001"),
                ("QA Bike Light", 9.99, "QA-BL-002"),
                ("QA T-Shirt", 15.99, "QA-TS-003"),
                ("QA Fleece Jacket", 49.99, "QA-FJ-004"),
                ("QA Onesie", 7.99, "QA-ON-005"),
            ],
        ),
        "orders": [],
    },
)


# ============================================================================
# DEV
# ============================================================================
DEV = EnvironmentCatalog(
    name="dev",
    display_name="Development",
    base_url="https://dev.saucedemo.com",
    api_url="https://dev-api.saucedemo.com",
    color="#F97316",
    fixtures={
        "users": _users(
            "dev",
            [
                ("dev_standard_user", "standard"),
                ("dev_problem_user", "problem"),
                ("dev_performance_user", "performance"),
                ("dev_error_user", "error"),
                ("dev_visual_user", "visual"),
                ("dev_admin_user", "admin"),
            ],
        ),
        "products": _products(
            "dev",
            [
                ("DEV Backpack", 29.99, "DEV-BP-001"),
                ("DEV Bike Light", 9.99, "DEV-BL-002"),
                ("DEV T-Shirt", 15.99, "DEV-TS-003"),
                ("DEV Fleece Jacket", 49.99, "DEV-FJ-004"),
                ("DEV Onesie", 7.99, "DEV-ON-005"),
                ("DEV Test Product", 99.99, "DEV-TP-006"),
            ],
        ),
        "orders": [],
    },
)


# ============================================================================
# PROD
# ============================================================================
PROD = EnvironmentCatalog(
    name="prod",
    display_name="Production",
    base_url="https://www.saucedemo.com",
    api_url="https://api.saucedemo.com",
    color="#8B5CF6",
    fixtures={
        "users": _users(
            "prod",
            [
                ("standard_user", "standard"),
                ("problem_user", "problem"),
                ("performance_glitch_user", "performance"),
            ],
        ),
        "products": _products(
            "prod",
            [
                ("Sauce Labs Backpack", 29.99, "PROD-BP-001"),
                ("Sauce Labs Bike Light", 9.99, "PROD-BL-002"),
                ("Sauce Labs Bolt T-Shirt", 15.99, "PROD-TS-003"),
            ],
        ),
        "orders": [],
    },
)


ENVIRONMENTS: dict[str, EnvironmentCatalog] = {env.name: env for env in (QA, DEV, PROD)}


def list_environments() -> list[str]:
    """Return registered environment codes in catalog order."""
    return list(ENVIRONMENTS)


def get_catalog(environment: str) -> EnvironmentCatalog:
    """Look up the seed data for an environment.

    Args:
        environment: Environment code, e.g. "qa".

    Returns:
        A deep copy of the catalog entry; mutating it does not affect
        the registry.

    Raises:
        UnknownEnvironmentError: If the environment is not registered.
    """
    try:
        entry = ENVIRONMENTS[environment]
    except KeyError:
        log.error("unknown_environment", environment=environment, known=list(ENVIRONMENTS))
        raise UnknownEnvironmentError(environment) from None
    return copy.deepcopy(entry)
