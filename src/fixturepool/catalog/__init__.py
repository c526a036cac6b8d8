"""Static environment catalog used to seed pool stores."""

from fixturepool.catalog.environments import (
    EnvironmentCatalog,
    get_catalog,
    list_environments,
)

__all__ = ["EnvironmentCatalog", "get_catalog", "list_environments"]
