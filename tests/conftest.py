"""Shared pytest fixtures for FixturePool tests.

This module provides fixtures for:
- Isolated settings pointing at a per-test data directory
- Pool managers bound to that directory
- Writing hand-built stores for scenario tests
- Test data factories

Usage:
    def test_something(manager):
        user = manager.acquire("users", "worker-1")
        assert user.id == "qa-user1"
"""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from fixturepool import cli
from fixturepool.api import app as api_app
from fixturepool.config.settings import Settings, get_settings
from fixturepool.core.pool_manager import ResourcePoolManager
from fixturepool.data.models.fixture import PoolStore
from fixturepool.data.store import PoolStoreFile, store_path_for
from tests.factories import PoolStoreFactory, ProductRecordFactory, UserRecordFactory

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(autouse=True)
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Settings, None, None]:
    """Point every test at its own data directory with fast lock backoff."""
    monkeypatch.setenv("TEST_ENV", "qa")
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "pools"))
    monkeypatch.setenv("RESULTS_PATH", str(tmp_path / "reports" / "test-results.json"))
    monkeypatch.setenv("LOCK_RETRIES", "5")
    monkeypatch.setenv("LOCK_MIN_TIMEOUT", "0.01")
    monkeypatch.setenv("LOCK_MAX_TIMEOUT", "0.05")
    monkeypatch.delenv("FIXTUREPOOL_WORKER_ID", raising=False)
    monkeypatch.delenv("PYTEST_XDIST_WORKER", raising=False)
    get_settings.cache_clear()

    yield get_settings()

    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep structlog on its defaults so cached loggers never hold captured streams."""
    monkeypatch.setattr(cli, "configure_logging", lambda: None)
    monkeypatch.setattr(api_app, "configure_logging", lambda: None)


@pytest.fixture
def data_dir(settings: Settings) -> Path:
    return settings.data_dir


# =============================================================================
# Pool Fixtures
# =============================================================================


@pytest.fixture
def manager(settings: Settings) -> ResourcePoolManager:
    """Pool manager for the qa environment, seeded from the catalog."""
    return ResourcePoolManager("qa", settings=settings)


@pytest.fixture
def write_store(data_dir: Path) -> Callable[[PoolStore], Path]:
    """Persist a hand-built store for its environment and return its path."""

    def _write(store: PoolStore) -> Path:
        path = store_path_for(data_dir, store.environment)
        PoolStoreFile(path).write(store)
        return path

    return _write


# =============================================================================
# Factory Fixtures
# =============================================================================


@pytest.fixture
def user_factory() -> type[UserRecordFactory]:
    """Provide user record factory."""
    return UserRecordFactory


@pytest.fixture
def product_factory() -> type[ProductRecordFactory]:
    """Provide product record factory."""
    return ProductRecordFactory


@pytest.fixture
def store_factory() -> type[PoolStoreFactory]:
    """Provide pool store factory."""
    return PoolStoreFactory
