"""Resource pool manager.

Hands out fixtures from an environment's pool store to independent test
workers, which may live in separate processes. Every read-modify-write of
the store happens inside one critical section:

    lock -> fresh read -> scan/mutate -> single write -> unlock

The store is always re-read after the lock is obtained; nothing is cached
between calls, since another process may have changed the file. Selection
is first-available in stored order, so results are deterministic.

Usage:
    manager = ResourcePoolManager("qa")

    with manager.lease("users", holder_id="worker-1") as user:
        login(user.attributes["username"], user.attributes["password"])

    manager.status()["users"].available
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import structlog

from fixturepool.catalog.environments import EnvironmentCatalog, get_catalog
from fixturepool.config.settings import Settings, get_settings
from fixturepool.core.exceptions import PoolExhaustedError, UnknownFixtureTypeError
from fixturepool.data.lock import StoreLock
from fixturepool.data.models.fixture import FixtureRecord, PoolStore, TypeStatus
from fixturepool.data.store import PoolStoreFile, store_path_for

log = structlog.get_logger()


@dataclass
class _Session:
    """Store snapshot held inside a critical section."""

    store: PoolStore
    dirty: bool = False


class ResourcePoolManager:
    """Pool manager for one environment.

    Construct one manager per environment; switching environments means
    constructing a new manager. Instances hold no pool state of their own,
    so any number of them (in any number of processes) may share a store.

    Args:
        environment: Environment code. Defaults to `settings.test_env`.
        data_dir: Directory of store files. Defaults to `settings.data_dir`.
        settings: Settings to use. Defaults to `get_settings()`.

    Raises:
        UnknownEnvironmentError: If the environment is not in the catalog.
        LockTimeoutError: If the store must be created and the lock is busy.
    """

    def __init__(
        self,
        environment: str | None = None,
        data_dir: Path | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.environment = environment or self._settings.test_env
        self._catalog = get_catalog(self.environment)
        self.store_path = store_path_for(
            data_dir if data_dir is not None else self._settings.data_dir,
            self.environment,
        )
        self._store = PoolStoreFile(self.store_path)
        self._log = log.bind(environment=self.environment)

        if not self._store.exists():
            with self._new_lock():
                self._read_or_seed()

    def __repr__(self) -> str:
        return f"ResourcePoolManager(environment={self.environment!r}, store={str(self.store_path)!r})"

    @property
    def environment_config(self) -> EnvironmentCatalog:
        """Catalog entry of the active environment."""
        return self._catalog.model_copy(deep=True)

    def _new_lock(self) -> StoreLock:
        # One handle per critical section so threads sharing a manager
        # contend on the file lock like separate processes do.
        return StoreLock.for_store(self.store_path, self._settings)

    def _read_or_seed(self) -> PoolStore:
        """Read the store, creating it from the catalog if absent. Lock must be held."""
        if self._store.exists():
            return self._store.read()

        store = PoolStore.from_catalog(self._catalog)
        self._store.write(store)
        self._log.info(
            "pool_initialized",
            path=str(self.store_path),
            environment_name=store.environment_name,
            types=list(store.pools),
        )
        return store

    @contextmanager
    def _locked_store(self) -> Iterator[_Session]:
        """Critical section yielding a fresh store; writes it back once if dirty."""
        with self._new_lock():
            session = _Session(store=self._read_or_seed())
            yield session
            if session.dirty:
                self._store.write(session.store)

    def _pool(self, store: PoolStore, fixture_type: str) -> list[FixtureRecord]:
        try:
            return store.pools[fixture_type]
        except KeyError:
            self._log.error("unknown_fixture_type", fixture_type=fixture_type)
            raise UnknownFixtureTypeError(fixture_type, self.environment) from None

    def acquire(self, fixture_type: str, holder_id: str = "default") -> FixtureRecord:
        """Take the first available fixture of a type.

        Args:
            fixture_type: Pool to draw from, e.g. "users".
            holder_id: Identity of the worker taking the fixture.

        Returns:
            A copy of the acquired record, marked in use.

        Raises:
            PoolExhaustedError: If no record of the type is available.
            UnknownFixtureTypeError: If the environment has no such pool.
            LockTimeoutError: If the store lock could not be obtained.
        """
        with self._locked_store() as session:
            records = self._pool(session.store, fixture_type)
            record = next((r for r in records if r.is_available), None)
            if record is None:
                self._log.warning(
                    "pool_exhausted", fixture_type=fixture_type, holder_id=holder_id
                )
                raise PoolExhaustedError(fixture_type)

            record.mark_in_use(holder_id, datetime.now(UTC))
            session.dirty = True
            acquired = record.model_copy(deep=True)

        self._log.info(
            "fixture_acquired",
            fixture_type=fixture_type,
            fixture_id=acquired.id,
            holder_id=holder_id,
        )
        return acquired

    def release(self, fixture_id: str, fixture_type: str) -> None:
        """Return a fixture to its pool.

        Releasing an unknown or already available id is a no-op.

        Raises:
            UnknownFixtureTypeError: If the environment has no such pool.
            LockTimeoutError: If the store lock could not be obtained.
        """
        with self._locked_store() as session:
            records = self._pool(session.store, fixture_type)
            record = next((r for r in records if r.id == fixture_id), None)
            if record is not None:
                session.dirty = record.mark_available()

        if record is None:
            self._log.debug(
                "release_unknown_fixture", fixture_type=fixture_type, fixture_id=fixture_id
            )
        else:
            self._log.info(
                "fixture_released", fixture_type=fixture_type, fixture_id=fixture_id
            )

    def status(self) -> dict[str, TypeStatus]:
        """Point-in-time counts per fixture type.

        Lock-free and advisory: the result may be stale by the time the
        caller looks at it. Never base an acquisition decision on it.

        Raises:
            StoreCorruptError: If the store file cannot be parsed.
        """
        try:
            store = self._store.read()
        except FileNotFoundError:
            return {}
        return store.summarize()

    def cleanup(self) -> None:
        """Mark every fixture of every type available.

        Administrative recovery for workers that crashed while holding
        fixtures. Never called by acquire or release.

        Raises:
            LockTimeoutError: If the store lock could not be obtained.
        """
        with self._locked_store() as session:
            reset = 0
            for records in session.store.pools.values():
                for record in records:
                    if record.mark_available():
                        reset += 1
            session.dirty = True

        self._log.info("pool_cleaned", reset=reset)

    @contextmanager
    def lease(
        self, fixture_type: str, holder_id: str = "default"
    ) -> Iterator[FixtureRecord]:
        """Acquire a fixture for the duration of a `with` block.

        The fixture is released on exit, including when the block raises.
        """
        record = self.acquire(fixture_type, holder_id)
        try:
            yield record
        finally:
            self.release(record.id, fixture_type)
