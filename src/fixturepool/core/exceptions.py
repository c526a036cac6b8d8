"""FixturePool exception hierarchy.

This module defines the base exception class and specialized exceptions
for the failure modes of the pool manager, its lock and its store.
"""

from pathlib import Path


class FixturePoolError(Exception):
    """Base exception for all FixturePool errors.

    All custom exceptions in FixturePool should inherit from this class
    so callers can catch every pool failure with a single except clause.
    """

    pass


class ConfigurationError(FixturePoolError):
    """Raised when configuration is invalid or missing.

    Example:
        raise ConfigurationError("lock_max_timeout must be >= lock_min_timeout")
    """

    pass


class UnknownEnvironmentError(ConfigurationError):
    """Raised when an environment name is not registered in the catalog.

    Attributes:
        environment: The environment name that was requested.

    Example:
        raise UnknownEnvironmentError("staging")
    """

    def __init__(self, environment: str) -> None:
        self.environment = environment
        super().__init__(f"Unknown environment: {environment!r}")


class UnknownFixtureTypeError(ConfigurationError):
    """Raised when a fixture type has no pool in the active environment.

    Attributes:
        fixture_type: The fixture type that was requested.
        environment: The environment the request was made against.
    """

    def __init__(self, fixture_type: str, environment: str) -> None:
        self.fixture_type = fixture_type
        self.environment = environment
        super().__init__(
            f"Unknown fixture type {fixture_type!r} for environment {environment!r}"
        )


class PoolExhaustedError(FixturePoolError):
    """Raised when a pool has no available fixture left.

    Recoverable: release other fixtures or reduce worker concurrency
    and retry the acquire.

    Attributes:
        fixture_type: The pool that is exhausted.

    Example:
        raise PoolExhaustedError("users")
    """

    def __init__(self, fixture_type: str) -> None:
        self.fixture_type = fixture_type
        super().__init__(f"No available {fixture_type} in the pool")


class LockTimeoutError(FixturePoolError):
    """Raised when the store lock could not be obtained within the retry budget.

    Recoverable: the caller may retry the whole operation.

    Attributes:
        path: Path of the lock file.
        attempts: Number of lock attempts made.
    """

    def __init__(self, path: Path, attempts: int) -> None:
        self.path = path
        self.attempts = attempts
        super().__init__(f"Timed out acquiring lock {path} after {attempts} attempts")


class LockReleaseError(FixturePoolError):
    """Raised when releasing the store lock fails.

    The preceding mutation may or may not be durable, and the lock file
    may be left in an inconsistent state.

    Attributes:
        path: Path of the lock file.
        reason: Why the release failed.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to release lock {path}: {reason}")


class StoreCorruptError(FixturePoolError):
    """Raised when the persisted pool document cannot be parsed or validated.

    Never repaired automatically: it indicates a prior failed write or
    an out-of-band edit.

    Attributes:
        path: Path of the store file.
        reason: Parser or validation message.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Pool store {path} is corrupt: {reason}")
