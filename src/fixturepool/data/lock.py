"""Cross-process lock scoped to one pool store file.

The lock is an exclusive `flock` on a sidecar file (`<store>.lock`).
Attempts are non-blocking and retried with exponential backoff through
tenacity, so contention surfaces as `LockTimeoutError` instead of an
unbounded wait. The kernel drops the lock when the holding process dies.

Usage:
    lock = StoreLock(Path("data/pools/testData-qa.json.lock"))
    with lock:
        ...  # read-modify-write the store
"""

import fcntl
import json
import os
import socket
import time
import uuid
from pathlib import Path
from types import TracebackType
from typing import IO

import structlog
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fixturepool.config.settings import Settings
from fixturepool.core.exceptions import LockReleaseError, LockTimeoutError

log = structlog.get_logger()


class _LockBusy(Exception):
    """Another holder has the lock; retried by tenacity."""


class StoreLock:
    """Exclusive, token-carrying lock handle for a store file.

    A handle is not reentrant: acquiring it twice without releasing
    raises RuntimeError.

    Attributes:
        path: Lock file path.
        retries: Attempts after the first one before giving up.
        min_timeout: Initial backoff between attempts (seconds).
        max_timeout: Backoff ceiling (seconds).
    """

    def __init__(
        self,
        path: Path,
        *,
        retries: int = 10,
        min_timeout: float = 0.1,
        max_timeout: float = 1.0,
    ) -> None:
        self.path = Path(path)
        self.retries = retries
        self.min_timeout = min_timeout
        self.max_timeout = max_timeout
        self._file: IO[str] | None = None
        self._token: str | None = None

    @classmethod
    def for_store(cls, store_path: Path, settings: Settings) -> "StoreLock":
        """Build the lock guarding `store_path` from lock settings."""
        return cls(
            store_path.with_name(store_path.name + ".lock"),
            retries=settings.lock_retries,
            min_timeout=settings.lock_min_timeout,
            max_timeout=settings.lock_max_timeout,
        )

    @property
    def is_held(self) -> bool:
        return self._file is not None

    @property
    def token(self) -> str | None:
        """Token of the current holding, None when not held."""
        return self._token

    def acquire(self) -> str:
        """Obtain the lock, retrying within the configured budget.

        Returns:
            The token identifying this holding.

        Raises:
            LockTimeoutError: If every attempt found the lock busy.
        """
        if self.is_held:
            raise RuntimeError(f"Lock {self.path} is already held by this handle")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        retrying = Retrying(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_exponential(
                multiplier=self.min_timeout, min=self.min_timeout, max=self.max_timeout
            ),
            retry=retry_if_exception_type(_LockBusy),
        )
        try:
            retrying(self._try_acquire)
        except RetryError as e:
            attempts = e.last_attempt.attempt_number
            log.warning("lock_timeout", path=str(self.path), attempts=attempts)
            raise LockTimeoutError(self.path, attempts) from None

        assert self._token is not None
        return self._token

    def _try_acquire(self) -> None:
        f = open(self.path, "a+", encoding="utf-8")
        try:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            f.close()
            raise _LockBusy(str(self.path)) from None
        except BaseException:
            f.close()
            raise

        token = uuid.uuid4().hex
        f.seek(0)
        f.truncate()
        f.write(
            json.dumps(
                {
                    "token": token,
                    "pid": os.getpid(),
                    "host": socket.gethostname(),
                    "acquiredAt": time.time(),
                }
            )
        )
        f.flush()
        self._file = f
        self._token = token

    def release(self) -> None:
        """Release the lock.

        The descriptor is always unlocked and closed. If the lock file was
        removed or replaced while held, or no longer carries this handle's
        token, the holding was compromised and LockReleaseError is raised.

        Raises:
            LockReleaseError: If the lock is not held or was compromised.
        """
        f, token = self._file, self._token
        if f is None:
            raise LockReleaseError(self.path, "lock is not held")
        self._file = None
        self._token = None

        problem: str | None = None
        try:
            problem = self._verify(f, token)
        finally:
            try:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            finally:
                f.close()

        if problem is not None:
            log.error("lock_compromised", path=str(self.path), reason=problem)
            raise LockReleaseError(self.path, problem)

    def _verify(self, f: IO[str], token: str | None) -> str | None:
        try:
            on_disk = os.stat(self.path)
        except FileNotFoundError:
            return "lock file was removed while held"
        held = os.fstat(f.fileno())
        if (on_disk.st_dev, on_disk.st_ino) != (held.st_dev, held.st_ino):
            return "lock file was replaced while held"

        f.seek(0)
        try:
            current = json.loads(f.read()).get("token")
        except (ValueError, AttributeError):
            current = None
        if current != token:
            return "lock token mismatch"
        return None

    def __enter__(self) -> "StoreLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
