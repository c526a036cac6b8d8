"""Tests for the cross-process store lock."""

import json
import threading
from pathlib import Path

import pytest

from fixturepool.config.settings import Settings
from fixturepool.core.exceptions import LockReleaseError, LockTimeoutError
from fixturepool.data.lock import StoreLock


@pytest.fixture
def lock_path(tmp_path: Path) -> Path:
    return tmp_path / "testData-qa.json.lock"


def _fast_lock(path: Path, retries: int = 2) -> StoreLock:
    return StoreLock(path, retries=retries, min_timeout=0.01, max_timeout=0.02)


class TestStoreLockAcquire:
    """Tests for StoreLock.acquire()."""

    def test_acquire_writes_token(self, lock_path: Path) -> None:
        """
        Given: A free lock
        When: It is acquired
        Then: The lock file carries the holder's token and pid
        """
        lock = _fast_lock(lock_path)

        token = lock.acquire()
        try:
            content = json.loads(lock_path.read_text())
            assert lock.is_held
            assert content["token"] == token == lock.token
            assert isinstance(content["pid"], int)
        finally:
            lock.release()

        assert not lock.is_held
        assert lock.token is None

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        lock = _fast_lock(tmp_path / "nested" / "dir" / "store.json.lock")
        with lock:
            assert lock.path.exists()

    def test_contended_lock_times_out(self, lock_path: Path) -> None:
        """
        Given: A lock held by another handle
        When: A second handle tries to acquire it
        Then: LockTimeoutError is raised after retries + 1 attempts
        """
        holder = _fast_lock(lock_path)
        holder.acquire()
        try:
            with pytest.raises(LockTimeoutError) as exc_info:
                _fast_lock(lock_path, retries=3).acquire()
            assert exc_info.value.attempts == 4
            assert exc_info.value.path == lock_path
        finally:
            holder.release()

    def test_zero_retries_tries_once(self, lock_path: Path) -> None:
        with _fast_lock(lock_path):
            with pytest.raises(LockTimeoutError) as exc_info:
                _fast_lock(lock_path, retries=0).acquire()
        assert exc_info.value.attempts == 1

    def test_waiter_gets_lock_after_release(self, lock_path: Path) -> None:
        """
        Given: A holder that releases shortly
        When: A waiter with a generous budget acquires
        Then: The waiter obtains the lock once it is free
        """
        holder = _fast_lock(lock_path)
        holder.acquire()
        timer = threading.Timer(0.05, holder.release)
        timer.start()
        try:
            waiter = StoreLock(lock_path, retries=50, min_timeout=0.01, max_timeout=0.02)
            with waiter:
                assert waiter.is_held
        finally:
            timer.join()

    def test_handle_is_not_reentrant(self, lock_path: Path) -> None:
        lock = _fast_lock(lock_path)
        with lock:
            with pytest.raises(RuntimeError, match="already held"):
                lock.acquire()

    def test_for_store_uses_lock_settings(self, tmp_path: Path) -> None:
        settings = Settings(lock_retries=7, lock_min_timeout=0.2, lock_max_timeout=0.4)
        lock = StoreLock.for_store(tmp_path / "testData-qa.json", settings)

        assert lock.path == tmp_path / "testData-qa.json.lock"
        assert (lock.retries, lock.min_timeout, lock.max_timeout) == (7, 0.2, 0.4)


class TestStoreLockRelease:
    """Tests for StoreLock.release()."""

    def test_release_without_acquire_raises(self, lock_path: Path) -> None:
        with pytest.raises(LockReleaseError, match="not held"):
            _fast_lock(lock_path).release()

    def test_context_manager_releases_on_error(self, lock_path: Path) -> None:
        lock = _fast_lock(lock_path)
        with pytest.raises(ValueError):
            with lock:
                raise ValueError("boom")

        assert not lock.is_held
        with _fast_lock(lock_path):
            pass

    def test_removed_lock_file_is_reported(self, lock_path: Path) -> None:
        """
        Given: A held lock whose file is deleted out-of-band
        When: The holder releases
        Then: LockReleaseError reports the compromise and the handle is freed
        """
        lock = _fast_lock(lock_path)
        lock.acquire()
        lock_path.unlink()

        with pytest.raises(LockReleaseError, match="removed"):
            lock.release()
        assert not lock.is_held

    def test_replaced_lock_file_is_reported(self, lock_path: Path) -> None:
        lock = _fast_lock(lock_path)
        lock.acquire()
        lock_path.unlink()
        lock_path.write_text("{}")

        with pytest.raises(LockReleaseError, match="replaced"):
            lock.release()

    def test_token_mismatch_is_reported(self, lock_path: Path) -> None:
        lock = _fast_lock(lock_path)
        lock.acquire()
        with open(lock_path, "r+") as f:
            f.truncate()
            f.write(json.dumps({"token": "someone-else"}))

        with pytest.raises(LockReleaseError, match="token mismatch"):
            lock.release()

        # The flock itself was still dropped
        with _fast_lock(lock_path):
            pass
