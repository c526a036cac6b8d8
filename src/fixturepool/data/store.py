"""Persistent pool store file.

One JSON document per environment, human readable (indent 2). Writes go
to a temporary file in the same directory and are moved into place with
`os.replace`, so a reader or a failed write never sees a partial document.

This class does no locking of its own; `ResourcePoolManager` is the only
writer and always holds the store lock around read-modify-write cycles.
"""

import json
import os
import tempfile
from pathlib import Path

import structlog
from pydantic import ValidationError

from fixturepool.core.exceptions import StoreCorruptError
from fixturepool.data.models.fixture import PoolStore

log = structlog.get_logger()


def store_path_for(data_dir: Path, environment: str) -> Path:
    """Path of the store file for an environment."""
    return Path(data_dir) / f"testData-{environment}.json"


class PoolStoreFile:
    """Reads and writes a `PoolStore` document at a fixed path."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> PoolStore:
        """Load and validate the store.

        Raises:
            FileNotFoundError: If the store has not been created yet.
            StoreCorruptError: If the file is not valid JSON or fails validation.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise self._corrupt(f"not UTF-8: {e}") from e

        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as e:
            raise self._corrupt(f"invalid JSON: {e}") from e

        try:
            return PoolStore.from_document(doc)
        except (ValidationError, ValueError) as e:
            raise self._corrupt(str(e)) from e

    def write(self, store: PoolStore) -> None:
        """Atomically replace the store document."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(store.to_document(), indent=2) + "\n"

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                # mkstemp creates 0600; admin tools read the store directly
                os.fchmod(f.fileno(), 0o644)
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _corrupt(self, reason: str) -> StoreCorruptError:
        log.error("pool_store_corrupt", path=str(self.path), reason=reason)
        return StoreCorruptError(self.path, reason)
