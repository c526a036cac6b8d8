"""Append-only test result log read by the admin surface.

A JSON array of result objects, each stamped with the time it was
recorded. This log is reporting glue: it is not guarded by the store
lock and concurrent appends from several workers may drop an entry.
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

log = structlog.get_logger()


class ResultLog:
    """Test results persisted as a JSON array."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read(self, newest_first: bool = True) -> list[dict[str, Any]]:
        """Return all results, most recent first by default."""
        if not self.path.exists():
            return []
        results = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(results, list):
            raise ValueError(f"{self.path}: expected a JSON array")
        return list(reversed(results)) if newest_first else results

    def append(self, result: dict[str, Any]) -> dict[str, Any]:
        """Record a result; returns the stored entry with its timestamp."""
        entry = {**result, "timestamp": datetime.now(UTC).isoformat()}
        results = self.read(newest_first=False)
        results.append(entry)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(results, indent=2) + "\n", encoding="utf-8")
        log.debug("test_result_recorded", path=str(self.path), total=len(results))
        return entry
