"""
JSON Preferences File Storage Implementation

DESIGN DECISION: A single JSON file is used as the durable key-value
backend because:
1. It mirrors a mobile preferences store (flat keys, primitive values)
2. No database setup required
3. Users can inspect it directly when something goes wrong

TRADEOFFS:
- Every write rewrites the whole file (fine for personal data volumes)
- No partial updates (the store does read-modify-write anyway)
- No cross-process locking (single writer assumed)

Writes go to a temp file that is then renamed over the real one,
so a crash mid-write never leaves a half-written preferences file.
"""

import json
import os
from pathlib import Path
from typing import Any

import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from budgetbee.services.storage.interface import StorageError
from budgetbee.services.storage.memory import DictKeyValueStore


logger = structlog.get_logger(__name__)


class JsonPreferencesStore(DictKeyValueStore):
    """
    File-backed key-value store.

    The whole state is loaded on construction and flushed on every
    write before the call returns.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__()
        self._ensure_parent_dir()
        self._load()
        logger.debug("preferences_store_opened", path=str(self.path), keys=len(self._data))

    def _ensure_parent_dir(self) -> None:
        """Create the data directory if it doesn't exist."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.path.parent}: {e}")

    def _load(self) -> None:
        """Load state from the preferences file."""
        if not self.path.exists():
            self._data = {}
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            self._quarantine(e)
            self._data = {}
            return

        if not isinstance(data, dict):
            self._quarantine(ValueError("preferences file is not a JSON object"))
            self._data = {}
            return

        self._data = data

    def _quarantine(self, error: Exception) -> None:
        """Move an unreadable preferences file aside so it is not overwritten."""
        corrupt_path = self.path.with_suffix(self.path.suffix + ".corrupt")
        logger.warning(
            "preferences_file_unreadable",
            path=str(self.path),
            moved_to=str(corrupt_path),
            error=str(error),
        )
        try:
            self.path.replace(corrupt_path)
        except OSError as e:
            logger.error("preferences_quarantine_failed", path=str(self.path), error=str(e))

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        reraise=True,
    )
    def _write_file(self, payload: str) -> None:
        """Atomic write: write to temp file, fsync, then rename."""
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        temp_path.replace(self.path)

    def _persist(self, data: dict[str, Any]) -> None:
        try:
            payload = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Cannot serialize preferences: {e}")

        try:
            self._write_file(payload)
        except OSError as e:
            logger.error("preferences_write_failed", path=str(self.path), error=str(e))
            raise StorageError(f"Failed to write preferences file {self.path}: {e}")

    def reload(self) -> None:
        """Re-read the preferences file, discarding in-memory state."""
        self._load()
