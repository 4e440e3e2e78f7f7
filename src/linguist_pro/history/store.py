"""Bounded refinement history mirrored to key-value storage."""

from __future__ import annotations

import json
import logging
import sqlite3
import time

from pydantic import TypeAdapter, ValidationError

from linguist_pro.models.refinement import RefinementRecord
from linguist_pro.storage.kv_store import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "linguist_history"
DEFAULT_MAX_ENTRIES = 10

_RECORDS = TypeAdapter(list[RefinementRecord])


class HistoryStore:
    """Most-recent-first log of refinements, capped at ``max_entries``.

    The in-memory list owned by the caller is authoritative. Every mutation
    rewrites the stored JSON snapshot wholesale.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = DEFAULT_STORAGE_KEY,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        self.storage = storage
        self.key = key
        self.max_entries = max_entries

    def load(self) -> list[RefinementRecord]:
        """Read the stored history. Missing or corrupt data yields an empty log."""
        try:
            raw = self.storage.get(self.key)
        except (sqlite3.Error, OSError):
            logger.warning(
                "Stored history under %r could not be read, starting empty", self.key, exc_info=True
            )
            return []
        if not raw:
            return []
        try:
            records = _RECORDS.validate_python(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            logger.warning("Stored history under %r is unreadable, starting empty", self.key)
            return []
        return records[: self.max_entries]

    def record(
        self,
        entry: RefinementRecord,
        current: list[RefinementRecord],
    ) -> list[RefinementRecord]:
        """Prepend ``entry``, drop anything past the cap and persist.

        A failed write is logged; the returned list stays authoritative.
        """
        updated = [entry, *current][: self.max_entries]
        try:
            self._save(updated)
        except Exception:
            logger.exception("Failed to persist history under %r", self.key)
        return updated

    def clear(self) -> list[RefinementRecord]:
        """Erase the stored history."""
        try:
            self.storage.delete(self.key)
        except Exception:
            logger.exception("Failed to erase stored history under %r", self.key)
        return []

    def _save(self, records: list[RefinementRecord]) -> None:
        self.storage.set(self.key, _RECORDS.dump_json(records).decode("utf-8"))

    @staticmethod
    def new_record(
        original: str,
        refined: str,
        now_ms: int | None = None,
    ) -> RefinementRecord:
        """Build a record stamped with the creation time, which doubles as its id."""
        timestamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
        return RefinementRecord(
            id=str(timestamp),
            original=original,
            refined=refined,
            timestamp=timestamp,
        )
