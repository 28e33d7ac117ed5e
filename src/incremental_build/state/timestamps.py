"""Keyed modification-time store."""

from __future__ import annotations

from pathlib import Path

from incremental_build.errors import StoreLoadError
from incremental_build.state.storage import (
    STATE_SCHEMA_VERSION,
    atomic_write_json,
    read_state_payload,
)


class TimestampStore:
    """Maps string keys (absolute file paths) to last-seen mtimes in milliseconds."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._entries: dict[str, int] = {}

    @property
    def path(self) -> Path:
        """Return on-disk JSON path."""
        return self._path

    def load(self) -> None:
        """Replace in-memory entries with the persisted ones, if any.

        A missing file is a first run and leaves the store empty. A file that
        exists but cannot be parsed raises StoreLoadError.
        """
        payload = read_state_payload(self._path)
        if payload is None:
            self._entries = {}
            return
        raw = payload.get("timestamps")
        if not isinstance(raw, dict):
            raise StoreLoadError(self._path, "'timestamps' must be an object")
        entries: dict[str, int] = {}
        for key, value in raw.items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise StoreLoadError(self._path, f"timestamp for '{key}' must be an integer")
            entries[key] = value
        self._entries = entries

    def get(self, key: str) -> int | None:
        """Return the recorded value, or None when there is no record."""
        return self._entries.get(key)

    def set(self, key: str, value: int) -> None:
        """Upsert a value in memory."""
        self._entries[key] = value

    def snapshot(self) -> dict[str, int]:
        """Return a copy of the in-memory mapping."""
        return dict(self._entries)

    def save(self) -> None:
        """Persist the full mapping, replacing any previous file."""
        atomic_write_json(
            self._path,
            {
                "schema_version": STATE_SCHEMA_VERSION,
                "timestamps": dict(sorted(self._entries.items())),
            },
        )
