"""Persisted set of relative resource paths."""

from __future__ import annotations

from pathlib import Path

from incremental_build.errors import StoreLoadError
from incremental_build.state.storage import (
    STATE_SCHEMA_VERSION,
    atomic_write_json,
    read_state_payload,
)


class ResourceSetStore:
    """Unordered set of resource paths seen by one run."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._paths: set[str] = set()

    @property
    def path(self) -> Path:
        """Return on-disk JSON path."""
        return self._path

    def load(self) -> None:
        """Replace in-memory paths with the persisted ones, if any."""
        payload = read_state_payload(self._path)
        if payload is None:
            self._paths = set()
            return
        raw = payload.get("resources")
        if not isinstance(raw, list):
            raise StoreLoadError(self._path, "'resources' must be a list")
        paths: set[str] = set()
        for item in raw:
            if not isinstance(item, str):
                raise StoreLoadError(self._path, "'resources' must contain only strings")
            paths.add(item)
        self._paths = paths

    def add(self, path: str) -> None:
        self._paths.add(path)

    def remove(self, path: str) -> bool:
        """Drop a path; returns whether it was present."""
        if path not in self._paths:
            return False
        self._paths.remove(path)
        return True

    def discard(self, path: str) -> None:
        self._paths.discard(path)

    def is_empty(self) -> bool:
        return not self._paths

    def paths(self) -> frozenset[str]:
        """Return an immutable snapshot of the current paths."""
        return frozenset(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def save(self) -> None:
        """Persist the set in sorted order, replacing any previous file."""
        atomic_write_json(
            self._path,
            {
                "schema_version": STATE_SCHEMA_VERSION,
                "resources": sorted(self._paths),
            },
        )
