"""Structured JSONL audit log of module evaluations."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class EvaluationEvent:
    """One module evaluation, successful or not."""

    timestamp: str
    module: str
    ok: bool
    stale: bool | None
    skipped: bool
    reason: str | None
    cleaned: list[str]
    error_code: str | None


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonlAuditLogger:
    """Append-only JSONL log of evaluations, readable back as events."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: EvaluationEvent) -> None:
        """Append an event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def history(
        self, module: str | None = None, limit: int | None = None
    ) -> list[EvaluationEvent]:
        """Return logged evaluations oldest first, optionally for one module.

        Lines that are not valid events are skipped; with a limit only the
        most recent events are kept.
        """
        if not self._path.exists():
            return []
        events: list[EvaluationEvent] = []
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                event = _parse_event(line)
                if event is None:
                    continue
                if module is not None and event.module != module:
                    continue
                events.append(event)
        if limit is not None:
            return events[-limit:] if limit > 0 else []
        return events


def _parse_event(line: str) -> EvaluationEvent | None:
    stripped = line.strip()
    if not stripped:
        return None
    try:
        record = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    if not isinstance(record, dict):
        return None
    try:
        return EvaluationEvent(**record)
    except TypeError:
        return None
