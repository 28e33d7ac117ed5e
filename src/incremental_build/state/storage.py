"""Shared JSON persistence for state stores."""

from __future__ import annotations

import json
from pathlib import Path

from incremental_build.errors import StoreLoadError, StoreSaveError

STATE_SCHEMA_VERSION = 1


def read_state_payload(path: Path) -> dict[str, object] | None:
    """Read a state file; None means no prior run wrote one."""
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise StoreLoadError(path, f"invalid JSON ({exc.msg})") from exc
    except UnicodeDecodeError as exc:
        raise StoreLoadError(path, "not UTF-8 text") from exc
    except OSError as exc:
        raise StoreLoadError(path, exc.strerror or str(exc)) from exc
    if not isinstance(payload, dict):
        raise StoreLoadError(path, "top-level value must be an object")
    schema = payload.get("schema_version")
    if not isinstance(schema, int) or isinstance(schema, bool):
        raise StoreLoadError(path, "missing schema_version")
    if schema != STATE_SCHEMA_VERSION:
        raise StoreLoadError(
            path, f"unsupported schema_version {schema}, expected {STATE_SCHEMA_VERSION}"
        )
    return payload


def atomic_write_json(path: Path, payload: dict[str, object]) -> None:
    """Write through a temp file so readers never see a partial file."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, sort_keys=True)
            handle.write("\n")
        tmp.replace(path)
    except OSError as exc:
        raise StoreSaveError(path, exc.strerror or str(exc)) from exc
