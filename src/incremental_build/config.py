"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "incremental_build.toml"
MAX_GRANULARITY_MS_CAP = 60 * 60 * 1000

DEFAULT_TIMESTAMPS_FILE = "incremental-timestamps.json"
DEFAULT_RESOURCES_FILE = "incremental-resources.json"

# Version-control metadata and editor/temp leftovers never take part in scans.
DEFAULT_EXCLUDE_GLOBS = (
    "**/*~",
    "**/#*#",
    "**/.#*",
    "**/%*%",
    "**/._*",
    "**/.DS_Store",
    "**/CVS",
    "**/CVS/**",
    "**/.cvsignore",
    "**/RCS",
    "**/RCS/**",
    "**/SCCS",
    "**/SCCS/**",
    "**/vssver.scc",
    "**/.svn",
    "**/.svn/**",
    "**/.git",
    "**/.git/**",
    "**/.gitattributes",
    "**/.gitignore",
    "**/.gitmodules",
    "**/.hg",
    "**/.hg/**",
    "**/.hgignore",
    "**/.hgsub",
    "**/.hgsubstate",
    "**/.hgtags",
    "**/.bzr",
    "**/.bzr/**",
    "**/.bzrignore",
)


@dataclass(slots=True, frozen=True)
class ScanningConfig:
    """Tree walking settings shared by every check."""

    default_excludes: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class EngineConfig:
    """Fully merged engine configuration."""

    enabled: bool
    granularity_ms: int
    timestamps_file: str
    resources_file: str
    scanning: ScanningConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for reports."""
        return {
            "enabled": self.enabled,
            "granularity_ms": self.granularity_ms,
            "timestamps_file": self.timestamps_file,
            "resources_file": self.resources_file,
            "scanning": {
                "default_excludes": list(self.scanning.default_excludes),
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    enabled: bool | None = None
    granularity_ms: int | None = None


def default_config() -> EngineConfig:
    """Build the built-in default config."""
    return EngineConfig(
        enabled=True,
        granularity_ms=0,
        timestamps_file=DEFAULT_TIMESTAMPS_FILE,
        resources_file=DEFAULT_RESOURCES_FILE,
        scanning=ScanningConfig(default_excludes=DEFAULT_EXCLUDE_GLOBS),
    )


def load_config_file(session_root: Path) -> dict[str, object]:
    """Load optional incremental_build.toml from the session root."""
    config_path = session_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _file_name(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    if "/" in value or "\\" in value or value in {".", ".."}:
        raise ValueError(f"Config field '{name}' must be a plain file name.")
    return value


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_non_negative_int_with_cap(value: object, name: str, default: int, cap: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Config field '{name}' must be a non-negative integer.")
    if value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value


def merge_config(
    base: EngineConfig, file_payload: dict[str, object], overrides: CliOverrides
) -> EngineConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    engine_payload = _get_table(file_payload, "engine")
    scanning_payload = _get_table(file_payload, "scanning")

    enabled = _optional_bool(engine_payload.get("enabled"), "engine.enabled", base.enabled)
    granularity_ms = _optional_non_negative_int_with_cap(
        engine_payload.get("granularity_ms"),
        "engine.granularity_ms",
        base.granularity_ms,
        MAX_GRANULARITY_MS_CAP,
    )
    timestamps_file = _file_name(
        engine_payload.get("timestamps_file"), "engine.timestamps_file", base.timestamps_file
    )
    resources_file = _file_name(
        engine_payload.get("resources_file"), "engine.resources_file", base.resources_file
    )
    if timestamps_file == resources_file:
        raise ValueError(
            "Config fields 'engine.timestamps_file' and 'engine.resources_file' must differ."
        )

    default_excludes = base.scanning.default_excludes
    if "default_excludes" in scanning_payload:
        default_excludes = _tuple_of_strings(
            scanning_payload["default_excludes"], "scanning", "default_excludes"
        )
    if "extra_excludes" in scanning_payload:
        default_excludes = default_excludes + _tuple_of_strings(
            scanning_payload["extra_excludes"], "scanning", "extra_excludes"
        )

    merged = EngineConfig(
        enabled=enabled,
        granularity_ms=granularity_ms,
        timestamps_file=timestamps_file,
        resources_file=resources_file,
        scanning=ScanningConfig(default_excludes=default_excludes),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: EngineConfig, overrides: CliOverrides) -> EngineConfig:
    """Apply startup overrides at highest precedence."""
    enabled = _optional_bool(overrides.enabled, "overrides.enabled", config.enabled)
    granularity_ms = _optional_non_negative_int_with_cap(
        overrides.granularity_ms,
        "overrides.granularity_ms",
        config.granularity_ms,
        MAX_GRANULARITY_MS_CAP,
    )
    return EngineConfig(
        enabled=enabled,
        granularity_ms=granularity_ms,
        timestamps_file=config.timestamps_file,
        resources_file=config.resources_file,
        scanning=config.scanning,
    )


def load_effective_config(
    session_root: Path, overrides: CliOverrides | None = None
) -> EngineConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    payload = load_config_file(session_root.resolve())
    return merge_config(default_config(), payload, overrides or CliOverrides())
