"""Deterministic tree walking with Ant-style include/exclude globs.

`*` and `?` stay inside one path segment, `**` spans any number of
directories, and a trailing `/**` also matches the directory itself.
"""

from __future__ import annotations

import functools
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE_GLOBS = ("**",)


@dataclass(slots=True, frozen=True)
class ScannedFile:
    """A file found under a scan root."""

    relative_path: str
    full_path: Path
    mtime_ms: int


def normalize_pattern(pattern: str) -> str:
    """Use forward slashes; a trailing slash means everything below."""
    normalized = pattern.replace("\\", "/").strip().lstrip("/")
    if normalized.endswith("/"):
        normalized += "**"
    return normalized


@functools.lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Translate one normalized glob into an anchored regex."""
    segments = pattern.split("/")
    last = len(segments) - 1
    regex = ""
    need_separator = False
    for index, segment in enumerate(segments):
        if segment == "**":
            if index == last:
                regex += "(?:/.*)?" if need_separator else ".*"
            else:
                regex += "/(?:[^/]*/)*" if need_separator else "(?:[^/]*/)*"
                need_separator = False
            continue
        if need_separator:
            regex += "/"
        regex += _segment_regex(segment)
        need_separator = True
    return re.compile(regex)


def _segment_regex(segment: str) -> str:
    output: list[str] = []
    for char in segment:
        if char == "*":
            output.append("[^/]*")
        elif char == "?":
            output.append("[^/]")
        else:
            output.append(re.escape(char))
    return "".join(output)


def matches_any(relative_path: str, patterns: tuple[str, ...]) -> bool:
    """Return True when a relative path matches one of the globs."""
    return any(compile_pattern(pattern).fullmatch(relative_path) for pattern in patterns)


def mtime_ms(path: Path) -> int | None:
    """Return modification time in milliseconds, or None when it cannot be read.

    Unreadable counts as missing, which makes a target out of date.
    """
    try:
        return path.stat().st_mtime_ns // 1_000_000
    except OSError:
        return None


def max_mtime_ms(files: list[ScannedFile]) -> int:
    """Latest modification time of a file set; an empty set yields 0."""
    return max((item.mtime_ms for item in files), default=0)


def scan_files(
    root: Path,
    includes: tuple[str, ...] = (),
    excludes: tuple[str, ...] = (),
    default_excludes: tuple[str, ...] = (),
) -> list[ScannedFile]:
    """List files under root matching includes minus excludes, sorted by path."""
    include_globs = tuple(normalize_pattern(item) for item in includes) or DEFAULT_INCLUDE_GLOBS
    exclude_globs = tuple(normalize_pattern(item) for item in excludes + default_excludes)
    excluded_dir_names = _excluded_dir_names(exclude_globs)

    files: list[ScannedFile] = []
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                ordered_entries = sorted(entries, key=lambda item: item.name)
        except OSError:
            logger.debug("Skipping unreadable directory %s", current)
            continue
        for entry in reversed(ordered_entries):
            full_path = Path(entry.path)
            relative = full_path.relative_to(root).as_posix()
            if entry.is_dir(follow_symlinks=False):
                if entry.name in excluded_dir_names and matches_any(relative, exclude_globs):
                    continue
                stack.append(full_path)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            if not matches_any(relative, include_globs):
                continue
            if matches_any(relative, exclude_globs):
                continue
            try:
                stat = entry.stat(follow_symlinks=False)
            except OSError:
                continue
            files.append(
                ScannedFile(
                    relative_path=relative,
                    full_path=full_path,
                    mtime_ms=stat.st_mtime_ns // 1_000_000,
                )
            )
    files.sort(key=lambda item: item.relative_path)
    return files


def _excluded_dir_names(exclude_globs: tuple[str, ...]) -> set[str]:
    """Extract directory-name prunes from **/name/** glob patterns."""
    output: set[str] = set()
    for pattern in exclude_globs:
        if not pattern.startswith("**/") or not pattern.endswith("/**"):
            continue
        name = pattern[3:-3].strip("/")
        if not name:
            continue
        if any(char in name for char in "*?[]{}/"):
            continue
        output.add(name)
    return output
