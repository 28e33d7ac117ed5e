"""Whole-tree source versus output comparison."""

from __future__ import annotations

import logging
from pathlib import Path

from incremental_build.scanning import max_mtime_ms, scan_files

logger = logging.getLogger(__name__)


def directory_updated(
    source_dir: Path,
    target_dir: Path,
    default_excludes: tuple[str, ...] = (),
) -> bool:
    """Return True when any source file is newer than every target file.

    Sources and outputs need not pair up one to one, so only the latest
    mtime of each tree is compared.
    """
    logger.debug("Checking %s against %s", source_dir, target_dir)
    if not source_dir.exists():
        logger.info("No sources to check in %s", source_dir)
        return False
    if not target_dir.exists():
        logger.info("No target directory %s, build is required", target_dir)
        return True

    latest_source = max_mtime_ms(scan_files(source_dir, default_excludes=default_excludes))
    latest_target = max_mtime_ms(scan_files(target_dir, default_excludes=default_excludes))
    logger.debug(
        "Last source modification %d, last target modification %d", latest_source, latest_target
    )
    if latest_source > latest_target:
        logger.info("Source modification detected in %s", source_dir)
        return True
    return False
