"""Descriptor (build file) change detection."""

from __future__ import annotations

import logging
from pathlib import Path

from incremental_build.scanning import mtime_ms
from incremental_build.state import TimestampStore

logger = logging.getLogger(__name__)


def descriptor_updated(descriptor_file: Path, timestamps: TimestampStore) -> bool:
    """Return True when the descriptor is newer than its recorded mtime.

    On change the new mtime is recorded in the store; the caller persists it.
    A missing descriptor counts as mtime 0.
    """
    key = str(descriptor_file.absolute())
    current = mtime_ms(descriptor_file) or 0
    recorded = timestamps.get(key)
    if recorded is None or current > recorded:
        logger.info("Descriptor modification detected: %s", key)
        timestamps.set(key, current)
        return True
    logger.debug("No modification on descriptor %s", key)
    return False
