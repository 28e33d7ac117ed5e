"""Resource add/modify/delete detection against the previous run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from incremental_build.errors import StoreLoadError
from incremental_build.models import ResourceGroup
from incremental_build.scanning import mtime_ms, scan_files
from incremental_build.state import ResourceSetStore

logger = logging.getLogger(__name__)

REASON_MODIFIED = "resources"
REASON_DELETED = "resources-deleted"
REASON_UNREADABLE = "resources-unreadable"


@dataclass(slots=True, frozen=True)
class ResourceCheck:
    """Result of one resource scan."""

    stale: bool
    reason: str | None = None
    path: str | None = None


def is_out_of_date(source: Path, target: Path, granularity_ms: int = 0) -> bool:
    """Copy-if-newer rule: target missing, or older than source beyond granularity."""
    target_mtime = mtime_ms(target)
    if target_mtime is None:
        return True
    source_mtime = mtime_ms(source)
    if source_mtime is None:
        return False
    return source_mtime - granularity_ms > target_mtime


def resources_updated(
    groups: tuple[ResourceGroup, ...],
    default_target: Path,
    store_path: Path,
    default_excludes: tuple[str, ...] = (),
    granularity_ms: int = 0,
) -> ResourceCheck:
    """Scan resource groups and reconcile them with the previous run's set.

    The first out-of-date file ends the scan. A path tracked last run but not
    matched now means a resource was deleted. In both cases the new set is
    not persisted; it is saved only when everything is up to date.
    """
    previous_store = ResourceSetStore(store_path)
    try:
        previous_store.load()
    except StoreLoadError as exc:
        logger.error("Error loading previous resources list: %s", exc)
        return ResourceCheck(stale=True, reason=REASON_UNREADABLE, path=str(store_path))

    current = ResourceSetStore(store_path)

    for group in groups:
        source = group.directory
        target = group.target_directory(default_target)
        if not source.exists():
            logger.info("Resources directory does not exist: %s", source)
            continue
        logger.debug("Resource includes %s, excludes %s", group.includes, group.excludes)
        files = scan_files(
            source,
            includes=group.includes,
            excludes=group.excludes,
            default_excludes=default_excludes,
        )
        logger.debug("%d resource files found in %s", len(files), source)
        for item in files:
            target_file = target / item.relative_path
            previous_store.discard(item.relative_path)
            current.add(item.relative_path)
            if is_out_of_date(item.full_path, target_file, granularity_ms):
                logger.info("Resource %s is newer than %s", item.full_path, target_file)
                return ResourceCheck(stale=True, reason=REASON_MODIFIED, path=str(item.full_path))

    if not previous_store.is_empty():
        removed = min(previous_store.paths())
        logger.info("Resource %s was deleted", removed)
        return ResourceCheck(stale=True, reason=REASON_DELETED, path=removed)

    current.save()
    return ResourceCheck(stale=False)
