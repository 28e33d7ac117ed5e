"""Individual staleness checks and the session registry."""

from .descriptor import descriptor_updated
from .registry import ModuleRegistry, find_stale_dependency
from .resources import (
    REASON_DELETED,
    REASON_MODIFIED,
    REASON_UNREADABLE,
    ResourceCheck,
    is_out_of_date,
    resources_updated,
)
from .sources import directory_updated

__all__ = [
    "ModuleRegistry",
    "REASON_DELETED",
    "REASON_MODIFIED",
    "REASON_UNREADABLE",
    "ResourceCheck",
    "descriptor_updated",
    "directory_updated",
    "find_stale_dependency",
    "is_out_of_date",
    "resources_updated",
]
