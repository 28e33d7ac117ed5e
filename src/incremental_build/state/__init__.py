"""Persistent per-module state stores."""

from .resources import ResourceSetStore
from .storage import STATE_SCHEMA_VERSION
from .timestamps import TimestampStore

__all__ = [
    "ResourceSetStore",
    "STATE_SCHEMA_VERSION",
    "TimestampStore",
]
