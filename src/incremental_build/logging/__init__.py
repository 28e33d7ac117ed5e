"""Structured logging utilities."""

from .audit import EvaluationEvent, JsonlAuditLogger, utc_timestamp

__all__ = ["EvaluationEvent", "JsonlAuditLogger", "utc_timestamp"]
