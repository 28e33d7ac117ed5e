"""Error types raised by the staleness engine."""

from __future__ import annotations

from pathlib import Path

from incremental_build.models import ModuleIdentifier


class IncrementalBuildError(Exception):
    """Base class for engine failures."""

    code = "INCREMENTAL_BUILD_ERROR"


class StoreLoadError(IncrementalBuildError):
    """Raised when a persisted state file exists but cannot be read."""

    code = "STATE_UNREADABLE"

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Unable to load state file {path}: {reason}")
        self.path = path
        self.reason = reason


class StoreSaveError(IncrementalBuildError):
    """Raised when a state file cannot be written."""

    code = "STATE_WRITE_FAILED"

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Unable to save state file {path}: {reason}")
        self.path = path
        self.reason = reason


class CleanupError(IncrementalBuildError):
    """Raised when an output directory cannot be deleted."""

    code = "CLEANUP_FAILED"

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Unable to delete {path}: {reason}")
        self.path = path
        self.reason = reason


class ModuleAlreadyRecordedError(IncrementalBuildError):
    """Raised when a module verdict is recorded twice in one session."""

    code = "MODULE_ALREADY_RECORDED"

    def __init__(self, identifier: ModuleIdentifier) -> None:
        super().__init__(f"Module {identifier} was already recorded in this session.")
        self.identifier = identifier


class EvaluationError(IncrementalBuildError):
    """Fatal failure while evaluating one module."""

    def __init__(
        self, identifier: ModuleIdentifier, path: Path, cause: IncrementalBuildError
    ) -> None:
        super().__init__(f"Module {identifier}: {cause}")
        self.identifier = identifier
        self.path = path
        self.code = cause.code
