"""Per-module staleness evaluation and output cleanup."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from incremental_build.config import EngineConfig
from incremental_build.errors import CleanupError, EvaluationError, IncrementalBuildError
from incremental_build.logging import EvaluationEvent, JsonlAuditLogger, utc_timestamp
from incremental_build.models import Evaluation, ModuleDescriptor
from incremental_build.staleness import (
    ModuleRegistry,
    descriptor_updated,
    directory_updated,
    find_stale_dependency,
    resources_updated,
)
from incremental_build.state import TimestampStore

logger = logging.getLogger(__name__)

REASON_DESCRIPTOR = "descriptor"
REASON_SOURCES = "sources"


class IncrementalBuildEngine:
    """Decides whether a module must be rebuilt and cleans it when it must.

    Checks run in a fixed order: descriptor, dependencies, resources, sources.
    The first stale check wins and the remaining ones are not run, so the
    state they would have refreshed (notably the resource set) is left as is
    for that run.

    A module should be evaluated from one thread only; a concurrent second
    evaluation of the same module fails with MODULE_ALREADY_RECORDED.
    """

    def __init__(
        self,
        config: EngineConfig,
        registry: ModuleRegistry,
        audit_logger: JsonlAuditLogger | None = None,
    ) -> None:
        self._config = config
        self._registry = registry
        self._audit_logger = audit_logger

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    def evaluate(self, module: ModuleDescriptor) -> Evaluation:
        """Evaluate one module; raises EvaluationError on fatal I/O failures."""
        try:
            result = self._evaluate(module)
        except EvaluationError as exc:
            self._audit(module, result=None, error_code=exc.code)
            raise
        self._audit(module, result=result, error_code=None)
        return result

    def _evaluate(self, module: ModuleDescriptor) -> Evaluation:
        identifier = module.identifier
        if not self._config.enabled:
            logger.info("Incremental build deactivated.")
            return Evaluation(identifier=identifier, stale=False, skipped=True)

        recorded = self._registry.lookup(identifier)
        if recorded is not None:
            logger.info("Module %s already evaluated in this session, skipping", identifier)
            return Evaluation(identifier=identifier, stale=recorded.stale, skipped=True)

        timestamps = TimestampStore(module.build_dir / self._config.timestamps_file)
        logger.debug("Loading previous timestamps from %s", timestamps.path)
        try:
            timestamps.load()
        except IncrementalBuildError as exc:
            raise EvaluationError(identifier, timestamps.path, exc) from exc

        reason = self._first_stale_check(module, timestamps)
        stale = reason is not None
        try:
            self._registry.record(identifier, stale)
        except IncrementalBuildError as exc:
            raise EvaluationError(identifier, module.build_dir, exc) from exc

        cleaned: tuple[str, ...] = ()
        if stale:
            logger.info("Module %s is stale (%s), cleaning", identifier, reason)
            cleaned = self._clean_module(module)

        logger.debug("Saving timestamps to %s", timestamps.path)
        try:
            timestamps.save()
        except IncrementalBuildError as exc:
            raise EvaluationError(identifier, timestamps.path, exc) from exc
        return Evaluation(identifier=identifier, stale=stale, reason=reason, cleaned=cleaned)

    def _first_stale_check(
        self, module: ModuleDescriptor, timestamps: TimestampStore
    ) -> str | None:
        logger.info("Verifying module descriptor %s", module.descriptor_file)
        if descriptor_updated(module.descriptor_file, timestamps):
            return REASON_DESCRIPTOR

        logger.info("Verifying dependency modules of %s", module.identifier)
        stale_dependency = find_stale_dependency(self._registry, module.dependencies)
        if stale_dependency is not None:
            return f"dependency:{stale_dependency}"

        logger.info("Verifying resources of %s", module.identifier)
        store_path = module.build_dir / self._config.resources_file
        try:
            check = resources_updated(
                module.resources,
                default_target=module.output_dir,
                store_path=store_path,
                default_excludes=self._config.scanning.default_excludes,
                granularity_ms=self._config.granularity_ms,
            )
        except IncrementalBuildError as exc:
            raise EvaluationError(module.identifier, store_path, exc) from exc
        if check.stale:
            return check.reason

        logger.info("Verifying sources of %s", module.identifier)
        if directory_updated(
            module.source_dir,
            module.output_dir,
            default_excludes=self._config.scanning.default_excludes,
        ):
            return REASON_SOURCES
        return None

    def _clean_module(self, module: ModuleDescriptor) -> tuple[str, ...]:
        """Delete the build root, plus output dirs that live outside it."""
        build_dir = _normalized(module.build_dir)
        targets = [build_dir]
        for directory in (module.output_dir, module.test_output_dir):
            candidate = _normalized(directory)
            if candidate.is_relative_to(build_dir):
                continue
            targets.append(candidate)

        cleaned: list[str] = []
        for target in targets:
            try:
                _delete_directory(target)
            except CleanupError as exc:
                raise EvaluationError(module.identifier, target, exc) from exc
            cleaned.append(str(target))
        return tuple(cleaned)

    def _audit(
        self,
        module: ModuleDescriptor,
        result: Evaluation | None,
        error_code: str | None,
    ) -> None:
        if self._audit_logger is None:
            return
        self._audit_logger.append(
            EvaluationEvent(
                timestamp=utc_timestamp(),
                module=str(module.identifier),
                ok=result is not None,
                stale=result.stale if result is not None else None,
                skipped=result.skipped if result is not None else False,
                reason=result.reason if result is not None else None,
                cleaned=list(result.cleaned) if result is not None else [],
                error_code=error_code,
            )
        )


def _normalized(path: Path) -> Path:
    return Path(os.path.normpath(path.absolute()))


def _delete_directory(path: Path) -> None:
    logger.info("Deleting %s", path)
    if not path.exists() and not path.is_symlink():
        return
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as exc:
        raise CleanupError(path, exc.strerror or str(exc)) from exc
