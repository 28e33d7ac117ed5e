"""Session-scoped module verdicts and dependency propagation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from incremental_build.errors import ModuleAlreadyRecordedError
from incremental_build.models import ModuleIdentifier, ModuleState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ModuleRegistry:
    """Verdicts recorded during one build session, keyed by module identity.

    The orchestrator owns the registry and must evaluate dependencies before
    their dependents; an absent entry means "not evaluated this session".
    """

    _modules: dict[ModuleIdentifier, ModuleState] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def lookup(self, identifier: ModuleIdentifier) -> ModuleState | None:
        """Return the recorded module state, if any."""
        with self._lock:
            return self._modules.get(identifier)

    def record(self, identifier: ModuleIdentifier, stale: bool) -> ModuleState:
        """Insert a verdict; each module may be recorded once per session."""
        with self._lock:
            if identifier in self._modules:
                raise ModuleAlreadyRecordedError(identifier)
            state = ModuleState(identifier=identifier, stale=stale)
            self._modules[identifier] = state
            return state

    def identifiers(self) -> tuple[ModuleIdentifier, ...]:
        """Return recorded identifiers in recording order."""
        with self._lock:
            return tuple(self._modules.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._modules)


def find_stale_dependency(
    registry: ModuleRegistry, dependencies: Iterable[ModuleIdentifier]
) -> ModuleIdentifier | None:
    """Return the first dependency recorded stale this session."""
    for identifier in dependencies:
        module = registry.lookup(identifier)
        if module is None:
            logger.debug("Module %s not found in session", identifier)
            continue
        logger.debug("Module %s stale: %s", identifier, module.stale)
        if module.stale:
            logger.info("Dependency %s was updated", identifier)
            return identifier
    return None
