from __future__ import annotations

import pytest

from incremental_build.errors import ModuleAlreadyRecordedError
from incremental_build.models import ModuleIdentifier, ModuleState
from incremental_build.staleness import ModuleRegistry, find_stale_dependency

CORE = ModuleIdentifier("org.example", "core", "1.0")
UTIL = ModuleIdentifier("org.example", "util", "1.0")
WEB = ModuleIdentifier("org.example", "web", "1.0")


def test_identifiers_compare_structurally() -> None:
    assert ModuleIdentifier("org.example", "core", "1.0") == CORE
    assert hash(ModuleIdentifier("org.example", "core", "1.0")) == hash(CORE)
    assert ModuleIdentifier("org.example", "core", "1.1") != CORE


def test_identifier_text_form_round_trips() -> None:
    assert str(CORE) == "org.example:core:1.0"
    assert ModuleIdentifier.parse("org.example:core:1.0") == CORE

    with pytest.raises(ValueError, match="group:name:version"):
        ModuleIdentifier.parse("org.example:core")


def test_lookup_of_unrecorded_module_is_none() -> None:
    assert ModuleRegistry().lookup(CORE) is None


def test_record_then_lookup() -> None:
    registry = ModuleRegistry()
    state = registry.record(CORE, stale=True)

    assert state == ModuleState(identifier=CORE, stale=True)
    assert registry.lookup(ModuleIdentifier("org.example", "core", "1.0")) == state
    assert registry.identifiers() == (CORE,)
    assert len(registry) == 1


def test_recording_twice_is_rejected() -> None:
    registry = ModuleRegistry()
    registry.record(CORE, stale=False)

    with pytest.raises(ModuleAlreadyRecordedError):
        registry.record(CORE, stale=True)
    assert registry.lookup(CORE) == ModuleState(identifier=CORE, stale=False)


def test_first_stale_dependency_is_reported() -> None:
    registry = ModuleRegistry()
    registry.record(CORE, stale=False)
    registry.record(UTIL, stale=True)
    registry.record(WEB, stale=True)

    assert find_stale_dependency(registry, (CORE, WEB, UTIL)) == WEB


def test_unknown_and_clean_dependencies_do_not_propagate() -> None:
    registry = ModuleRegistry()
    registry.record(CORE, stale=False)

    assert find_stale_dependency(registry, (CORE, UTIL)) is None
    assert find_stale_dependency(registry, ()) is None
