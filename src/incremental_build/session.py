"""Session files: modules of one build, listed in dependency order."""

from __future__ import annotations

import tomllib
from pathlib import Path

from incremental_build.models import ModuleDescriptor, ModuleIdentifier, ResourceGroup


def load_session(path: Path) -> tuple[ModuleDescriptor, ...]:
    """Load module descriptors from a TOML session file."""
    resolved = path.resolve()
    with resolved.open("rb") as handle:
        payload = tomllib.load(handle)
    raw_modules = payload.get("modules", [])
    if not isinstance(raw_modules, list):
        raise ValueError("Session field 'modules' must be an array of tables.")
    base_dir = resolved.parent
    modules: list[ModuleDescriptor] = []
    seen: set[ModuleIdentifier] = set()
    for index, raw in enumerate(raw_modules):
        if not isinstance(raw, dict):
            raise ValueError(f"Session entry 'modules[{index}]' must be a table.")
        module = parse_module(raw, base_dir, f"modules[{index}]")
        if module.identifier in seen:
            raise ValueError(
                f"Session entry 'modules[{index}]' repeats module {module.identifier}."
            )
        seen.add(module.identifier)
        modules.append(module)
    return tuple(modules)


def parse_module(raw: dict[str, object], base_dir: Path, where: str) -> ModuleDescriptor:
    """Build a ModuleDescriptor from one session table."""
    identifier = ModuleIdentifier(
        group=_required_str(raw, "group", where),
        name=_required_str(raw, "name", where),
        version=_required_str(raw, "version", where),
    )
    build_dir = _required_path(raw, "build_dir", base_dir, where)
    output_dir = _optional_path(raw, "output_dir", base_dir, where) or build_dir / "classes"
    test_output_dir = (
        _optional_path(raw, "test_output_dir", base_dir, where) or build_dir / "test-classes"
    )

    raw_dependencies = raw.get("dependencies", [])
    if not isinstance(raw_dependencies, list):
        raise ValueError(f"Session field '{where}.dependencies' must be a list of strings.")
    dependencies: list[ModuleIdentifier] = []
    for item in raw_dependencies:
        if not isinstance(item, str):
            raise ValueError(f"Session field '{where}.dependencies' must contain only strings.")
        try:
            dependencies.append(ModuleIdentifier.parse(item))
        except ValueError as exc:
            raise ValueError(f"Session field '{where}.dependencies': {exc}") from exc

    raw_resources = raw.get("resources", [])
    if not isinstance(raw_resources, list):
        raise ValueError(f"Session field '{where}.resources' must be an array of tables.")
    resources: list[ResourceGroup] = []
    for index, item in enumerate(raw_resources):
        item_where = f"{where}.resources[{index}]"
        if not isinstance(item, dict):
            raise ValueError(f"Session entry '{item_where}' must be a table.")
        resources.append(
            ResourceGroup(
                directory=_required_path(item, "directory", base_dir, item_where),
                target_path=_optional_path(item, "target_path", base_dir, item_where),
                includes=_strings(item, "includes", item_where),
                excludes=_strings(item, "excludes", item_where),
            )
        )

    return ModuleDescriptor(
        identifier=identifier,
        descriptor_file=_required_path(raw, "descriptor", base_dir, where),
        source_dir=_required_path(raw, "source_dir", base_dir, where),
        output_dir=output_dir,
        test_output_dir=test_output_dir,
        build_dir=build_dir,
        resources=tuple(resources),
        dependencies=tuple(dependencies),
    )


def _required_str(raw: dict[str, object], key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Session field '{where}.{key}' must be a non-empty string.")
    return value.strip()


def _required_path(raw: dict[str, object], key: str, base_dir: Path, where: str) -> Path:
    return (base_dir / _required_str(raw, key, where)).absolute()


def _optional_path(raw: dict[str, object], key: str, base_dir: Path, where: str) -> Path | None:
    value = raw.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"Session field '{where}.{key}' must be a string.")
    return (base_dir / value).absolute()


def _strings(raw: dict[str, object], key: str, where: str) -> tuple[str, ...]:
    value = raw.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"Session field '{where}.{key}' must be a list of strings.")
    return tuple(value)
