"""Typed records describing modules, resource groups and verdicts."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True, frozen=True)
class ModuleIdentifier:
    """Structural (group, name, version) identity of a module."""

    group: str
    name: str
    version: str

    @classmethod
    def parse(cls, text: str) -> ModuleIdentifier:
        """Parse the `group:name:version` text form."""
        parts = text.split(":")
        if len(parts) != 3 or not all(part.strip() for part in parts):
            raise ValueError(f"Module identifier '{text}' must look like 'group:name:version'.")
        group, name, version = (part.strip() for part in parts)
        return cls(group=group, name=name, version=version)

    def __str__(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"


@dataclass(slots=True, frozen=True)
class ModuleState:
    """Verdict recorded for one module during a build session."""

    identifier: ModuleIdentifier
    stale: bool


@dataclass(slots=True, frozen=True)
class ResourceGroup:
    """A directory of non-source files copied to an output location."""

    directory: Path
    target_path: Path | None = None
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()

    def target_directory(self, default_output: Path) -> Path:
        """Return the group override, or the module output directory."""
        if self.target_path is None:
            return default_output
        return self.target_path


@dataclass(slots=True, frozen=True)
class ModuleDescriptor:
    """Everything the engine needs to know about one module."""

    identifier: ModuleIdentifier
    descriptor_file: Path
    source_dir: Path
    output_dir: Path
    test_output_dir: Path
    build_dir: Path
    resources: tuple[ResourceGroup, ...] = ()
    dependencies: tuple[ModuleIdentifier, ...] = ()


@dataclass(slots=True, frozen=True)
class Evaluation:
    """Outcome of evaluating one module."""

    identifier: ModuleIdentifier
    stale: bool
    reason: str | None = None
    cleaned: tuple[str, ...] = field(default_factory=tuple)
    skipped: bool = False

    def to_dict(self) -> dict[str, object]:
        """Return a serializable view for reports."""
        return {
            "module": str(self.identifier),
            "stale": self.stale,
            "reason": self.reason,
            "cleaned": list(self.cleaned),
            "skipped": self.skipped,
        }
