from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/incremental_build/engine.py",
        "src/incremental_build/cli.py",
        "src/incremental_build/state/__init__.py",
        "src/incremental_build/staleness/__init__.py",
        "src/incremental_build/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
