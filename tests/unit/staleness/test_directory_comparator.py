from __future__ import annotations

import os
from pathlib import Path

from incremental_build.config import DEFAULT_EXCLUDE_GLOBS
from incremental_build.staleness import directory_updated


def _file(path: Path, seconds: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x", encoding="utf-8")
    os.utime(path, (seconds, seconds))
    return path


def test_missing_source_is_not_stale(tmp_path: Path) -> None:
    assert directory_updated(tmp_path / "src", tmp_path / "out") is False


def test_missing_target_is_stale(tmp_path: Path) -> None:
    _file(tmp_path / "src" / "A.txt", 1_000)

    assert directory_updated(tmp_path / "src", tmp_path / "out") is True


def test_newer_source_is_stale(tmp_path: Path) -> None:
    _file(tmp_path / "src" / "A.txt", 3_000)
    _file(tmp_path / "out" / "A.class", 2_000)

    assert directory_updated(tmp_path / "src", tmp_path / "out") is True


def test_newer_output_is_not_stale(tmp_path: Path) -> None:
    _file(tmp_path / "src" / "pkg" / "A.txt", 1_000)
    _file(tmp_path / "src" / "B.txt", 1_500)
    _file(tmp_path / "out" / "unrelated.bin", 2_000)

    assert directory_updated(tmp_path / "src", tmp_path / "out") is False


def test_equal_mtimes_are_not_stale(tmp_path: Path) -> None:
    _file(tmp_path / "src" / "A.txt", 2_000)
    _file(tmp_path / "out" / "A.class", 2_000)

    assert directory_updated(tmp_path / "src", tmp_path / "out") is False


def test_empty_output_dir_is_stale_against_any_source(tmp_path: Path) -> None:
    _file(tmp_path / "src" / "A.txt", 1)
    (tmp_path / "out").mkdir()

    assert directory_updated(tmp_path / "src", tmp_path / "out") is True


def test_excluded_source_files_are_ignored(tmp_path: Path) -> None:
    _file(tmp_path / "src" / "A.txt", 1_000)
    _file(tmp_path / "src" / "A.txt~", 9_000)
    _file(tmp_path / "out" / "A.class", 2_000)

    assert (
        directory_updated(
            tmp_path / "src", tmp_path / "out", default_excludes=DEFAULT_EXCLUDE_GLOBS
        )
        is False
    )
