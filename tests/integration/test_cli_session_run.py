from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from incremental_build.cli import main

SESSION = """
[[modules]]
group = "org.example"
name = "util"
version = "1.0"
descriptor = "util/pom.xml"
source_dir = "util/src"
build_dir = "util/target"

[[modules]]
group = "org.example"
name = "core"
version = "1.0"
descriptor = "core/pom.xml"
source_dir = "core/src"
build_dir = "core/target"
dependencies = ["org.example:util:1.0"]
"""


def _file(path: Path, seconds: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x", encoding="utf-8")
    os.utime(path, (seconds, seconds))
    return path


def _lines(capsys: pytest.CaptureFixture[str]) -> list[dict[str, object]]:
    return [json.loads(line) for line in capsys.readouterr().out.splitlines()]


def _workspace(tmp_path: Path) -> Path:
    for name in ("util", "core"):
        _file(tmp_path / name / "pom.xml", 1_000)
        _file(tmp_path / name / "src" / "A.txt", 2_000)
    session = tmp_path / "session.toml"
    session.write_text(SESSION, encoding="utf-8")
    return session


def test_cli_reports_one_line_per_module(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    session = _workspace(tmp_path)

    assert main([str(session)]) == 0
    first = _lines(capsys)
    assert [(line["module"], line["stale"], line["reason"]) for line in first] == [
        ("org.example:util:1.0", True, "descriptor"),
        ("org.example:core:1.0", True, "descriptor"),
    ]

    for name in ("util", "core"):
        _file(tmp_path / name / "target" / "classes" / "A.class", 3_000)
    assert main([str(session)]) == 0
    assert [line["stale"] for line in _lines(capsys)] == [False, False]

    _file(tmp_path / "util" / "src" / "A.txt", 4_000)
    assert main([str(session)]) == 0
    assert [line["reason"] for line in _lines(capsys)] == [
        "sources",
        "dependency:org.example:util:1.0",
    ]


def test_cli_disable_flag_and_audit_log(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    session = _workspace(tmp_path)
    audit_path = tmp_path / "logs" / "audit.jsonl"

    assert main([str(session), "--no-incremental-build", "--audit-log", str(audit_path)]) == 0

    assert [line["skipped"] for line in _lines(capsys)] == [True, True]
    assert len(audit_path.read_text(encoding="utf-8").splitlines()) == 2
    assert not (tmp_path / "util" / "target").exists()


def test_cli_reports_fatal_error_and_stops(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    session = _workspace(tmp_path)
    _file(tmp_path / "util" / "target" / "incremental-timestamps.json", 1_000)

    assert main([str(session)]) == 1

    lines = _lines(capsys)
    assert len(lines) == 1
    assert lines[0]["module"] == "org.example:util:1.0"
    assert lines[0]["error"]["code"] == "STATE_UNREADABLE"


def test_cli_history_prints_logged_evaluations_per_module(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    session = _workspace(tmp_path)
    audit_path = tmp_path / "audit.jsonl"
    assert main([str(session), "--audit-log", str(audit_path)]) == 0
    assert main([str(session), "--audit-log", str(audit_path)]) == 0
    capsys.readouterr()

    assert main([str(session), "--audit-log", str(audit_path), "--history", "1"]) == 0

    lines = _lines(capsys)
    assert [line["module"] for line in lines] == [
        "org.example:util:1.0",
        "org.example:core:1.0",
    ]
    assert all(line["ok"] is True for line in lines)


def test_cli_history_requires_audit_log(tmp_path: Path) -> None:
    session = _workspace(tmp_path)

    with pytest.raises(SystemExit) as exit_info:
        main([str(session), "--history", "5"])

    assert exit_info.value.code == 2
