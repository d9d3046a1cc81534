"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

import pytest

from apidocgen import cli
from apidocgen.cli import _build_parser, main
from apidocgen.models import TaskDescription, TaskResult
from apidocgen.stores import TaskCache


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "serve"])
    assert args.verbose is True
    assert args.command == "serve"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["cache", "show", "--verbose"])
    assert args.verbose is True
    assert args.command == "cache"
    assert args.action == "show"


def test_cli_generate_collects_repeated_patterns() -> None:
    args = _build_parser().parse_args(
        ["generate", "--repo", "https://example.com/r.git", "--pattern", "api/**", "--pattern", "app.js"]
    )
    assert args.repo == "https://example.com/r.git"
    assert args.patterns == ["api/**", "app.js"]
    assert args.output == "public/openapi.json"


def test_cli_generate_rejects_repo_with_archive() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["generate", "--repo", "r", "--archive", "a.zip"])


def test_cli_generate_writes_document(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    source = tmp_path / "app.js"
    source.write_text("app.get('/x')", encoding="utf-8")
    existing = tmp_path / "existing.json"
    existing.write_text(json.dumps({"openapi": "3.0.0", "paths": {}}), encoding="utf-8")
    output = tmp_path / "out" / "openapi.json"
    received: List[TaskDescription] = []

    async def fake_run_task(config, task: TaskDescription) -> TaskResult:
        received.append(task)
        return TaskResult(
            status_message="Documentation successfully processed for 1 endpoint(s).",
            endpoints_found=1,
            file_by_file_results=[],
            merged_documentation={"openapi": "3.0.0", "paths": {"/x": {"get": {}}}},
        )

    monkeypatch.setattr(cli, "_run_task", fake_run_task)

    main(
        [
            "generate",
            str(source),
            "--language",
            "javascript",
            "--existing",
            str(existing),
            "--output",
            str(output),
            "--config",
            str(tmp_path),
        ]
    )

    task = received[0]
    assert task.files[0].content == "app.get('/x')"
    assert task.language == "javascript"
    assert task.existing_documentation == {"openapi": "3.0.0", "paths": {}}
    assert json.loads(output.read_text(encoding="utf-8"))["paths"] == {"/x": {"get": {}}}
    assert "1 endpoint(s)" in capsys.readouterr().out


def test_cli_generate_exits_on_unreadable_input(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(tmp_path / "missing.js"), "--config", str(tmp_path)])

    assert excinfo.value.code == 1


def test_cli_cache_show_and_clear(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("APIDOCGEN_CACHE_PATH", raising=False)
    cache_file = tmp_path / ".apidocgen" / "memory.json"
    TaskCache(cache_file).put("a" * 64, {"status_message": "done"})

    main(["cache", "show", "--config", str(tmp_path)])
    assert "a" * 64 in capsys.readouterr().out

    main(["cache", "clear", "--config", str(tmp_path)])
    assert "cleared" in capsys.readouterr().out
    assert len(TaskCache(cache_file)) == 0
