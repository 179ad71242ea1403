"""Tests for the resume-match command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from resume_match import __version__
from resume_match.cli import main, parse_file_spec


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestParseFileSpec:

    def test_valid(self) -> None:
        desc = parse_file_spec("cv.pdf:2048:application/pdf")
        assert desc.name == "cv.pdf"
        assert desc.size == 2048
        assert desc.media_type == "application/pdf"

    def test_name_with_colon(self) -> None:
        desc = parse_file_spec("my:cv.txt:10:text/plain")
        assert desc.name == "my:cv.txt"

    @pytest.mark.parametrize("raw", ["cv.pdf", "cv.pdf:big:application/pdf", ":1:text/plain"])
    def test_invalid(self, raw: str) -> None:
        with pytest.raises(ValueError):
            parse_file_spec(raw)


class TestCli:

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["--version"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run([]) == 0
        assert "resume-match" in capsys.readouterr().out

    def test_run_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["run", "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["stage"] == "conversing"
        assert len(data["reveal"]["records"]) == 8
        assert [t["author"] for t in data["transcript"]] == ["user", "system"]

    def test_run_yaml_multiple_messages(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = _run(["run", "--format", "yaml", "--message", "a", "--message", "b"])
        assert code == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert len(data["transcript"]) == 4

    def test_run_trace(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["run", "--trace", "--format", "json"]) == 0
        out = capsys.readouterr().out
        assert "[stage] intake -> revealing" in out
        assert "[stage] revealing -> conversing" in out

    def test_run_table(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("COLUMNS", "200")
        assert _run(["run"]) == 0
        assert "AI Assistant" in capsys.readouterr().out

    def test_run_writes_event_log(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        log = tmp_path / "run.jsonl"
        assert _run(["run", "--events", str(log), "--format", "json"]) == 0
        capsys.readouterr()

        events = [json.loads(line) for line in log.read_text(encoding="utf-8").splitlines()]
        types = [e["type"] for e in events]
        assert types.count("RecordRevealed") == 8
        assert "StageChanged" in types
        assert types[-1] == "TurnAppended"
        assert len({e["source_id"] for e in events}) == 1

    def test_run_rejects_unsupported_files(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["run", "--file", "photo.png:10:image/png"]) == 1
        assert "supported media type" in capsys.readouterr().err

    def test_run_bad_file_spec(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["run", "--file", "nonsense"]) == 1
        assert "Error" in capsys.readouterr().err

    def test_run_with_config_and_catalog(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config = tmp_path / "workflow.yaml"
        config.write_text("workflow:\n  progress_step: 50\n  reply_delay_ms: 10\n")
        catalog = tmp_path / "jobs.json"
        catalog.write_text(json.dumps([{"id": "a", "title": "Analyst"}]))

        code = _run([
            "run", "--config", str(config), "--catalog", str(catalog), "--format", "json",
        ])
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert [r["title"] for r in data["reveal"]["records"]] == ["Analyst"]

    def test_catalog_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["catalog", "--format", "json"]) == 0
        records = json.loads(capsys.readouterr().out)
        assert len(records) == 8
        assert records[0]["title"] == "Senior Software Engineer"

    def test_catalog_table(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("COLUMNS", "200")
        assert _run(["catalog"]) == 0
        assert "TechCorp" in capsys.readouterr().out

    def test_info(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["info"]) == 0
        out = capsys.readouterr().out
        assert f"resume-match v{__version__}" in out
        assert "reveal_interval_ms: 800.0" in out
        assert "- application/pdf" in out

    def test_info_with_json_config(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config = tmp_path / "workflow.json"
        config.write_text(json.dumps({"workflow": {"reply_delay_ms": 5}}))
        assert _run(["info", "--config", str(config)]) == 0
        assert "reply_delay_ms: 5" in capsys.readouterr().out
