import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from quill.__main__ import app
from quill.composer.types import ComposerExecutionResult
from quill.providers.assistant import ClaudeCliBridge

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("QUILL_HOME", str(tmp_path / "home"))
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("# Guide\n", encoding="utf-8")
    return tmp_path


def test_suggest_prints_json(workspace: Path) -> None:
    result = runner.invoke(app, ["suggest", "see @docs/gu", "--workspace", str(workspace)])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["context"] == "mention"
    assert [item["value"] for item in payload["suggestions"]] == ["docs/guide.md"]


def test_prepare_reports_diagnostics(workspace: Path) -> None:
    result = runner.invoke(app, ["prepare", "/nope", "--workspace", str(workspace)])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["blocking"] is True
    assert payload["diagnostics"][0]["code"] == "CMD_UNKNOWN"


def test_commands_lists_registry(workspace: Path) -> None:
    result = runner.invoke(app, ["commands", "--workspace", str(workspace)])

    assert result.exit_code == 0
    assert "/compact [instructions]" in result.stdout
    assert "/mcp [server]" in result.stdout


def test_run_local_command(workspace: Path) -> None:
    result = runner.invoke(app, ["run", "/help", "--workspace", str(workspace)])

    assert result.exit_code == 0
    assert "/model <model>" in result.stdout


def test_run_streams_assistant_output(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_run(self: ClaudeCliBridge, request) -> ComposerExecutionResult:
        assert request.model_override == "opus"
        return ComposerExecutionResult(ok=True, provider="external-assistant", output="streamed answer")

    monkeypatch.setattr(ClaudeCliBridge, "run", fake_run)

    result = runner.invoke(app, ["run", "summarize @docs/guide.md", "--model", "opus", "--workspace", str(workspace)])

    assert result.exit_code == 0
    assert result.stdout.strip() == "streamed answer"


def test_missing_workspace_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["prepare", "hello", "--workspace", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "workspace directory not found" in result.output
