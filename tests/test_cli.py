import json

import pytest
from typer.testing import CliRunner

from relay_cli import app

runner = CliRunner()


@pytest.fixture
def request_file(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(json.dumps({
        "model": "x",
        "system": "be brief",
        "tools": [{"name": "Read", "description": "read a file", "input_schema": {"type": "object"}}],
        "messages": [{"role": "user", "content": "say hi"}],
    }), encoding="utf-8")
    return path


def test_compose_prints_prompt(request_file):
    result = runner.invoke(app, ["compose", str(request_file)])
    assert result.exit_code == 0
    assert "<system>" in result.output
    assert "AVAILABLE TOOLS" in result.output
    assert "say hi" in result.output


def test_compose_hide_tools(request_file):
    result = runner.invoke(app, ["compose", str(request_file), "--hide-tools"])
    assert result.exit_code == 0
    assert "AVAILABLE TOOLS" not in result.output
    assert "say hi" in result.output


def test_compose_rejects_unsupported(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(json.dumps({"model": "x", "messages": [], "tool_choice": {"type": "any"}}), encoding="utf-8")
    result = runner.invoke(app, ["compose", str(path)])
    assert result.exit_code == 2
    assert "tool_choice" in result.output


def test_compose_bad_file(tmp_path):
    path = tmp_path / "request.json"
    path.write_text("{", encoding="utf-8")
    result = runner.invoke(app, ["compose", str(path)])
    assert result.exit_code == 1


def test_extract_lists_calls(tmp_path):
    path = tmp_path / "answer.txt"
    path.write_text('ok\n<use tool="Glob">{"pattern": "*.py"}</use>', encoding="utf-8")
    result = runner.invoke(app, ["extract", str(path)])
    assert result.exit_code == 0
    assert "Glob" in result.output


def test_extract_without_calls(tmp_path):
    path = tmp_path / "answer.txt"
    path.write_text("plain answer", encoding="utf-8")
    result = runner.invoke(app, ["extract", str(path)])
    assert result.exit_code == 0
    assert "No tool calls found." in result.output
