"""Tests for CLI commands."""
import json
import logging
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from plugin_host.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def detach_log_handlers():
    """Drop handlers bound to CliRunner's temporary streams."""
    yield
    logging.getLogger().handlers.clear()


def invoke(runner, root, *args):
    return runner.invoke(cli, ["--root", str(root), "-q", *args])


class TestLintCommand:
    """Test the lint command."""

    def test_text_report_fails_on_errors(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "lint")

        assert result.exit_code == 1
        assert "FM001" in result.output
        assert "8 error(s), 9 warning(s), 4 info" in result.output

    def test_json_report(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "lint", "--format", "json")

        data = json.loads(result.output)
        assert data["counts"] == {"info": 4, "warning": 9, "error": 8}
        assert result.exit_code == 1

    def test_clean_corpus_passes(self, runner, clean_root):
        result = invoke(runner, clean_root, "lint", "--fail-on", "info")

        assert result.exit_code == 0
        assert "0 error(s)" in result.output

    def test_fail_on_threshold(self, runner, corpus_root):
        assert invoke(runner, corpus_root, "lint", "--select", "VER001", "--fail-on", "warning").exit_code == 0
        assert invoke(runner, corpus_root, "lint", "--select", "VER001", "--fail-on", "info").exit_code == 1

    def test_fail_on_from_environment(self, runner, corpus_root, monkeypatch):
        monkeypatch.setenv("PLUGIN_HOST_FAIL_ON", "info")

        result = invoke(runner, corpus_root, "lint", "--select", "VER001")

        assert result.exit_code == 1

    def test_ignore(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "lint", "--ignore", "VER001", "--ignore", "VER002")

        assert "VER00" not in result.output

    def test_unknown_rule_is_usage_error(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "lint", "--select", "NOPE123")

        assert result.exit_code == 2
        assert "NOPE123" in result.output

    def test_missing_root(self, runner, tmp_path):
        result = invoke(runner, tmp_path / "missing", "lint")

        assert result.exit_code == 1
        assert "Corpus root not found" in result.output


class TestLookupCommands:
    """Test list and show."""

    def test_list_kind(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "list", "--kind", "skill")

        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert len(lines) == 4
        assert all(line.startswith("skill") for line in lines)

    def test_list_marks_invalid(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "list", "--kind", "agent")

        broken = next(line for line in result.output.splitlines() if "broken-agent" in line)
        assert broken.endswith("[invalid]")

    def test_show(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "show", "backend-developer", "--no-body")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["name"] == "backend-developer"
        assert data["frontmatter"]["model"] == "opus"
        assert "body" not in data

    def test_show_command_with_slash(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "show", "/learn-path", "--kind", "command")

        assert result.exit_code == 0
        assert json.loads(result.output)["body"].startswith("\n# /learn-path")

    def test_show_missing(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "show", "nobody")

        assert result.exit_code == 1
        assert "No document named 'nobody'" in result.output


class TestRoutingCommands:
    """Test bonds, match and command."""

    def test_bonds_text(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "bonds")

        assert "backend-developer -> sql-queries (PRIMARY_BOND, declared by agent)" in result.output
        assert "! frontend-developer -> missing-skill (missing skill)" in result.output
        assert "Orphan skills: python-fundamentals" in result.output

    def test_bonds_json(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "bonds", "--format", "json")

        assert len(json.loads(result.output)["bonds"]) == 3

    def test_match(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "match", "I want the frontend roadmap", "--limit", "1")

        lines = result.output.strip().splitlines()
        assert len(lines) == 1
        assert lines[0].startswith("1.00  agent  frontend-developer")

    def test_match_nothing(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "match", "quantum knitting")

        assert result.output.strip() == "No matches"

    def test_command(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "command", "/learn-path frontend")

        assert result.exit_code == 0
        assert "Command: /learn-path" in result.output
        assert 'Arguments: ["frontend"]' in result.output
        assert "Usage: /learn-path <roadmap>" in result.output

    def test_command_unknown(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "command", "/teleport")

        assert result.exit_code == 1
        assert "Unknown command: /teleport" in result.output

    def test_command_syntax_error(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "command", "learn-path")

        assert result.exit_code == 2


class TestCatalogAndServe:
    """Test catalog and serve."""

    def test_catalog_stdout(self, runner, corpus_root):
        result = invoke(runner, corpus_root, "catalog")

        assert result.exit_code == 0
        assert json.loads(result.output)["totals"]["agents"] == 5

    def test_catalog_yaml_file(self, runner, corpus_root, tmp_path):
        out = tmp_path / "catalog.yaml"

        result = invoke(runner, corpus_root, "catalog", "-o", str(out), "--format", "yaml")

        assert result.exit_code == 0
        assert yaml.safe_load(out.read_text())["plugin"]["name"] == "roadmap-plugin"

    def test_serve(self, runner, corpus_root):
        with patch("uvicorn.run") as mock_run:
            result = invoke(runner, corpus_root, "serve", "--port", "9001")

        assert result.exit_code == 0
        kwargs = mock_run.call_args.kwargs
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9001
