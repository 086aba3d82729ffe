"""
CLI tests using click's CliRunner.

Every invocation passes ``--root`` pointing at an empty temp directory so no
local .codecoach/config.json leaks in, and ``--no-eslint`` so no Node
toolchain is needed.
"""

import json

import pytest
from click.testing import CliRunner

from codecoach import __version__
from codecoach.cli import cli


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


class TestRootCommand:
    """Group-level behavior."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "analyze" in result.output
        assert "topics" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestAnalyzeCommand:
    """codecoach analyze."""

    def test_json_from_stdin(self, runner, tmp_path):
        result = runner.invoke(
            cli,
            ["analyze", "-", "--json", "--no-eslint", "--root", str(tmp_path)],
            input="var x = 1;\n",
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        slugs = [d["topicSlug"] for d in payload["detections"]]
        assert "no-var-usage" in slugs
        assert payload["language"] == "javascript"
        assert payload["layers"]["fundamentals"] >= 1
        assert payload["prioritized"]
        assert all(d["isNegative"] for d in payload["prioritized"])
        assert payload["diagnostics"] == []
        assert len(payload["topIssues"]) <= 3
        assert payload["feedbackContext"]["frameworkContext"] == "JavaScript code"
        assert "no-var-usage" in [p["topicSlug"] for p in payload["topicPerformance"]]

    def test_file_with_dialect(self, runner, tmp_path):
        source = tmp_path / "app.ts"
        source.write_text("const n: number = 1;\n", encoding="utf-8")

        result = runner.invoke(
            cli,
            ["analyze", str(source), "--dialect", "typescript", "--json", "--no-eslint", "--root", str(tmp_path)],
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["language"] == "typescript"
        assert payload["hasTypeScript"] is True

    def test_human_output(self, runner, tmp_path):
        result = runner.invoke(
            cli,
            ["analyze", "-", "--no-eslint", "--root", str(tmp_path)],
            input="var x = 1;\n",
        )

        assert result.exit_code == 0, result.output
        assert "ANALYSIS (javascript)" in result.output
        assert "FOCUS FOR A BEGINNER LEARNER" in result.output
        assert "no-var-usage" in result.output

    def test_parse_errors_are_reported(self, runner, tmp_path):
        result = runner.invoke(
            cli,
            ["analyze", "-", "--no-eslint", "--root", str(tmp_path)],
            input=")))\n",
        )

        assert result.exit_code == 0, result.output
        assert "WARNING:" in result.output
        assert "[parse]" in result.output
        assert "No patterns detected" in result.output

    def test_invalid_level(self, runner, tmp_path):
        result = runner.invoke(cli, ["analyze", "-", "--level", "guru", "--root", str(tmp_path)], input="x;")
        assert result.exit_code == 2

    def test_bad_curriculum_path(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config_dir = tmp_path / ".codecoach"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(
            json.dumps(
                {
                    "paths": {
                        "curriculum": str(tmp_path / "missing.yaml"),
                        "error_log": str(tmp_path / "error.log"),
                    }
                }
            ),
            encoding="utf-8",
        )

        result = runner.invoke(cli, ["analyze", "-", "--no-eslint"], input="var x = 1;")

        assert result.exit_code == 1
        assert "CurriculumError" in result.output
        assert (tmp_path / "error.log").exists()


class TestTopicsCommand:
    """codecoach topics."""

    def test_single_layer(self, runner, tmp_path):
        result = runner.invoke(cli, ["topics", "--layer", "patterns", "--root", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "PATTERNS (20%)" in result.output
        assert "nested-ternary" in result.output
        assert "FUNDAMENTALS" not in result.output

    def test_all_layers(self, runner, tmp_path):
        result = runner.invoke(cli, ["topics", "--root", str(tmp_path)])

        assert result.exit_code == 0
        for header in ("FUNDAMENTALS", "INTERMEDIATE", "PATTERNS"):
            assert header in result.output
