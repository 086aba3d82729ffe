"""
Runtime configuration tests - defaults, config file and environment overrides.
"""

import json

from codecoach.config_runtime import DEFAULTS, load_runtime_config


def _write_config(root, data):
    config_dir = root / ".codecoach"
    config_dir.mkdir()
    (config_dir / "config.json").write_text(json.dumps(data), encoding="utf-8")


class TestRuntimeConfig:
    """Priority: environment > config file > defaults."""

    def test_defaults(self, tmp_path):
        cfg = load_runtime_config(str(tmp_path))

        assert cfg == DEFAULTS
        assert cfg is not DEFAULTS
        assert cfg["limits"]["max_tree_depth"] == 400
        assert cfg["limits"]["max_scan_depth"] == 20

    def test_config_file(self, tmp_path):
        _write_config(tmp_path, {"limits": {"max_top_issues": 7}, "eslint": {"enabled": False}})
        cfg = load_runtime_config(str(tmp_path))

        assert cfg["limits"]["max_top_issues"] == 7
        assert cfg["eslint"]["enabled"] is False
        assert cfg["eslint"]["binary"] == "eslint"

    def test_wrong_types_and_unknown_keys_ignored(self, tmp_path):
        _write_config(tmp_path, {"limits": {"max_top_issues": "many", "bogus": 1}, "extra": {}})
        cfg = load_runtime_config(str(tmp_path))

        assert cfg["limits"]["max_top_issues"] == 3
        assert "bogus" not in cfg["limits"]
        assert "extra" not in cfg

    def test_broken_file(self, tmp_path):
        (tmp_path / ".codecoach").mkdir()
        (tmp_path / ".codecoach" / "config.json").write_text("{not json", encoding="utf-8")

        assert load_runtime_config(str(tmp_path)) == DEFAULTS

    def test_environment_wins(self, tmp_path, monkeypatch):
        _write_config(tmp_path, {"eslint": {"timeout": 10}})
        monkeypatch.setenv("CODECOACH_ESLINT_TIMEOUT", "45")
        monkeypatch.setenv("CODECOACH_ESLINT_ENABLED", "no")
        monkeypatch.setenv("CODECOACH_PATHS_CURRICULUM", "/tmp/catalog.yaml")
        cfg = load_runtime_config(str(tmp_path))

        assert cfg["eslint"]["timeout"] == 45
        assert cfg["eslint"]["enabled"] is False
        assert cfg["paths"]["curriculum"] == "/tmp/catalog.yaml"

    def test_invalid_environment_value(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CODECOACH_LIMITS_MAX_TREE_DEPTH", "deep")
        monkeypatch.setenv("CODECOACH_ESLINT_ENABLED", "maybe")
        cfg = load_runtime_config(str(tmp_path))

        assert cfg["limits"]["max_tree_depth"] == 400
        assert cfg["eslint"]["enabled"] is True
