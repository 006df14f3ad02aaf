"""Tests for configuration loading."""

import json

from modkill.config import Config, build_scan_options, load_config
from modkill.models import DEFAULT_DEPTH, DEFAULT_TARGET


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "config.json")
        assert config == Config()
        assert config.target == DEFAULT_TARGET
        assert config.depth == DEFAULT_DEPTH

    def test_reads_values(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"target": "vendor", "exclude": ["old"], "depth": 4}))

        config = load_config(path)

        assert config.target == "vendor"
        assert config.exclude == ["old"]
        assert config.depth == 4

    def test_invalid_json_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text("{nope")

        assert load_config(path) == Config()
        assert "Ignoring config file" in caplog.text

    def test_invalid_values_give_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"depth": -1}))

        assert load_config(path) == Config()


class TestBuildScanOptions:
    def test_defaults_from_config(self):
        options = build_scan_options(Config(target="vendor", depth=3))
        assert options.target == "vendor"
        assert options.depth == 3

    def test_none_overrides_are_ignored(self):
        options = build_scan_options(Config(target="vendor"), target=None, depth=None)
        assert options.target == "vendor"

    def test_overrides_win(self):
        options = build_scan_options(Config(target="vendor"), target="node_modules", depth=2)
        assert options.target == "node_modules"
        assert options.depth == 2

    def test_exclude_lists_are_combined(self):
        options = build_scan_options(Config(exclude=["a"]), exclude=["b"])
        assert options.exclude == ("a", "b")

    def test_flags_enable_from_either_side(self):
        options = build_scan_options(
            Config(exclude_hidden=True), exclude_hidden=False, hide_errors=True
        )
        assert options.exclude_hidden
        assert options.hide_errors

    def test_roots_become_tuple(self):
        options = build_scan_options(Config(), roots=["/a", "/b"])
        assert options.roots == ("/a", "/b")
