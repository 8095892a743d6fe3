"""Tests for cadencefmt/config.py — YAML config loading and validation."""

import pytest

from cadencefmt.config import (
    CONFIG_FILENAME,
    ConfigError,
    FormatterConfig,
    config_from_dict,
    find_config,
    load_config,
)
from cadencefmt.layout import DEFAULT_BYPASS_KINDS, EMPTY_BLOCK
from cadencefmt.lexer import TokenKind


def _write_config(directory, text):
    path = directory / CONFIG_FILENAME
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_no_config_file(self, tmp_path):
        cfg = load_config(search_from=tmp_path)
        assert cfg.max_line_width == 80
        assert cfg.indent == "    "
        assert cfg.bypass_kinds == DEFAULT_BYPASS_KINDS
        assert cfg.collapse_empty_blocks
        assert not cfg.strict
        assert cfg.renderer.kind == "command"
        assert cfg.server.port == 9090
        assert cfg.source is None

    def test_empty_file(self, tmp_path):
        path = _write_config(tmp_path, "")
        cfg = load_config(path)
        assert cfg.max_line_width == 80
        assert cfg.source == path


class TestLoading:
    def test_full_file(self, tmp_path):
        path = _write_config(tmp_path, """\
max_line_width: 100
indent: "  "
bypass_kinds: [paren_open, PAREN_CLOSE]
collapse_empty_blocks: false
strict: true
renderer:
  kind: http
  url: http://localhost:7000/render
  timeout: 5
server:
  port: 8000
log_file: fmt.log
""")
        cfg = load_config(path)
        assert cfg.max_line_width == 100
        assert cfg.indent == "  "
        assert cfg.bypass_kinds == frozenset({TokenKind.PAREN_OPEN, TokenKind.PAREN_CLOSE})
        assert not cfg.collapse_empty_blocks
        assert cfg.strict
        assert cfg.renderer.kind == "http"
        assert cfg.renderer.url == "http://localhost:7000/render"
        assert cfg.renderer.timeout == 5
        assert cfg.renderer.command == ["cadence-pretty"]
        assert cfg.server.host == "127.0.0.1"
        assert cfg.server.port == 8000
        assert cfg.log_file == "fmt.log"

    def test_discovered_in_parent(self, tmp_path):
        _write_config(tmp_path, "max_line_width: 60\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / CONFIG_FILENAME).resolve()
        assert load_config(search_from=nested).max_line_width == 60

    def test_find_config_gives_up(self, tmp_path):
        assert find_config(tmp_path, max_depth=1) is None


class TestErrors:
    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = _write_config(tmp_path, "max_line_width: [1,\n")
        with pytest.raises(ConfigError, match="Could not parse"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = _write_config(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_schema_violation_names_key(self):
        with pytest.raises(ConfigError, match="max_line_width"):
            config_from_dict({"max_line_width": 0})

    def test_unknown_key(self):
        with pytest.raises(ConfigError):
            config_from_dict({"line_width": 80})

    def test_nested_violation(self):
        with pytest.raises(ConfigError, match="renderer/kind"):
            config_from_dict({"renderer": {"kind": "grpc"}})

    def test_unknown_bypass_kind(self):
        with pytest.raises(ConfigError, match="BANANA"):
            config_from_dict({"bypass_kinds": ["BANANA"]})

    def test_indent_must_be_whitespace(self):
        with pytest.raises(ConfigError):
            config_from_dict({"indent": "--"})


class TestMergeConfig:
    def test_defaults(self):
        merge = FormatterConfig().merge_config()
        assert merge.bypass_kinds == DEFAULT_BYPASS_KINDS
        assert merge.fixups == (EMPTY_BLOCK,)
        assert not merge.strict

    def test_collapse_disabled(self):
        merge = config_from_dict({"collapse_empty_blocks": False, "strict": True}).merge_config()
        assert merge.fixups == ()
        assert merge.strict
