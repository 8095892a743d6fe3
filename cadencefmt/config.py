"""Formatter configuration.

Read from a YAML file (``.cadencefmt.yaml``, found by walking up from the
working directory, or given explicitly) and validated against CONFIG_SCHEMA.
Every key is optional:

    max_line_width: 80
    indent: "    "
    bypass_kinds: [PAREN_OPEN, PAREN_CLOSE, BRACKET_OPEN, BRACKET_CLOSE, BRACE_OPEN]
    collapse_empty_blocks: true
    strict: false
    renderer:
      kind: command            # command | http
      command: [cadence-pretty]
      url: http://127.0.0.1:9191/render
      timeout: 30
    server:
      host: 127.0.0.1
      port: 9090
    log_file: null
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import jsonschema
import yaml

from cadencefmt.layout import DEFAULT_BYPASS_KINDS, DEFAULT_FIXUPS
from cadencefmt.lexer import kind_by_name
from cadencefmt.merge import MergeConfig


CONFIG_FILENAME = ".cadencefmt.yaml"

DEFAULT_MAX_LINE_WIDTH = 80
DEFAULT_INDENT = "    "
DEFAULT_PORT = 9090


CONFIG_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "max_line_width": {"type": "integer", "minimum": 1},
        "indent": {"type": "string", "pattern": "^[ \t]*$"},
        "bypass_kinds": {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
        "collapse_empty_blocks": {"type": "boolean"},
        "strict": {"type": "boolean"},
        "renderer": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "kind": {"enum": ["command", "http"]},
                "command": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "url": {"type": "string"},
                "timeout": {"type": "number", "exclusiveMinimum": 0},
            },
        },
        "server": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "host": {"type": "string"},
                "port": {"type": "integer", "minimum": 0, "maximum": 65535},
            },
        },
        "log_file": {"type": ["string", "null"]},
    },
}


class ConfigError(ValueError):
    pass


# ─── Data classes ────────────────────────────────────────────────────────────

@dataclass
class RendererSettings:
    kind: str = "command"
    command: list[str] = field(default_factory=lambda: ["cadence-pretty"])
    url: str = "http://127.0.0.1:9191/render"
    timeout: float = 30.0


@dataclass
class ServerSettings:
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT


@dataclass
class FormatterConfig:
    max_line_width: int = DEFAULT_MAX_LINE_WIDTH
    indent: str = DEFAULT_INDENT
    bypass_kinds: frozenset = DEFAULT_BYPASS_KINDS
    collapse_empty_blocks: bool = True
    strict: bool = False
    renderer: RendererSettings = field(default_factory=RendererSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    log_file: Optional[str] = None
    source: Optional[Path] = None    # File the config was read from

    def merge_config(self) -> MergeConfig:
        return MergeConfig(
            bypass_kinds=self.bypass_kinds,
            fixups=DEFAULT_FIXUPS if self.collapse_empty_blocks else (),
            strict=self.strict,
        )


# ─── Loading ─────────────────────────────────────────────────────────────────

def config_from_dict(data: dict[str, Any], source: Optional[Path] = None) -> FormatterConfig:
    """Validate a parsed YAML mapping and build a FormatterConfig."""
    try:
        jsonschema.validate(data, CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"Invalid config{f' {source}' if source else ''} at {where}: {e.message}") from None

    cfg = FormatterConfig(source=source)
    if "max_line_width" in data:
        cfg.max_line_width = data["max_line_width"]
    if "indent" in data:
        cfg.indent = data["indent"]
    if "bypass_kinds" in data:
        try:
            cfg.bypass_kinds = frozenset(kind_by_name(name) for name in data["bypass_kinds"])
        except ValueError as e:
            raise ConfigError(str(e)) from None
    if "collapse_empty_blocks" in data:
        cfg.collapse_empty_blocks = data["collapse_empty_blocks"]
    if "strict" in data:
        cfg.strict = data["strict"]
    if "log_file" in data:
        cfg.log_file = data["log_file"]

    renderer = data.get("renderer") or {}
    for key in ("kind", "command", "url", "timeout"):
        if key in renderer:
            setattr(cfg.renderer, key, renderer[key])

    server = data.get("server") or {}
    for key in ("host", "port"):
        if key in server:
            setattr(cfg.server, key, server[key])
    return cfg


def find_config(start: Path, max_depth: int = 8) -> Optional[Path]:
    """Nearest .cadencefmt.yaml in *start* or one of its parents."""
    cur = start.resolve()
    for _ in range(max_depth):
        candidate = cur / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if cur.parent == cur:
            break
        cur = cur.parent
    return None


def load_config(path: str | Path | None = None, *, search_from: Optional[Path] = None) -> FormatterConfig:
    """Load the config at *path*, or the discovered one, or the defaults.

    An explicit *path* must exist; discovery silently falls back to defaults.
    """
    if path is None:
        path = find_config(search_from or Path.cwd())
        if path is None:
            return FormatterConfig()
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse YAML config {path}: {e}") from None

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")
    return config_from_dict(data, source=path)
