"""Canonical rendering collaborators and the format pipeline.

Parsing Cadence and pretty-printing the syntax tree happen outside this
package. A Renderer hands source code to such a tool and returns its
comment-free, width-constrained rendering:

  - CommandRenderer runs a local executable (source on stdin, rendering on
    stdout, diagnostic on stderr).
  - HttpRenderer posts the source to a rendering service.

pretty_code() is the whole pipeline: render, then put the original's
comments back with the reconciliation engine. A parse failure short-circuits
the merge and the diagnostic itself becomes the output.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import httpx

from cadencefmt.config import FormatterConfig, RendererSettings
from cadencefmt.merge import MergeConfig, ReconcileStats, reconcile


PARSE_FAILURE_PREFIX = "Parsing failed"


class ParseFailure(Exception):
    """The source did not parse; ``message`` is the parser's diagnostic."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RenderError(RuntimeError):
    """The renderer could not be reached or misbehaved."""


class Renderer(Protocol):
    def render(self, code: str, max_line_width: int, indent: str) -> str:
        ...


# ─── Renderers ───────────────────────────────────────────────────────────────

class CommandRenderer:
    def __init__(self, argv: Sequence[str], timeout: float = 30.0):
        if not argv:
            raise ValueError("CommandRenderer needs a command")
        self.argv = list(argv)
        self.timeout = timeout

    def render(self, code: str, max_line_width: int, indent: str) -> str:
        cmd = self.argv + ["--max-line-width", str(max_line_width), "--indent", indent]
        try:
            result = subprocess.run(
                cmd,
                input=code,
                capture_output=True, text=True, encoding="utf-8",
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise RenderError(f"Renderer command not found: {self.argv[0]}") from None
        except subprocess.TimeoutExpired:
            raise RenderError(f"Renderer timed out after {self.timeout}s: {self.argv[0]}") from None

        if result.returncode != 0:
            diagnostic = (result.stderr or result.stdout).strip()
            if diagnostic.startswith(PARSE_FAILURE_PREFIX):
                raise ParseFailure(diagnostic)
            raise RenderError(f"{self.argv[0]} exited with {result.returncode}: {diagnostic[:300]}")
        return result.stdout


class HttpRenderer:
    def __init__(self, url: str, timeout: float = 30.0, client: Optional[httpx.Client] = None):
        self.url = url
        self.timeout = timeout
        self.client = client

    def render(self, code: str, max_line_width: int, indent: str) -> str:
        payload = {"code": code, "maxLineWidth": max_line_width, "indent": indent}
        try:
            if self.client is not None:
                resp = self.client.post(self.url, json=payload, timeout=self.timeout)
            else:
                resp = httpx.post(self.url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise RenderError(f"Renderer request to {self.url} failed: {e}") from e

        if resp.status_code == 422:
            raise ParseFailure(resp.text)
        if resp.status_code != 200:
            raise RenderError(f"Renderer returned status {resp.status_code}: {resp.text[:300]}")
        return resp.text


def renderer_from_config(settings: RendererSettings) -> Renderer:
    if settings.kind == "http":
        return HttpRenderer(settings.url, timeout=settings.timeout)
    return CommandRenderer(settings.command, timeout=settings.timeout)


# ─── Pipeline ────────────────────────────────────────────────────────────────

@dataclass
class FormatResult:
    text: str                     # Formatted code, or the parse diagnostic
    parse_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.parse_error is None


def format_code(
    code: str,
    max_line_width: int,
    renderer: Renderer,
    *,
    indent: str = "    ",
    merge_config: MergeConfig | None = None,
    stats: ReconcileStats | None = None,
) -> FormatResult:
    try:
        rendered = renderer.render(code, max_line_width, indent)
    except ParseFailure as e:
        return FormatResult(text=e.message, parse_error=e.message)
    if rendered.startswith(PARSE_FAILURE_PREFIX):
        return FormatResult(text=rendered, parse_error=rendered)
    return FormatResult(text=reconcile(code, rendered, config=merge_config, stats=stats))


def pretty_code(
    code: str,
    max_line_width: int,
    renderer: Renderer,
    *,
    indent: str = "    ",
    merge_config: MergeConfig | None = None,
    stats: ReconcileStats | None = None,
) -> str:
    """Format *code*, keeping its comments and paragraph breaks.

    On a parse failure the parser's diagnostic is returned instead.
    """
    return format_code(
        code, max_line_width, renderer,
        indent=indent, merge_config=merge_config, stats=stats,
    ).text


def format_with_config(
    code: str,
    config: FormatterConfig,
    *,
    max_line_width: int | None = None,
    renderer: Renderer | None = None,
    stats: ReconcileStats | None = None,
) -> FormatResult:
    """format_code() with every knob taken from *config*."""
    return format_code(
        code,
        max_line_width or config.max_line_width,
        renderer or renderer_from_config(config.renderer),
        indent=config.indent,
        merge_config=config.merge_config(),
        stats=stats,
    )
