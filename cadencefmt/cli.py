#!/usr/bin/env python3
"""cadencefmt: format Cadence source while keeping comments.

Usage:
    # Format a file, print the result
    cadencefmt format contracts/Token.cdc [--max-line-width 100]

    # Format in place
    cadencefmt format contracts/Token.cdc --write

    # Merge an existing rendering with the original's comments (no renderer)
    cadencefmt merge contracts/Token.cdc rendered/Token.cdc --stats

    # Start the HTTP playground on http://127.0.0.1:9090/
    cadencefmt serve [--port 9090]

Configuration is read from --config, or the nearest .cadencefmt.yaml.

Exit codes: 0 ok, 1 parse failure, 2 renderer or configuration error,
3 desynchronized merge in strict mode.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from cadencefmt.config import ConfigError, FormatterConfig, load_config
from cadencefmt.log import log, set_log_file
from cadencefmt.merge import DesyncError, ReconcileStats, reconcile
from cadencefmt.render import RenderError, format_with_config


EXIT_OK = 0
EXIT_PARSE_FAILURE = 1
EXIT_ERROR = 2
EXIT_DESYNC = 3


def read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def report_stats(stats: ReconcileStats) -> None:
    print(json.dumps(stats.as_dict(), indent=2), file=sys.stderr)
    for event in stats.desync_events:
        log(
            f"Streams desynchronized at {event.kind} {event.text!r} "
            f"(line {event.line}, column {event.column}); "
            f"{event.pending_comments} comment(s) may be misplaced",
            "WARN",
        )


# ─── Commands ────────────────────────────────────────────────────────────────

def cmd_format(args, config: FormatterConfig) -> int:
    code = read_source(args.file)
    stats = ReconcileStats()
    try:
        result = format_with_config(code, config, max_line_width=args.max_line_width, stats=stats)
    except RenderError as e:
        log(str(e), "ERROR")
        return EXIT_ERROR

    if not result.ok:
        print(result.text, file=sys.stderr)
        return EXIT_PARSE_FAILURE

    if args.write and args.file != "-":
        if result.text != code:
            Path(args.file).write_text(result.text, encoding="utf-8")
            log(f"Reformatted {args.file}")
    else:
        sys.stdout.write(result.text)
        if not result.text.endswith("\n"):
            sys.stdout.write("\n")

    if args.stats:
        report_stats(stats)
    return EXIT_OK


def cmd_merge(args, config: FormatterConfig) -> int:
    original = read_source(args.original)
    rendered = read_source(args.rendered)
    stats = ReconcileStats()
    sys.stdout.write(reconcile(original, rendered, config=config.merge_config(), stats=stats))
    if args.stats:
        report_stats(stats)
    return EXIT_OK


def cmd_serve(args, config: FormatterConfig) -> int:
    from cadencefmt.server import serve

    serve(config, host=args.host, port=args.port)
    return EXIT_OK


# ─── Entry point ─────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cadencefmt",
        description="Format Cadence source code, preserving comments and blank lines.",
    )
    parser.add_argument("--config", default=None,
                        help="Path to a YAML config (default: nearest .cadencefmt.yaml)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    fmt_parser = subparsers.add_parser("format", help="Format a source file")
    fmt_parser.add_argument("file", help="Cadence source file, or - for stdin")
    fmt_parser.add_argument("--max-line-width", type=int, default=None,
                            help="Maximum line width (default: from config, 80)")
    fmt_parser.add_argument("--write", action="store_true",
                            help="Rewrite the file instead of printing")
    fmt_parser.add_argument("--stats", action="store_true",
                            help="Print comment placement counters to stderr")

    merge_parser = subparsers.add_parser(
        "merge", help="Re-insert ORIGINAL's comments into an existing RENDERED file",
    )
    merge_parser.add_argument("original")
    merge_parser.add_argument("rendered")
    merge_parser.add_argument("--stats", action="store_true")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP playground")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        log(str(e), "ERROR")
        return EXIT_ERROR
    if config.log_file:
        set_log_file(config.log_file)

    handlers = {
        "format": cmd_format,
        "merge": cmd_merge,
        "serve": cmd_serve,
    }
    try:
        return handlers[args.command](args, config)
    except DesyncError as e:
        log(str(e), "ERROR")
        return EXIT_DESYNC
    except OSError as e:
        log(f"{e.filename or ''}: {e.strerror or e}", "ERROR")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
