"""Console logging for the CLI and the HTTP server.

Log lines go to stderr: stdout carries formatted code.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import Optional


LOG_FILE: Optional[str] = None


def set_log_file(path: Optional[str]) -> None:
    global LOG_FILE
    LOG_FILE = path


def log(msg: str, level: str = "INFO") -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    line = f"[{timestamp}] [{level}] {msg}"
    print(line, file=sys.stderr, flush=True)
    if LOG_FILE:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(line + "\n")


def log_separator(title: str = "") -> None:
    line = f"━━━ {title} " + "━" * max(0, 60 - len(title))
    log(line)
