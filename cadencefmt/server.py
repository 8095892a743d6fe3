"""HTTP playground for the formatter.

    GET  /        -> HTML page: code on the left, formatted code on the right
    POST /pretty  -> {"code": "...", "maxLineLength": 80}  ->  text/plain

Each request is handled on its own thread with its own merge state.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional

import jsonschema

from cadencefmt.config import FormatterConfig
from cadencefmt.log import log, log_separator
from cadencefmt.merge import DesyncError
from cadencefmt.render import RenderError, Renderer, format_with_config, renderer_from_config


REQUEST_SCHEMA = {
    "type": "object",
    "required": ["code"],
    "properties": {
        "code": {"type": "string"},
        "maxLineLength": {"type": "integer", "minimum": 1},
    },
}

MAX_BODY_BYTES = 4 * 1024 * 1024

PAGE = """\
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>cadencefmt</title>
    <style>
        :root { --line-length: 80ch; }
        body {
            margin: 0;
            height: 100vh;
            font-family: monospace;
            display: grid;
            grid-template-rows: auto 1fr;
            grid-template-columns: 50% 50%;
        }
        #toolbar { grid-column: 1 / 3; padding: 4px; border-bottom: 1px solid #ccc; }
        textarea, #output-wrapper { border: 1px solid #ccc; resize: none; margin: 0; }
        #output-wrapper { position: relative; overflow: auto; }
        #output { white-space: pre; padding: 2px; }
        #bar {
            position: absolute;
            top: 0;
            bottom: 0;
            left: var(--line-length);
            width: 1px;
            background-color: #c00;
        }
    </style>
</head>
<body>
<div id="toolbar">
    max line length <input id="width" type="number" min="1" step="1">
</div>
<textarea id="editor" spellcheck="false"></textarea>
<div id="output-wrapper">
    <div id="output"></div>
    <div id="bar"></div>
</div>
<script>
    const editor = document.getElementById("editor")
    const output = document.getElementById("output")
    const width = document.getElementById("width")

    let code = localStorage.getItem("code") || ""
    let maxLineLength = Number(localStorage.getItem("maxLineLength")) || 80

    editor.addEventListener("keydown", (e) => {
        if (e.key !== "Tab") return
        e.preventDefault()
        const start = editor.selectionStart
        editor.setRangeText("    ", start, editor.selectionEnd, "end")
        editor.dispatchEvent(new Event("input"))
    })

    editor.addEventListener("input", () => {
        code = editor.value
        localStorage.setItem("code", code)
        update()
    })

    width.addEventListener("input", () => {
        maxLineLength = Number(width.value) || 80
        localStorage.setItem("maxLineLength", maxLineLength)
        update()
    })

    async function update() {
        document.documentElement.style.setProperty("--line-length", maxLineLength + "ch")
        const response = await fetch("/pretty", {
            method: "POST",
            headers: {"Content-Type": "application/json"},
            body: JSON.stringify({code, maxLineLength}),
        })
        output.textContent = await response.text()
    }

    editor.value = code
    width.value = maxLineLength
    update()
</script>
</body>
</html>
"""


class PrettyHandler(BaseHTTPRequestHandler):
    server: "PrettyServer"

    def do_GET(self):
        if self.path != "/":
            self._send(HTTPStatus.NOT_FOUND, f"Not found: {self.path}")
            return
        self._send(HTTPStatus.OK, PAGE, content_type="text/html; charset=utf-8")

    def do_POST(self):
        if self.path != "/pretty":
            self._send(HTTPStatus.NOT_FOUND, f"Not found: {self.path}")
            return

        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            self._send(HTTPStatus.BAD_REQUEST, "Invalid Content-Length")
            return
        if length > MAX_BODY_BYTES:
            self._send(HTTPStatus.REQUEST_ENTITY_TOO_LARGE, "Request body too large")
            return

        raw = self.rfile.read(length)
        try:
            payload = json.loads(raw.decode("utf-8"))
            jsonschema.validate(payload, REQUEST_SCHEMA)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            self._send(HTTPStatus.BAD_REQUEST, f"Invalid JSON: {e}")
            return
        except jsonschema.ValidationError as e:
            self._send(HTTPStatus.BAD_REQUEST, f"Invalid request: {e.message}")
            return

        config = self.server.config
        try:
            result = format_with_config(
                payload["code"],
                config,
                max_line_width=payload.get("maxLineLength"),
                renderer=self.server.renderer,
            )
        except RenderError as e:
            log(f"Renderer failed: {e}", "ERROR")
            self._send(HTTPStatus.BAD_GATEWAY, str(e))
            return
        except DesyncError as e:
            log(str(e), "WARN")
            self._send(HTTPStatus.INTERNAL_SERVER_ERROR, str(e))
            return

        self._send(HTTPStatus.OK, result.text)

    def _send(self, status: HTTPStatus, body: str, content_type: str = "text/plain; charset=utf-8"):
        data = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format, *args):
        log(f"{self.address_string()} {format % args}")


class PrettyServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], config: FormatterConfig, renderer: Renderer):
        super().__init__(address, PrettyHandler)
        self.config = config
        self.renderer = renderer


def make_server(
    config: FormatterConfig,
    *,
    renderer: Optional[Renderer] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> PrettyServer:
    address = (
        host if host is not None else config.server.host,
        port if port is not None else config.server.port,
    )
    return PrettyServer(address, config, renderer or renderer_from_config(config.renderer))


def serve(config: FormatterConfig, *, host: Optional[str] = None, port: Optional[int] = None) -> None:
    srv = make_server(config, host=host, port=port)
    bound_host, bound_port = srv.server_address[:2]
    log_separator("cadencefmt playground")
    log(f"Listening on http://{bound_host}:{bound_port}/")
    try:
        srv.serve_forever()
    except KeyboardInterrupt:
        log("Shutting down")
    finally:
        srv.server_close()
