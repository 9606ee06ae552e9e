"""In-process stand-in for the Neutral IPC server used by the test suite.

It speaks the real record framing but only understands three tags:
``{:;name:}``, ``{:exit; CODE :}`` and ``{:redirect; CODE >> URL :}``.
"""

from __future__ import annotations

import json
import re
import socketserver
import threading
from typing import Any

import msgpack

from neutral_ipc.constants import CONTENT_BIN, CONTENT_JSON, CONTENT_PATH, CTRL_STATUS_KO, CTRL_STATUS_OK, HEADER_LEN
from neutral_ipc.record import decode_header, encode_header, encode_record

STATUS_TEXT = {
    "200": "OK",
    "301": "Moved Permanently",
    "302": "Found",
    "404": "Not Found",
    "500": "Internal Server Error",
}

EXIT_TAG = re.compile(r"\{:exit;\s*(\d{3})\s*:\}")
REDIRECT_TAG = re.compile(r"\{:redirect;\s*(\d{3})\s*>>\s*(\S+)\s*:\}")
VAR_TAG = re.compile(r"\{:;([\w.-]+):\}")


def lookup(data: dict[str, Any], dotted: str) -> str:
    value: Any = data
    for part in dotted.split("."):
        if not isinstance(value, dict) or part not in value:
            return ""
        value = value[part]
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render(source: str, schema: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    redirect = REDIRECT_TAG.search(source)
    if redirect:
        code, url = redirect.groups()
        return f"{code} {STATUS_TEXT[code]}\n{url}", status(code, url)

    exited = EXIT_TAG.search(source)
    if exited:
        code = exited.group(1)
        return f"{code} {STATUS_TEXT[code]}", status(code)

    data = schema.get("data", {})
    return VAR_TAG.sub(lambda match: lookup(data, match.group(1)), source), status("200")


def status(code: str, param: str = "", has_error: bool = False) -> dict[str, Any]:
    return {
        "status_code": code,
        "status_text": STATUS_TEXT.get(code, ""),
        "status_param": param,
        "has_error": has_error,
    }


class FakeIpcRequestHandler(socketserver.StreamRequestHandler):
    server: "FakeIpcServer"

    def handle(self) -> None:
        raw_header = self.rfile.read(HEADER_LEN)
        if len(raw_header) < HEADER_LEN:
            return
        header = decode_header(raw_header)
        content1 = self.rfile.read(header.length1)
        content2 = self.rfile.read(header.length2)
        self.server.requests.append((header, content1, content2))

        mode = self.server.mode
        if mode == "silent":
            self.server.release.wait(timeout=5)
            return
        if mode == "truncate":
            self.wfile.write(encode_header(CTRL_STATUS_OK, CONTENT_JSON, 50, 0, 0) + b'{"status_code"')
            return
        if mode == "garbage":
            self.wfile.write(b"\x07" + b"\x00" * (HEADER_LEN - 1))
            return
        if mode == "bad-status":
            self.wfile.write(encode_record(CTRL_STATUS_OK, CONTENT_JSON, b"not json", 30, b""))
            return

        self.wfile.write(self._respond(header.format1, content1, header.format2, content2))

    def _respond(self, format1: int, content1: bytes, format2: int, content2: bytes) -> bytes:
        schema = msgpack.unpackb(content1, raw=False) if format1 == CONTENT_BIN else json.loads(content1 or b"{}")
        control = CTRL_STATUS_OK
        if format2 == CONTENT_PATH:
            try:
                with open(content2.decode(), encoding="utf-8") as handle:
                    source = handle.read()
            except OSError as exc:
                output, result = "", status("500", str(exc), has_error=True)
                control = CTRL_STATUS_KO
            else:
                output, result = render(source, schema)
        else:
            output, result = render(content2.decode(), schema)

        if format1 == CONTENT_BIN:
            payload = msgpack.packb(result, use_bin_type=True)
        else:
            payload = json.dumps(result).encode()
        return encode_record(control, format1, payload, 30, output)


class FakeIpcServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, host: str = "127.0.0.1", port: int = 0, mode: str = "render"):
        self.mode = mode
        self.requests: list[tuple[Any, bytes, bytes]] = []
        self.release = threading.Event()
        super().__init__((host, port), FakeIpcRequestHandler)

    def start(self) -> threading.Thread:
        thread = threading.Thread(target=self.serve_forever, daemon=True)
        thread.start()
        return thread

    def stop(self, thread: threading.Thread) -> None:
        self.release.set()
        self.shutdown()
        self.server_close()
        thread.join(timeout=2)
