"""TCP transport to the Neutral IPC server."""

from __future__ import annotations

import logging
import socket

from .config import IpcConfig
from .constants import CONTENT_JSON, CONTENT_TEXT, CTRL_PARSE_TEMPLATE, HEADER_LEN
from .errors import IpcConnectionError, ProtocolError
from .record import Record, decode_header, encode_record

logger = logging.getLogger(__name__)


class IpcConnection:
    """Blocking socket wrapper that exchanges whole records with the server.

    The configured timeout bounds the connect and every send or receive.
    One instance serves one caller at a time.
    """

    def __init__(self, config: IpcConfig | None = None):
        self.config = config if config is not None else IpcConfig.from_file()
        self._sock: socket.socket | None = None

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self) -> None:
        if self._sock is not None:
            raise RuntimeError("Connection is already open")

        host, port = self.config.address
        logger.debug("Connecting to %s:%s (timeout %ss)", host, port, self.config.timeout)
        try:
            self._sock = socket.create_connection((host, port), timeout=self.config.timeout)
        except socket.timeout as exc:
            raise IpcConnectionError(f"Timed out connecting to {host}:{port}") from exc
        except OSError as exc:
            raise IpcConnectionError(f"Cannot connect to {host}:{port}: {exc}") from exc

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "IpcConnection":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def send(self, data: bytes) -> None:
        sock = self._require_socket()
        try:
            sock.sendall(data)
        except socket.timeout as exc:
            raise IpcConnectionError("Timed out sending request") from exc
        except OSError as exc:
            raise IpcConnectionError(f"Failed to send request: {exc}") from exc
        logger.debug("Sent %d bytes", len(data))

    def recv_exact(self, length: int) -> bytes:
        sock = self._require_socket()
        chunks = []
        remaining = length
        while remaining > 0:
            try:
                chunk = sock.recv(min(self.config.buffer_size, remaining))
            except socket.timeout as exc:
                raise IpcConnectionError(f"Timed out waiting for response after {self.config.timeout}s") from exc
            except OSError as exc:
                raise IpcConnectionError(f"Failed to read response: {exc}") from exc
            if not chunk:
                raise ProtocolError(f"Connection closed by server with {remaining} of {length} bytes missing")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def recv_record(self) -> Record:
        header = decode_header(self.recv_exact(HEADER_LEN))
        content1 = self.recv_exact(header.length1)
        content2 = self.recv_exact(header.length2)
        logger.debug("Received record control=%s (%d + %d bytes)", header.control, header.length1, header.length2)
        return Record(header.control, header.format1, content1, header.format2, content2)

    def roundtrip(self, request: bytes) -> Record:
        if self._sock is None:
            self.connect()
        self.send(request)
        return self.recv_record()

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise RuntimeError("Connection is not open")
        return self._sock


def is_server_available(config: IpcConfig | None = None, timeout: float = 1.0) -> bool:
    """Probe the server with a minimal render request and wait for a reply header."""
    config = config if config is not None else IpcConfig.from_file()
    probe = encode_record(CTRL_PARSE_TEMPLATE, CONTENT_JSON, b"{}", CONTENT_TEXT, b"")
    try:
        with IpcConnection(config.replace(timeout=timeout)) as conn:
            conn.send(probe)
            decode_header(conn.recv_exact(HEADER_LEN))
    except (IpcConnectionError, ProtocolError) as exc:
        logger.debug("Server at %s:%s unavailable: %s", config.host, config.port, exc)
        return False
    return True
