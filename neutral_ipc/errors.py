"""Exceptions raised by the Neutral IPC client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .protocol import RenderResult


class NeutralIpcError(Exception):
    """Base class for every client-side failure."""


class IpcConnectionError(NeutralIpcError, ConnectionError):
    """Raised when the server is unreachable or a socket operation times out."""


class SerializationError(NeutralIpcError, ValueError):
    """Raised when a schema cannot be encoded or decoded in the requested format."""


class ProtocolError(NeutralIpcError):
    """Raised when a server reply is malformed or truncated."""


class RenderError(NeutralIpcError):
    """Raised on request when the server reports a failed render.

    The full status information stays available on ``result``.
    """

    def __init__(self, result: RenderResult):
        detail = f"{result.status_code} {result.status_text}".strip() or "render failed"
        if result.status_param:
            detail = f"{detail}: {result.status_param}"
        super().__init__(detail)
        self.result = result
