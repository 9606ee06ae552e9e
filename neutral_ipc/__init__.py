"""Client for rendering Neutral TS templates through the Neutral IPC server."""

from .config import IpcConfig
from .connection import IpcConnection, is_server_available
from .constants import (
    CONTENT_BIN,
    CONTENT_JSON,
    CONTENT_PATH,
    CONTENT_TEXT,
    CTRL_PARSE_TEMPLATE,
    CTRL_STATUS_KO,
    CTRL_STATUS_OK,
    HEADER_LEN,
)
from .errors import IpcConnectionError, NeutralIpcError, ProtocolError, RenderError, SerializationError
from .protocol import RenderResult, decode_response, encode_request
from .schema import SchemaBuilder, deep_merge, encode_schema
from .template import NeutralTemplate

__all__ = [
    "CONTENT_BIN",
    "CONTENT_JSON",
    "CONTENT_PATH",
    "CONTENT_TEXT",
    "CTRL_PARSE_TEMPLATE",
    "CTRL_STATUS_KO",
    "CTRL_STATUS_OK",
    "HEADER_LEN",
    "IpcConfig",
    "IpcConnection",
    "IpcConnectionError",
    "NeutralIpcError",
    "NeutralTemplate",
    "ProtocolError",
    "RenderError",
    "RenderResult",
    "SchemaBuilder",
    "SerializationError",
    "decode_response",
    "deep_merge",
    "encode_request",
    "encode_schema",
    "is_server_available",
]
