"""Request encoding and response decoding for template renders."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .constants import CONTENT_BIN, CONTENT_JSON, CONTENT_PATH, CONTENT_TEXT, CTRL_PARSE_TEMPLATE, CTRL_STATUS_OK
from .errors import ProtocolError, RenderError, SerializationError
from .record import Record, encode_record
from .schema import decode_schema, encode_schema

TEMPLATE_FORMATS = (CONTENT_TEXT, CONTENT_PATH)


@dataclass(frozen=True)
class RenderResult:
    """Rendered output plus the status the server attached to it."""

    content: str
    status_code: str = ""
    status_text: str = ""
    status_param: str = ""
    control: int = CTRL_STATUS_OK
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def has_error(self) -> bool:
        if self.control != CTRL_STATUS_OK:
            return True
        return self.data.get("has_error") is True

    @property
    def ok(self) -> bool:
        return not self.has_error

    def raise_for_status(self) -> "RenderResult":
        if self.has_error:
            raise RenderError(self)
        return self


def encode_request(
    template: str,
    schema: Mapping[str, Any],
    *,
    template_format: int = CONTENT_TEXT,
    schema_format: str | int = "json",
) -> bytes:
    if template_format not in TEMPLATE_FORMATS:
        raise ValueError(f"Unsupported template format: {template_format!r}")
    fmt, payload = encode_schema(schema, schema_format)
    try:
        body = template.encode()
    except UnicodeEncodeError as exc:
        raise SerializationError(f"Template is not representable as UTF-8: {exc}") from exc
    return encode_record(CTRL_PARSE_TEMPLATE, fmt, payload, template_format, body)


def decode_response(record: Record) -> RenderResult:
    # anything but MessagePack is read as JSON
    status_format = CONTENT_BIN if record.format1 == CONTENT_BIN else CONTENT_JSON
    try:
        status = decode_schema(record.content1, status_format) if record.content1 else {}
    except SerializationError as exc:
        raise ProtocolError(f"Invalid status payload: {exc}") from exc
    if not isinstance(status, dict):
        raise ProtocolError("Status payload must be a mapping")

    try:
        content = record.content2.decode()
    except UnicodeDecodeError as exc:
        raise ProtocolError(f"Rendered content is not valid UTF-8: {exc}") from exc

    return RenderResult(
        content=content,
        status_code=_as_text(status.get("status_code")),
        status_text=_as_text(status.get("status_text")),
        status_param=_as_text(status.get("status_param")),
        control=record.control,
        data=status,
    )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
