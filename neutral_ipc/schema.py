"""Schema building and encoding.

A schema is the data tree handed to the template engine, conventionally
rooted under a ``data`` key. Partial schemas are combined with
:func:`deep_merge` and encoded as JSON or MessagePack for the wire.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from typing import Any

import msgpack
from msgpack.exceptions import UnpackException

from .constants import CONTENT_BIN, CONTENT_JSON
from .errors import SerializationError

logger = logging.getLogger(__name__)

SCHEMA_FORMATS = {
    "json": CONTENT_JSON,
    "msgpack": CONTENT_BIN,
    "bin": CONTENT_BIN,
    CONTENT_JSON: CONTENT_JSON,
    CONTENT_BIN: CONTENT_BIN,
}


def resolve_schema_format(schema_format: str | int) -> int:
    key = schema_format.lower() if isinstance(schema_format, str) else schema_format
    try:
        return SCHEMA_FORMATS[key]
    except (KeyError, TypeError):
        raise ValueError(f"Unsupported schema format: {schema_format!r}") from None


def deep_merge(base: Mapping[str, Any], update: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``update`` merged into it; neither input is modified.

    Keys present in both as mappings are merged recursively. Any other
    collision is won by ``update``. Existing keys keep their position and
    new keys are appended in the order ``update`` yields them.
    """
    merged = {key: copy.deepcopy(value) for key, value in base.items()}
    for key, value in update.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def encode_schema(schema: Mapping[str, Any], schema_format: str | int = "json") -> tuple[int, bytes]:
    fmt = resolve_schema_format(schema_format)
    try:
        if fmt == CONTENT_BIN:
            payload = msgpack.packb(schema, use_bin_type=True)
        else:
            payload = json.dumps(schema, ensure_ascii=False, allow_nan=False, separators=(",", ":")).encode()
    except (TypeError, ValueError, OverflowError) as exc:
        name = "MessagePack" if fmt == CONTENT_BIN else "JSON"
        raise SerializationError(f"Schema is not representable as {name}: {exc}") from exc
    return fmt, payload


def decode_schema(raw: bytes, schema_format: str | int = "json") -> Any:
    fmt = resolve_schema_format(schema_format)
    try:
        if fmt == CONTENT_BIN:
            return msgpack.unpackb(raw, raw=False)
        return json.loads(raw)
    except (TypeError, ValueError, UnpackException) as exc:
        name = "MessagePack" if fmt == CONTENT_BIN else "JSON"
        raise SerializationError(f"Invalid {name} schema: {exc}") from exc


def load_fragment(fragment: Mapping[str, Any] | str | bytes | None) -> dict[str, Any]:
    """Turn a mapping, JSON text or MessagePack bytes into a plain dict."""
    if fragment is None:
        return {}
    if isinstance(fragment, Mapping):
        return dict(fragment)
    if isinstance(fragment, str):
        data = decode_schema(fragment.encode(), CONTENT_JSON)
    elif isinstance(fragment, (bytes, bytearray)):
        data = decode_schema(bytes(fragment), CONTENT_BIN)
    else:
        raise SerializationError(f"Unsupported schema fragment type: {type(fragment).__name__}")

    if not isinstance(data, Mapping):
        raise SerializationError("Schema fragment must decode to a mapping")
    return dict(data)


class SchemaBuilder:
    """Accumulates schema fragments, merging each one in call order."""

    def __init__(self, *fragments: Mapping[str, Any] | str | bytes):
        self._schema: dict[str, Any] = {}
        for fragment in fragments:
            self.merge(fragment)

    def merge(self, fragment: Mapping[str, Any] | str | bytes | None) -> "SchemaBuilder":
        data = load_fragment(fragment)
        logger.debug("Merging schema fragment with keys %s", list(data))
        self._schema = deep_merge(self._schema, data)
        return self

    def build(self) -> dict[str, Any]:
        return copy.deepcopy(self._schema)

    def encode(self, schema_format: str | int = "json") -> tuple[int, bytes]:
        return encode_schema(self._schema, schema_format)

    def __len__(self) -> int:
        return len(self._schema)
