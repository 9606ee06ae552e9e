"""High-level template rendering through the Neutral IPC server."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .config import IpcConfig
from .connection import IpcConnection
from .constants import CONTENT_PATH, CONTENT_TEXT
from .protocol import RenderResult, decode_response, encode_request
from .schema import SchemaBuilder, resolve_schema_format

logger = logging.getLogger(__name__)

SchemaFragment = Mapping[str, Any] | str | bytes


class NeutralTemplate:
    """A template reference plus the schema it is rendered with.

    ``template`` is a file path on the server host when ``is_path`` is true,
    otherwise the template source itself. Each :meth:`render` opens its own
    connection, so an instance can be rendered repeatedly while its template
    or schema changes in between.
    """

    def __init__(
        self,
        template: str = "",
        schema: SchemaFragment | None = None,
        *,
        is_path: bool = True,
        config: IpcConfig | None = None,
        schema_format: str | int = "json",
    ):
        self.config = config if config is not None else IpcConfig.from_file()
        self.schema_format = resolve_schema_format(schema_format)
        self._template = template
        self._template_format = CONTENT_PATH if is_path else CONTENT_TEXT
        self._schema = SchemaBuilder()
        if schema is not None:
            self._schema.merge(schema)
        self.result: RenderResult | None = None

    @classmethod
    def from_file(cls, path: str, schema: SchemaFragment | None = None, **kwargs: Any) -> "NeutralTemplate":
        return cls(path, schema, is_path=True, **kwargs)

    @classmethod
    def from_source(cls, source: str, schema: SchemaFragment | None = None, **kwargs: Any) -> "NeutralTemplate":
        return cls(source, schema, is_path=False, **kwargs)

    @property
    def template(self) -> str:
        return self._template

    @property
    def is_path(self) -> bool:
        return self._template_format == CONTENT_PATH

    @property
    def schema(self) -> dict[str, Any]:
        return self._schema.build()

    def set_path(self, path: str) -> None:
        self._template_format = CONTENT_PATH
        self._template = path

    def set_source(self, source: str) -> None:
        self._template_format = CONTENT_TEXT
        self._template = source

    def merge_schema(self, fragment: SchemaFragment) -> None:
        self._schema.merge(fragment)

    def render(self, raise_on_error: bool = False) -> str:
        """Render through the server and return the output text.

        Status fields of the reply are kept on :attr:`result` whatever the
        outcome. With ``raise_on_error`` a failed render raises
        :class:`~neutral_ipc.errors.RenderError` after the result is stored.
        """
        request = encode_request(
            self._template,
            self._schema.build(),
            template_format=self._template_format,
            schema_format=self.schema_format,
        )
        with IpcConnection(self.config) as conn:
            record = conn.roundtrip(request)

        self.result = decode_response(record)
        logger.debug("Rendered %s: %s %s", "file" if self.is_path else "source", self.status_code, self.status_text)
        if raise_on_error:
            self.result.raise_for_status()
        return self.result.content

    def has_error(self) -> bool:
        return self.result is not None and self.result.has_error

    @property
    def status_code(self) -> str:
        return self.result.status_code if self.result is not None else ""

    @property
    def status_text(self) -> str:
        return self.result.status_text if self.result is not None else ""

    @property
    def status_param(self) -> str:
        return self.result.status_param if self.result is not None else ""
