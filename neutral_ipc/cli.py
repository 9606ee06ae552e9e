#!/usr/bin/env python3
"""Render a Neutral TS template from the command line."""

from __future__ import annotations

import argparse
import logging
import sys

from .config import IpcConfig
from .connection import is_server_available
from .constants import DEFAULT_CONFIG_FILE
from .errors import NeutralIpcError, RenderError
from .schema import SchemaBuilder
from .template import NeutralTemplate


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="neutral-ipc", description="Neutral IPC template client")
    parser.add_argument("--config", default=DEFAULT_CONFIG_FILE, help="IPC server JSON config file")
    parser.add_argument("--host")
    parser.add_argument("--port", type=int)
    parser.add_argument("--timeout", type=float)
    parser.add_argument("--buffer-size", type=int)
    parser.add_argument("--schema", action="append", default=[], metavar="FILE", help="JSON schema file, merged in order")
    parser.add_argument("--data", action="append", default=[], metavar="JSON", help="inline JSON schema, merged after files")
    parser.add_argument("--msgpack", action="store_true", help="send the schema as MessagePack")
    parser.add_argument("--status", action="store_true", help="print the status line to stderr")
    parser.add_argument("--strict", action="store_true", help="exit with 1 when the server reports an error")
    parser.add_argument("-v", "--verbose", action="store_true")

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--source", help="template source")
    target.add_argument("--file", help="template path on the server host")
    target.add_argument("--check", action="store_true", help="only check that the server answers")
    return parser


def load_schema(files: list[str], inline: list[str]) -> SchemaBuilder:
    builder = SchemaBuilder()
    for path in files:
        with open(path, encoding="utf-8") as handle:
            builder.merge(handle.read())
    for text in inline:
        builder.merge(text)
    return builder


def format_status(template: NeutralTemplate) -> str:
    line = f"{template.status_code} {template.status_text}".strip()
    if template.status_param:
        line = f"{line} ({template.status_param})"
    return line


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = IpcConfig.from_file(
            args.config,
            host=args.host,
            port=args.port,
            timeout=args.timeout,
            buffer_size=args.buffer_size,
        )
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.check:
        available = is_server_available(config, timeout=config.timeout)
        print(f"{config.host}:{config.port} {'available' if available else 'unavailable'}")
        return 0 if available else 1

    try:
        schema = load_schema(args.schema, args.data)
        options = {"config": config, "schema_format": "msgpack" if args.msgpack else "json"}
        if args.file is not None:
            template = NeutralTemplate.from_file(args.file, schema.build(), **options)
        else:
            template = NeutralTemplate.from_source(args.source, schema.build(), **options)
        output = template.render(raise_on_error=args.strict)
    except RenderError as exc:
        print(exc.result.content)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except (NeutralIpcError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(output)
    if args.status:
        print(format_status(template), file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
