"""Connection settings for the Neutral IPC client."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from dataclasses import dataclass
from typing import Any

from .constants import DEFAULT_BUFFER_SIZE, DEFAULT_CONFIG_FILE, DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IpcConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    buffer_size: int = DEFAULT_BUFFER_SIZE

    def __post_init__(self) -> None:
        if not isinstance(self.host, str) or not self.host.strip():
            raise ValueError("'host' cannot be empty")
        if not 1 <= int(self.port) <= 65535:
            raise ValueError("'port' must be between 1 and 65535")
        if float(self.timeout) <= 0:
            raise ValueError("'timeout' must be > 0")
        if int(self.buffer_size) < 1:
            raise ValueError("'buffer_size' must be >= 1")

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE, **overrides: Any) -> "IpcConfig":
        """Build a config from the IPC server's JSON file, then apply ``overrides``.

        A missing file yields the defaults. An unreadable or malformed file is
        logged and also yields the defaults. ``None`` overrides are skipped.
        """
        values = _read_config_file(path)
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def replace(self, **changes: Any) -> "IpcConfig":
        return dataclasses.replace(self, **changes)

    @property
    def address(self) -> tuple[str, int]:
        return (self.host, self.port)


def _read_config_file(path: str) -> dict[str, Any]:
    if not os.path.exists(path):
        return {}

    try:
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unusable config file %s: %s", path, exc)
        return {}

    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top level must be a JSON object", path)
        return {}

    values: dict[str, Any] = {}
    if isinstance(data.get("host"), str):
        values["host"] = data["host"]
    for key, kind in (("port", int), ("timeout", float), ("buffer_size", int)):
        raw = data.get(key)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            continue
        values[key] = kind(raw)

    for key in list(values):
        try:
            IpcConfig(**{key: values[key]})
        except ValueError as exc:
            logger.warning("Ignoring %r from config file %s: %s", key, path, exc)
            del values[key]
    logger.debug("Loaded %s from %s", sorted(values), path)
    return values
