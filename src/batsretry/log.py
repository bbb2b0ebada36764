"""Logging context passed explicitly through the retry pipeline."""
from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Mapping, MutableMapping, Optional, TextIO, Tuple

LOGGER_NAME = "batsretry"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_HANDLER_MARKER = "_batsretry_handler"


class KeyValueFormatter(logging.Formatter):
    """Render records as ``@timestamp=... @level=... @message=... key=value``."""

    def __init__(self) -> None:
        super().__init__(datefmt=TIMESTAMP_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"@timestamp={self.formatTime(record, self.datefmt)}",
            f"@level={record.levelname.lower()}",
            f"@message={_quote(record.getMessage())}",
        ]
        fields: Mapping[str, Any] = getattr(record, "fields", {}) or {}
        parts.extend(f"{key}={_quote(str(value))}" for key, value in fields.items())
        text = " ".join(parts)
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter carrying key/value fields scoped to one unit of work."""

    def __init__(self, logger: logging.Logger, fields: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(logger, dict(fields or {}))

    @property
    def fields(self) -> Dict[str, Any]:
        return dict(self.extra)

    def bind(self, **fields: Any) -> "ContextLogger":
        merged = dict(self.extra)
        merged.update(fields)
        return ContextLogger(self.logger, merged)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        fields = dict(self.extra)
        fields.update(extra.pop("fields", {}))
        extra["fields"] = fields
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(**fields: Any) -> ContextLogger:
    return ContextLogger(logging.getLogger(LOGGER_NAME), fields)


def configure_logging(*, verbose: bool = False, stream: Optional[TextIO] = None) -> ContextLogger:
    """Install the key/value handler on the package logger (idempotent)."""

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(KeyValueFormatter())
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return ContextLogger(logger)


def _quote(value: str) -> str:
    if value and not any(ch in value for ch in ' ="\t\n'):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'
