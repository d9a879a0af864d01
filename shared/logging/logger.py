from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from shared.utils.formatting import mask_identifier

_correlation_ctx: ContextVar[dict[str, str] | None] = ContextVar("correlation_ctx", default=None)

_REDACTED = "[REDACTED]"
_TRUNCATED = "[TRUNCATED]"
_MAX_DEPTH = 6

# CPF and CNPJ, bare or formatted
_DOCUMENT_PATTERNS = (
    re.compile(r"\b\d{11,19}\b"),
    re.compile(r"\b\d{3}\.\d{3}\.\d{3}-\d{2}\b"),
    re.compile(r"\b\d{2}\.\d{3}\.\d{3}/\d{4}-\d{2}\b"),
)

_SECRET_FIELDS = frozenset(
    {
        "pix_key",
        "pix_key_holder",
        "pix_qr_code",
        "account_number",
        "bank_account_number",
        "document_number",
        "session_token",
        "admin_session",
        "x-admin-session",
        "cookie",
        "authorization",
        "pushover_token",
        "pushover_user_key",
    }
)
# logged with only the first and last six characters
_MASKED_FIELDS = frozenset({"wallet_address", "tx_hash", "email", "owner_email"})


def _redact_text(value: str) -> str:
    for pattern in _DOCUMENT_PATTERNS:
        value = pattern.sub(_REDACTED, value)
    return value


def _sanitize_field(key: str, value: Any, depth: int) -> Any:
    name = key.lower()
    if name in _SECRET_FIELDS:
        return _REDACTED
    if name in _MASKED_FIELDS and isinstance(value, str):
        return mask_identifier(value, visible=6)
    return sanitize(value, depth + 1)


def _sanitize_mapping(values: dict[Any, Any], depth: int) -> dict[str, Any]:
    return {str(key): _sanitize_field(str(key), value, depth) for key, value in values.items()}


def _sanitize_items(values: list[Any] | tuple[Any, ...] | set[Any], depth: int) -> list[Any]:
    return [sanitize(item, depth + 1) for item in values]


_SCALAR_RENDERERS: tuple[tuple[type | tuple[type, ...], Callable[[Any], Any]], ...] = (
    (bool, lambda value: value),
    ((int, float), lambda value: value),
    (str, _redact_text),
    (Decimal, str),
    (Enum, lambda value: value.value),
    ((datetime, date), lambda value: value.isoformat()),
    (UUID, str),
)


def sanitize(value: Any, depth: int = 0) -> Any:
    """Returns a JSON-friendly copy of ``value`` with secrets and documents removed."""
    if depth >= _MAX_DEPTH:
        return _TRUNCATED
    if value is None:
        return None
    if isinstance(value, dict):
        return _sanitize_mapping(value, depth)
    if isinstance(value, list | tuple | set | frozenset):
        return _sanitize_items(value, depth)
    for types, render in _SCALAR_RENDERERS:
        if isinstance(value, types):
            return render(value)
    return _redact_text(str(value))


class JsonFormatter(logging.Formatter):
    def __init__(self, service_name: str | None = None) -> None:
        super().__init__()
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self._service_name:
            entry["service"] = self._service_name
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(_current_correlation_context())
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            entry.update(extra_fields)
        return json.dumps(sanitize(entry), default=str, ensure_ascii=False)


def _current_correlation_context() -> dict[str, str]:
    return _correlation_ctx.get() or {}


def configure_logging(level: str = "INFO", service_name: str | None = None) -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    if any(isinstance(handler.formatter, JsonFormatter) for handler in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(service_name))
    root.addHandler(handler)
    # one line per request is already emitted by the correlation middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def set_correlation_context(values: dict[str, str]) -> None:
    _correlation_ctx.set(dict(values))


def update_correlation_context(values: dict[str, str]) -> None:
    _correlation_ctx.set({**_current_correlation_context(), **values})


def get_correlation_context() -> dict[str, str]:
    return dict(_current_correlation_context())


def clear_correlation_context() -> None:
    _correlation_ctx.set({})


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
