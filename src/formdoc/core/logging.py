from __future__ import annotations

import logging
import os
import re
from datetime import datetime, timezone
from typing import Any, Mapping

from pythonjsonlogger.json import JsonFormatter

DEFAULT_LOG_LEVEL = "INFO"
HANDLER_NAME = "formdoc_json"

_SENSITIVE_KEYS = frozenset(
    {
        "password",
        "token",
        "authorization",
        "email",
        "cpf",
        "cnpj",
        "signature_data_url",
    }
)

_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
# Punctuated or digits-only, as stored after normalization.
_CNPJ_RE = re.compile(r"\b(?:\d{2}\.\d{3}\.\d{3}/\d{4}-\d{2}|\d{14})\b")
_CPF_RE = re.compile(r"\b(?:\d{3}\.\d{3}\.\d{3}-\d{2}|\d{11})\b")
_DATA_URL_RE = re.compile(r"data:image/[A-Za-z0-9.+-]+;base64,[A-Za-z0-9+/=]+")


def scrub_text(text: str) -> str:
    text = _EMAIL_RE.sub("[REDACTED_EMAIL]", text)
    text = _CNPJ_RE.sub("[REDACTED_CNPJ]", text)
    text = _CPF_RE.sub("[REDACTED_CPF]", text)
    text = _DATA_URL_RE.sub("[REDACTED_IMAGE]", text)
    return text


def scrub_pii(value: Any) -> Any:
    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in _SENSITIVE_KEYS:
                out[key] = "[REDACTED]"
            else:
                out[key] = scrub_pii(v)
        return out

    if isinstance(value, (list, tuple)):
        return [scrub_pii(v) for v in value]

    if isinstance(value, str):
        return scrub_text(value)

    return value


class PrivacyFilter(logging.Filter):
    """Strip contact details and tax ids that company forms carry into log lines."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 (filter)
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = str(record.msg)

        record.msg = scrub_text(message)
        record.args = ()

        fields = getattr(record, "fields", None)
        if isinstance(fields, Mapping):
            record.fields = scrub_pii(fields)

        return True


class UtcJsonFormatter(JsonFormatter):
    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            now = datetime.fromtimestamp(record.created, tz=timezone.utc)
            log_record["timestamp"] = now.isoformat()


def build_formatter() -> UtcJsonFormatter:
    return UtcJsonFormatter(
        "%(levelname)s %(name)s %(message)s",
        rename_fields={"levelname": "level", "name": "logger"},
    )


def _normalize_level(level: str | int | None) -> int:
    if level is None:
        level = os.getenv("FORMDOC_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(*, level: str | int | None = None) -> logging.Logger:
    """Configure process-wide logging.

    Idempotent: calling multiple times will not add multiple handlers, but the
    level is always re-applied.
    """

    resolved_level = _normalize_level(level)

    root = logging.getLogger()
    root.setLevel(resolved_level)

    for h in root.handlers:
        if getattr(h, "name", None) == HANDLER_NAME:
            h.setLevel(resolved_level)
            return logging.getLogger("formdoc")

    handler = logging.StreamHandler()
    handler.name = HANDLER_NAME
    handler.setLevel(resolved_level)
    handler.setFormatter(build_formatter())
    handler.addFilter(PrivacyFilter())

    root.addHandler(handler)

    # Pillow logs every plugin lookup at DEBUG.
    logging.getLogger("PIL").setLevel(logging.WARNING)

    return logging.getLogger("formdoc")


def log_event(
    logger: logging.Logger,
    event: str,
    /,
    *,
    level: int | str = logging.INFO,
    **fields: Any,
) -> None:
    if isinstance(level, str):
        level = _normalize_level(level)

    logger.log(level, event, extra={"fields": scrub_pii(fields)})
