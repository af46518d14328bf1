"""Logging setup for the notion2code service and CLI.

Two output modes: one JSON object per line (``LOG_FORMAT=json``, the
default, meant for log shippers) or a plain text line for local runs.
Every handler redacts Notion integration tokens and LLM provider keys
before anything is written, and request-scoped records carry the
``request_id`` that the request context middleware stores in
``request_id_var``.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Optional


request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_TEXT_DATEFMT = "%H:%M:%S"

# Chatty at INFO; their request lines duplicate our own.
_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "LiteLLM")

# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """Render a record as a JSON line with its ``extra`` fields flattened in."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        entry.update(
            (name, value) for name, value in vars(record).items()
            if name not in _RECORD_ATTRS and name not in entry
        )
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


_REDACTED = "***REDACTED***"

# (pattern, replacement); a replacement may keep a captured label like "Bearer ".
_REDACTIONS = [
    (re.compile(r"\bsk-ant-[\w\-]{20,}"), _REDACTED),
    (re.compile(r"\bsk-[a-zA-Z0-9]{20,}\b"), _REDACTED),
    (re.compile(r"\b(?:secret|ntn)_[a-zA-Z0-9]{20,}\b"), _REDACTED),
    (re.compile(r"(?i)\b(bearer\s+)[\w.\-]{20,}"), r"\g<1>" + _REDACTED),
    (
        re.compile(r"(?i)\b((?:api_key|api_base|secret|password|token|authorization)[=:]\s*)[^\s,'\"]{8,}"),
        r"\g<1>" + _REDACTED,
    ),
]


def redact(text: str) -> str:
    """Replace credentials in *text* with a fixed marker."""
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


class _SecretFilter(logging.Filter):
    """Apply ``redact`` to the message, its string arguments and exception text."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact(str(record.msg))
        if isinstance(record.args, tuple):
            record.args = tuple(redact(a) if isinstance(a, str) else a for a in record.args)
        if record.exc_text:
            record.exc_text = redact(record.exc_text)
        return True


def mask_secret(value: str) -> str:
    """Short, log-safe fingerprint of a credential, e.g. ``sk-ant-...abcd``."""
    if not value:
        return ""
    if len(value) <= 11:
        return "***"
    return f"{value[:7]}...{value[-4:]}"


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install the stdout handler on the root logger, replacing any existing ones.

    Args:
        log_level: Standard level name, INFO when omitted.
        log_format: ``"json"`` (default) or ``"text"``.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_SecretFilter())
    if fmt == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt=_TEXT_DATEFMT))

    logging.basicConfig(level=level, handlers=[handler], force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured", extra={"level": level, "format": fmt})
