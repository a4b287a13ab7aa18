"""Centralized logging helpers.

Provides one-time logging configuration, structured ``extra`` payloads for
DEBUG traces, URL/secret redaction and a small timing helper. Kept free of
project imports other than constants so any module can use it.
"""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from constants import Constants

_SENSITIVE_KEYS = ("token", "access_token", "key", "api_key", "password", "secret", "sig")
_TOKEN_PATTERN = re.compile(r"(gh[pousr]_[A-Za-z0-9]{20,}|Bearer\s+[A-Za-z0-9._\-]+)")
_REDACTED = "***"


def configure_logging() -> None:
    """Configure the root logger once, honoring MIRRORSYNC_LOG_LEVEL."""
    level_name = os.environ.get(Constants.ENV_LOG_LEVEL, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping for structured log records.

    None values are dropped so records only carry what is known.
    """
    return {k: v for k, v in fields.items() if v is not None}


def redact(text: Optional[str]) -> str:
    """Mask bearer tokens and GitHub tokens in free-form text."""
    if not text:
        return ""
    return _TOKEN_PATTERN.sub(_REDACTED, text)


def safe_url(url: str) -> str:
    """Strip credentials and sensitive query parameters from a URL."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    query = [
        (k, _REDACTED if k.lower() in _SENSITIVE_KEYS else v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit((parts.scheme, netloc, parts.path, urlencode(query, safe="*"), ""))


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

    def __init__(self):
        self._start: Optional[float] = None
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.monotonic()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.monotonic()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, measured up to now while the block is running."""
        if self._start is None:
            return 0
        end = self._end if self._end is not None else time.monotonic()
        return int((end - self._start) * 1000)
