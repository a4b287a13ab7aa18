"""Shared HTTP helpers used across marketplace and repository clients.

Encapsulates retries, timeouts and DEBUG tracing so clients avoid duplicating
try/except blocks. Helpers never exit the process: transport failures are
reported as status 0 and each client decides how to surface them. This module
is dependency-light and can be safely imported by both marketplace/* and
repository/* without cycles.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional, Dict, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

# Simple in-memory cache for GET responses
_http_cache: Dict[str, Tuple[Any, float]] = {}


def _get_cache_key(method: str, url: str, headers: Optional[Dict[str, str]] = None) -> str:
    """Generate cache key from request parameters."""
    headers_str = str(sorted(headers.items())) if headers else ""
    return f"{method}:{url}:{headers_str}"


def _is_cache_valid(cache_entry: Tuple[Any, float]) -> bool:
    """Check if cache entry is still valid."""
    _, cached_time = cache_entry
    return time.time() - cached_time < Constants.HTTP_CACHE_TTL_SEC


def clear_cache() -> None:
    """Drop all cached GET responses."""
    _http_cache.clear()


def _backoff(attempt: int) -> None:
    """Sleep before the next attempt (exponential backoff)."""
    if attempt < Constants.HTTP_RETRY_MAX - 1:
        time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** attempt))


def _request_with_retries(
    method: str,
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    payload: Optional[Any] = None,
) -> Tuple[int, Dict[str, str], str]:
    """Send a request, retrying transport errors and 5xx responses.

    Returns:
        Tuple of (status_code, headers_dict, body_text); status 0 means every
        attempt failed before a response arrived.
    """
    safe_target = safe_url(url)
    last_failure = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action=method,
                            target=safe_target,
                            attempt=attempt + 1
                        )
                    )
                response = requests.request(
                    method,
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=headers,
                    json=payload,
                )
            except requests.Timeout:
                last_failure = "timeout"
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP timeout",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action=method,
                            outcome="timeout",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                _backoff(attempt)
                continue
            except requests.RequestException as exc:  # includes ConnectionError
                last_failure = str(exc)
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request exception",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action=method,
                            outcome="request_exception",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                _backoff(attempt)
                continue

            if response.status_code >= 500:
                last_failure = f"HTTP {response.status_code}"
                logger.debug("Server error %s from %s, retrying", response.status_code, safe_target)
                _backoff(attempt)
                continue

            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP response ok",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        action=method,
                        outcome="success",
                        status_code=response.status_code,
                        duration_ms=t.duration_ms(),
                        target=safe_target
                    )
                )
            return response.status_code, dict(response.headers), response.text

    logger.warning(
        "%s %s failed after %s attempts: %s",
        method,
        safe_target,
        Constants.HTTP_RETRY_MAX,
        last_failure,
    )
    return 0, {}, f"Request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_failure}"


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET request with timeout, retries, and caching with DEBUG traces."""
    cache_key = _get_cache_key('GET', url, headers)

    # Check cache first
    if cache_key in _http_cache and _is_cache_valid(_http_cache[cache_key]):
        cached_data, _ = _http_cache[cache_key]
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP cache hit",
                extra=extra_context(
                    event="cache_hit",
                    component="http_client",
                    action="GET",
                    target=safe_url(url)
                )
            )
        return cached_data

    result = _request_with_retries("GET", url, headers=headers)
    if 0 < result[0] < 500:  # Don't cache transport or server errors
        _http_cache[cache_key] = (result, time.time())
    return result


def _parse_json(
    url: str,
    action: str,
    status_code: int,
    response_headers: Dict[str, str],
    text: str,
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Parse a 2xx body as JSON, returning None for the payload on failure."""
    if 200 <= status_code < 300 and text:
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            if is_debug_enabled(logger):
                logger.debug(
                    "JSON decode error",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action=action,
                        outcome="json_decode_error",
                        status_code=status_code,
                        target=safe_url(url)
                    )
                )
            return status_code, response_headers, None
        return status_code, response_headers, parsed

    return status_code, response_headers, None


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Perform GET request and parse JSON response with DEBUG traces.

    Args:
        url: Target URL
        headers: Optional request headers

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)
    """
    status_code, response_headers, text = robust_get(url, headers=headers)
    return _parse_json(url, "get_json", status_code, response_headers, text)


def post_json(
    url: str,
    payload: Any,
    *,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """POST a JSON payload and parse the JSON response. Never cached.

    Args:
        url: Target URL
        payload: JSON-serializable request body
        headers: Optional request headers

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)
    """
    status_code, response_headers, text = _request_with_retries(
        "POST", url, headers=headers, payload=payload
    )
    return _parse_json(url, "post_json", status_code, response_headers, text)
