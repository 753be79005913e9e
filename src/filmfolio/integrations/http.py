"""urllib plumbing shared by the remote storage clients.

Maps transport failures and HTTP status codes onto the error taxonomy in
:mod:`filmfolio.shared.errors`.  Nothing here retries.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from filmfolio.shared.errors import (
    AuthorizationError,
    BackendServerError,
    BackendUnreachableError,
    CapacityError,
    RateLimitedError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class NotFound(Exception):
    """Raised by :func:`send` for a 404 so callers can treat it as absent."""


def send(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    body: bytes | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """Send a request and return the decoded JSON body (None when empty).

    Raises:
        NotFound: on HTTP 404.
        AuthorizationError: on 401/403.
        CapacityError: on 413.
        RateLimitedError: on 429.
        BackendServerError: on any other error status or an undecodable body.
        BackendUnreachableError: when the host cannot be reached.
    """
    req = urllib.request.Request(url, data=body, method=method, headers=headers or {})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read()
    except urllib.error.HTTPError as exc:
        raise _status_error(exc, method, url, len(body) if body else 0) from exc
    except (urllib.error.URLError, TimeoutError, ConnectionError) as exc:
        logger.warning("%s %s failed: %s", method, url, exc)
        raise BackendUnreachableError(f"Could not reach {_host(url)}: {exc}") from exc

    if not raw:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise BackendServerError(f"Unreadable response from {_host(url)}") from exc


def _status_error(exc: urllib.error.HTTPError, method: str, url: str, sent: int) -> Exception:
    status = exc.code
    detail = _error_detail(exc)
    logger.warning("%s %s returned HTTP %s: %s", method, url, status, detail)
    if status == 404:
        return NotFound(url)
    if status in (401, 403):
        return AuthorizationError(f"{_host(url)} rejected the credentials (HTTP {status})")
    if status == 413:
        return CapacityError(sent)
    if status == 429:
        return RateLimitedError(f"{_host(url)} is rate limiting requests, try again shortly")
    return BackendServerError(f"{_host(url)} answered HTTP {status}: {detail}", status=status)


def _error_detail(exc: urllib.error.HTTPError) -> str:
    try:
        payload = exc.read().decode("utf-8", errors="replace")
    except OSError:
        return exc.reason or ""
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        return payload[:200]
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data)[:200]
    return str(data)[:200]


def _host(url: str) -> str:
    return urllib.parse.urlsplit(url).netloc or url
