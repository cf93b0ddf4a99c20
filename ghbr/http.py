"""HTTP plumbing for talking to the GitHub REST API."""

from __future__ import annotations

from typing import Dict, Optional

import httpx

from .constants import GITHUB_API_VERSION, GITHUB_MEDIA_TYPE, HTTP_TIMEOUT_SECONDS
from .utils import as_list, safe_str
from .version import USER_AGENT

# (exception type, label, word that already conveys the label); first match wins.
_TRANSPORT_LABELS = (
    (httpx.TimeoutException, "request timed out", "timed out"),
    (httpx.ConnectError, "failed to connect", "connect"),
    (httpx.ProxyError, "proxy error", "proxy"),
    (httpx.RequestError, "network error", "network"),
)


def http_timeout(seconds: float = HTTP_TIMEOUT_SECONDS) -> httpx.Timeout:
    return httpx.Timeout(seconds)


def request_headers(
    token: str = "",
    *,
    accept: str = GITHUB_MEDIA_TYPE,
) -> Dict[str, str]:
    headers = {
        "Accept": accept,
        "User-Agent": USER_AGENT,
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def github_error_message(response: httpx.Response) -> Optional[str]:
    """GitHub's JSON ``message``, with the first ``errors[]`` reason appended."""
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    message = (safe_str(data.get("message") or data.get("error")) or "").strip()
    if not message:
        return None
    errors = as_list(data.get("errors"))
    if not errors:
        return message
    first = errors[0]
    if isinstance(first, dict):
        reason = safe_str(first.get("message") or first.get("code"))
    else:
        reason = safe_str(first)
    return f"{message} ({reason})" if reason else message


def _status_detail(response: httpx.Response) -> str:
    status = f"{response.status_code} {response.reason_phrase}".strip()
    body = response.text.strip()
    if not body:
        return status
    suffix = github_error_message(response) or body.splitlines()[0].strip()
    return f"{status}: {suffix}" if status else suffix


def _request_target(exc: httpx.HTTPError) -> str:
    try:
        request = exc.request
    except RuntimeError:
        return ""
    return f"{request.method} {request.url}"


def _transport_detail(exc: httpx.HTTPError) -> str:
    message = str(exc).strip()
    summary = message or exc.__class__.__name__
    for exc_type, label, keyword in _TRANSPORT_LABELS:
        if isinstance(exc, exc_type):
            if message and keyword not in message.lower():
                summary = f"{label}: {message}"
            else:
                summary = label
            break
    target = _request_target(exc)
    if target and target not in summary:
        summary = f"{summary} ({target})"
    return summary


def describe_http_error(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return _status_detail(exc.response)
    return _transport_detail(exc)
