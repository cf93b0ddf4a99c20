"""Shared utility helpers for ghbr."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

_SENSITIVE_KV_PATTERN = re.compile(
    r"(?i)\b(token|access_token|password|secret)\b\s*([:=])\s*([^\s]+)"
)
_AUTH_HEADER_PATTERN = re.compile(r"(?i)\bAuthorization:\s*(Bearer|token)\s+([^\s]+)")
_GITHUB_TOKEN_PATTERN = re.compile(
    r"\b(?:gh[pousr]_[A-Za-z0-9]{20,}|github_pat_[A-Za-z0-9_]{20,})\b"
)


def redact(text: str) -> str:
    """Best-effort redaction of GitHub credentials in log output."""
    value = str(text)
    value = _AUTH_HEADER_PATTERN.sub(lambda m: f"Authorization: {m.group(1)} ***", value)
    value = _SENSITIVE_KV_PATTERN.sub(lambda m: f"{m.group(1)}{m.group(2)}***", value)
    value = _GITHUB_TOKEN_PATTERN.sub("***", value)
    return value


def mask_token(token: str) -> str:
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}...{token[-4:]}"


def safe_int(value: Any) -> Optional[int]:
    try:
        if value is None:
            return None
        if isinstance(value, bool):
            return int(value)
        return int(str(value))
    except (TypeError, ValueError):
        return None


def safe_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    return {}


def as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return []


def pick(mapping: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None


def first_non_empty(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value is None:
            continue
        normalized = value.strip()
        if normalized:
            return normalized
    return None
