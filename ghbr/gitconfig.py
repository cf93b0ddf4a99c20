"""Defaults discovered from the local git configuration."""

from __future__ import annotations

import re
import subprocess
from typing import Optional

_OWNER_PATTERN = re.compile(r"([-a-zA-Z0-9]+)/[^/]+$")
_REPO_PATTERN = re.compile(r"[-a-zA-Z0-9]+/([^/]+?)(?:\.git)?/?$")


def git_config_value(key: str) -> Optional[str]:
    try:
        completed = subprocess.run(
            ["git", "config", "--get", key],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if completed.returncode != 0:
        return None
    value = completed.stdout.strip()
    return value or None


def origin_url() -> Optional[str]:
    return git_config_value("remote.origin.url")


def owner_from_url(url: str) -> Optional[str]:
    # Works for both https://github.com/owner/repo.git and git@github.com:owner/repo.git
    normalized = (url or "").strip().replace(":", "/")
    match = _OWNER_PATTERN.search(normalized)
    if not match:
        return None
    return match.group(1)


def repo_from_url(url: str) -> Optional[str]:
    normalized = (url or "").strip().replace(":", "/")
    match = _REPO_PATTERN.search(normalized)
    if not match:
        return None
    return match.group(1) or None


def default_owner() -> Optional[str]:
    origin = origin_url()
    if origin:
        owner = owner_from_url(origin)
        if owner:
            return owner
    return git_config_value("github.user") or git_config_value("user.name")


def default_repository() -> Optional[str]:
    origin = origin_url()
    if not origin:
        return None
    return repo_from_url(origin)


def github_token() -> Optional[str]:
    return git_config_value("github.token")
