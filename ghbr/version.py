"""Version helpers for ghbr."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from functools import lru_cache
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as metadata_version
from typing import Callable, List, Optional, Tuple

import httpx

from .constants import (
    APP_NAME,
    DEFAULT_GITHUB_API_URL,
    GITHUB_MEDIA_TYPE,
    PACKAGE_NAME,
    UPSTREAM_OWNER,
    UPSTREAM_REPO,
    VERSION_CHECK_TIMEOUT_SECONDS,
)


@lru_cache()
def cli_version() -> str:
    try:
        from . import __version__
    except Exception:
        __version__ = ""

    if isinstance(__version__, str) and __version__.strip():
        return __version__

    try:
        return metadata_version(PACKAGE_NAME)
    except PackageNotFoundError:
        return "0.0.0"


USER_AGENT = f"{PACKAGE_NAME}/{cli_version()}"


@dataclass(frozen=True)
class VersionCheck:
    current: str
    latest: str

    @property
    def outdated(self) -> bool:
        return version_tuple(self.latest) > version_tuple(self.current)


_NUMBER_PATTERN = re.compile(r"\d+")


def version_tuple(value: str) -> Tuple[int, ...]:
    raw = (value or "").strip().lstrip("vV")
    core = raw.split("-", 1)[0].split("+", 1)[0]
    return tuple(int(part) for part in _NUMBER_PATTERN.findall(core))


def _latest_tag(
    factory: Callable[[httpx.Timeout], httpx.Client],
    limit: httpx.Timeout,
) -> Optional[str]:
    url = f"{DEFAULT_GITHUB_API_URL}/repos/{UPSTREAM_OWNER}/{UPSTREAM_REPO}/releases/latest"
    headers = {"Accept": GITHUB_MEDIA_TYPE, "User-Agent": USER_AGENT}
    try:
        with factory(limit) as client:
            response = client.get(url, headers=headers)
            response.raise_for_status()
            payload = response.json()
    except (httpx.HTTPError, ValueError):
        return None
    tag = payload.get("tag_name") if isinstance(payload, dict) else None
    if not isinstance(tag, str) or not tag.strip():
        return None
    return tag.strip().lstrip("vV")


def fetch_latest_version(
    client_factory: Optional[Callable[[httpx.Timeout], httpx.Client]] = None,
    *,
    timeout: float = VERSION_CHECK_TIMEOUT_SECONDS,
) -> Optional[VersionCheck]:
    """Look up the newest upstream tag within ``timeout`` seconds overall.

    The lookup runs on a daemon thread; any failure or overrun yields None.
    """
    limit = httpx.Timeout(timeout, connect=timeout)
    factory = client_factory or (lambda t: httpx.Client(timeout=t, follow_redirects=True))
    found: List[Optional[str]] = []
    worker = threading.Thread(
        target=lambda: found.append(_latest_tag(factory, limit)),
        name="ghbr-version-check",
        daemon=True,
    )
    worker.start()
    worker.join(timeout)
    if not found or not found[0]:
        return None
    return VersionCheck(current=cli_version(), latest=found[0])


def output_version(
    client_factory: Optional[Callable[[httpx.Timeout], httpx.Client]] = None,
) -> str:
    lines = [f"{APP_NAME} current version v{cli_version()}"]
    check = fetch_latest_version(client_factory)
    if check is not None and check.outdated:
        lines.append(f"The latest version is v{check.latest}, please update {APP_NAME}")
    return "\n".join(lines)
