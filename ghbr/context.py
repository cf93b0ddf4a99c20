"""Per-invocation wiring shared by ghbr commands."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple

import httpx

from .config import ConfigFile, resolve_api_url
from .github import GitHubClient
from .http import http_timeout

HttpClientFactory = Callable[[httpx.Timeout], httpx.Client]


def default_http_client_factory(timeout: httpx.Timeout) -> httpx.Client:
    # Release assets redirect to a storage host.
    return httpx.Client(timeout=timeout, follow_redirects=True)


@dataclass(frozen=True)
class AppContext:
    """Loaded configuration plus the means to reach GitHub."""

    config: ConfigFile = field(default_factory=ConfigFile)
    config_path: Optional[Path] = None
    http_client_factory: HttpClientFactory = default_http_client_factory

    @property
    def api_url(self) -> str:
        return resolve_api_url(self.config)

    @contextmanager
    def github_session(self, token: str) -> Iterator[Tuple[GitHubClient, httpx.Client]]:
        """Yield a GitHub API client and the raw HTTP client it shares for downloads."""
        with self.http_client_factory(http_timeout()) as client:
            yield GitHubClient(client, token, base_url=self.api_url), client
