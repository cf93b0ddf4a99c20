from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Set, Tuple

import httpx
import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

import ghbr.gitconfig as gitconfig
from ghbr.console import reset_console
from ghbr.errors import GitHubAPIError, NotFoundError
from ghbr.github import PullRequest, Release, RepositoryFile, Repository


class MemoryKeyring(KeyringBackend):
    priority = 1

    def __init__(self) -> None:
        self._storage: Dict[tuple, str] = {}

    def get_password(self, service: str, username: str) -> Optional[str]:
        return self._storage.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self._storage[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        try:
            del self._storage[(service, username)]
        except KeyError as exc:
            raise PasswordDeleteError(str(exc)) from exc


@pytest.fixture(autouse=True)
def memory_keyring() -> None:
    original = keyring.get_keyring()
    keyring.set_keyring(MemoryKeyring())
    try:
        yield
    finally:
        keyring.set_keyring(original)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GHBR_GITHUB_API_URL", raising=False)
    monkeypatch.setenv("GHBR_CONFIG", str(tmp_path / "ghbr-config.toml"))
    monkeypatch.setattr(gitconfig, "git_config_value", lambda key: None)
    reset_console()
    yield
    reset_console()


Handler = Callable[[httpx.Request], httpx.Response]


def make_http_client(handler: Handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)


@pytest.fixture
def http_client() -> Callable[[Handler], httpx.Client]:
    clients: List[httpx.Client] = []

    def _make(handler: Handler) -> httpx.Client:
        client = make_http_client(handler)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


class FakeGitHub:
    """In-memory GitHub that records every call in order."""

    def __init__(
        self,
        *,
        release: Optional[Release] = None,
        fail: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.release = release
        self.fail: Dict[str, Exception] = dict(fail or {})
        self.calls: List[Tuple[Any, ...]] = []
        self.branches: Dict[str, Set[str]] = {}
        self.files: Dict[Tuple[str, str, str], RepositoryFile] = {}
        self.pulls: Dict[int, Dict[str, Any]] = {}
        self.repositories: Dict[str, Repository] = {}
        self._sha_counter = 0

    def _next_sha(self) -> str:
        self._sha_counter += 1
        return f"{self._sha_counter:040x}"

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name,) + args)
        if name in self.fail:
            raise self.fail[name]

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def seed_file(self, repo: str, branch: str, path: str, content: str) -> RepositoryFile:
        self.branches.setdefault(repo, set()).add(branch)
        stored = RepositoryFile(path=path, sha=self._next_sha(), content=content)
        self.files[(repo, branch, path)] = stored
        return stored

    def get_latest_release(self, owner: str, repo: str) -> Release:
        self._record("get_latest_release", owner, repo)
        if self.release is None:
            raise NotFoundError("get latest release failed: 404 Not Found", status_code=404)
        return self.release

    def create_branch(self, owner: str, repo: str, origin: str, new: str) -> None:
        self._record("create_branch", owner, repo, origin, new)
        branches = self.branches.setdefault(repo, set())
        if origin not in branches:
            raise NotFoundError(f"get ref failed: {origin}", status_code=404)
        if new in branches:
            raise GitHubAPIError("create ref failed: Reference already exists", status_code=422)
        branches.add(new)
        for (file_repo, branch, path), stored in list(self.files.items()):
            if file_repo == repo and branch == origin:
                self.files[(repo, new, path)] = stored

    def delete_branch(self, owner: str, repo: str, branch: str) -> None:
        self._record("delete_branch", owner, repo, branch)
        self.branches.get(repo, set()).discard(branch)
        for key in [key for key in self.files if key[0] == repo and key[1] == branch]:
            del self.files[key]

    def create_pull_request(
        self, owner: str, repo: str, *, title: str, head: str, base: str, body: str
    ) -> PullRequest:
        self._record("create_pull_request", owner, repo, title, head, base, body)
        number = len(self.pulls) + 1
        self.pulls[number] = {"head": head, "base": base, "state": "open", "title": title}
        return PullRequest(
            number=number,
            html_url=f"https://github.com/{owner}/{repo}/pull/{number}",
            state="open",
        )

    def merge_pull_request(self, owner: str, repo: str, number: int) -> None:
        self._record("merge_pull_request", owner, repo, number)
        pull = self.pulls[number]
        for (file_repo, branch, path), stored in list(self.files.items()):
            if file_repo == repo and branch == pull["head"]:
                self.files[(repo, pull["base"], path)] = stored
        pull["state"] = "merged"

    def close_pull_request(self, owner: str, repo: str, number: int) -> None:
        self._record("close_pull_request", owner, repo, number)
        self.pulls[number]["state"] = "closed"

    def get_file(self, owner: str, repo: str, branch: str, path: str) -> RepositoryFile:
        self._record("get_file", owner, repo, branch, path)
        try:
            return self.files[(repo, branch, path)]
        except KeyError as exc:
            raise NotFoundError(f"get file failed: {path}", status_code=404) from exc

    def create_file(
        self,
        owner: str,
        repo: str,
        path: str,
        message: str,
        content: bytes,
        *,
        branch: Optional[str] = None,
    ) -> str:
        self._record("create_file", owner, repo, path, message, content, branch)
        stored = self.seed_file(repo, branch or "main", path, content.decode("utf-8"))
        return stored.sha

    def update_file(
        self,
        owner: str,
        repo: str,
        branch: str,
        path: str,
        sha: str,
        message: str,
        content: bytes,
    ) -> str:
        self._record("update_file", owner, repo, branch, path, sha, message, content)
        current = self.files.get((repo, branch, path))
        if current is None or current.sha != sha:
            raise GitHubAPIError("update file failed: 409 Conflict", status_code=409)
        return self.seed_file(repo, branch, path, content.decode("utf-8")).sha

    def delete_file(
        self, owner: str, repo: str, branch: str, path: str, sha: str, message: str
    ) -> None:
        self._record("delete_file", owner, repo, branch, path, sha, message)
        self.files.pop((repo, branch, path), None)

    def create_repository(
        self,
        org: Optional[str],
        name: str,
        *,
        description: str,
        homepage: str,
        private: bool,
    ) -> Repository:
        self._record("create_repository", org, name, description, homepage, private)
        owner = org or "octocat"
        repository = Repository(
            name=name,
            full_name=f"{owner}/{name}",
            html_url=f"https://github.com/{owner}/{name}",
            default_branch="main",
        )
        self.repositories[name] = repository
        return repository

    def delete_repository(self, owner: str, name: str) -> None:
        self._record("delete_repository", owner, name)
        self.repositories.pop(name, None)


@pytest.fixture
def fake_github() -> type[FakeGitHub]:
    return FakeGitHub


FORMULA_V1 = """require 'formula'

class Ghbr < Formula
  homepage 'https://github.com/octocat/ghbr'
  version 'v0.0.1'

  url 'https://github.com/octocat/ghbr/releases/download/v0.0.1/ghbr_v0.0.1_darwin_amd64.zip'
  sha256 '{sha}'

  def install
    bin.install 'ghbr'
  end
end
""".replace("{sha}", "a" * 64)


@pytest.fixture
def formula_v1() -> str:
    return FORMULA_V1
