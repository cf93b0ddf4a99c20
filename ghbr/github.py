"""GitHub REST API collaborator for ghbr."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence
from urllib.parse import quote

import httpx

from .constants import DEFAULT_GITHUB_API_URL
from .errors import CLIError, GitHubAPIError, NotFoundError, ValidationError
from .http import describe_http_error, request_headers
from .utils import as_dict, as_list, pick, safe_int, safe_str


@dataclass(frozen=True)
class ReleaseAsset:
    name: str
    browser_download_url: str
    size: Optional[int] = None


@dataclass(frozen=True)
class Release:
    tag_name: str
    name: Optional[str] = None
    html_url: Optional[str] = None
    assets: List[ReleaseAsset] = field(default_factory=list)


@dataclass(frozen=True)
class RepositoryFile:
    path: str
    sha: str
    content: str
    encoding: str = "base64"


@dataclass(frozen=True)
class PullRequest:
    number: int
    html_url: str
    state: Optional[str] = None


@dataclass(frozen=True)
class Repository:
    name: str
    full_name: str
    html_url: str
    default_branch: Optional[str] = None


class GitHubAPI(Protocol):
    """Operations ghbr needs from a GitHub-compatible service."""

    def get_latest_release(self, owner: str, repo: str) -> Release: ...

    def create_branch(self, owner: str, repo: str, origin: str, new: str) -> None: ...

    def delete_branch(self, owner: str, repo: str, branch: str) -> None: ...

    def create_pull_request(
        self, owner: str, repo: str, *, title: str, head: str, base: str, body: str
    ) -> PullRequest: ...

    def merge_pull_request(self, owner: str, repo: str, number: int) -> None: ...

    def close_pull_request(self, owner: str, repo: str, number: int) -> None: ...

    def get_file(self, owner: str, repo: str, branch: str, path: str) -> RepositoryFile: ...

    def create_file(
        self,
        owner: str,
        repo: str,
        path: str,
        message: str,
        content: bytes,
        *,
        branch: Optional[str] = None,
    ) -> str: ...

    def update_file(
        self,
        owner: str,
        repo: str,
        branch: str,
        path: str,
        sha: str,
        message: str,
        content: bytes,
    ) -> str: ...

    def delete_file(
        self, owner: str, repo: str, branch: str, path: str, sha: str, message: str
    ) -> None: ...

    def create_repository(
        self,
        org: Optional[str],
        name: str,
        *,
        description: str,
        homepage: str,
        private: bool,
    ) -> Repository: ...

    def delete_repository(self, owner: str, name: str) -> None: ...


def _require(**values: Any) -> None:
    for label, value in values.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"missing GitHub {label.replace('_', ' ')}")


def parse_release(payload: Dict[str, Any]) -> Release:
    tag = safe_str(pick(payload, "tag_name"))
    if not tag:
        raise CLIError("release payload is missing tag_name")
    assets: List[ReleaseAsset] = []
    for entry in as_list(payload.get("assets")):
        record = as_dict(entry)
        name = safe_str(record.get("name"))
        url = safe_str(record.get("browser_download_url"))
        if not name or not url:
            continue
        assets.append(ReleaseAsset(name=name, browser_download_url=url, size=safe_int(record.get("size"))))
    return Release(
        tag_name=tag,
        name=safe_str(payload.get("name")),
        html_url=safe_str(payload.get("html_url")),
        assets=assets,
    )


def parse_pull_request(payload: Dict[str, Any]) -> PullRequest:
    number = safe_int(payload.get("number"))
    if number is None:
        raise CLIError("pull request payload is missing number")
    return PullRequest(
        number=number,
        html_url=safe_str(payload.get("html_url")) or "",
        state=safe_str(payload.get("state")),
    )


def parse_repository(payload: Dict[str, Any]) -> Repository:
    name = safe_str(payload.get("name")) or ""
    return Repository(
        name=name,
        full_name=safe_str(payload.get("full_name")) or name,
        html_url=safe_str(payload.get("html_url")) or "",
        default_branch=safe_str(payload.get("default_branch")),
    )


def decode_file(payload: Dict[str, Any]) -> RepositoryFile:
    encoding = safe_str(payload.get("encoding")) or ""
    if encoding != "base64":
        raise CLIError(f"unexpected encoding: {encoding or 'none'}")
    raw = safe_str(payload.get("content")) or ""
    try:
        decoded = base64.b64decode(raw.encode("ascii"))
        text = decoded.decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise CLIError(f"failed to decode file content: {exc}") from exc
    return RepositoryFile(
        path=safe_str(payload.get("path")) or "",
        sha=safe_str(payload.get("sha")) or "",
        content=text,
        encoding=encoding,
    )


def _content_sha(payload: Dict[str, Any]) -> str:
    return safe_str(as_dict(payload.get("content")).get("sha")) or ""


class GitHubClient:
    """httpx-backed implementation of :class:`GitHubAPI`."""

    def __init__(
        self,
        client: httpx.Client,
        token: str,
        *,
        base_url: str = DEFAULT_GITHUB_API_URL,
    ) -> None:
        _require(personal_access_token=token)
        self._client = client
        self._headers = request_headers(token)
        self._base_url = base_url.rstrip("/")

    def _url(self, *parts: str) -> str:
        return "/".join([self._base_url] + [quote(part, safe="/") for part in parts])

    def _request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        target: str,
        expected: Sequence[int],
        params: Any = None,
        json_body: Any = None,
    ) -> httpx.Response:
        try:
            response = self._client.request(
                method,
                url,
                headers=self._headers,
                params=params,
                json=json_body,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            detail = describe_http_error(exc)
            status = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
            error_cls = NotFoundError if status == 404 else GitHubAPIError
            raise error_cls(
                f"{operation} failed ({target}): {detail}",
                operation=operation,
                status_code=status,
            ) from exc
        if response.status_code not in expected:
            raise GitHubAPIError(
                f"{operation} failed ({target}): unexpected status "
                f"{response.status_code} {response.reason_phrase}".rstrip(),
                operation=operation,
                status_code=response.status_code,
            )
        return response

    def _json(self, response: httpx.Response, operation: str) -> Dict[str, Any]:
        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise GitHubAPIError(
                f"{operation} response was not valid JSON", operation=operation
            ) from exc
        if not isinstance(payload, dict):
            raise GitHubAPIError(
                f"unexpected {operation} payload structure", operation=operation
            )
        return payload

    def get_latest_release(self, owner: str, repo: str) -> Release:
        _require(owner_name=owner, repository_name=repo)
        response = self._request(
            "GET",
            self._url("repos", owner, repo, "releases", "latest"),
            operation="get latest release",
            target=f"{owner}/{repo}",
            expected=(200,),
        )
        return parse_release(self._json(response, "get latest release"))

    def create_branch(self, owner: str, repo: str, origin: str, new: str) -> None:
        _require(repository_name=repo, origin_branch_name=origin, new_branch_name=new)
        response = self._request(
            "GET",
            self._url("repos", owner, repo, "git", "ref", "heads", origin),
            operation="get ref",
            target=f"{owner}/{repo} branch {origin}",
            expected=(200,),
        )
        sha = safe_str(as_dict(self._json(response, "get ref").get("object")).get("sha"))
        if not sha:
            raise GitHubAPIError(
                f"get ref failed ({owner}/{repo} branch {origin}): missing object sha",
                operation="get ref",
            )
        self._request(
            "POST",
            self._url("repos", owner, repo, "git", "refs"),
            operation="create ref",
            target=f"{owner}/{repo} branch {new}",
            expected=(201,),
            json_body={"ref": f"refs/heads/{new}", "sha": sha},
        )

    def delete_branch(self, owner: str, repo: str, branch: str) -> None:
        _require(repository_name=repo, branch_name=branch)
        self._request(
            "DELETE",
            self._url("repos", owner, repo, "git", "refs", "heads", branch),
            operation="delete ref",
            target=f"{owner}/{repo} branch {branch}",
            expected=(204,),
        )

    def create_pull_request(
        self, owner: str, repo: str, *, title: str, head: str, base: str, body: str
    ) -> PullRequest:
        _require(
            pull_request_title=title,
            pull_request_head_branch=head,
            pull_request_base_branch=base,
            pull_request_body=body,
        )
        response = self._request(
            "POST",
            self._url("repos", owner, repo, "pulls"),
            operation="create pull request",
            target=f"{owner}/{repo} {head} -> {base}",
            expected=(201,),
            json_body={"title": title, "head": head, "base": base, "body": body},
        )
        return parse_pull_request(self._json(response, "create pull request"))

    def merge_pull_request(self, owner: str, repo: str, number: int) -> None:
        _require(repository_name=repo)
        if not number:
            raise ValidationError("missing GitHub pull request number")
        self._request(
            "PUT",
            self._url("repos", owner, repo, "pulls", str(number), "merge"),
            operation="merge pull request",
            target=f"{owner}/{repo}#{number}",
            expected=(200,),
            json_body={},
        )

    def close_pull_request(self, owner: str, repo: str, number: int) -> None:
        _require(repository_name=repo)
        if not number:
            raise ValidationError("missing GitHub pull request number")
        self._request(
            "PATCH",
            self._url("repos", owner, repo, "pulls", str(number)),
            operation="close pull request",
            target=f"{owner}/{repo}#{number}",
            expected=(200,),
            json_body={"state": "closed"},
        )

    def get_file(self, owner: str, repo: str, branch: str, path: str) -> RepositoryFile:
        _require(repository_name=repo, branch_name=branch, file_path=path)
        response = self._request(
            "GET",
            self._url("repos", owner, repo, "contents", path),
            operation="get file",
            target=f"{owner}/{repo}@{branch}:{path}",
            expected=(200,),
            params={"ref": branch},
        )
        return decode_file(self._json(response, "get file"))

    def _put_file(
        self,
        owner: str,
        repo: str,
        path: str,
        message: str,
        content: bytes,
        *,
        branch: Optional[str],
        sha: Optional[str],
        operation: str,
        expected: Sequence[int],
    ) -> str:
        body: Dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
        }
        if branch:
            body["branch"] = branch
        if sha:
            body["sha"] = sha
        response = self._request(
            "PUT",
            self._url("repos", owner, repo, "contents", path),
            operation=operation,
            target=f"{owner}/{repo}@{branch or 'default branch'}:{path}",
            expected=expected,
            json_body=body,
        )
        return _content_sha(self._json(response, operation))

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
        _require(repository_name=repo, file_path=path, commit_message=message)
        return self._put_file(
            owner,
            repo,
            path,
            message,
            content,
            branch=branch,
            sha=None,
            operation="create file",
            expected=(201,),
        )

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
        _require(file_path=path, commit_message=message, file_sha=sha, branch_name=branch)
        if not content:
            raise ValidationError("missing GitHub content")
        return self._put_file(
            owner,
            repo,
            path,
            message,
            content,
            branch=branch,
            sha=sha,
            operation="update file",
            expected=(200,),
        )

    def delete_file(
        self, owner: str, repo: str, branch: str, path: str, sha: str, message: str
    ) -> None:
        _require(file_path=path, commit_message=message, file_sha=sha, branch_name=branch)
        self._request(
            "DELETE",
            self._url("repos", owner, repo, "contents", path),
            operation="delete file",
            target=f"{owner}/{repo}@{branch}:{path}",
            expected=(200,),
            json_body={"message": message, "sha": sha, "branch": branch},
        )

    def create_repository(
        self,
        org: Optional[str],
        name: str,
        *,
        description: str,
        homepage: str,
        private: bool,
    ) -> Repository:
        _require(repository_name=name, repository_description=description)
        if org:
            url = self._url("orgs", org, "repos")
        else:
            url = self._url("user", "repos")
        response = self._request(
            "POST",
            url,
            operation="create repository",
            target=f"{org + '/' if org else ''}{name}",
            expected=(201,),
            json_body={
                "name": name,
                "description": description,
                "homepage": homepage,
                "private": private,
            },
        )
        return parse_repository(self._json(response, "create repository"))

    def delete_repository(self, owner: str, name: str) -> None:
        _require(repository_name=name)
        self._request(
            "DELETE",
            self._url("repos", owner, name),
            operation="delete repository",
            target=f"{owner}/{name}",
            expected=(204,),
        )
