"""Resolve the latest GitHub release into a formula-ready ReleaseInfo."""

from __future__ import annotations

import hashlib

import httpx

from .console import log_step
from .constants import ASSET_ARCH_MARKER, ASSET_OS_MARKER, DOWNLOAD_CHUNK_SIZE
from .errors import DownloadError, HandledError
from .formula import ReleaseInfo
from .github import GitHubAPI, Release, ReleaseAsset
from .http import describe_http_error


def find_asset(
    release: Release,
    *,
    os_marker: str = ASSET_OS_MARKER,
    arch_marker: str = ASSET_ARCH_MARKER,
) -> ReleaseAsset:
    """Return the first asset, in API order, naming both markers."""
    for asset in release.assets:
        if os_marker in asset.name and arch_marker in asset.name:
            return asset
    raise HandledError(
        f'No released asset whose name contains "{os_marker}" and "{arch_marker}".\n'
        f'You need to name one of the assets with "{os_marker}" and "{arch_marker}" '
        "to specify the asset is for Mac."
    )


def download_sha256(client: httpx.Client, url: str) -> str:
    hasher = hashlib.sha256()
    try:
        with client.stream("GET", url) as response:
            if response.status_code != 200:
                raise DownloadError(
                    f"failed to download {url}: invalid http status: "
                    f"{response.status_code} {response.reason_phrase}".rstrip()
                )
            for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                hasher.update(chunk)
    except httpx.HTTPError as exc:
        raise DownloadError(f"failed to download {url}: {describe_http_error(exc)}") from exc
    return hasher.hexdigest()


def resolve_latest_release(
    github: GitHubAPI,
    http_client: httpx.Client,
    owner: str,
    repo: str,
) -> ReleaseInfo:
    log_step("Checking the latest release")
    release = github.get_latest_release(owner, repo)

    asset = find_asset(release)

    log_step("Downloading Darwin AMD64 release")
    log_step("Calculating a checksum of the release")
    checksum = download_sha256(http_client, asset.browser_download_url)

    return ReleaseInfo(
        version=release.tag_name,
        asset_url=asset.browser_download_url,
        checksum=checksum,
    )
