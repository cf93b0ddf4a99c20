"""Shared constants for ghbr."""

from __future__ import annotations

PACKAGE_NAME = "ghbr"
APP_NAME = "ghbr"

# Version self-check target (advisory only).
UPSTREAM_OWNER = "shuheiktgw"
UPSTREAM_REPO = "ghbr"
VERSION_CHECK_TIMEOUT_SECONDS = 2.0

CONFIG_ENV_VAR = "GHBR_CONFIG"
DEFAULT_CONFIG_DIR_NAME = "ghbr"
GITHUB_TOKEN_ENV_VAR = "GITHUB_TOKEN"
GITHUB_API_URL_ENV_VAR = "GHBR_GITHUB_API_URL"

DEFAULT_GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_MEDIA_TYPE = "application/vnd.github+json"

KEYRING_SERVICE = "ghbr"
KEYRING_USERNAME = "github_token"

DEFAULT_BRANCH = "main"
DEFAULT_FONT = "isometric3"

# A release asset must carry both markers to be picked for the formula.
ASSET_OS_MARKER = "darwin"
ASSET_ARCH_MARKER = "amd64"

FORMULA_REPO_PREFIX = "homebrew-"
STAGING_BRANCH_PREFIX = "bumps_up_to_"
COMMIT_MESSAGE_PREFIX = "Bumps up to "
README_PATH = "README.md"

EXIT_CODE_OK = 0
EXIT_CODE_ERROR = 1
EXIT_CODE_USAGE = 2
EXIT_CODE_INTERRUPT = 130

HTTP_TIMEOUT_SECONDS = 30.0
DOWNLOAD_CHUNK_SIZE = 1024 * 1024
