"""Formula document parsing, patching and templating."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern

import pyfiglet

from .constants import COMMIT_MESSAGE_PREFIX, FORMULA_REPO_PREFIX, STAGING_BRANCH_PREFIX
from .errors import FormulaParseError, HandledError

VERSION_PATTERN = re.compile(r"""version\s['"]([\w.-]+)['"]""")
URL_PATTERN = re.compile(r"""url\s['"]((?:http|https)://[\w\-./?%&=+~]+)['"]""")
SHA256_PATTERN = re.compile(r"""sha256\s['"]([0-9A-Fa-f]{64})['"]""")


@dataclass(frozen=True)
class ReleaseInfo:
    """The release a formula should point at."""

    version: str
    asset_url: str
    checksum: str


@dataclass(frozen=True)
class FormulaTarget:
    owner: str
    repo: str
    path: str


def formula_target(owner: str, app: str, org: Optional[str] = None) -> FormulaTarget:
    return FormulaTarget(
        owner=org or owner,
        repo=f"{FORMULA_REPO_PREFIX}{app}",
        path=f"{app}.rb",
    )


def staging_branch_name(version: str) -> str:
    return f"{STAGING_BRANCH_PREFIX}{version}"


def commit_message(version: str) -> str:
    return f"{COMMIT_MESSAGE_PREFIX}{version}"


def _find(pattern: Pattern[str], text: str, keyword: str) -> "re.Match[str]":
    match = pattern.search(text)
    if match is None:
        raise FormulaParseError(
            f"could not find {keyword} in the formula file; "
            f"it is likely not to contain a proper `{keyword}` indicator"
        )
    return match


def parse_version(text: str) -> str:
    return _find(VERSION_PATTERN, text, "version").group(1)


def parse_url(text: str) -> str:
    return _find(URL_PATTERN, text, "url").group(1)


def parse_checksum(text: str) -> str:
    return _find(SHA256_PATTERN, text, "sha256").group(1)


def is_up_to_date(text: str, release: ReleaseInfo) -> bool:
    # Only the version is compared; url and sha256 drift are not detected.
    return parse_version(text) == release.version


def _replace(pattern: Pattern[str], text: str, keyword: str, value: str) -> str:
    # Every occurrence of the old value changes, e.g. in `test do` assertions.
    old = _find(pattern, text, keyword).group(1)
    return text.replace(old, value)


def bump_formula(text: str, release: ReleaseInfo) -> str:
    """Point the formula at ``release``; fails if any field is missing."""
    updated = _replace(VERSION_PATTERN, text, "version", release.version)
    updated = _replace(URL_PATTERN, updated, "url", release.asset_url)
    return _replace(SHA256_PATTERN, updated, "sha256", release.checksum)


def class_name(app: str) -> str:
    parts = [part for part in re.split(r"[^A-Za-z0-9]+", app) if part]
    return "".join(part[:1].upper() + part[1:] for part in parts)


def render_banner(app: str, font: str) -> str:
    try:
        return pyfiglet.figlet_format(app, font=font).rstrip("\n")
    except pyfiglet.FontNotFound as exc:
        raise HandledError(
            f'Unknown ASCII font "{font}".\n'
            "Pick one of the fonts listed by `pyfiglet --list_fonts`."
        ) from exc


def render_formula(app: str, origin_repo: str, release: ReleaseInfo, font: str) -> str:
    banner = render_banner(app, font)
    return (
        "require 'formula'\n"
        "\n"
        f"class {class_name(app)} < Formula\n"
        f"  homepage 'https://github.com/{origin_repo}'\n"
        f"  version '{release.version}'\n"
        "\n"
        f"  url '{release.asset_url}'\n"
        f"  sha256 '{release.checksum}'\n"
        "\n"
        "  def install\n"
        f"    bin.install '{app}'\n"
        "  end\n"
        "\n"
        "  def caveats\n"
        "    <<-'EOF'\n"
        f"{banner}\n"
        "EOF\n"
        "  end\n"
        "end\n"
    )


def render_readme(formula_repo: str, origin_repo: str) -> str:
    return (
        f"{formula_repo}\n"
        "====\n"
        "\n"
        f"[Homebrew](https://brew.sh/) formula for "
        f"[{origin_repo}](https://github.com/{origin_repo})\n"
    )
