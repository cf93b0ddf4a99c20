"""Per-invocation argument models and their resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from . import gitconfig
from .auth import resolve_token
from .config import ConfigFile
from .constants import DEFAULT_BRANCH, DEFAULT_FONT, GITHUB_TOKEN_ENV_VAR
from .errors import ValidationError
from .utils import first_non_empty


@dataclass(frozen=True)
class CreateArgs:
    """Arguments for `ghbr create`."""

    token: str
    owner: str
    repo: str
    org: Optional[str] = None
    font: str = DEFAULT_FONT
    private: bool = False


@dataclass(frozen=True)
class ReleaseArgs:
    """Arguments for `ghbr release`."""

    token: str
    owner: str
    repo: str
    org: Optional[str] = None
    branch: str = DEFAULT_BRANCH
    force: bool = False
    merge: bool = False


def _or_lazy(value: Optional[str], fallback: Callable[[], Optional[str]]) -> Optional[str]:
    resolved = first_non_empty(value)
    if resolved:
        return resolved
    return first_non_empty(fallback())


def resolve_token_value(explicit: Optional[str]) -> str:
    resolved = resolve_token(explicit)
    if resolved is None:
        raise ValidationError(
            "missing GitHub personal access token\n\n"
            f"Please set it via `-t` option, {GITHUB_TOKEN_ENV_VAR} environment variable, "
            "`ghbr auth login` or github.token in .gitconfig"
        )
    return resolved.token


def resolve_owner(explicit: Optional[str], config: ConfigFile) -> str:
    owner = _or_lazy(first_non_empty(explicit, config.owner), gitconfig.default_owner)
    if not owner:
        raise ValidationError(
            "missing GitHub repository owner\n\n"
            "Please set it via `-o` option.\n"
            "You can set a default owner as `owner` in the ghbr config file, "
            "or `github.user` or `user.name` in ~/.gitconfig"
        )
    return owner


def resolve_repository(explicit: Optional[str]) -> str:
    repo = _or_lazy(explicit, gitconfig.default_repository)
    if not repo:
        raise ValidationError(
            "missing GitHub repository\n\n"
            "ghbr extracts the repository from .git/config, so move to the root of "
            "your project, or set it via `-r` option"
        )
    return repo


def build_create_args(
    *,
    token: Optional[str],
    owner: Optional[str],
    repo: Optional[str],
    org: Optional[str],
    font: Optional[str],
    private: bool,
    config: ConfigFile,
) -> CreateArgs:
    return CreateArgs(
        token=resolve_token_value(token),
        owner=resolve_owner(owner, config),
        repo=resolve_repository(repo),
        org=first_non_empty(org, config.org),
        font=first_non_empty(font, config.font) or DEFAULT_FONT,
        private=private,
    )


def build_release_args(
    *,
    token: Optional[str],
    owner: Optional[str],
    repo: Optional[str],
    org: Optional[str],
    branch: Optional[str],
    force: bool,
    merge: bool,
    config: ConfigFile,
) -> ReleaseArgs:
    if branch is not None and not branch.strip():
        raise ValidationError("missing GitHub branch")
    return ReleaseArgs(
        token=resolve_token_value(token),
        owner=resolve_owner(owner, config),
        repo=resolve_repository(repo),
        org=first_non_empty(org, config.org),
        branch=first_non_empty(branch, config.branch) or DEFAULT_BRANCH,
        force=force,
        merge=merge,
    )
