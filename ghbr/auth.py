"""GitHub token storage and resolution for ghbr."""

from __future__ import annotations

import os
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Optional

import keyring
from keyring.errors import NoKeyringError, PasswordDeleteError

from . import gitconfig
from .console import log, log_error
from .constants import GITHUB_TOKEN_ENV_VAR, KEYRING_SERVICE, KEYRING_USERNAME
from .errors import CLIError, ValidationError
from .prompts import prompt_confirm, prompt_token
from .utils import mask_token


@dataclass(frozen=True)
class TokenSource:
    token: str
    source: str


def load_keyring_token() -> Optional[str]:
    try:
        secret = keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except NoKeyringError:
        return None
    except Exception as exc:
        log_error(f"failed to read stored credentials from keyring: {exc}")
        return None
    if not secret:
        return None
    return secret.strip() or None


def persist_token(token: str) -> None:
    normalized = token.strip()
    if not normalized:
        raise ValidationError("attempted to persist empty GitHub token")
    try:
        keyring.set_password(KEYRING_SERVICE, KEYRING_USERNAME, normalized)
    except NoKeyringError as exc:
        raise CLIError(
            f"no keyring backend available; set {GITHUB_TOKEN_ENV_VAR} for this session"
        ) from exc
    except Exception as exc:
        raise CLIError(f"failed to persist GitHub token in keyring: {exc}") from exc
    log(f"stored GitHub token ({mask_token(normalized)}) in system keyring")


def clear_token() -> bool:
    try:
        keyring.delete_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except (NoKeyringError, PasswordDeleteError):
        return False
    return True


def resolve_token(explicit: Optional[str] = None) -> Optional[TokenSource]:
    """Flag, then GITHUB_TOKEN, then the keyring, then git config github.token."""
    if explicit and explicit.strip():
        return TokenSource(explicit.strip(), "flag")
    env_token = os.environ.get(GITHUB_TOKEN_ENV_VAR, "").strip()
    if env_token:
        return TokenSource(env_token, "environment variable")
    stored = load_keyring_token()
    if stored:
        return TokenSource(stored, "system keyring")
    git_token = gitconfig.github_token()
    if git_token:
        return TokenSource(git_token, "git config")
    return None


def read_login_token(args: SimpleNamespace) -> str:
    provided = (getattr(args, "token", None) or "").strip()
    if provided:
        return provided
    existing = load_keyring_token()
    if existing:
        log(f"stored GitHub token detected ({mask_token(existing)})")
        if not prompt_confirm("Replace the stored token?", default=False):
            return existing
    return prompt_token("GitHub personal access token:")


def handle_auth_login(args: SimpleNamespace) -> int:
    token = read_login_token(args)
    persist_token(token)
    return 0


def handle_auth_logout(_: SimpleNamespace) -> int:
    if clear_token():
        log("removed stored GitHub token")
    else:
        log("no stored GitHub token to remove")
    return 0


def handle_auth_status(_: SimpleNamespace) -> int:
    resolved = resolve_token()
    if resolved is None:
        log("no GitHub token configured")
        backend = getattr(keyring, "get_keyring", lambda: None)()
        backend_name = getattr(backend, "name", None) or "unknown"
        log(f"keyring backend: {backend_name}")
        return 0
    log(f"GitHub token source: {resolved.source}")
    log(f"effective token (masked): {mask_token(resolved.token)}")
    return 0
