"""Configuration file support for ghbr."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from platformdirs import PlatformDirs

from .constants import (
    CONFIG_ENV_VAR,
    DEFAULT_BRANCH,
    DEFAULT_CONFIG_DIR_NAME,
    DEFAULT_FONT,
    DEFAULT_GITHUB_API_URL,
    GITHUB_API_URL_ENV_VAR,
)
from .errors import CLIError

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover (py<311)
    import tomli as tomllib


@dataclass(frozen=True)
class ConfigFile:
    owner: Optional[str] = None
    org: Optional[str] = None
    branch: Optional[str] = None
    font: Optional[str] = None
    api_url: Optional[str] = None


def default_config_path() -> Path:
    dirs = PlatformDirs(appname=DEFAULT_CONFIG_DIR_NAME, appauthor=False, roaming=True)
    return Path(dirs.user_config_path) / "config.toml"


def resolve_config_path() -> Path:
    env_value = (os.environ.get(CONFIG_ENV_VAR) or "").strip()
    if env_value:
        return Path(env_value).expanduser()
    return default_config_path()


def _safe_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        normalized = value.strip()
        return normalized or None
    return str(value).strip() or None


def load_config(path: Optional[Path] = None) -> ConfigFile:
    config_path = path or resolve_config_path()
    if not config_path.exists():
        return ConfigFile()
    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CLIError(f"failed to read config file {config_path}: {exc}") from exc
    except Exception as exc:
        raise CLIError(f"failed to parse config file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        return ConfigFile()
    return ConfigFile(
        owner=_safe_str(data.get("owner")),
        org=_safe_str(data.get("org") or data.get("organization")),
        branch=_safe_str(data.get("branch")),
        font=_safe_str(data.get("font")),
        api_url=_safe_str(data.get("api_url") or data.get("apiUrl")),
    )


def config_template() -> str:
    return (
        "# ghbr configuration (TOML)\n"
        "#\n"
        "# Precedence (highest -> lowest):\n"
        "#   CLI flags > environment variables > this file > git config > built-in defaults\n"
        "#\n"
        "# The GitHub token is never read from this file; use GITHUB_TOKEN,\n"
        "# `ghbr auth login` or `git config github.token`.\n"
        "\n"
        "# owner = \"octocat\"\n"
        "# org = \"my-org\"  # host formula repositories under an organization\n"
        f"# branch = \"{DEFAULT_BRANCH}\"\n"
        f"# font = \"{DEFAULT_FONT}\"\n"
        f"# api_url = \"{DEFAULT_GITHUB_API_URL}\"\n"
    )


def write_default_config(path: Optional[Path] = None, *, force: bool) -> Path:
    config_path = path or resolve_config_path()
    if config_path.exists() and not force:
        raise CLIError(f"config file already exists: {config_path} (use --force to overwrite)")
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(config_template(), encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"failed to write config file {config_path}: {exc}") from exc
    return config_path


def resolve_api_url(config: Optional[ConfigFile] = None) -> str:
    env_value = (os.environ.get(GITHUB_API_URL_ENV_VAR) or "").strip()
    if env_value:
        return env_value.rstrip("/")
    if config is not None and config.api_url:
        return config.api_url.rstrip("/")
    return DEFAULT_GITHUB_API_URL


def effective_config(config: ConfigFile) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Compute the effective config for display (no CLI flags), with sources.

    Returns (values, sources) where sources map key -> one of:
    "env", "config", "default", "unset".
    """
    sources: Dict[str, str] = {}
    values: Dict[str, Any] = {}

    values["owner"] = config.owner
    sources["owner"] = "config" if config.owner else "unset"

    values["org"] = config.org
    sources["org"] = "config" if config.org else "unset"

    values["branch"] = config.branch or DEFAULT_BRANCH
    sources["branch"] = "config" if config.branch else "default"

    values["font"] = config.font or DEFAULT_FONT
    sources["font"] = "config" if config.font else "default"

    api_env = (os.environ.get(GITHUB_API_URL_ENV_VAR) or "").strip()
    values["api_url"] = resolve_api_url(config)
    if api_env:
        sources["api_url"] = "env"
    else:
        sources["api_url"] = "config" if config.api_url else "default"
    return values, sources
