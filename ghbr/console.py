"""Console helpers for ghbr."""

from __future__ import annotations

import sys

from .utils import redact

_LOG_SILENCED = False


def configure_console(*, quiet: bool = False) -> None:
    global _LOG_SILENCED
    if quiet:
        _LOG_SILENCED = True


def reset_console() -> None:
    global _LOG_SILENCED
    _LOG_SILENCED = False


def log(message: str) -> None:
    if _LOG_SILENCED:
        return
    print(f"[ghbr] {redact(message)}", file=sys.stdout)


def log_step(message: str) -> None:
    log(f"===> {message}")


def log_error(message: str) -> None:
    print(f"[ghbr] {redact(message)}", file=sys.stderr)


def log_warning(message: str) -> None:
    log_error(f"warning: {message}")


def echo(message: str = "") -> None:
    """Print a plain line (result summaries) unless logs are silenced."""
    if _LOG_SILENCED:
        return
    print(message, file=sys.stdout)
