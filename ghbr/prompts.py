"""Interactive questions asked by `ghbr auth login`."""

from __future__ import annotations

from typing import Any, Union

import questionary


class InteractionAborted(Exception):
    """Raised when the user cancels a prompt (Ctrl-C or Ctrl-D)."""


def _answer(question: questionary.Question) -> Any:
    result = question.ask()
    if result is None:
        raise InteractionAborted()
    return result


def token_not_blank(value: str) -> Union[bool, str]:
    return bool(value.strip()) or "GitHub token cannot be empty"


def prompt_confirm(prompt: str, *, default: bool) -> bool:
    return bool(_answer(questionary.confirm(prompt, default=default)))


def prompt_token(prompt: str) -> str:
    return str(_answer(questionary.password(prompt, validate=token_not_blank))).strip()
