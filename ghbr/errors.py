"""Error types for ghbr."""

from __future__ import annotations

from typing import List, Optional


class CLIError(Exception):
    """Raised for user-facing CLI errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.secondary_errors: List[Exception] = []

    def add_secondary(self, error: Exception) -> None:
        self.secondary_errors.append(error)


class ValidationError(CLIError):
    """Missing or malformed input, detected before any network call."""


class HandledError(CLIError):
    """Expected failure whose message is already formatted for display."""


class FormulaParseError(CLIError):
    """The formula document lacks one of its recognised fields."""


class DownloadError(CLIError):
    """A release asset could not be downloaded."""


class GitHubAPIError(CLIError):
    """A GitHub REST call failed or returned an unexpected status."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class NotFoundError(GitHubAPIError):
    """The requested repository, release, ref or file does not exist."""
