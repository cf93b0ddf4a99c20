"""Point an existing formula at a new release through a pull request."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .console import echo, log_step, log_warning
from .errors import CLIError
from .formula import (
    FormulaTarget,
    ReleaseInfo,
    bump_formula,
    commit_message,
    is_up_to_date,
    staging_branch_name,
)
from .github import GitHubAPI, PullRequest


class UpdateStatus(str, Enum):
    UP_TO_DATE = "up_to_date"
    PULL_REQUEST_OPENED = "pull_request_opened"
    MERGED = "merged"


@dataclass(frozen=True)
class UpdateResult:
    status: UpdateStatus
    version: str
    branch: Optional[str] = None
    pull_request: Optional[PullRequest] = None


def _rollback(primary: BaseException, description: str, action: Callable[[], None]) -> None:
    """Run a best-effort rollback step; its failure is attached to ``primary``."""
    try:
        action()
    except Exception as exc:
        log_warning(f"rollback failed to {description}: {exc}")
        if isinstance(primary, CLIError):
            primary.add_secondary(exc)


def update_formula(
    github: GitHubAPI,
    target: FormulaTarget,
    branch: str,
    release: ReleaseInfo,
    *,
    force: bool = False,
    merge: bool = False,
) -> UpdateResult:
    owner, repo, path = target.owner, target.repo, target.path

    log_step("Checking the current formula")
    current = github.get_file(owner, repo, branch, path)

    if is_up_to_date(current.content, release) and not force:
        echo()
        echo("ghbr aborted!")
        echo()
        echo(f"The current formula (pointing to version {release.version}) is up-to-date.")
        echo("If you want to update the formula anyway, run `ghbr release` with `--force` option.")
        return UpdateResult(status=UpdateStatus.UP_TO_DATE, version=release.version)

    # Computed in full before anything is written.
    updated = bump_formula(current.content, release)

    log_step("Creating a new feature branch")
    new_branch = staging_branch_name(release.version)
    github.create_branch(owner, repo, branch, new_branch)

    def delete_staging_branch() -> None:
        github.delete_branch(owner, repo, new_branch)

    log_step("Updating the formula file")
    message = commit_message(release.version)
    try:
        github.update_file(
            owner,
            repo,
            new_branch,
            path,
            current.sha,
            message,
            updated.encode("utf-8"),
        )
    except Exception as exc:
        _rollback(exc, f"delete branch {new_branch}", delete_staging_branch)
        raise

    log_step("Creating a Pull Request")
    try:
        pull_request = github.create_pull_request(
            owner, repo, title=message, head=new_branch, base=branch, body=message
        )
    except Exception as exc:
        _rollback(exc, f"delete branch {new_branch}", delete_staging_branch)
        raise

    if not merge:
        echo()
        echo("Yay! Now your formula is ready to update!")
        echo()
        echo(f"Access {pull_request.html_url} and merge the Pull Request")
        return UpdateResult(
            status=UpdateStatus.PULL_REQUEST_OPENED,
            version=release.version,
            branch=new_branch,
            pull_request=pull_request,
        )

    log_step("Merging the Pull Request")
    try:
        github.merge_pull_request(owner, repo, pull_request.number)
    except Exception as exc:
        _rollback(
            exc,
            f"close pull request #{pull_request.number}",
            lambda: github.close_pull_request(owner, repo, pull_request.number),
        )
        _rollback(exc, f"delete branch {new_branch}", delete_staging_branch)
        raise

    # Unlike the rollbacks above, a failure here is reported.
    log_step("Deleting the branch")
    delete_staging_branch()

    echo()
    echo("Yay! Now your formula is up-to-date!")
    return UpdateResult(
        status=UpdateStatus.MERGED,
        version=release.version,
        branch=new_branch,
        pull_request=pull_request,
    )
