"""Create a formula repository from a project's latest release."""

from __future__ import annotations

from typing import Optional

from .console import echo, log_step
from .constants import README_PATH
from .formula import ReleaseInfo, formula_target, render_formula, render_readme
from .github import GitHubAPI, Repository


def create_formula_repository(
    github: GitHubAPI,
    *,
    owner: str,
    app: str,
    release: ReleaseInfo,
    font: str,
    org: Optional[str] = None,
    private: bool = False,
) -> Repository:
    target = formula_target(owner, app, org)
    origin_repo = f"{owner}/{app}"

    # Render first so a bad font fails before the repository exists.
    formula = render_formula(app, origin_repo, release, font)
    readme = render_readme(target.repo, origin_repo)

    log_step("Creating a repository")
    repository = github.create_repository(
        org,
        target.repo,
        description=f"Homebrew formula for {origin_repo}",
        homepage=f"https://github.com/{origin_repo}",
        private=private,
    )

    log_step(f"Adding {README_PATH} to the repository")
    github.create_file(
        target.owner,
        target.repo,
        README_PATH,
        f"Create {README_PATH}",
        readme.encode("utf-8"),
    )

    log_step(f"Adding {target.path} to the repository")
    github.create_file(
        target.owner,
        target.repo,
        target.path,
        "Create formula",
        formula.encode("utf-8"),
    )

    echo()
    echo("Yay! Your Homebrew formula repository has been successfully created!")
    echo(f"Access {repository.html_url} and see what we achieved.")
    return repository
