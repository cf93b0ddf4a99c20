#!/usr/bin/env python3
"""ghbr CLI entry point."""

from __future__ import annotations

import json
import sys
from dataclasses import replace
from types import SimpleNamespace
from typing import Callable, Optional, Sequence

import typer

from . import __version__
from .args import CreateArgs, ReleaseArgs, build_create_args, build_release_args
from .auth import handle_auth_login, handle_auth_logout, handle_auth_status
from .bootstrap import create_formula_repository
from .config import (
    ConfigFile,
    effective_config,
    load_config,
    resolve_config_path,
    write_default_config,
)
from .console import configure_console, log, log_error, log_warning, reset_console
from .constants import EXIT_CODE_ERROR, EXIT_CODE_INTERRUPT, EXIT_CODE_OK, EXIT_CODE_USAGE
from .context import AppContext
from .errors import CLIError, HandledError, ValidationError
from .formula import formula_target
from .prompts import InteractionAborted
from .release import resolve_latest_release
from .updater import update_formula
from .version import output_version

app = typer.Typer(help="ghbr: create and update Homebrew formulae from GitHub Releases")
auth_app = typer.Typer(help="GitHub token management")
config_app = typer.Typer(help="Configuration file helpers")
app.add_typer(auth_app, name="auth")
app.add_typer(config_app, name="config")


def _context(ctx: typer.Context) -> AppContext:
    obj = ctx.obj
    if isinstance(obj, AppContext):
        return obj
    return AppContext()


def _config(ctx: typer.Context) -> ConfigFile:
    return _context(ctx).config


def report_error(exc: CLIError) -> None:
    if isinstance(exc, HandledError):
        typer.echo(str(exc), err=True)
    else:
        log_error(f"error: {exc}")
    for secondary in exc.secondary_errors:
        log_warning(f"additionally: {secondary}")


def run_handler(action: Callable[[], int]) -> None:
    try:
        rc = action()
    except ValidationError as exc:
        report_error(exc)
        raise typer.Exit(code=EXIT_CODE_USAGE) from exc
    except CLIError as exc:
        report_error(exc)
        raise typer.Exit(code=EXIT_CODE_ERROR) from exc
    except (InteractionAborted, KeyboardInterrupt) as exc:
        log_error("aborted")
        raise typer.Exit(code=EXIT_CODE_INTERRUPT) from exc
    raise typer.Exit(code=rc)


def handle_create(args: CreateArgs, context: AppContext) -> int:
    with context.github_session(args.token) as (github, client):
        release = resolve_latest_release(github, client, args.owner, args.repo)
        create_formula_repository(
            github,
            owner=args.owner,
            app=args.repo,
            release=release,
            font=args.font,
            org=args.org,
            private=args.private,
        )
    return EXIT_CODE_OK


def handle_release(args: ReleaseArgs, context: AppContext) -> int:
    with context.github_session(args.token) as (github, client):
        release = resolve_latest_release(github, client, args.owner, args.repo)
        update_formula(
            github,
            formula_target(args.owner, args.repo, args.org),
            args.branch,
            release,
            force=args.force,
            merge=args.merge,
        )
    return EXIT_CODE_OK


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"ghbr {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def cli_callback(
    ctx: typer.Context,
    quiet: bool = typer.Option(False, "--quiet", "-q", help="suppress progress output"),
    version: bool = typer.Option(
        False,
        "--version",
        help="show the ghbr version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    reset_console()
    configure_console(quiet=quiet)
    path = resolve_config_path()
    try:
        config = load_config(path)
    except CLIError as exc:
        log_error(f"error: {exc}")
        raise typer.Exit(code=EXIT_CODE_USAGE) from exc
    base = ctx.obj if isinstance(ctx.obj, AppContext) else AppContext()
    ctx.obj = replace(base, config=config, config_path=path)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=EXIT_CODE_USAGE)


TOKEN_HELP = "GitHub personal access token"
OWNER_HELP = "GitHub repository owner name"
REPO_HELP = "GitHub repository"


@app.command("create")
def create(
    ctx: typer.Context,
    token: Optional[str] = typer.Option(None, "--token", "-t", help=TOKEN_HELP),
    owner: Optional[str] = typer.Option(None, "--owner", "-o", help=OWNER_HELP),
    repository: Optional[str] = typer.Option(None, "--repository", "-r", help=REPO_HELP),
    org: Optional[str] = typer.Option(
        None, "--org", "-g", help="GitHub organization to host the formula on"
    ),
    font: Optional[str] = typer.Option(
        None, "--font", "-f", help="ASCII art font for the formula caveats"
    ),
    private: bool = typer.Option(
        False, "--private", "-p", help="create a private formula repository"
    ),
) -> None:
    """Create a GitHub repository to host a Homebrew formula."""
    context = _context(ctx)

    def action() -> int:
        args = build_create_args(
            token=token,
            owner=owner,
            repo=repository,
            org=org,
            font=font,
            private=private,
            config=_config(ctx),
        )
        return handle_create(args, context)

    run_handler(action)


@app.command("release")
def release(
    ctx: typer.Context,
    token: Optional[str] = typer.Option(None, "--token", "-t", help=TOKEN_HELP),
    owner: Optional[str] = typer.Option(None, "--owner", "-o", help=OWNER_HELP),
    repository: Optional[str] = typer.Option(None, "--repository", "-r", help=REPO_HELP),
    org: Optional[str] = typer.Option(
        None, "--org", "-g", help="GitHub organization hosting the formula"
    ),
    branch: Optional[str] = typer.Option(
        None,
        "--branch",
        "-b",
        help="formula repository branch (default: main; earlier ghbr releases used master)",
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="update the formula even if it is up-to-date"
    ),
    merge: bool = typer.Option(False, "--merge", "-m", help="merge the pull request"),
) -> None:
    """Update your Homebrew formula to point to the latest release."""
    context = _context(ctx)

    def action() -> int:
        args = build_release_args(
            token=token,
            owner=owner,
            repo=repository,
            org=org,
            branch=branch,
            force=force,
            merge=merge,
            config=_config(ctx),
        )
        return handle_release(args, context)

    run_handler(action)


app.command("init", hidden=True)(create)
app.command("update", hidden=True)(release)
app.command("bumpup", hidden=True)(release)


@app.command("version")
def version_command(ctx: typer.Context) -> None:
    """Print the current version of ghbr."""
    context = _context(ctx)
    typer.echo(output_version(context.http_client_factory))
    raise typer.Exit(code=EXIT_CODE_OK)


@auth_app.command("login")
def auth_login(
    token: Optional[str] = typer.Option(
        None, "--token", "-t", help="token to store (prompted when omitted)"
    ),
) -> None:
    run_handler(lambda: handle_auth_login(SimpleNamespace(token=token)))


@auth_app.command("logout")
def auth_logout() -> None:
    run_handler(lambda: handle_auth_logout(SimpleNamespace()))


@auth_app.command("status")
def auth_status() -> None:
    run_handler(lambda: handle_auth_status(SimpleNamespace()))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="overwrite an existing config file"),
) -> None:
    def action() -> int:
        path = write_default_config(resolve_config_path(), force=force)
        log(f"wrote config template to {path}")
        return EXIT_CODE_OK

    run_handler(action)


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="print machine-readable JSON"),
) -> None:
    values, sources = effective_config(_config(ctx))
    if as_json:
        typer.echo(json.dumps({"values": values, "sources": sources}, indent=2, sort_keys=True))
        raise typer.Exit(code=EXIT_CODE_OK)
    for key, value in values.items():
        rendered = "-" if value is None else value
        typer.echo(f"{key} = {rendered} ({sources[key]})")
    raise typer.Exit(code=EXIT_CODE_OK)


@config_app.command("path")
def config_path_command() -> None:
    typer.echo(str(resolve_config_path()))
    raise typer.Exit(code=EXIT_CODE_OK)


def main(argv: Optional[Sequence[str]] = None) -> int:
    command = typer.main.get_command(app)
    try:
        # Standalone mode reports usage errors itself and always ends in SystemExit.
        command.main(
            args=list(argv) if argv is not None else None,
            prog_name="ghbr",
            standalone_mode=True,
        )
    except SystemExit as exc:
        if exc.code is None:
            return EXIT_CODE_OK
        return exc.code if isinstance(exc.code, int) else EXIT_CODE_ERROR
    except (KeyboardInterrupt, typer.Abort):
        log_error("aborted")
        return EXIT_CODE_INTERRUPT
    return EXIT_CODE_OK


if __name__ == "__main__":
    sys.exit(main())
