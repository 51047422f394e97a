#!/usr/bin/env python3
"""nanoscope-release CLI entry point."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Optional, Sequence

import typer

from . import __version__
from .auth import (
    clear_token,
    mask_token,
    persist_token,
    require_token,
    resolve_token,
    token_source,
)
from .config import load_config, resolve_config_path, resolve_settings, write_config_template
from .console import configure_console, log, log_error
from .constants import EXIT_CODE_INTERRUPT, EXIT_CODE_USAGE, TOKEN_ENV_VAR
from .context import AppContext
from .errors import CLIError
from .orchestrator import delete_release_drafts, plan_release, release
from .prompts import InteractionAborted, prompt_confirm, prompt_password
from .semver import IncrementKind

app = typer.Typer(help="Publish Nanoscope releases and update the Homebrew tap")
auth_app = typer.Typer(help="GitHub token helpers")
config_app = typer.Typer(help="Configuration file helpers")
app.add_typer(auth_app, name="auth")
app.add_typer(config_app, name="config")


@dataclass
class CLIContext:
    token: Optional[str] = None
    config_path: Optional[Path] = None
    cache_dir: Optional[str] = None
    source_dir: Optional[str] = None


def build_app_context(args: SimpleNamespace) -> AppContext:
    config = load_config(getattr(args, "config_path", None))
    settings = resolve_settings(
        config,
        cache_dir=getattr(args, "cache_dir", None),
        source_dir=getattr(args, "source_dir", None),
    )
    return AppContext(settings=settings)


def _parse_kind(value: str) -> IncrementKind:
    try:
        return IncrementKind.parse(value)
    except ValueError as exc:
        raise CLIError(str(exc)) from exc


def handle_release(args: SimpleNamespace) -> int:
    token = require_token(args.token)
    kind = _parse_kind(args.bump)
    artifact = Path(args.artifact)
    ctx = build_app_context(args)
    settings = ctx.settings
    target = f"{settings.owner}/{settings.repo}"
    if not args.yes and not prompt_confirm(
        f"Publish {artifact.name} as a new {kind.value} release of {target}?",
        default=False,
    ):
        log("release cancelled")
        return 1
    result = release(ctx, artifact, kind, token=token)
    log(f"released {result.version}: {result.download_url}")
    return 0


def handle_delete_drafts(args: SimpleNamespace) -> int:
    token = require_token(args.token)
    ctx = build_app_context(args)
    settings = ctx.settings
    if not args.yes and not prompt_confirm(
        f"Delete all draft releases of {settings.owner}/{settings.repo}?",
        default=False,
    ):
        log("nothing deleted")
        return 1
    deleted = delete_release_drafts(ctx, token=token)
    log(f"deleted {len(deleted)} draft release(s)")
    return 0


def handle_next_version(args: SimpleNamespace) -> int:
    # stdout carries only the version so scripts can capture it.
    configure_console(stderr=True)
    kind = _parse_kind(args.bump)
    ctx = build_app_context(args)
    current, upcoming = plan_release(ctx, kind)
    log(f"current version: {current}")
    typer.echo(str(upcoming))
    return 0


def handle_auth_login(args: SimpleNamespace) -> int:
    token = (getattr(args, "token", None) or "").strip()
    if not token:
        token = prompt_password("GitHub access token")
    if not token:
        raise CLIError("no token provided")
    persist_token(token)
    return 0


def handle_auth_logout(_: SimpleNamespace) -> int:
    if clear_token():
        log("removed stored GitHub token")
    else:
        log("no stored GitHub token")
    return 0


def handle_auth_status(_: SimpleNamespace) -> int:
    token = resolve_token()
    if not token:
        log(f"not authenticated; set {TOKEN_ENV_VAR} or run 'nanoscope-release auth login'")
        return 1
    log(f"token {mask_token(token)} (source: {token_source()})")
    return 0


def handle_config_path(args: SimpleNamespace) -> int:
    path = getattr(args, "config_path", None) or resolve_config_path()
    typer.echo(str(path))
    return 0


def handle_config_init(args: SimpleNamespace) -> int:
    path = getattr(args, "config_path", None) or resolve_config_path()
    written = write_config_template(Path(path), force=bool(getattr(args, "force", False)))
    log(f"wrote {written}")
    return 0


def _run_handler(handler, args: SimpleNamespace) -> None:
    try:
        rc = handler(args)
    except CLIError as exc:
        log_error(f"error: {exc}")
        raise typer.Exit(code=EXIT_CODE_USAGE) from exc
    except InteractionAborted as exc:
        raise typer.Exit(code=EXIT_CODE_INTERRUPT) from exc
    raise typer.Exit(code=rc)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"nanoscope-release {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def cli_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="path to the TOML config file",
    ),
    cache_dir: Optional[str] = typer.Option(
        None,
        "--cache-dir",
        help="directory holding the Homebrew tap clone",
    ),
    source_dir: Optional[str] = typer.Option(
        None,
        "--source-dir",
        help="git checkout whose HEAD is tagged (default: current directory)",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="suppress progress output"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="show the version and exit",
    ),
) -> None:
    configure_console(quiet=quiet)
    ctx.obj = CLIContext(
        token=resolve_token(),
        config_path=config,
        cache_dir=cache_dir,
        source_dir=source_dir,
    )
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=EXIT_CODE_USAGE)


def _base_args(ctx: typer.Context, **extra) -> SimpleNamespace:
    obj: CLIContext = ctx.obj
    return SimpleNamespace(
        token=obj.token,
        config_path=obj.config_path,
        cache_dir=obj.cache_dir,
        source_dir=obj.source_dir,
        **extra,
    )


@app.command("release")
def release_command(
    ctx: typer.Context,
    artifact: Path = typer.Argument(..., help="distribution zip to upload"),
    bump: str = typer.Option(
        IncrementKind.PATCH.value,
        "--bump",
        "-b",
        help="version component to increment: major, minor or patch",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="do not ask for confirmation"),
) -> None:
    _run_handler(handle_release, _base_args(ctx, artifact=artifact, bump=bump, yes=yes))


@app.command("delete-drafts")
def delete_drafts_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="do not ask for confirmation"),
) -> None:
    _run_handler(handle_delete_drafts, _base_args(ctx, yes=yes))


@app.command("next-version")
def next_version_command(
    ctx: typer.Context,
    bump: str = typer.Option(
        IncrementKind.PATCH.value,
        "--bump",
        "-b",
        help="version component to increment: major, minor or patch",
    ),
) -> None:
    _run_handler(handle_next_version, _base_args(ctx, bump=bump))


@auth_app.command("login")
def auth_login(
    token: Optional[str] = typer.Option(
        None,
        "--token",
        help="GitHub access token (prompted when omitted)",
    ),
) -> None:
    _run_handler(handle_auth_login, SimpleNamespace(token=token))


@auth_app.command("logout")
def auth_logout() -> None:
    _run_handler(handle_auth_logout, SimpleNamespace())


@auth_app.command("status")
def auth_status() -> None:
    _run_handler(handle_auth_status, SimpleNamespace())


@config_app.command("path")
def config_path_command(ctx: typer.Context) -> None:
    _run_handler(handle_config_path, SimpleNamespace(config_path=ctx.obj.config_path))


@config_app.command("init")
def config_init_command(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="overwrite an existing file"),
) -> None:
    args = SimpleNamespace(config_path=ctx.obj.config_path, force=force)
    _run_handler(handle_config_init, args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    command = typer.main.get_command(app)
    try:
        rc = command.main(
            args=list(argv) if argv is not None else None,
            prog_name="nanoscope-release",
            standalone_mode=False,
        )
    except SystemExit as exc:
        return int(exc.code or 0)
    except (KeyboardInterrupt, typer.Abort):
        log_error("interrupted")
        return EXIT_CODE_INTERRUPT
    return int(rc or 0) if isinstance(rc, int) else 0


if __name__ == "__main__":
    sys.exit(main())
