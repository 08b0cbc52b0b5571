"""CLI application for RepoVault using Rich and Typer."""

import logging
import os
from pathlib import Path
from typing import Optional

import click
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer.core import TyperGroup

from repovault.core.config import ENV_KEYS, get_env, load_settings, setup_logging
from repovault.core.errors import VaultError
from repovault.core.git import GitClient
from repovault.core.links import LinkReconciler
from repovault.core.orchestrator import VaultOrchestrator

console = Console()


def _env_epilog() -> str:
    lines = [".env keys:"]
    lines += [f"  {key}={example}" for key, example in ENV_KEYS.items()]
    return "\n\n".join(lines)


class VaultGroup(TyperGroup):
    """Command group that reports unknown commands with exit code 1."""

    def resolve_command(self, ctx: click.Context, args: list[str]):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


app = typer.Typer(
    name="vault",
    help="RepoVault - Link many git repositories into one vault tree",
    epilog=_env_epilog(),
    cls=VaultGroup,
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=False,
)


def print_help():
    """Print usage and recognized .env keys."""
    table = Table(title="Commands", show_header=True, header_style="bold cyan")
    table.add_column("Command", style="green")
    table.add_column("Description")

    commands = [
        ("vault pull", "Pull all repos + create links"),
        ("vault add <git-url>", "Clone a new project + link it"),
        ("vault add <url> --link <p>", "With explicit vault path"),
        ("vault status", "Show status of all repos"),
    ]

    for cmd, desc in commands:
        table.add_row(escape(cmd), desc)

    console.print(table)
    console.print(".env:")
    for key, example in ENV_KEYS.items():
        console.print(f"  {key}={escape(example)}", highlight=False)


def _print_progress(message: str) -> None:
    console.print(escape(message), highlight=False)


def _get_vault_root(vault: Optional[str]) -> Path:
    """Resolve vault root from argument, env var, or the working directory."""
    if vault:
        return Path(vault).expanduser().resolve()
    env_vault = get_env("VAULT_ROOT")
    if env_vault:
        return Path(env_vault).expanduser().resolve()
    return Path(os.getcwd()).resolve()


def _build_orchestrator(ctx: typer.Context) -> VaultOrchestrator:
    """Load settings and wire the orchestrator, exiting 1 on fatal problems."""
    options = ctx.obj or {}
    git = GitClient()
    if not git.is_available():
        console.print("[red]git not found. Please install it manually.[/red]")
        raise typer.Exit(1)

    try:
        settings = load_settings(_get_vault_root(options.get("vault")))
    except VaultError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    return VaultOrchestrator(
        settings,
        git=git,
        reconciler=LinkReconciler(),
        on_progress=_print_progress,
    )


@app.command()
def pull(ctx: typer.Context):
    """Pull all repos + create links."""
    orchestrator = _build_orchestrator(ctx)
    summary = orchestrator.pull_all()
    if not summary.processed:
        return

    kind = orchestrator.link_kind
    line = f"{summary.processed} repos pulled"
    if summary.created:
        line += f", {summary.created} {kind}s created"
    console.print()
    console.print(f"[green]{line}.[/green]")
    if summary.sync_failures:
        console.print(
            f"[yellow]{len(summary.sync_failures)} pulls failed.[/yellow]"
        )
    if summary.link_failures:
        console.print(
            f"[yellow]{len(summary.link_failures)} {kind}s could not be created.[/yellow]"
        )


@app.command()
def add(
    ctx: typer.Context,
    url: Optional[str] = typer.Argument(None, help="Git URL (SSH or HTTPS)"),
    link: Optional[str] = typer.Option(
        None,
        "--link",
        "-l",
        help="Vault path for the link (default: project path from the URL)",
    ),
):
    """Clone a new project + link it."""
    if not url:
        console.print("[red]Missing: Git URL[/red]")
        raise typer.Exit(1)

    orchestrator = _build_orchestrator(ctx)
    console.print()
    try:
        result = orchestrator.add_one(url, link)
    except VaultError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print()
    console.print(f"[green]Done: {escape(str(result.link_path))}[/green]")


@app.command()
def status(ctx: typer.Context):
    """Show status of all repos."""
    orchestrator = _build_orchestrator(ctx)
    report = orchestrator.status_report()

    console.print()
    console.print(
        f"Sources: {escape(', '.join(str(s) for s in report.sources))}",
        highlight=False,
    )
    console.print()

    if report.entries:
        table = Table(show_header=True)
        table.add_column("Status")
        table.add_column("Repository")
        for entry in report.entries:
            state = "[green]OK[/green]" if entry.linked else "[yellow]--[/yellow]"
            table.add_row(state, escape(entry.relative.as_posix()))
        console.print(table)

    console.print(
        f"{report.total} repos ({report.linked} linked, {report.missing} without link).",
        highlight=False,
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    vault: Optional[str] = typer.Option(
        None,
        "--vault",
        "-v",
        help="Vault root holding .env (default: $VAULT_ROOT or the current directory)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug logging",
    ),
):
    """RepoVault - Link many git repositories into one vault tree."""
    setup_logging("DEBUG" if debug else None)
    if debug:
        logging.getLogger("repovault").setLevel(logging.DEBUG)
    ctx.obj = {"vault": vault, "debug": debug}

    if ctx.invoked_subcommand is None:
        print_help()
        raise typer.Exit(0)


def run_cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run_cli()
