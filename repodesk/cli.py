"""repodesk command-line interface."""

from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.table import Table

from repodesk import __version__
from repodesk.config import RepodeskConfig
from repodesk.exceptions import (
    ConfigurationError,
    ExecutionError,
    MergeConflictError,
    MergeError,
    RepodeskError,
)
from repodesk.git.ops import RepositoryOperations
from repodesk.logging import get_logger, setup_logging
from repodesk.session import RepositorySession

console = Console()
logger = get_logger("cli")


def _ops(ctx: click.Context) -> RepositoryOperations:
    """Build the operations for the selected repository on first use."""
    ops: RepositoryOperations | None = ctx.obj.get("ops")
    if ops is None:
        session = RepositorySession()
        try:
            session.select(ctx.obj["repo"] or Path.cwd())
        except RepodeskError as e:
            _fail(e)
        ops = RepositoryOperations(session=session, config=ctx.obj["config"])
        ctx.obj["ops"] = ops
    return ops


def _fail(error: RepodeskError) -> NoReturn:
    """Print a façade failure and exit with status 1."""
    logger.debug(f"{type(error).__name__}: {error}")
    if isinstance(error, MergeConflictError):
        console.print(f"[red]Merge conflict:[/red] {error.message}")
        console.print(f"[yellow]{error.outcome.target} is checked out with the merge in progress[/yellow]")
        console.print("Conflicting files:")
        for f in error.conflicting_files:
            console.print(f"  - {f}")
    elif isinstance(error, MergeError):
        console.print(f"[red]Merge failed ({error.outcome.phase}):[/red] {error.message}")
    elif isinstance(error, ExecutionError):
        console.print(f"[red]git failed:[/red] {error.output or error.message}")
    else:
        console.print(f"[red]Error:[/red] {error.message}")
    raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="repodesk")
@click.option(
    "--repo",
    "-r",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Repository to operate on (default: current directory)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: .repodesk/config.yaml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"]),
    default=None,
    help="Override the configured log level",
)
@click.pass_context
def cli(
    ctx: click.Context,
    repo: Path | None,
    config_path: Path | None,
    log_level: str | None,
) -> None:
    """repodesk - run everyday git operations on one repository."""
    ctx.ensure_object(dict)

    try:
        config = RepodeskConfig.load(config_path)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e

    setup_logging(
        level=log_level or config.logging.level,
        log_dir=config.logging.directory,
        json_output=config.logging.json_output,
        console_output=config.logging.console_output,
    )

    ctx.obj["repo"] = repo
    ctx.obj["config"] = config


@cli.command("log")
@click.option("--limit", "-n", type=click.IntRange(min=1), default=None, help="Show at most N commits")
@click.pass_context
def log_cmd(ctx: click.Context, limit: int | None) -> None:
    """Show commits across all branches."""
    try:
        commits = _ops(ctx).list_commits()
    except RepodeskError as e:
        _fail(e)

    if not commits:
        console.print("[yellow]No commits found[/yellow]")
        return

    for commit in commits[:limit] if limit else commits:
        console.print(f"  [cyan]{commit.hash}[/cyan] {commit.message}", highlight=False)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show short-format working tree status."""
    try:
        text = _ops(ctx).get_status()
    except RepodeskError as e:
        _fail(e)

    if text:
        console.print(text, highlight=False, markup=False)
    else:
        console.print("[green]Working tree clean[/green]")


@cli.command()
@click.pass_context
def branches(ctx: click.Context) -> None:
    """List local branches."""
    ops = _ops(ctx)
    try:
        names = ops.list_branches()
        current = ops.current_branch()
    except RepodeskError as e:
        _fail(e)

    table = Table(title="Branches")
    table.add_column("Branch")
    table.add_column("Current")
    for name in names:
        table.add_row(name, "✓" if name == current else "")
    console.print(table)


@cli.command()
@click.pass_context
def current(ctx: click.Context) -> None:
    """Print the checked-out branch."""
    try:
        name = _ops(ctx).current_branch()
    except RepodeskError as e:
        _fail(e)

    click.echo(name or "(detached HEAD)")


@cli.group()
def branch() -> None:
    """Create or delete branches."""


@branch.command("create")
@click.argument("name")
@click.pass_context
def branch_create(ctx: click.Context, name: str) -> None:
    """Create NAME and switch to it."""
    try:
        _ops(ctx).create_branch(name)
    except RepodeskError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Created and switched to {name}")


@branch.command("delete")
@click.argument("name")
@click.pass_context
def branch_delete(ctx: click.Context, name: str) -> None:
    """Delete merged branch NAME."""
    try:
        _ops(ctx).delete_branch(name)
    except RepodeskError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Deleted {name}")


@cli.command()
@click.argument("name")
@click.pass_context
def checkout(ctx: click.Context, name: str) -> None:
    """Switch to branch NAME."""
    try:
        _ops(ctx).checkout_branch(name)
    except RepodeskError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Switched to {name}")


@cli.command()
@click.option("--message", "-m", required=True, help="Commit message")
@click.pass_context
def commit(ctx: click.Context, message: str) -> None:
    """Stage all changes and commit them."""
    try:
        commit_sha = _ops(ctx).commit_all(message)
    except RepodeskError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Created commit: {commit_sha[:8]}")


@cli.command()
@click.argument("branch_name", metavar="BRANCH", required=False)
@click.pass_context
def push(ctx: click.Context, branch_name: str | None) -> None:
    """Push BRANCH (default: configured push branch) to the remote."""
    ops = _ops(ctx)
    try:
        ops.push_branch(branch_name)
    except RepodeskError as e:
        _fail(e)
    pushed = branch_name or ops.config.operations.default_push_branch
    console.print(f"[green]✓[/green] Pushed {pushed} to {ops.config.operations.default_remote}")


@cli.command()
@click.argument("source")
@click.argument("target")
@click.pass_context
def merge(ctx: click.Context, source: str, target: str) -> None:
    """Check out TARGET and merge SOURCE into it."""
    try:
        outcome = _ops(ctx).merge_branch(source, target)
    except RepodeskError as e:
        _fail(e)

    kind = "fast-forward" if outcome.fast_forward else "merge"
    console.print(f"[green]✓[/green] Merged {source} into {target} ({kind})")


@cli.command("abort-merge")
@click.pass_context
def abort_merge(ctx: click.Context) -> None:
    """Abort an in-progress merge."""
    try:
        _ops(ctx).abort_merge()
    except RepodeskError as e:
        _fail(e)
    console.print("[green]✓[/green] Merge aborted")


if __name__ == "__main__":
    cli()
