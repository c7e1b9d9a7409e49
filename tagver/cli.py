"""
tagver.cli — Command-line interface.

Usage:
    tagver semver              Print the current semantic version
    tagver tags                List tags, most recent first
    tagver log [REVISION]      Show the commits reachable from a revision
    tagver remote [NAME]       Show the domain and path of a git remote
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tagver import __version__
from tagver.core.errors import TagverError
from tagver.core.models import format_rfc3339

console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
        datefmt="%H:%M:%S",
    )


def _get_repository(ctx: click.Context):
    from tagver.vcs.repository import GitRepository
    opts = ctx.obj
    return GitRepository.open(opts["path"], git_timeout=opts["timeout"])


def _fail(exc: TagverError) -> NoReturn:
    err_console.print(f"[red]✗ {exc.kind}[/red] {escape(str(exc))}")
    sys.exit(int(exc.exit_code))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "-C", "--path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Run as if started in this directory.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Timeout for each git call, in seconds.",
)
@click.version_option(__version__, prog_name="tagver")
@click.pass_context
def main(ctx: click.Context, verbose: bool, path: Path | None, timeout: float | None) -> None:
    """tagver — semantic versions derived from git history."""
    _setup_logging(verbose)
    ctx.obj = {"verbose": verbose, "path": path, "timeout": timeout}


# ---------------------------------------------------------------------------
# semver
# ---------------------------------------------------------------------------

@main.command()
@click.option("-r", "--revision", default=None, help="Revision to version (default: HEAD).")
@click.pass_context
def semver(ctx: click.Context, revision: str | None) -> None:
    """Print the current semantic version."""
    from tagver.operations.resolver import resolve_detailed
    try:
        repo = _get_repository(ctx)
        result = resolve_detailed(repo, revision or repo.config.revision)
    except TagverError as exc:
        _fail(exc)

    if ctx.obj["verbose"]:
        table = Table(title="Version Resolution")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Branch", result.branch or "—")
        table.add_row("HEAD", result.head_hash[:12] or "—")
        table.add_row("Working tree", "clean" if result.is_clean else "dirty")
        table.add_row("Anchor tag", result.anchor.name if result.anchor else "—")
        table.add_row("Commits ahead", str(result.ahead))
        err_console.print(table)

    # Plain output so scripts can capture it.
    click.echo(str(result.version))


# ---------------------------------------------------------------------------
# tags
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def tags(ctx: click.Context) -> None:
    """List tags, most recent first."""
    from tagver.core.semver import SemVer
    try:
        tag_list = _get_repository(ctx).tags()
    except TagverError as exc:
        _fail(exc)

    table = Table(title="Tags")
    table.add_column("Name", style="cyan")
    table.add_column("Type", width=11)
    table.add_column("Commit", style="yellow", width=7)
    table.add_column("Date", style="dim")
    table.add_column("Semver", width=6)
    for t in tag_list:
        table.add_row(
            t.name,
            t.kind.value,
            t.commit.short_hash,
            format_rfc3339(t.commit.committer.timestamp),
            "●" if SemVer.parse(t.name) else "",
        )
    console.print(table)


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------

@main.command()
@click.argument("revision", default="HEAD")
@click.option("-n", "--limit", default=20, type=int, help="Max commits to show.")
@click.pass_context
def log(ctx: click.Context, revision: str, limit: int) -> None:
    """Show the commits reachable from a revision."""
    try:
        commits = _get_repository(ctx).ancestry_of(revision)
    except TagverError as exc:
        _fail(exc)

    table = Table(title=f"Commits — {revision} ({len(commits)} reachable)")
    table.add_column("Hash", style="yellow", width=7)
    table.add_column("Committed", style="dim")
    table.add_column("Author", style="cyan")
    table.add_column("Message")
    for c in commits[:limit]:
        table.add_row(
            c.short_hash,
            format_rfc3339(c.committer.timestamp),
            c.author.name,
            c.short_message[:60],
        )
    console.print(table)


# ---------------------------------------------------------------------------
# remote
# ---------------------------------------------------------------------------

@main.command()
@click.argument("name", required=False)
@click.pass_context
def remote(ctx: click.Context, name: str | None) -> None:
    """Show the domain and path of a git remote (default: origin)."""
    try:
        domain, path = _get_repository(ctx).remote(name)
    except TagverError as exc:
        _fail(exc)
    click.echo(f"{domain} {path}")


if __name__ == "__main__":
    main()
