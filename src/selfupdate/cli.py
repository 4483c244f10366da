"""CLI entry point for selfupdate."""

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from selfupdate import __version__
from selfupdate.core.config import Config
from selfupdate.core.errors import SelfUpdateError
from selfupdate.core.github import parse_repo_spec
from selfupdate.core.log import enable_log
from selfupdate.core.updater import Updater
from selfupdate.core.validate import SHA256Validator
from selfupdate.core.version import parse_version
from selfupdate.models.release import Release

console = Console()


def make_updater(filters: tuple[str, ...], sha256: bool) -> Updater:
    """Build an updater from the environment plus command line options."""
    config = Config.from_environment()
    changes = {}
    if filters:
        changes["filters"] = filters
    if sha256:
        changes["validator"] = SHA256Validator()
    if changes:
        config = config.with_options(**changes)
    return Updater(config)


def parse_slug(spec: str) -> tuple[str, str]:
    try:
        return parse_repo_spec(spec)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)


def show_release(release: Release) -> None:
    lines = [
        f"[bold]Version:[/bold] {release.version}",
        f"[bold]Name:[/bold] {escape(release.name)}",
        f"[bold]Asset:[/bold] {escape(release.asset_name)} ({release.asset_byte_size / (1024 * 1024):.1f} MB)",
        f"[bold]Download:[/bold] {escape(release.asset_url)}",
        f"[bold]URL:[/bold] {escape(release.url)}",
    ]
    if release.published_at:
        lines.append(f"[bold]Published:[/bold] {release.published_at.strftime('%Y-%m-%d %H:%M')}")
    if release.validation_asset_id is not None:
        lines.append(f"[bold]Validation asset:[/bold] {release.validation_asset_id}")
    console.print(Panel("\n".join(lines), title=f"[green]{escape(release.slug)}[/green]"))


filter_option = click.option(
    "--filter", "filters", multiple=True, help="Regular expression an asset name must match"
)
sha256_option = click.option(
    "--sha256", is_flag=True, help="Require and check a .sha256 file next to the asset"
)


@click.group()
@click.version_option(version=__version__, prog_name="selfupdate")
@click.option("--verbose", is_flag=True, help="Show what the updater is doing")
def main(verbose: bool):
    """Selfupdate - update executables from GitHub releases.

    Examples:

        selfupdate detect junegunn/fzf

        selfupdate detect BurntSushi/ripgrep --version 14.0.0

        selfupdate update ./bin/fzf 0.40.0 junegunn/fzf
    """
    if verbose:
        enable_log()


@main.command()
@click.argument("slug")
@click.option("--version", "-v", "version_tag", default="", help="Exact release tag to detect")
@filter_option
@sha256_option
def detect(slug: str, version_tag: str, filters: tuple[str, ...], sha256: bool):
    """Show the release that would be installed.

    SLUG is owner/repo or a GitHub URL.
    """
    owner, repo = parse_slug(slug)
    try:
        with make_updater(filters, sha256) as updater:
            release = updater.detect_version(owner, repo, version_tag)
    except SelfUpdateError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    show_release(release)


@main.command()
@click.argument("cmd_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("current")
@click.argument("slug")
@filter_option
@sha256_option
def update(cmd_path: str, current: str, slug: str, filters: tuple[str, ...], sha256: bool):
    """Update the executable CMD_PATH, currently at version CURRENT.

    SLUG is the repository releasing the executable.
    """
    owner, repo = parse_slug(slug)
    try:
        with make_updater(filters, sha256) as updater:
            latest = updater.update_command(cmd_path, current, owner, repo)
    except SelfUpdateError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    report(current, latest)


@main.command("self-update")
@click.option("--slug", required=True, help="Repository releasing this command, as owner/repo")
@sha256_option
def self_update(slug: str, sha256: bool):
    """Update selfupdate itself to the latest version."""
    owner, repo = parse_slug(slug)
    console.print(f"[blue]Current version:[/blue] {__version__}")
    try:
        with make_updater((), sha256) as updater:
            latest = updater.update_self(__version__, owner, repo)
    except SelfUpdateError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    report(__version__, latest)


def report(current: str, latest: Release) -> None:
    if latest.version <= parse_version(current):
        console.print(f"[green]Already up to date![/green] ({escape(current)})")
        return

    console.print(f"\n[green]✓[/green] Updated to version {latest.version}")
    if latest.release_notes:
        console.print(Panel(Text(latest.release_notes), title="Release notes"))


if __name__ == "__main__":
    main()
