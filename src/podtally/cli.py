"""CLI entry point for Podtally."""

import asyncio
import json
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from podtally.config.logging import setup_logging
from podtally.config.manager import ConfigManager
from podtally.config.schema import GlobalConfig, NumberingStrategy, ShowConfig
from podtally.episodes.freshness import evaluate_freshness
from podtally.episodes.resolver import resolve_with_report
from podtally.feeds.fetcher import FeedFetcher
from podtally.storage.store import EpisodeStore
from podtally.sync import SyncService, SyncSummary
from podtally.utils.datetime import to_local
from podtally.utils.errors import (
    ConfigError,
    FeedUnavailableError,
    PodtallyError,
    ShowNotFoundError,
)
from podtally.utils.text import truncate_text

app = typer.Typer(
    name="podtally",
    help="Track weekly episode releases across podcast and YouTube feeds",
    no_args_is_help=True,
)
console = Console()


def _format_date(value) -> str:
    return to_local(value).strftime("%Y-%m-%d %H:%M")


def _open_store(ctx: typer.Context, manager: ConfigManager, config: GlobalConfig) -> EpisodeStore:
    """Open the episode store, honouring --database over the config file."""
    override = (ctx.obj or {}).get("database")
    path = override if override is not None else manager.database_path(config)
    return EpisodeStore(path)


def _select_shows(manager: ConfigManager, show_ids: list[str] | None) -> dict[str, ShowConfig]:
    if not show_ids:
        return manager.list_shows()
    return {show_id: manager.get_show(show_id) for show_id in show_ids}


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file"
    ),
    database: Path | None = typer.Option(
        None,
        "--database",
        envvar="PODTALLY_DATABASE",
        help="Episode database path (overrides config)",
    ),
) -> None:
    """Podtally - did my shows release this week?"""
    level = "INFO"
    try:
        level = ConfigManager().load_config().log_level
    except ConfigError:
        # Reported by the command that actually needs the config
        pass

    setup_logging(verbose=verbose, log_file=log_file, level=level)
    ctx.obj = {"database": database}


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from podtally import __version__

    console.print(f"[bold cyan]Podtally[/bold cyan] v{__version__}")


@app.command("add")
def add_show(
    locator: str = typer.Argument(..., help="RSS URL, YouTube channel ID or local feed file"),
    name: str = typer.Option(..., "--name", "-n", help="Display name"),
    weekday: str = typer.Option(..., "--weekday", "-w", help="Scheduled release weekday"),
    kind: str = typer.Option("rss", "--kind", "-k", help="Source kind: rss or youtube"),
    strategy: NumberingStrategy = typer.Option(
        NumberingStrategy.GENERIC, "--strategy", "-s", help="Episode numbering convention"
    ),
    marker: str | None = typer.Option(
        None, "--marker", help="Number marker for trailing_hash or decimal_bonus (default '#')"
    ),
    prefix: str | None = typer.Option(
        None, "--prefix", help="Title prefix for named_prefix (default: name)"
    ),
    link: str | None = typer.Option(None, "--link", help="Public page of the show"),
    show_id: str | None = typer.Option(
        None, "--id", help="Explicit identifier (generated from the name otherwise)"
    ),
    collapse_same_day: bool = typer.Option(
        False, "--collapse-same-day", help="Keep only one episode per publish date"
    ),
) -> None:
    """Add a show to track.

    Examples:
        podtally add https://anchor.fm/s/ea5b58fc/podcast/rss --name "Zé Carioca" \\
            --weekday monday --strategy leading_colon

        podtally add UCxxxxxxxx --kind youtube --name "My Channel" --weekday friday
    """
    try:
        manager = ConfigManager()
        show = ShowConfig(
            name=name,
            weekday=weekday,
            kind=kind,
            locator=locator,
            strategy=strategy,
            marker=marker,
            prefix=prefix,
            link=link,
            collapse_same_day=collapse_same_day,
        )
        new_id = manager.add_show(show, show_id=show_id)

        console.print(
            f"[green]✓[/green] Show '[bold]{show.name}[/bold]' added as [cyan]{new_id}[/cyan]"
        )

    except ValidationError as e:
        console.print("[red]✗[/red] Invalid show configuration:")
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]) or "show"
            console.print(f"  • {field}: {error['msg']}")
        sys.exit(1)
    except PodtallyError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)


@app.command("list")
def list_shows() -> None:
    """List all tracked shows."""
    try:
        manager = ConfigManager()
        shows = manager.list_shows()

        if not shows:
            console.print("[yellow]No shows configured yet.[/yellow]")
            console.print(
                "\nAdd a show: [cyan]podtally add <feed> --name <name> --weekday <day>[/cyan]"
            )
            return

        table = Table(title="[bold]Tracked Shows[/bold]")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="bold")
        table.add_column("Day", style="green")
        table.add_column("Kind", style="yellow")
        table.add_column("Numbering", style="magenta")
        table.add_column("Source", style="blue")

        for show_id, show in shows.items():
            table.add_row(
                show_id,
                show.name,
                show.weekday,
                show.kind,
                show.strategy.value,
                truncate_text(show.locator, 40),
            )

        console.print(table)
        console.print(f"\n[dim]Total: {len(shows)} show(s)[/dim]")

    except PodtallyError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)


@app.command("remove")
def remove_show(
    ctx: typer.Context,
    show_id: str = typer.Argument(..., help="Show identifier"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
    purge: bool = typer.Option(
        False, "--purge", help="Also delete the show's stored episodes"
    ),
) -> None:
    """Stop tracking a show.

    Examples:
        podtally remove cubinho

        podtally remove cubinho --force --purge
    """
    try:
        manager = ConfigManager()

        try:
            show = manager.get_show(show_id)
        except ShowNotFoundError:
            console.print(f"[red]✗[/red] Show '[bold]{show_id}[/bold]' not found")
            console.print("\nAvailable shows:")
            for known in manager.list_shows():
                console.print(f"  • {known}")
            sys.exit(1)

        if not force:
            console.print(f"\nShow:   [bold]{show.name}[/bold]")
            console.print(f"Source: [dim]{show.locator}[/dim]")
            confirm: bool = typer.confirm("\nAre you sure you want to remove this show?")
            if not confirm:
                console.print("[yellow]Cancelled[/yellow]")
                return

        manager.remove_show(show_id)
        console.print(f"[green]✓[/green] Show '[bold]{show_id}[/bold]' removed")

        if purge:
            store = _open_store(ctx, manager, manager.load_config())
            deleted = store.delete_show(show_id)
            console.print(f"[dim]  Deleted {deleted} stored episode(s)[/dim]")

    except PodtallyError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)


@app.command("update-source")
def update_source(
    show_id: str = typer.Argument(..., help="Show identifier"),
    locator: str = typer.Argument(..., help="New RSS URL, channel ID or feed file"),
) -> None:
    """Correct the feed location of a show (its only mutable attribute)."""
    try:
        manager = ConfigManager()
        show = manager.update_source(show_id, locator)
        console.print(
            f"[green]✓[/green] Source of '[bold]{show_id}[/bold]' set to [blue]{show.locator}[/blue]"
        )
    except ValidationError as e:
        console.print(f"[red]✗[/red] Invalid source: {e.errors()[0]['msg']}")
        sys.exit(1)
    except PodtallyError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)


@app.command("status")
def status_command(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print machine-readable JSON"),
) -> None:
    """Show which shows have released an episode this week.

    The week starts on Sunday at local midnight. Shows without stored
    episodes are judged by their scheduled weekday (marked "schedule").
    """
    try:
        manager = ConfigManager()
        config = manager.load_config()
        shows = manager.list_shows()
        latest = _open_store(ctx, manager, config).latest_per_show()

        rows = []
        for show_id, show in shows.items():
            result = evaluate_freshness(show, latest.get(show_id))
            episode = result.episode
            rows.append(
                {
                    "id": show_id,
                    "name": show.name,
                    "weekday": show.weekday,
                    "released": result.released,
                    "basis": result.basis,
                    "week_start": result.week_start.isoformat(),
                    "episode": (
                        {
                            "number": episode.number_text,
                            "title": episode.title,
                            "published": to_local(episode.published).isoformat(),
                        }
                        if episode is not None
                        else None
                    ),
                    "link": show.link,
                }
            )

        if as_json:
            typer.echo(json.dumps(rows, ensure_ascii=False, indent=2))
            return

        table = Table(title="[bold]This Week[/bold]")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Day", style="green")
        table.add_column("Out", justify="center")
        table.add_column("Latest", style="white")
        table.add_column("Published", style="dim")

        for row in rows:
            mark = "[green]✓[/green]" if row["released"] else "[red]✗[/red]"
            if row["basis"] == "schedule":
                mark += "[dim]*[/dim]"
            episode = row["episode"]
            table.add_row(
                row["id"],
                row["weekday"],
                mark,
                f"#{episode['number']} {truncate_text(episode['title'], 40)}" if episode else "—",
                _format_date(latest[row["id"]].published) if episode else "—",
            )

        console.print(table)
        if any(row["basis"] == "schedule" for row in rows):
            console.print("[dim]* no stored episodes; judged by scheduled weekday[/dim]")

    except PodtallyError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)


@app.command("episodes")
def episodes_command(
    ctx: typer.Context,
    show_id: str = typer.Argument(..., help="Show identifier"),
    limit: int = typer.Option(20, "--limit", "-l", min=1, help="Number of most recent episodes"),
) -> None:
    """List stored episodes of a show, newest last."""
    try:
        manager = ConfigManager()
        show = manager.get_show(show_id)
        episodes = _open_store(ctx, manager, manager.load_config()).list_episodes(show_id)

        if not episodes:
            console.print(f"[yellow]No stored episodes for {show.name}.[/yellow]")
            console.print(f"\nImport them: [cyan]podtally backfill --show {show_id}[/cyan]")
            return

        table = Table(title=f"[bold]{show.name}[/bold]")
        table.add_column("#", style="cyan", justify="right", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Published", style="dim")

        for episode in episodes[-limit:]:
            table.add_row(episode.number_text, episode.title, _format_date(episode.published))

        console.print(table)
        console.print(f"\n[dim]Showing {min(limit, len(episodes))} of {len(episodes)}[/dim]")

    except PodtallyError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)


def _print_summary(summary: SyncSummary) -> None:
    table = Table(show_header=True, box=None)
    table.add_column("Show", style="cyan", no_wrap=True)
    table.add_column("Result")
    table.add_column("Entries", justify="right", style="dim")
    table.add_column("Episodes", justify="right", style="dim")

    for result in summary.results:
        if result.failed:
            outcome = "[red]failed[/red]"
        elif result.up_to_date:
            outcome = "[dim]up to date[/dim]"
        elif result.inserted:
            outcome = f"[green]+{result.inserted} new[/green]"
        else:
            outcome = "no new episodes"
        table.add_row(result.show_id, outcome, str(result.fetched), str(result.resolved))

    console.print(table)

    for result in summary.failures:
        console.print(f"[red]✗[/red] {result.show_id}: {result.error}")

    console.print(f"\n[dim]{summary.inserted} new episode(s) stored[/dim]")


def _run_sync(ctx: typer.Context, show_ids: list[str] | None, full: bool) -> None:
    try:
        manager = ConfigManager()
        config = manager.load_config()
        shows = _select_shows(manager, show_ids)
        store = _open_store(ctx, manager, config)
    except PodtallyError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    if not shows:
        console.print("[yellow]No shows configured yet.[/yellow]")
        return

    async def run() -> SyncSummary:
        async with FeedFetcher(config.fetch) as fetcher:
            service = SyncService(store, fetcher, max_concurrency=config.fetch.max_concurrency)
            if full:
                return await service.backfill(shows)
            return await service.sync_all(shows)

    try:
        summary = asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(130)
    except PodtallyError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)

    _print_summary(summary)

    if summary.all_failed:
        sys.exit(1)


@app.command("sync")
def sync_command(
    ctx: typer.Context,
    show: list[str] | None = typer.Option(
        None, "--show", "-s", help="Only sync these show IDs (repeatable)"
    ),
) -> None:
    """Fetch new episodes for shows that haven't released this week yet.

    Shows whose latest stored episode is from the current week are skipped.
    Exits non-zero only when every show failed.
    """
    _run_sync(ctx, show, full=False)


@app.command("backfill")
def backfill_command(
    ctx: typer.Context,
    show: list[str] | None = typer.Option(
        None, "--show", "-s", help="Only backfill these show IDs (repeatable)"
    ),
) -> None:
    """Import the full feed history of shows, skipping known episodes."""
    _run_sync(ctx, show, full=True)


@app.command("resolve")
def resolve_command(
    show_id: str = typer.Argument(..., help="Show identifier"),
    limit: int = typer.Option(10, "--limit", "-l", min=1, help="Number of episodes to show"),
) -> None:
    """Fetch a show's feed and show how its titles resolve (nothing is stored)."""
    try:
        manager = ConfigManager()
        config = manager.load_config()
        show = manager.get_show(show_id)
    except PodtallyError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    async def fetch():
        async with FeedFetcher(config.fetch) as fetcher:
            return await fetcher.fetch(show.locator, show.kind)

    try:
        entries = asyncio.run(fetch())
    except FeedUnavailableError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    report = resolve_with_report(show, entries)

    table = Table(title=f"[bold]{show.name}[/bold] ({show.strategy.value})")
    table.add_column("#", style="cyan", justify="right", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Published", style="dim")
    for episode in report.episodes[-limit:]:
        table.add_row(episode.number_text, episode.title, _format_date(episode.published))
    console.print(table)

    console.print(
        f"\n[dim]{report.total_entries} entries → {len(report.episodes)} episodes "
        f"({report.dropped} dropped, {report.positional} positional, "
        f"{report.duplicates} duplicate)[/dim]"
    )


def _set_config_value(config: GlobalConfig, key: str, value: str) -> GlobalConfig:
    """Return a validated copy of ``config`` with a dotted key replaced."""
    data = config.model_dump(mode="json")
    parts = key.split(".")
    target = data
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            raise KeyError(key)
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(key)
    target[parts[-1]] = None if value.lower() in ("none", "null", "") else value
    return GlobalConfig.model_validate(data)


@app.command("config")
def config_command(
    ctx: typer.Context,
    action: str = typer.Argument(..., help="Action: show or set <key> <value>"),
    key: str | None = typer.Argument(None, help="Config key (for 'set'), e.g. fetch.timeout_seconds"),
    value: str | None = typer.Argument(None, help="Config value (for 'set')"),
) -> None:
    """Manage Podtally configuration.

    Examples:
        podtally config show

        podtally config set log_level DEBUG

        podtally config set fetch.max_concurrency 3
    """
    try:
        manager = ConfigManager()

        if action == "show":
            config = manager.load_config()
            override = (ctx.obj or {}).get("database")

            console.print("\n[bold]Podtally Configuration[/bold]\n")

            table = Table(show_header=False, box=None)
            table.add_column("Key", style="cyan")
            table.add_column("Value", style="white")

            table.add_row("Config file", str(manager.config_file))
            table.add_row("Shows file", str(manager.shows_file))
            table.add_row("Database", str(override or manager.database_path(config)))
            table.add_row("", "")
            table.add_row("Log level", config.log_level)
            table.add_row("Fetch timeout", f"{config.fetch.timeout_seconds:g}s")
            table.add_row("Fetch attempts", str(config.fetch.max_attempts))
            table.add_row("Concurrency", str(config.fetch.max_concurrency))

            console.print(table)

        elif action == "set":
            if not key or value is None:
                console.print("[red]✗[/red] Usage: podtally config set <key> <value>")
                sys.exit(1)

            config = manager.load_config()
            try:
                updated = _set_config_value(config, key, value)
            except KeyError:
                console.print(f"[red]✗[/red] Unknown config key: {key}")
                console.print("\nAvailable keys:")
                for field_name, field_value in config.model_dump().items():
                    if isinstance(field_value, dict):
                        for sub_name in field_value:
                            console.print(f"  • {field_name}.{sub_name}")
                    else:
                        console.print(f"  • {field_name}")
                sys.exit(1)
            except ValidationError as e:
                console.print(f"[red]✗[/red] Invalid value for {key}: {e.errors()[0]['msg']}")
                sys.exit(1)

            manager.save_config(updated)
            console.print(
                f"[green]✓[/green] Set [cyan]{key}[/cyan] = [yellow]{value}[/yellow]"
            )

        else:
            console.print(f"[red]✗[/red] Unknown action: {action}")
            console.print("Valid actions: show, set")
            sys.exit(1)

    except PodtallyError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    app()
