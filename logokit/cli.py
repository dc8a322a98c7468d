"""Typer command-line interface for logokit."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape

from logokit import __app_name__, __version__
from logokit.core.cache import CacheStore
from logokit.core.catalog import CatalogClient, Logo
from logokit.core.config import (
    Config,
    config_exists,
    default_config,
    load_config,
    save_config,
)
from logokit.core.errors import (
    ConfigurationError,
    ExitCode,
    InstallAggregateError,
    LogokitError,
    ResolutionError,
)
from logokit.core.installer import STRATEGIES, BatchInstaller, install_logos
from logokit.core.logger import get_log_path, get_logger, setup_logging
from logokit.core.progress import RichProgressReporter
from logokit.core.transform import to_component_name

_log = get_logger("cli")

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name=__app_name__,
    help="Add logos from svgl.app to your project.",
    no_args_is_help=True,
    add_completion=False,
)


class State:
    def __init__(self) -> None:
        self.no_cache = False
        self.project_dir = Path.cwd()


def _state(ctx: typer.Context) -> State:
    if not isinstance(ctx.obj, State):
        ctx.obj = State()
    return ctx.obj


def build_catalog(no_cache: bool = False, use_cache: bool = True) -> CatalogClient:
    settings = Config()
    cache = CacheStore(enabled=use_cache and not no_cache)
    return CatalogClient(
        base_url=settings.get("api_base"),
        cache=cache,
        timeout=settings.get("request_timeout"),
        cache_ttl=settings.get("cache_ttl"),
    )


def _fail(error: LogokitError) -> typer.Exit:
    """Print ``error`` and return the Exit carrying its code."""
    if isinstance(error, ResolutionError):
        err_console.print(f"[red]✗[/red] {escape(str(error))}")
        for name in error.not_found:
            hints = error.suggestions.get(name) or []
            if hints:
                err_console.print(f"  [yellow]Did you mean?[/yellow] {', '.join(hints[:3])}")
        err_console.print("[dim]  Use 'logokit list' or 'logokit search <query>' to explore.[/dim]")
    elif isinstance(error, InstallAggregateError):
        err_console.print(f"[red]✗[/red] {len(error.failed)} of {len(error.outcomes)} installs failed")
        for outcome in error.failed:
            err_console.print(f"  [red]✗[/red] {outcome.name}: {escape(outcome.reason)}")
    else:
        err_console.print(f"[red]✗[/red] {escape(str(error))}")
        config_path = getattr(error, "config_path", None)
        if config_path:
            err_console.print(f"[dim]  {config_path}[/dim]")
    _log.debug("CLI: exiting with %s", error.exit_code)
    return typer.Exit(int(error.exit_code))


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{__app_name__} {__version__}")
        raise typer.Exit


@app.callback()
def main(
    ctx: typer.Context,
    no_cache: Annotated[bool, typer.Option("--no-cache", help="Disable caching for this command")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log debug output to stderr")] = False,
    config_dir: Annotated[
        Optional[Path], typer.Option("--config", "-C", help="Project directory holding logos.config.json")
    ] = None,
    version: Annotated[
        bool, typer.Option("--version", callback=version_callback, is_eager=True, help="Show version")
    ] = False,
) -> None:
    setup_logging(verbose=verbose)
    state = _state(ctx)
    state.no_cache = no_cache
    if config_dir is not None:
        state.project_dir = config_dir


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite an existing configuration")] = False,
) -> None:
    """Write logos.config.json with auto-detected defaults."""
    state = _state(ctx)
    if config_exists(state.project_dir) and not force:
        console.print("[yellow]⚠[/yellow] Configuration already exists. Use --force to overwrite.")
        return
    config = default_config(state.project_dir)
    console.print(f"[blue]ℹ[/blue] Detected framework: {config.framework}")
    console.print(f"[blue]ℹ[/blue] Detected TypeScript: {'Yes' if config.typescript else 'No'}")
    try:
        path = save_config(config, state.project_dir)
    except LogokitError as e:
        raise _fail(e) from e
    console.print(f"[green]✓[/green] Configuration saved to {path.name}")


@app.command()
def add(
    ctx: typer.Context,
    logos: Annotated[list[str], typer.Argument(help="Logo names to add")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite existing files")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be installed")] = False,
    silent: Annotated[bool, typer.Option("--silent", "-s", help="Minimal output")] = False,
    concurrency: Annotated[Optional[int], typer.Option("--concurrency", min=1)] = None,
    timeout: Annotated[Optional[float], typer.Option("--timeout", help="Per-logo timeout in seconds")] = None,
    strategy: Annotated[str, typer.Option("--strategy", help="pool or window")] = "pool",
) -> None:
    """Add logos to your project."""
    state = _state(ctx)
    settings = Config()
    if strategy not in STRATEGIES:
        raise typer.BadParameter(f"expected one of {', '.join(STRATEGIES)}", param_hint="--strategy")
    try:
        config = load_config(state.project_dir)
        catalog = build_catalog(state.no_cache, config.registry.cache)
        installer = BatchInstaller(
            catalog,
            config,
            config.resolve_output_dir(state.project_dir),
            reporter=RichProgressReporter(console=console),
            concurrency=concurrency or settings.get("concurrency"),
            job_timeout=timeout if timeout is not None else settings.get("job_timeout"),
            strategy=strategy,
        )
        report = install_logos(installer, logos, force=force, dry_run=dry_run, progress=not silent)
        report.raise_for_failures()
    except LogokitError as e:
        raise _fail(e) from e

    if report.dry_run:
        console.print("Dry run - would install:")
        for job in report.jobs:
            if job.error:
                console.print(f"  - {job.logo.title} [red]✗ {escape(job.error)}[/red]")
                continue
            targets = ", ".join(str(p) for p in job.destinations)
            console.print(f"  - {job.logo.title} → {targets}")
        return

    count = len(report.outcomes)
    console.print(f"[green]✓[/green] Successfully installed {count} logo{'' if count == 1 else 's'}")
    if silent:
        return
    for outcome in report.succeeded:
        console.print(f"[dim]  ✓ {outcome.name}[/dim]")
    first = report.jobs[0]
    if config.framework == "react" and config.format != "svg":
        component = to_component_name(first.logo.title)
        console.print("\n[dim]Usage:[/dim]")
        console.print(f"[cyan]  import {{ {component} }} from '{config.output_dir}/{first.destinations[-1].stem}'[/cyan]")
        console.print(f"[cyan]  <{component} size={{32}} />[/cyan]")
    else:
        console.print(f"[cyan]  Check your logos in: {config.output_dir}[/cyan]")


def _print_logo(logo: Logo, show_category: bool = False) -> None:
    variant = " [dim](light/dark)[/dim]" if logo.has_variants else ""
    category = f" [blue]\\[{', '.join(logo.categories)}][/blue]" if show_category else ""
    url = f" [dim]- {logo.url}[/dim]" if logo.url else ""
    console.print(f"  [green]✓[/green] [bold]{logo.title}[/bold]{category}{variant}{url}")


@app.command("list")
def list_logos(
    ctx: typer.Context,
    category: Annotated[Optional[str], typer.Option("--category", "-c", help="Filter by category")] = None,
    search: Annotated[Optional[str], typer.Option("--search", "-s", help="Search logos by name")] = None,
    limit: Annotated[int, typer.Option("--limit", min=1, help="Limit number of results")] = 50,
) -> None:
    """List available logos."""
    catalog = build_catalog(_state(ctx).no_cache)
    try:
        if search:
            logos = catalog.search_logos(search)
            console.print(f"Found {len(logos)} logos matching \"{search}\"")
        elif category:
            logos = catalog.get_logos_by_category(category)
            console.print(f"Found {len(logos)} logos in category \"{category}\"")
        else:
            logos = catalog.get_all_logos()
            categories = sorted(catalog.get_categories(), key=lambda c: c.total, reverse=True)
            console.print(f"Showing {min(len(logos), limit)} of {len(logos)} available logos")
            console.print("\n[blue]Categories:[/blue]")
            for cat in categories[:10]:
                console.print(f"[dim]  {cat.category} ({cat.total})[/dim]")
            if len(categories) > 10:
                console.print(f"[dim]  ... and {len(categories) - 10} more[/dim]")
    except LogokitError as e:
        raise _fail(e) from e

    if not logos:
        console.print("[yellow]⚠[/yellow] No logos found.")
        return

    grouped: dict[str, list[Logo]] = {}
    for logo in logos[:limit]:
        grouped.setdefault(", ".join(logo.categories) or "Other", []).append(logo)
    for name, group in grouped.items():
        if not category and not search:
            console.print(f"\n[bold cyan]{name}[/bold cyan]:")
        for logo in group:
            _print_logo(logo)
    if len(logos) > limit:
        console.print(f"[dim]\n... and {len(logos) - limit} more logos[/dim]")


@app.command()
def search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Search query")],
) -> None:
    """Search for logos by name."""
    if not query.strip():
        err_console.print("[red]✗[/red] Please provide a search query.")
        raise typer.Exit(int(ExitCode.GENERAL_ERROR))
    catalog = build_catalog(_state(ctx).no_cache)
    try:
        logos = catalog.search_logos(query)
    except LogokitError as e:
        raise _fail(e) from e
    if not logos:
        console.print(f"No logos found for \"{query}\"")
        return
    console.print(f"Found {len(logos)} logo{'' if len(logos) == 1 else 's'} matching \"{query}\"")
    for logo in logos:
        _print_logo(logo, show_category=True)


def _format_ms(ms: int) -> str:
    try:
        return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")
    except (ValueError, OSError, OverflowError):
        return str(ms)


@app.command()
def cache(
    clear: Annotated[bool, typer.Option("--clear", help="Clear all cached data")] = False,
    stats: Annotated[bool, typer.Option("--stats", help="Show cache statistics")] = False,
) -> None:
    """Manage the local catalog cache."""
    store = CacheStore()
    if clear:
        result = store.clear()
        if not result:
            err_console.print(f"[red]✗[/red] Failed to clear cache: {result.reason}")
            raise typer.Exit(int(ExitCode.GENERAL_ERROR))
        console.print("[green]✓[/green] Cache cleared successfully")
        return
    if stats:
        info = store.stats()
        console.print("Cache Statistics:")
        console.print(f"  Entries: {info.entries}")
        console.print(f"  Total Size: {info.total_size / 1024:.2f} KB")
        if info.oldest_entry is not None and info.newest_entry is not None:
            console.print(f"  Oldest Entry: {_format_ms(info.oldest_entry)}")
            console.print(f"  Newest Entry: {_format_ms(info.newest_entry)}")
        console.print(f"  Log File: {get_log_path()}", soft_wrap=True)
        return
    console.print("Cache Management Commands:")
    console.print("[cyan]  logokit cache --stats    Show cache statistics[/cyan]")
    console.print("[cyan]  logokit cache --clear    Clear all cached data[/cyan]")


@app.command("settings")
def settings_command(
    key: Annotated[Optional[str], typer.Argument(help="Setting to show or change")] = None,
    value: Annotated[Optional[str], typer.Argument(help="New value for KEY")] = None,
    reset: Annotated[bool, typer.Option("--reset", help="Restore every default")] = False,
) -> None:
    """Show or change per-user settings (concurrency, timeouts, cache TTL, API URL)."""
    settings = Config()
    try:
        if reset:
            settings.reset()
            console.print("[green]✓[/green] Settings restored to defaults")
            return
        if key is not None and key not in settings.keys():
            raise ConfigurationError(
                f"Unknown setting {key!r}; expected one of {', '.join(settings.keys())}"
            )
        if key is not None and value is not None:
            settings.set(key, value)
            console.print(f"[green]✓[/green] {key} = {settings.get(key)}")
            return
    except LogokitError as e:
        raise _fail(e) from e

    shown = settings.items() if key is None else {key: settings.get(key)}
    for name, current in shown.items():
        console.print(f"  [bold]{name}[/bold]: {current}")
