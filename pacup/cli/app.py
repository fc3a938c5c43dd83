"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from pacup import __version__
from pacup.core.fetch_manager import FetchManager
from pacup.exceptions import PacupError
from pacup.fetch.downloader import close_connection_pool
from pacup.models.srcinfo import Architecture, Distribution
from pacup.srcinfo import parse
from pacup.storage.config_manager import ConfigManager
from pacup.utils.path import read_manifest

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_package,
    print_summary_panel,
    print_validation_table,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("pacup")

app = typer.Typer(
    name="pacup",
    help=(
        "Help maintainers update pacscripts: inspect .SRCINFO manifests and fetch"
        " their sources with checksum verification."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "pacup"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _parse_architecture(value: str | None) -> Architecture:
    if value is None:
        return Architecture.ALL
    arch = Architecture.from_token(value)
    if arch is None:
        raise typer.BadParameter(f"Unknown architecture: {value}")
    return arch


def _parse_distribution(value: str | None) -> Distribution:
    if value is None:
        return Distribution.ALL
    distro = Distribution.from_token(value)
    if distro is None:
        raise typer.BadParameter(f"Unknown distribution: {value}")
    return distro


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """pacup CLI"""
    if version:
        console.print(f"[bold]pacup[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose >= 2:
        log_level = "DEBUG"
    elif verbose == 1:
        log_level = "INFO"
    logging.getLogger("pacup").setLevel(log_level)

    if show_config:
        try:
            config = ConfigManager(CONFIG_FILE).load_config()
        except PacupError as e:
            console.print(format_error_with_suggestions(e))
            raise typer.Exit(code=1) from e
        print_config(CONFIG_FILE, config.model_dump(exclude={"config_path", "dry_run"}))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def info(
    paths: list[Path] = typer.Argument(  # noqa: B008
        ..., help="Paths to .SRCINFO files or package directories containing one."
    ),
):
    """Parse manifests and show what they declare."""
    failed = False
    for path in paths:
        try:
            package = parse(read_manifest(path))
        except (PacupError, OSError, UnicodeDecodeError) as e:
            console.print(format_error_with_suggestions(e, {"path": str(path)}))
            failed = True
            continue
        print_package(package, console)
    if failed:
        raise typer.Exit(code=1)


@app.command()
def fetch(
    path: Path = typer.Argument(  # noqa: B008
        ..., help="Path to a .SRCINFO file or a package directory containing one."
    ),
    output_dir: Path | None = typer.Option(  # noqa: B008
        None, "-o", "--output", help="Directory to save sources into."
    ),
    workers: int | None = typer.Option(
        None,
        "-w",
        "--workers",
        help="Number of simultaneous downloads (overrides config).",
    ),
    append: bool | None = typer.Option(
        None,
        "--append/--overwrite",
        help="Append to existing destination files instead of overwriting them.",
    ),
    arch: str | None = typer.Option(
        None, "--arch", help="Only fetch sources for this architecture."
    ),
    distro: str | None = typer.Option(
        None, "--distro", help="Only fetch sources for this distribution release."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show what would be downloaded without downloading."
    ),
):
    """Download a package's sources and verify their checksums."""
    architecture = _parse_architecture(arch)
    distribution = _parse_distribution(distro)

    cli_options = {
        key: value
        for key, value in {
            "output_dir": str(output_dir) if output_dir else None,
            "max_workers": workers,
            "dry_run": dry_run,
        }.items()
        if value is not None
    }
    if append is not None:
        cli_options["write_mode"] = "append" if append else "overwrite"
        if append:
            cli_options["cleanup_partial"] = False

    try:
        config = ConfigManager(CONFIG_FILE).load_config(cli_options)
        package = parse(read_manifest(path))
    except (PacupError, OSError, UnicodeDecodeError) as e:
        console.print(format_error_with_suggestions(e, {"path": str(path)}))
        raise typer.Exit(code=1) from e

    async def _fetch_async():
        async with ProgressManager(
            console=console, dry_run=config.dry_run
        ) as progress_manager:
            try:
                manager = FetchManager(config, progress_manager)
                return await manager.fetch_package(
                    package, architecture=architecture, distribution=distribution
                )
            finally:
                await close_connection_pool()

    console.print(
        f"[bold cyan]📦 Fetching sources for {package.base} {package.version}..."
        "[/bold cyan]"
    )
    start_time = time.monotonic()
    stats = asyncio.run(_fetch_async())
    print_summary_panel(stats, time.monotonic() - start_time)
    if not stats.ok:
        raise typer.Exit(code=1)


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Write a configuration file with default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()
    ConfigManager(CONFIG_FILE).save_new_config({})
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        print_validation_table(config)
    except PacupError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e
