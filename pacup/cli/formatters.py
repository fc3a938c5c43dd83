"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pacup.models.config import PacupConfig
from pacup.models.srcinfo import Architecture, Package
from pacup.models.stats import FetchStats
from pacup.utils.formatting import format_duration, format_size, short_digest


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "MalformedLineError": [
            "• Attribute lines must have the form 'key = value'.",
            "• Regenerate the .SRCINFO from the pacscript.",
        ],
        "UnknownAttributeNameError": [
            "• Checksum keys must be one of b2sums, md5sums, sha1sums, sha224sums,"
            " sha256sums, sha384sums or sha512sums.",
        ],
        "UnknownQualifierError": [
            "• Qualifiers must be a known distribution (e.g. 'jammy', 'bookworm')"
            " and/or architecture (e.g. 'amd64', 'x86_64').",
        ],
        "DuplicateAttributeError": [
            "• A manifest must declare pkgbase and pkgver exactly once.",
        ],
        "MissingRequiredAttributeError": [
            "• A manifest must declare pkgbase and pkgver exactly once.",
            "• Check that the path points at a .SRCINFO file.",
        ],
        "MalformedRepologyEntryError": [
            "• Repology entries must have the form 'key: value'.",
        ],
        "HashMismatchError": [
            "• The upstream file may have changed; update the checksum.",
            "• The download may be corrupted; try again.",
        ],
        "TransportError": [
            "• A network connection issue occurred.",
            "• Check that the source URL is still valid.",
            "• Increase `max_attempts` in the configuration to retry more.",
        ],
        "FilesystemError": [
            "• Check that the output directory exists and is writable.",
        ],
        "ConfigurationError": [
            "• Run `pacup validate` to see the offending setting.",
            "• Run `pacup init --force` to regenerate the configuration.",
        ],
        "FileNotFoundError": [
            "• Pass a .SRCINFO file or a directory containing one.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_package(package: Package, console: Console | None = None):
    """Displays a parsed package: metadata, repology info, and sources."""
    console = console or Console()

    info = Table(show_header=False, box=None, padding=(0, 2))
    info.add_column(style="bold cyan")
    info.add_column()
    info.add_row("Version:", f"[green]{escape(package.version)}[/green]")
    maintainers = "\n".join(escape(m) for m in package.maintainers)
    info.add_row("Maintainers:", maintainers or "[dim]none[/dim]")
    for key, value in package.repology.items():
        info.add_row(f"Repology {escape(key)}:", escape(value))

    sources = Table(title="Sources", title_justify="left", expand=True)
    sources.add_column("Destination", style="cyan")
    sources.add_column("Target", style="magenta")
    sources.add_column("Checksums")
    sources.add_column("URL", style="dim", overflow="fold")
    for source in package.sources:
        target = []
        if not source.distribution.is_all:
            target.append(str(source.distribution))
        if source.architecture is not Architecture.ALL:
            target.append(source.architecture.value)
        checksums = "\n".join(
            f"{h.algorithm.value}: {escape(short_digest(h.value))}"
            for h in source.hashes
        )
        sources.add_row(
            escape(str(source.destination)),
            "/".join(target) or "all",
            checksums or "[yellow]none[/yellow]",
            escape(source.url),
        )

    content = Table.grid(padding=(1, 0))
    content.add_row(info)
    if package.sources:
        content.add_row(sources)

    console.print(
        Panel(
            content,
            title=f"[bold]{escape(package.base)}[/bold]",
            border_style="cyan",
        )
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = "\n".join(
        f"{key} = {escape(str(value))}" for key, value in config_data.items()
    )
    console.print(
        Panel(
            content,
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: PacupConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Max Workers:", str(config.max_workers))
    table.add_row("Max Attempts:", str(config.max_attempts))
    table.add_row("Chunk Size:", format_size(config.chunk_size))
    table.add_row("Write Mode:", config.write_mode)
    table.add_row(
        "Cleanup Partial:", "✓ Enabled" if config.cleanup_partial else "✗ Disabled"
    )
    table.add_row("Output Directory:", f"[dim]{escape(config.output_dir)}[/dim]")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_summary_panel(stats: FetchStats, duration: float):
    """Displays the final summary of a fetch session."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(justify="right")

    if stats.dry_run:
        table.add_row("Sources Planned:", f"[cyan]{stats.sources_total}[/cyan]")
    else:
        table.add_row("Downloaded:", f"[green]{stats.sources_downloaded}[/green]")
        table.add_row("Failed:", f"[red]{stats.sources_failed}[/red]")
        if stats.hash_mismatches:
            table.add_row("Checksum Mismatches:", f"[red]{stats.hash_mismatches}[/red]")
        if stats.unverified:
            table.add_row("Unverified:", f"[yellow]{stats.unverified}[/yellow]")
        if stats.retries:
            table.add_row("Retries:", str(stats.retries))
        table.add_row("Total Size:", format_size(stats.total_size_downloaded))
    table.add_row("Duration:", format_duration(duration))

    for name, error in stats.failures:
        table.add_row(f"[red]✗ {escape(name)}[/red]", f"[dim]{escape(error)}[/dim]")

    ok = stats.ok
    console.print(
        Panel(
            table,
            title="[bold green]✓ Fetch Complete[/bold green]"
            if ok
            else "[bold red]✗ Fetch Finished With Errors[/bold red]",
            border_style="green" if ok else "red",
            expand=False,
        )
    )
