"""
Manages a Rich Live display for concurrent source downloads.
Shows overall progress, active downloads, and session statistics.
"""

import asyncio
from datetime import datetime

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)
from rich.table import Table
from rich.text import Text


class ProgressManager:
    """Tracks per-source download progress and renders it with Rich."""

    def __init__(self, console: Console, dry_run: bool = False):
        self.console = console
        self.dry_run = dry_run

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=False,
        )

        self.overall_progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=console,
        )

        self._live: Live | None = None

        self._stats = {
            "total_sources": 0,
            "completed": 0,
            "failed": 0,
            "active_downloads": 0,
            "start_time": None,
        }

        self._overall_task_id: TaskID | None = None
        self._active_tasks: dict[TaskID, str] = {}

    def _generate_stats_panel(self) -> Panel:
        stats_table = Table.grid(padding=(0, 2))
        stats_table.add_column(style="bold cyan", justify="right")
        stats_table.add_column(style="white")
        stats_table.add_column(style="bold cyan", justify="right")
        stats_table.add_column(style="white")
        remaining = (
            self._stats["total_sources"] - self._stats["completed"] - self._stats["failed"]
        )
        stats_table.add_row(
            "Downloaded:",
            f"[green]{self._stats['completed']}[/green]",
            "Failed:",
            f"[red]{self._stats['failed']}[/red]",
        )
        stats_table.add_row(
            "Active:",
            f"[cyan]{self._stats['active_downloads']}[/cyan]",
            "Remaining:",
            f"[cyan]{remaining}[/cyan]",
        )
        combined = Table.grid()
        combined.add_row(stats_table)
        if self._overall_task_id is not None:
            combined.add_row("")
            combined.add_row(self.overall_progress)
        return Panel(
            combined, title="[bold]📊 Fetch Statistics[/bold]", border_style="blue"
        )

    def _generate_progress_panel(self) -> Panel:
        if not self._active_tasks:
            return Panel(
                Text(
                    "Waiting for downloads to start...",
                    style="dim italic",
                    justify="center",
                ),
                title="[bold]📥 Active Downloads[/bold]",
                border_style="green",
            )
        return Panel(
            self.progress,
            title=f"[bold]📥 Active Downloads ({len(self._active_tasks)})[/bold]",
            border_style="green",
        )

    def _render(self) -> Group:
        return Group(self._generate_stats_panel(), self._generate_progress_panel())

    def _update_display(self):
        if self.dry_run or not self._live:
            return
        self._live.update(self._render())

    def _update_overall(self):
        if self._overall_task_id is not None:
            self.overall_progress.update(
                self._overall_task_id,
                completed=self._stats["completed"] + self._stats["failed"],
            )

    def initialize_session(self, total_sources: int):
        self._stats["total_sources"] = total_sources
        self._stats["start_time"] = datetime.now()
        if not self.dry_run:
            self._overall_task_id = self.overall_progress.add_task(
                "Overall Progress", total=total_sources, start=True
            )
        self._update_display()

    def add_source_task(self, description: str, total_size: int) -> TaskID | None:
        if self.dry_run:
            return None
        if len(description) > 45:
            description = "…" + description[-44:]
        task_id = self.progress.add_task(
            description, total=total_size or None, start=True
        )
        self._active_tasks[task_id] = description
        self._stats["active_downloads"] = len(self._active_tasks)
        self._update_display()
        return task_id

    def update_task_progress(self, task_id: TaskID | None, completed: int):
        if task_id is not None and not self.dry_run:
            self.progress.update(task_id, completed=completed)

    def update_task_total(self, task_id: TaskID | None, total: int):
        if task_id is not None and not self.dry_run:
            self.progress.update(task_id, total=total)

    def remove_task(self, task_id: TaskID | None, success: bool | None = True):
        """
        Removes a finished task. `success=None` marks an attempt that will be
        retried, so it is not counted as completed or failed.
        """
        if task_id is None or self.dry_run:
            return
        try:
            self.progress.remove_task(task_id)
        except KeyError:
            return
        self._active_tasks.pop(task_id, None)
        self._stats["active_downloads"] = len(self._active_tasks)
        if success is True:
            self._stats["completed"] += 1
        elif success is False:
            self._stats["failed"] += 1
        self._update_overall()
        self._update_display()

    async def __aenter__(self):
        if self.dry_run:
            return self
        self._live = Live(
            self._render(),
            console=self.console,
            refresh_per_second=12,
            vertical_overflow="visible",
        )
        self._live.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._live and not self.dry_run:
            await asyncio.sleep(0.2)
            self._live.stop()
            self._live = None
