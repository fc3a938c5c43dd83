"""
Fetches all sources of a parsed package, with a bounded number of concurrent
downloads, retry with backoff for transport failures, and cleanup of partial
files.
"""

import asyncio
import logging
from pathlib import Path

import aiohttp
from rich.markup import escape

from pacup.cli.progress_manager import ProgressManager
from pacup.exceptions import (
    DownloadError,
    FilesystemError,
    HashMismatchError,
    TransportError,
)
from pacup.fetch.downloader import (
    DownloadResult,
    SourceDownloader,
    WriteMode,
    get_connection_pool,
)
from pacup.models.config import PacupConfig
from pacup.models.srcinfo import Architecture, Distribution, Package, SourceEntry
from pacup.models.stats import FetchStats
from pacup.utils.path import create_dir, resolve_destination

log = logging.getLogger(__name__)


class FetchManager:
    """Orchestrates downloading every source of a package."""

    def __init__(
        self,
        config: PacupConfig,
        progress_manager: ProgressManager | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        self.config = config
        self.progress_manager = progress_manager
        self.session = session
        self.downloader = SourceDownloader(
            chunk_size=config.chunk_size, write_mode=WriteMode(config.write_mode)
        )
        self.stats = FetchStats(dry_run=config.dry_run)
        self.semaphore = asyncio.Semaphore(config.max_workers)

    async def fetch_package(
        self,
        package: Package,
        output_dir: Path | None = None,
        architecture: Architecture = Architecture.ALL,
        distribution: Distribution = Distribution.ALL,
    ) -> FetchStats:
        """
        Downloads the sources of `package` that apply to the given target.

        A failing source never aborts the others; failures are collected in
        the returned stats.
        """
        output_dir = Path(output_dir or self.config.output_dir)
        sources = package.sources_for(architecture, distribution)
        self.stats.sources_total = len(sources)

        if not sources:
            log.info(f"{package.base} declares no sources for this target.")
            return self.stats

        if self.progress_manager:
            self.progress_manager.initialize_session(len(sources))
        planned = self._plan_destinations(sources, output_dir)
        if not self.config.dry_run and planned:
            create_dir(output_dir)
            if self.session is None:
                self.session = await get_connection_pool(
                    self.config.max_workers,
                    self.config.connect_timeout,
                    self.config.read_timeout,
                )

        await asyncio.gather(
            *(self._fetch_source(source, path, output_dir) for source, path in planned)
        )
        return self.stats

    def _plan_destinations(
        self, sources: list[SourceEntry], output_dir: Path
    ) -> list[tuple[SourceEntry, Path]]:
        """
        Resolves every destination, failing sources that escape `output_dir` or
        that share a destination file with another selected source.
        """
        by_path: dict[Path, list[tuple[SourceEntry, Path]]] = {}
        for source in sources:
            try:
                path = resolve_destination(output_dir, source.destination)
            except FilesystemError as e:
                self._handle_failure(source, None, e)
                continue
            by_path.setdefault(path.resolve(), []).append((source, path))

        planned = []
        for claimants in by_path.values():
            if len(claimants) == 1:
                planned.extend(claimants)
                continue
            for source, path in claimants:
                error = FilesystemError(
                    f"Destination '{source.destination}' is declared by "
                    f"{len(claimants)} sources for this target; select one "
                    "with --arch/--distro",
                    str(path),
                    source.url,
                )
                self._handle_failure(source, None, error)
        return planned

    async def _fetch_source(
        self, source: SourceEntry, path: Path, output_dir: Path
    ) -> None:
        name = str(source.destination)

        if self.config.dry_run:
            log.info(f"  [cyan]→ (Dry Run)[/] Would save to [dim]{escape(str(path))}[/dim]")
            return

        async with self.semaphore:
            try:
                result = await self._download_with_retry(source, path, output_dir)
            except DownloadError as e:
                self._handle_failure(source, path, e)
                return

        self.stats.sources_downloaded += 1
        self.stats.total_size_downloaded += result.bytes_written
        if result.digest is None:
            self.stats.unverified += 1
            log.warning(f"[yellow]⚠ {escape(name)}: no checksum declared, not verified[/yellow]")
        else:
            algorithm = source.expected_hash.algorithm.value
            log.info(f"[green]✓ {escape(name)}[/green] [dim]({algorithm} ok)[/dim]")

    async def _download_with_retry(
        self, source: SourceEntry, path: Path, output_dir: Path
    ) -> DownloadResult:
        """Retries transport failures with exponential backoff; other errors are final."""
        if path.parent != output_dir:
            create_dir(path.parent)

        wrote_destination = False
        last_exception = None
        for attempt in range(1, self.config.max_attempts + 1):
            task_id = None
            if self.progress_manager:
                task_id = self.progress_manager.add_source_task(str(source.destination), 0)

            def on_progress(completed: int, task_id=task_id) -> None:
                if self.progress_manager:
                    self.progress_manager.update_task_progress(task_id, completed)

            def on_total(total: int, task_id=task_id) -> None:
                if self.progress_manager:
                    self.progress_manager.update_task_total(task_id, total)

            try:
                result = await self.downloader.download(
                    source,
                    session=self.session,
                    destination_dir=output_dir,
                    on_progress=on_progress,
                    on_total=on_total,
                )
            except TransportError as e:
                last_exception = e
                wrote_destination = wrote_destination or e.wrote_destination
                if self.progress_manager:
                    retrying = attempt < self.config.max_attempts
                    self.progress_manager.remove_task(
                        task_id, success=None if retrying else False
                    )
                log.debug(
                    f"Download attempt {attempt}/{self.config.max_attempts} for "
                    f"'{source.destination}' failed: {e}."
                )
                if attempt < self.config.max_attempts:
                    self.stats.retries += 1
                    await asyncio.sleep(self.config.base_delay * (2 ** (attempt - 1)))
            except DownloadError as e:
                if self.progress_manager:
                    self.progress_manager.remove_task(task_id, success=False)
                # An earlier attempt may have left bytes behind.
                e.wrote_destination = e.wrote_destination or wrote_destination
                raise
            else:
                if self.progress_manager:
                    self.progress_manager.remove_task(task_id, success=True)
                return result

        last_exception.wrote_destination = wrote_destination
        raise last_exception

    def _handle_failure(
        self, source: SourceEntry, path: Path | None, error: DownloadError
    ):
        name = str(source.destination)
        self.stats.record_failure(name, error)
        if isinstance(error, HashMismatchError):
            self.stats.hash_mismatches += 1
        log.error(f"[red]✗ {escape(name)}: {escape(str(error))}[/red]")

        # Only remove what a failed attempt of this run wrote.
        if (
            self.config.cleanup_partial
            and path is not None
            and error.wrote_destination
            and path.is_file()
        ):
            try:
                path.unlink()
                log.debug(f"Removed partial file '{path}'.")
            except OSError as e:
                log.warning(f"Could not remove partial file '{path}': {e}")
