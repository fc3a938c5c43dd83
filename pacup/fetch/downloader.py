"""
Handles the low-level downloading of source files over HTTP, hashing the byte
stream as it is written so the checksum is verified without a second pass.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import aiofiles
import aiohttp

from pacup.exceptions import FilesystemError, HashMismatchError, TransportError
from pacup.fetch.integrity import IncrementalHasher
from pacup.models.srcinfo import SourceEntry
from pacup.utils.path import resolve_destination

log = logging.getLogger(__name__)

_connection_pool: aiohttp.ClientSession | None = None
_pool_lock = asyncio.Lock()


async def get_connection_pool(
    max_workers: int = 4, connect_timeout: float = 15, read_timeout: float = 90
) -> aiohttp.ClientSession:
    """
    Gets or creates a shared aiohttp ClientSession for downloads.

    This function ensures that only one connection pool is created for the
    lifetime of the application run.

    Args:
        max_workers: Maximum concurrent connections (should match config.max_workers).
        connect_timeout: Seconds allowed to establish a connection.
        read_timeout: Seconds allowed between two reads of a response body.
    """
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            return _connection_pool

        connector = aiohttp.TCPConnector(
            limit=max_workers * 2,
            limit_per_host=max_workers,
            ttl_dns_cache=600,  # 10 minutes
            keepalive_timeout=30,
            enable_cleanup_closed=True,
        )
        timeout = aiohttp.ClientTimeout(
            total=None, sock_connect=connect_timeout, sock_read=read_timeout
        )
        _connection_pool = aiohttp.ClientSession(connector=connector, timeout=timeout)
        log.debug(f"Created download pool with limit_per_host={max_workers}")

    return _connection_pool


async def close_connection_pool() -> None:
    """Closes the shared global connection pool."""
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            await _connection_pool.close()
            _connection_pool = None
            log.debug("Shared downloader connection pool closed.")


class WriteMode(str, Enum):
    """
    How an existing destination file is treated.
    OVERWRITE: Truncate and write from the start.
    APPEND: Keep existing bytes and append. The digest covers only new bytes.
    """

    OVERWRITE = "overwrite"
    APPEND = "append"

    @property
    def file_mode(self) -> str:
        return "ab" if self is WriteMode.APPEND else "wb"


@dataclass(frozen=True)
class DownloadResult:
    source: SourceEntry
    path: Path
    bytes_written: int
    digest: str | None


class SourceDownloader:
    """
    Fetches a single source and verifies it against its first declared checksum.

    Each call makes exactly one request; retrying is left to the caller.
    """

    DEFAULT_CHUNK_SIZE = 131072  # 128 KB

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        write_mode: WriteMode = WriteMode.OVERWRITE,
    ):
        self.chunk_size = chunk_size
        self.write_mode = WriteMode(write_mode)

    async def download(
        self,
        source: SourceEntry,
        session: aiohttp.ClientSession | None = None,
        destination_dir: Path | None = None,
        on_progress: Callable[[int], None] | None = None,
        on_total: Callable[[int], None] | None = None,
    ) -> DownloadResult:
        """
        Streams `source.url` into its destination, hashing each chunk on the way.

        Args:
            source: The source entry to fetch.
            session: Session to use; defaults to the shared connection pool.
            destination_dir: Directory the source's destination is relative to.
            on_progress: Called with the running byte count after every chunk.
            on_total: Called once with Content-Length when the server sends it.

        Raises:
            TransportError: On a non-success status or a connection failure.
            FilesystemError: If the destination escapes `destination_dir` or
                cannot be opened or written.
            HashMismatchError: If the computed digest differs from the declared one.
        """
        path = resolve_destination(
            Path(destination_dir) if destination_dir is not None else Path("."),
            source.destination,
        )

        expected = source.expected_hash
        hasher = IncrementalHasher(expected) if expected else None
        if session is None:
            session = await get_connection_pool()

        log.debug(f"Downloading {source.url} -> {path}")
        opened = False
        bytes_written = 0
        try:
            async with session.get(source.url, allow_redirects=True) as response:
                response.raise_for_status()
                if on_total and response.content_length:
                    on_total(response.content_length)

                try:
                    async with aiofiles.open(path, self.write_mode.file_mode) as f:
                        opened = True
                        async for chunk in response.content.iter_chunked(self.chunk_size):
                            bytes_written += len(chunk)
                            if on_progress:
                                on_progress(bytes_written)
                            if hasher:
                                hasher.update(chunk)
                            await f.write(chunk)
                except (aiohttp.ClientError, asyncio.TimeoutError):
                    raise
                except OSError as e:
                    action = "writing to" if opened else "opening"
                    raise FilesystemError(
                        f"Failed {action} '{path}': {e}",
                        str(path),
                        source.url,
                        wrote_destination=opened,
                    ) from e
        except aiohttp.ClientResponseError as e:
            raise TransportError(
                f"Failed to download {source.url}: HTTP {e.status} {e.message}",
                source.url,
                e.status,
                wrote_destination=opened,
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(
                f"Failed to download {source.url}: {str(e) or type(e).__name__}",
                source.url,
                wrote_destination=opened,
            ) from e

        digest = hasher.hexdigest() if hasher else None
        if hasher and not hasher.verify():
            log.warning(f"[red]Checksum mismatch for '{path.name}'[/red]")
            raise HashMismatchError(expected.value, digest, source.url)

        log.debug(f"Downloaded {bytes_written} bytes to {path}")
        return DownloadResult(source, path, bytes_written, digest)
