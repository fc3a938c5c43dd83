"""
Dataclass for tracking fetch session statistics.
"""

import time
from dataclasses import dataclass, field


@dataclass
class FetchStats:
    """Tracks the outcome of fetching a package's sources."""

    sources_total: int = 0
    sources_downloaded: int = 0
    sources_failed: int = 0
    hash_mismatches: int = 0
    unverified: int = 0
    retries: int = 0
    total_size_downloaded: int = 0
    dry_run: bool = False
    failures: list[tuple[str, str]] = field(default_factory=list)
    _start_time: float = field(default_factory=time.monotonic, repr=False)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._start_time

    @property
    def avg_speed_bps(self) -> float:
        elapsed = self.elapsed
        return self.total_size_downloaded / elapsed if elapsed > 0 else 0.0

    @property
    def ok(self) -> bool:
        return self.sources_failed == 0

    def record_failure(self, name: str, error: Exception) -> None:
        self.sources_failed += 1
        self.failures.append((name, str(error)))
