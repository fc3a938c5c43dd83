"""
Core application engine for orchestrating the fetch process.

The `FetchManager` plays the caller role around the single-request
downloader: it bounds concurrency, retries transport failures, and cleans up
partially written files.
"""

from .fetch_manager import FetchManager

__all__ = ["FetchManager"]
