"""
Fetch Layer.

This package downloads declared sources and verifies them against their
declared checksums.
"""

from .downloader import DownloadResult, SourceDownloader, WriteMode
from .integrity import IncrementalHasher, verify_file

__all__ = [
    "DownloadResult",
    "IncrementalHasher",
    "SourceDownloader",
    "WriteMode",
    "verify_file",
]
