"""
Data Models Layer.

This package contains the value types describing a parsed manifest, plus the
Pydantic configuration model and session statistics.
"""

from .config import PacupConfig
from .srcinfo import (
    Architecture,
    Attribute,
    AttributeKind,
    Distribution,
    DistroFamily,
    HashAlgorithm,
    HashSum,
    Package,
    SourceEntry,
)
from .stats import FetchStats

__all__ = [
    "Architecture",
    "Attribute",
    "AttributeKind",
    "Distribution",
    "DistroFamily",
    "FetchStats",
    "HashAlgorithm",
    "HashSum",
    "Package",
    "PacupConfig",
    "SourceEntry",
]
