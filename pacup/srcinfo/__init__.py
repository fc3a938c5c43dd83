"""
.SRCINFO Parsing Layer.

This package turns the text of a Pacstall .SRCINFO manifest into a typed
`Package`. Parsing is all-or-nothing: the first error aborts the whole parse.
"""

import logging

from pacup.models.srcinfo import Package

from .attribute import classify_line, parse_attributes
from .builder import build_package

log = logging.getLogger(__name__)


def parse(text: str) -> Package:
    """Parses a complete manifest into a Package."""
    package = build_package(parse_attributes(text))
    log.debug(
        f"Parsed {package.base} {package.version} with {len(package.sources)} source(s)."
    )
    return package


__all__ = ["build_package", "classify_line", "parse", "parse_attributes"]
