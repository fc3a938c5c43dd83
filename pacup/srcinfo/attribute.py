"""
Classifies individual .SRCINFO lines into typed attributes.

A key has the shape ``<name>[_<distro-or-arch>[_<arch>]]``. The first segment
selects the attribute kind; the remaining segments are qualifiers scoping the
value to a distribution release and/or an architecture.
"""

import logging
from collections.abc import Iterator

from pacup.exceptions import (
    MalformedLineError,
    UnknownAttributeNameError,
    UnknownQualifierError,
)
from pacup.models.srcinfo import (
    Architecture,
    Attribute,
    AttributeKind,
    Distribution,
    HashAlgorithm,
)

log = logging.getLogger(__name__)

SEPARATOR = " = "
CONTINUATION = "\t"

FIXED_NAMES = {
    "pkgbase": AttributeKind.PKGBASE,
    "pkgver": AttributeKind.PKGVER,
    "maintainer": AttributeKind.MAINTAINER,
    "repology": AttributeKind.REPOLOGY,
    "source": AttributeKind.SOURCE,
}


def strip_continuation(line: str) -> str:
    """Removes a single leading tab, if present."""
    if line.startswith(CONTINUATION):
        return line[1:]
    return line


def _first_token(line: str) -> str:
    """The text before the first '_' or ' '."""
    for i, char in enumerate(line):
        if char in "_ ":
            return line[:i]
    return line


def is_attribute_line(line: str) -> bool:
    """
    True if the line carries one of the attributes this parser understands.

    Anything else (pkgname headers, pkgdesc, depends, blank lines...) is skipped.
    """
    name = _first_token(line)
    return name in FIXED_NAMES or name.endswith("sums")


def iter_attribute_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yields (line_number, line) for every candidate attribute line."""
    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = strip_continuation(raw)
        if is_attribute_line(line):
            yield line_number, line


def _split_segments(key: str) -> list[str]:
    """Splits a key on '_' and rejoins 'x86' '64' into 'x86_64'."""
    raw = key.split("_")
    segments: list[str] = []
    i = 0
    while i < len(raw):
        if raw[i] == "x86" and i + 1 < len(raw) and raw[i + 1] == "64":
            segments.append("x86_64")
            i += 2
        else:
            segments.append(raw[i])
            i += 1
    return segments


def _classify_name(name: str) -> tuple[AttributeKind, HashAlgorithm | None] | None:
    if kind := FIXED_NAMES.get(name):
        return kind, None
    if algorithm := HashAlgorithm.from_key(name):
        return AttributeKind.HASHSUM, algorithm
    return None


def parse_qualifiers(
    qualifiers: list[str],
) -> tuple[Architecture, Distribution] | str:
    """
    Interprets the qualifier segments of a key.

    The first segment is tried as a distribution, then as an architecture.
    After a distribution, a second segment names the architecture; it falls
    back to 'all' when absent or unrecognized.

    Returns:
        An (architecture, distribution) pair, or the offending segment when
        it is neither a distribution nor an architecture.
    """
    if not qualifiers:
        return Architecture.ALL, Distribution.ALL

    head = qualifiers[0]
    if (distro := Distribution.from_token(head)) is not None:
        arch = Architecture.ALL
        if len(qualifiers) > 1:
            arch = Architecture.from_token(qualifiers[1]) or Architecture.ALL
        return arch, distro

    if (arch := Architecture.from_token(head)) is not None:
        return arch, Distribution.ALL

    return head


def classify_line(line: str, line_number: int | None = None) -> Attribute:
    """
    Turns a single manifest line into an Attribute.

    Raises:
        MalformedLineError: If the line has no ' = ' separator.
        UnknownAttributeNameError: If the key name is not recognized.
        UnknownQualifierError: If a qualifier is neither distro nor architecture.
    """
    return _classify(strip_continuation(line), line_number)


def _classify(line: str, line_number: int | None) -> Attribute:
    key, sep, value = line.partition(SEPARATOR)
    if not sep:
        raise MalformedLineError(
            f"Expected 'key{SEPARATOR}value', got `{line}`", line_number, line
        )

    name, *qualifiers = _split_segments(key)
    classified = _classify_name(name)
    if classified is None:
        raise UnknownAttributeNameError(name, line_number, line)
    kind, algorithm = classified

    parsed = parse_qualifiers(qualifiers)
    if isinstance(parsed, str):
        raise UnknownQualifierError(parsed, line_number, line)
    architecture, distribution = parsed

    return Attribute(
        kind=kind,
        value=value,
        architecture=architecture,
        distribution=distribution,
        algorithm=algorithm,
        line_number=line_number,
    )


def parse_attributes(text: str) -> list[Attribute]:
    """
    Classifies every attribute line of a manifest, stopping at the first error.
    """
    attributes = [
        _classify(line, line_number) for line_number, line in iter_attribute_lines(text)
    ]
    log.debug(f"Classified {len(attributes)} attribute lines.")
    return attributes
