"""
Assembles classified attributes into a single Package.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from pacup.exceptions import (
    DuplicateAttributeError,
    MalformedRepologyEntryError,
    MissingRequiredAttributeError,
)
from pacup.models.srcinfo import (
    Attribute,
    AttributeKind,
    HashAlgorithm,
    HashSum,
    Package,
    SourceEntry,
)

log = logging.getLogger(__name__)

SKIP = "SKIP"
DEST_SEPARATOR = "::"
REPOLOGY_SEPARATOR = ": "


def split_source(value: str) -> tuple[Path, str]:
    """
    Splits a source value into (destination, url).

    'name::url' names the destination explicitly; otherwise it is the last
    '/'-delimited segment of the URL.
    """
    dest, sep, url = value.partition(DEST_SEPARATOR)
    if sep:
        return Path(dest), url
    return Path(value.rsplit("/", 1)[-1]), value


class _HashPool:
    """Hash-sum attributes waiting to be claimed by a source."""

    def __init__(self, hashes: list[Attribute]):
        self._by_algorithm: dict[HashAlgorithm, list[tuple[int, Attribute]]] = {}
        for index, attr in enumerate(hashes):
            self._by_algorithm.setdefault(attr.algorithm, []).append((index, attr))
        self._claimed: set[int] = set()

    def claim(self, algorithm: HashAlgorithm, source: Attribute) -> Attribute | None:
        """Removes and returns the first unclaimed hash matching the source's qualifiers."""
        for index, attr in self._by_algorithm.get(algorithm, ()):
            if index in self._claimed:
                continue
            if attr.qualifiers == source.qualifiers:
                self._claimed.add(index)
                return attr
        return None

    @property
    def unclaimed(self) -> int:
        total = sum(len(v) for v in self._by_algorithm.values())
        return total - len(self._claimed)


class PackageBuilder:
    """Collects attributes and validates the cardinality rules of a manifest."""

    def __init__(self):
        self._base: Attribute | None = None
        self._version: Attribute | None = None
        self._maintainers: list[str] = []
        self._repology: dict[str, str] = {}
        self._sources: list[Attribute] = []
        self._hashes: list[Attribute] = []

    def _set_unique(self, current: Attribute | None, attr: Attribute) -> Attribute:
        if current is not None:
            raise DuplicateAttributeError(
                attr.kind.value, attr.line_number, f"{attr.kind.value} = {attr.value}"
            )
        return attr

    def add(self, attr: Attribute) -> None:
        kind = attr.kind
        if kind is AttributeKind.PKGBASE:
            self._base = self._set_unique(self._base, attr)
        elif kind is AttributeKind.PKGVER:
            self._version = self._set_unique(self._version, attr)
        elif kind is AttributeKind.MAINTAINER:
            self._maintainers.append(attr.value)
        elif kind is AttributeKind.REPOLOGY:
            key, sep, value = attr.value.partition(REPOLOGY_SEPARATOR)
            if not sep:
                raise MalformedRepologyEntryError(attr.value, attr.line_number)
            self._repology[key] = value
        elif kind is AttributeKind.SOURCE:
            self._sources.append(attr)
        elif kind is AttributeKind.HASHSUM:
            if attr.value != SKIP:
                self._hashes.append(attr)

    def _build_sources(self) -> tuple[SourceEntry, ...]:
        pool = _HashPool(self._hashes)
        entries = []
        for source in self._sources:
            destination, url = split_source(source.value)
            hashes = []
            for algorithm in HashAlgorithm:
                if (claimed := pool.claim(algorithm, source)) is not None:
                    hashes.append(HashSum(algorithm, claimed.value.lower()))
            entries.append(
                SourceEntry(
                    destination=destination,
                    url=url,
                    hashes=tuple(hashes),
                    architecture=source.architecture,
                    distribution=source.distribution,
                )
            )
        if pool.unclaimed:
            log.debug(f"{pool.unclaimed} checksum(s) matched no source.")
        return tuple(entries)

    def build(self) -> Package:
        if self._base is None:
            raise MissingRequiredAttributeError(AttributeKind.PKGBASE.value)
        if self._version is None:
            raise MissingRequiredAttributeError(AttributeKind.PKGVER.value)
        return Package(
            base=self._base.value,
            version=self._version.value,
            maintainers=tuple(self._maintainers),
            repology=dict(self._repology),
            sources=self._build_sources(),
        )


def build_package(attributes: Iterable[Attribute]) -> Package:
    """
    Builds a Package from the full, ordered attribute sequence of one manifest.

    Raises:
        DuplicateAttributeError: If pkgbase or pkgver occurs twice.
        MissingRequiredAttributeError: If pkgbase or pkgver is absent.
        MalformedRepologyEntryError: If a repology value lacks ': '.
    """
    builder = PackageBuilder()
    for attr in attributes:
        builder.add(attr)
    return builder.build()
