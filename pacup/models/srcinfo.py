"""
Value types describing a parsed .SRCINFO manifest.
"""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class HashAlgorithm(Enum):
    """
    Checksum algorithms a manifest may declare.

    Member order is significant: sources claim their hashes in this order, and
    the first claimed hash is the one verified on download.
    """

    B2 = "b2"
    MD5 = "md5"
    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @property
    def suffix(self) -> str:
        """The manifest key for this algorithm, e.g. 'sha256sums'."""
        return f"{self.value}sums"

    @classmethod
    def from_key(cls, key: str) -> Optional["HashAlgorithm"]:
        for algorithm in cls:
            if algorithm.suffix == key:
                return algorithm
        return None

    def new(self):
        """Creates a fresh incremental hashlib object for this algorithm."""
        if self is HashAlgorithm.B2:
            return hashlib.blake2s(digest_size=32)
        return hashlib.new(self.value)


class Architecture(str, Enum):
    """Target architectures, named the Debian way."""

    ALL = "all"
    AMD64 = "amd64"
    ARM64 = "arm64"
    ARMEL = "armel"
    ARMHF = "armhf"
    I386 = "i386"
    MIPS64EL = "mips64el"
    PPC64EL = "ppc64el"
    RISCV64 = "riscv64"
    S390X = "s390x"

    @classmethod
    def from_token(cls, token: str) -> Optional["Architecture"]:
        """Resolves a key segment (including Arch-style aliases) to an architecture."""
        return _ARCH_TOKENS.get(token)


_ARCH_TOKENS = {
    "amd64": Architecture.AMD64,
    "x86_64": Architecture.AMD64,
    "arm64": Architecture.ARM64,
    "aarch64": Architecture.ARM64,
    "armel": Architecture.ARMEL,
    "arm": Architecture.ARMEL,
    "armhf": Architecture.ARMHF,
    "armv7h": Architecture.ARMHF,
    "i386": Architecture.I386,
    "i686": Architecture.I386,
    "mips64el": Architecture.MIPS64EL,
    "ppc64el": Architecture.PPC64EL,
    "riscv64": Architecture.RISCV64,
    "s390x": Architecture.S390X,
}


class DistroFamily(str, Enum):
    ALL = "all"
    DEBIAN = "debian"
    UBUNTU = "ubuntu"


DEBIAN_RELEASES = ("bullseye", "bookworm", "trixie", "sid")
UBUNTU_RELEASES = ("focal", "jammy", "noble", "oracular", "devel")


@dataclass(frozen=True)
class Distribution:
    """A distribution qualifier: a family plus a release, either of which may be 'all'."""

    family: DistroFamily = DistroFamily.ALL
    release: str = "all"

    @classmethod
    def from_token(cls, token: str) -> Optional["Distribution"]:
        """
        Resolves a key segment to a distribution.

        Returns None rather than raising so callers can fall back to reading the
        segment as an architecture.
        """
        if token == DistroFamily.DEBIAN.value:
            return cls(DistroFamily.DEBIAN)
        if token in DEBIAN_RELEASES:
            return cls(DistroFamily.DEBIAN, token)
        if token == DistroFamily.UBUNTU.value:
            return cls(DistroFamily.UBUNTU)
        if token in UBUNTU_RELEASES:
            return cls(DistroFamily.UBUNTU, token)
        return None

    @property
    def is_all(self) -> bool:
        return self.family is DistroFamily.ALL

    def covers(self, other: "Distribution") -> bool:
        """True if a value qualified with this distribution applies to `other`."""
        if self.is_all:
            return True
        if self.family is not other.family:
            return False
        return self.release == "all" or self.release == other.release

    def __str__(self) -> str:
        if self.is_all:
            return "all"
        if self.release == "all":
            return self.family.value
        return self.release


Distribution.ALL = Distribution()


class AttributeKind(Enum):
    PKGBASE = "pkgbase"
    PKGVER = "pkgver"
    MAINTAINER = "maintainer"
    REPOLOGY = "repology"
    SOURCE = "source"
    HASHSUM = "sums"


@dataclass(frozen=True)
class Attribute:
    """One classified manifest line."""

    kind: AttributeKind
    value: str
    architecture: Architecture = Architecture.ALL
    distribution: Distribution = Distribution.ALL
    algorithm: HashAlgorithm | None = None
    line_number: int | None = field(default=None, compare=False)

    @property
    def qualifiers(self) -> tuple[Architecture, Distribution]:
        return self.architecture, self.distribution


@dataclass(frozen=True)
class HashSum:
    algorithm: HashAlgorithm
    value: str


@dataclass(frozen=True)
class SourceEntry:
    """One fetchable artifact together with the checksums correlated to it."""

    destination: Path
    url: str
    hashes: tuple[HashSum, ...] = ()
    architecture: Architecture = Architecture.ALL
    distribution: Distribution = Distribution.ALL

    @property
    def expected_hash(self) -> HashSum | None:
        """The hash checked on download: the first one in algorithm order."""
        return self.hashes[0] if self.hashes else None

    def applies_to(
        self, architecture: Architecture, distribution: Distribution
    ) -> bool:
        """
        True if this source is needed on the given target.

        A target of 'all' acts as a wildcard on that axis.
        """
        if architecture is not Architecture.ALL and self.architecture not in (
            Architecture.ALL,
            architecture,
        ):
            return False
        return distribution.is_all or self.distribution.covers(distribution)


@dataclass(frozen=True)
class Package:
    """The result of parsing one manifest."""

    base: str
    version: str
    maintainers: tuple[str, ...] = ()
    repology: dict[str, str] = field(default_factory=dict)
    sources: tuple[SourceEntry, ...] = ()

    def sources_for(
        self,
        architecture: Architecture = Architecture.ALL,
        distribution: Distribution = Distribution.ALL,
    ) -> list[SourceEntry]:
        """
        Returns the sources relevant to a target, in manifest order.

        With the defaults (all/all) every source is returned.
        """
        return [s for s in self.sources if s.applies_to(architecture, distribution)]
