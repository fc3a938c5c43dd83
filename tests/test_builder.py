from pathlib import Path

import pytest

from pacup.exceptions import (
    DuplicateAttributeError,
    MalformedRepologyEntryError,
    MissingRequiredAttributeError,
)
from pacup.models.srcinfo import (
    Architecture,
    Distribution,
    DistroFamily,
    HashAlgorithm,
    HashSum,
    Package,
    SourceEntry,
)
from pacup.srcinfo import parse
from pacup.srcinfo.builder import split_source

DATA_DIR = Path(__file__).parent / "data"

MULTI_TARGET = """\
pkgbase = foo-bin
	pkgver = 1.4.2
	maintainer = Alice <alice@example.com>
	maintainer = Bob <bob@example.com>
	maintainer = Alice <alice@example.com>
	repology = project: foo
	repology = visibleversion: 1.4.2
	repology = project: foo-renamed
	source = https://example.com/LICENSE
	source_amd64 = foo.tar.gz::https://example.com/dl/foo-x64.tar.gz
	source_arm64 = https://example.com/dl/foo-arm64.tar.gz
	source_jammy_amd64 = https://example.com/dl/foo-jammy.deb
	sha256sums = SKIP
	sha256sums_amd64 = AAAA
	b2sums_amd64 = bbbb
	sha256sums_arm64 = cccc
	md5sums_jammy_amd64 = dddd
	sha512sums_jammy_amd64 = eeee

pkgname = foo-bin
"""


def test_minimal_example() -> None:
    package = parse(
        "pkgbase = foo\npkgver = 1.0\nsource = https://x/y/f.tar.gz\nsha256sums = abc123"
    )
    assert package == Package(
        base="foo",
        version="1.0",
        sources=(
            SourceEntry(
                destination=Path("f.tar.gz"),
                url="https://x/y/f.tar.gz",
                hashes=(HashSum(HashAlgorithm.SHA256, "abc123"),),
            ),
        ),
    )


def test_sample_manifest() -> None:
    package = parse((DATA_DIR / "1password-cli-bin.SRCINFO").read_text(encoding="utf-8"))
    assert package.base == "1password-cli-bin"
    assert package.version == "2.28.0"
    assert package.maintainers == ("Oren Klopfer <oren@taumoda.com>",)
    assert package.repology == {"project": "1password-cli"}
    (source,) = package.sources
    assert source.destination == Path("op_linux_amd64_v2.28.0.zip")
    assert source.expected_hash.algorithm is HashAlgorithm.SHA256


def test_multi_target_manifest() -> None:
    package = parse(MULTI_TARGET)

    assert package.maintainers == (
        "Alice <alice@example.com>",
        "Bob <bob@example.com>",
        "Alice <alice@example.com>",
    )
    assert package.repology == {"project": "foo-renamed", "visibleversion": "1.4.2"}

    license_, x64, arm, jammy = package.sources
    assert license_.destination == Path("LICENSE")
    assert license_.hashes == ()

    assert x64.destination == Path("foo.tar.gz")
    assert x64.url == "https://example.com/dl/foo-x64.tar.gz"
    assert x64.architecture is Architecture.AMD64
    assert x64.hashes == (
        HashSum(HashAlgorithm.B2, "bbbb"),
        HashSum(HashAlgorithm.SHA256, "aaaa"),
    )

    assert arm.hashes == (HashSum(HashAlgorithm.SHA256, "cccc"),)

    assert jammy.distribution == Distribution(DistroFamily.UBUNTU, "jammy")
    assert jammy.hashes == (
        HashSum(HashAlgorithm.MD5, "dddd"),
        HashSum(HashAlgorithm.SHA512, "eeee"),
    )
    assert jammy.expected_hash == HashSum(HashAlgorithm.MD5, "dddd")


def test_hashes_are_claimed_in_order_by_matching_sources() -> None:
    package = parse(
        "pkgbase = foo\npkgver = 1\n"
        "source = https://x/a\nsource = https://x/b\n"
        "sha256sums = 1111\nsha256sums = 2222\nsha256sums_amd64 = 3333\n"
    )
    a, b = package.sources
    assert a.hashes == (HashSum(HashAlgorithm.SHA256, "1111"),)
    assert b.hashes == (HashSum(HashAlgorithm.SHA256, "2222"),)


def test_skip_never_attaches() -> None:
    package = parse(
        "pkgbase = foo\npkgver = 1\n"
        "source = https://x/a\nsource = https://x/b\n"
        "sha256sums = SKIP\nsha256sums = 2222\n"
    )
    a, b = package.sources
    assert a.hashes == (HashSum(HashAlgorithm.SHA256, "2222"),)
    assert b.hashes == ()
    for source in package.sources:
        assert all(h.value != "skip" for h in source.hashes)


@pytest.mark.parametrize("key", ["pkgbase", "pkgver"])
def test_missing_required(key: str) -> None:
    lines = {"pkgbase": "pkgbase = foo", "pkgver": "pkgver = 1"}
    del lines[key]
    with pytest.raises(MissingRequiredAttributeError) as excinfo:
        parse("\n".join(lines.values()))
    assert excinfo.value.attribute == key


@pytest.mark.parametrize("key", ["pkgbase", "pkgver"])
def test_duplicate_required(key: str) -> None:
    text = f"pkgbase = foo\npkgver = 1\n{key} = again\n"
    with pytest.raises(DuplicateAttributeError) as excinfo:
        parse(text)
    assert excinfo.value.attribute == key
    assert excinfo.value.line_number == 3


def test_malformed_repology_aborts_parse() -> None:
    with pytest.raises(MalformedRepologyEntryError):
        parse("pkgbase = foo\npkgver = 1\nrepology = project foo\n")


def test_parse_is_idempotent() -> None:
    assert parse(MULTI_TARGET) == parse(MULTI_TARGET)


@pytest.mark.parametrize(
    "value, destination, url",
    [
        ("https://x/y/f.tar.gz", "f.tar.gz", "https://x/y/f.tar.gz"),
        ("name.zip::https://x/y/download?id=1", "name.zip", "https://x/y/download?id=1"),
        ("git+https://x/repo.git", "repo.git", "git+https://x/repo.git"),
    ],
)
def test_split_source(value: str, destination: str, url: str) -> None:
    assert split_source(value) == (Path(destination), url)


def test_sources_for_target() -> None:
    package = parse(MULTI_TARGET)
    jammy = Distribution.from_token("jammy")
    bookworm = Distribution.from_token("bookworm")

    names = lambda sources: [s.destination.name for s in sources]  # noqa: E731
    assert len(package.sources_for()) == 4
    assert names(package.sources_for(Architecture.AMD64, jammy)) == [
        "LICENSE",
        "foo.tar.gz",
        "foo-jammy.deb",
    ]
    assert names(package.sources_for(Architecture.AMD64, bookworm)) == [
        "LICENSE",
        "foo.tar.gz",
    ]
    assert names(package.sources_for(Architecture.ARM64)) == [
        "LICENSE",
        "foo-arm64.tar.gz",
    ]
