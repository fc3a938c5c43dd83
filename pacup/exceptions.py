"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class PacupError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(PacupError):
    """Raised for issues related to configuration loading or validation."""


class ManifestError(PacupError):
    """
    Base class for errors raised while parsing a .SRCINFO manifest.

    Carries the 1-based line number and the offending line when they are known.
    """

    def __init__(
        self, message: str, line_number: int | None = None, line: str | None = None
    ):
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class MalformedLineError(ManifestError):
    """Raised when an attribute line has no ' = ' separator."""


class UnknownAttributeNameError(ManifestError):
    """Raised when an attribute key is not a recognized name."""

    def __init__(self, name: str, line_number: int | None = None, line: str | None = None):
        self.name = name
        super().__init__(f"Unknown attribute: `{name}`", line_number, line)


class UnknownQualifierError(ManifestError):
    """Raised when a key suffix is neither a distribution nor an architecture."""

    def __init__(
        self, qualifier: str, line_number: int | None = None, line: str | None = None
    ):
        self.qualifier = qualifier
        super().__init__(
            f"Invalid distro or architecture: `{qualifier}`", line_number, line
        )


class DuplicateAttributeError(ManifestError):
    """Raised when pkgbase or pkgver appears more than once."""

    def __init__(
        self, attribute: str, line_number: int | None = None, line: str | None = None
    ):
        self.attribute = attribute
        super().__init__(f"Duplicate `{attribute}` attribute", line_number, line)


class MissingRequiredAttributeError(ManifestError):
    """Raised when pkgbase or pkgver is absent from the manifest."""

    def __init__(self, attribute: str):
        self.attribute = attribute
        super().__init__(f"Missing required `{attribute}` attribute")


class MalformedRepologyEntryError(ManifestError):
    """Raised when a repology value has no ': ' separator."""

    def __init__(
        self, entry: str, line_number: int | None = None, line: str | None = None
    ):
        self.entry = entry
        super().__init__(
            f"Malformed repology entry (expected 'key: value'): `{entry}`",
            line_number,
            line,
        )


class DownloadError(PacupError):
    """
    Base class for failures while fetching a single source.

    `wrote_destination` is True when the failing download had already opened
    (and so truncated or extended) its destination file.
    """

    def __init__(
        self, message: str, url: str | None = None, wrote_destination: bool = False
    ):
        self.url = url
        self.wrote_destination = wrote_destination
        super().__init__(message)


class TransportError(DownloadError):
    """Raised on a non-success HTTP status or a connection failure."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status: int | None = None,
        wrote_destination: bool = False,
    ):
        self.status = status
        super().__init__(message, url, wrote_destination)


class FilesystemError(DownloadError):
    """Raised when the destination file cannot be opened or written."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        url: str | None = None,
        wrote_destination: bool = False,
    ):
        self.path = path
        super().__init__(message, url, wrote_destination)


class HashMismatchError(DownloadError):
    """Raised when a downloaded file fails its checksum verification."""

    def __init__(self, expected: str, actual: str, url: str | None = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Hash mismatch: expected `{expected}`, got `{actual}`",
            url,
            wrote_destination=True,
        )
