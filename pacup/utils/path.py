"""
Utilities for locating manifests and preparing output directories.
"""

from pathlib import Path

from pacup.exceptions import FilesystemError

SRCINFO_NAME = ".SRCINFO"


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def resolve_destination(output_dir: Path, destination: Path) -> Path:
    """
    Joins a manifest-declared destination onto the output directory.

    Raises:
        FilesystemError: If the destination is absolute, climbs out of
            `output_dir` with '..', or names the directory itself.
    """
    path = Path(output_dir) / destination
    base = Path(output_dir).resolve()
    resolved = path.resolve()
    if resolved == base or not resolved.is_relative_to(base):
        raise FilesystemError(
            f"Destination '{destination}' is outside the output directory '{output_dir}'",
            str(path),
        )
    return path


def resolve_srcinfo_path(path: Path) -> Path:
    """
    Resolves a user-supplied path to a manifest file.

    A directory is taken to be a package directory holding a .SRCINFO file.

    Raises:
        FileNotFoundError: If no manifest exists at the resolved location.
    """
    candidate = path / SRCINFO_NAME if path.is_dir() else path
    if not candidate.is_file():
        raise FileNotFoundError(f"No manifest found at '{candidate}'")
    return candidate


def read_manifest(path: Path) -> str:
    """Reads a manifest as UTF-8 text."""
    return resolve_srcinfo_path(path).read_text(encoding="utf-8")
