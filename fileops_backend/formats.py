from __future__ import annotations

import enum
from pathlib import Path

from .errors import UnsupportedFormatError


class ArchiveFormat(enum.Enum):
    """Archive formats the tools can create and extract."""

    ZIP = "zip"
    TAR = "tar"
    TAR_GZ = "tar.gz"

    @property
    def label(self) -> str:
        return self.value.upper()

    @property
    def gzip(self) -> bool:
        return self is ArchiveFormat.TAR_GZ

    @classmethod
    def from_name(cls, name: str) -> "ArchiveFormat":
        """Resolve a user-facing format name ("zip", "tar", "tar.gz")."""
        key = (name or "").strip().lower()
        for fmt in cls:
            if fmt.value == key:
                return fmt
        raise UnsupportedFormatError(
            f"Unsupported archive format {name!r}. Supported formats: zip, tar, tar.gz"
        )


def classify_archive(path: str | Path) -> ArchiveFormat:
    """Pick the archive format from the filename alone.

    Compound suffixes are checked first so that "a.b.tar.gz" is TAR_GZ.
    """
    name = Path(path).name.lower()
    if name.endswith((".tar.gz", ".tgz")):
        return ArchiveFormat.TAR_GZ
    suffix = Path(name).suffix
    if suffix == ".zip":
        return ArchiveFormat.ZIP
    if suffix == ".gz":
        return ArchiveFormat.TAR_GZ
    if suffix == ".tar":
        return ArchiveFormat.TAR
    raise UnsupportedFormatError(
        f"Unsupported archive format for {Path(path).name}. Supported formats: ZIP, TAR, TAR.GZ, TGZ"
    )
