from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidArgumentError, NotFoundError
from .formats import ArchiveFormat


@dataclass(frozen=True)
class FileEntry:
    absolute_path: Path
    relative_path: str  # POSIX-style, relative to the walk root
    is_directory: bool
    size_bytes: int


@dataclass(frozen=True)
class OperationResult:
    items_processed: int
    total_bytes_in: int
    total_bytes_out: int
    output_paths: tuple[Path, ...] = ()

    @property
    def compression_ratio(self) -> int:
        """Percentage saved going from total_bytes_in to total_bytes_out.

        Defined as 0 when there was nothing to compress.
        """
        if self.total_bytes_in <= 0:
            return 0
        return round((1 - self.total_bytes_out / self.total_bytes_in) * 100)


@dataclass(frozen=True)
class ArchiveSpec:
    inputs: tuple[Path, ...]
    output_path: Path
    format: ArchiveFormat = ArchiveFormat.ZIP
    compression_level: int = 6

    def validate(self) -> None:
        if not self.inputs:
            raise InvalidArgumentError("At least one file or folder is required")
        if not 0 <= self.compression_level <= 9:
            raise InvalidArgumentError(
                f"Compression level must be between 0 and 9, got {self.compression_level}"
            )
        for path in self.inputs:
            if not path.exists():
                raise NotFoundError(f"File or folder {path} does not exist")


@dataclass(frozen=True)
class ExtractionSpec:
    archive_path: Path
    target_dir: Path
    overwrite: bool = False


@dataclass(frozen=True)
class TreeStats:
    files: int = 0
    directories: int = 0
    total_bytes: int = 0
