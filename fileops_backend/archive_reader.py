"""Extract ZIP / TAR / TAR.GZ archives and report every file written.

zipfile and tarfile expose entries differently: TAR members are recorded one
by one as they are extracted, while ZIP is extracted in one call and the
target is walked afterwards. Both sit behind Extractor.extract(), which
returns the list of extracted file paths (directories are not counted).
"""
from __future__ import annotations

import abc
import logging
import tarfile
import zipfile
import zlib
from pathlib import Path

from .errors import AlreadyExistsError, ArchiveReadError, NotFoundError, TargetNotEmptyError
from .formats import ArchiveFormat, classify_archive
from .models import ExtractionSpec, OperationResult
from .security import is_unsafe_member_name, safe_join
from .walker import walk

logger = logging.getLogger(__name__)

# Errors that mean "this archive stream is unreadable or corrupt".
_READ_ERRORS = (tarfile.TarError, zipfile.BadZipFile, EOFError, zlib.error, OSError, ValueError)


class Extractor(abc.ABC):
    @abc.abstractmethod
    def extract(self, archive_path: Path, target_dir: Path) -> list[Path]:
        """Extract archive_path into target_dir and return the files written."""


class ZipExtractor(Extractor):
    def extract(self, archive_path: Path, target_dir: Path) -> list[Path]:
        with zipfile.ZipFile(archive_path) as zf:
            members = zf.infolist()
            expected: set[Path] = set()
            for info in members:
                if is_unsafe_member_name(info.filename):
                    raise ArchiveReadError(f"Unsafe path in ZIP: {info.filename!r}")
                if not info.is_dir():
                    expected.add(safe_join(target_dir, info.filename))
            zf.extractall(target_dir)

        # zipfile reports nothing per entry, so re-walk the target and keep
        # the files that came from this archive.
        return [
            entry.absolute_path
            for entry in walk(target_dir)
            if entry.absolute_path.resolve() in expected
        ]


class TarExtractor(Extractor):
    def __init__(self, gzip: bool = False) -> None:
        self.mode = "r:gz" if gzip else "r:"

    def extract(self, archive_path: Path, target_dir: Path) -> list[Path]:
        extracted: list[Path] = []
        with tarfile.open(archive_path, self.mode) as tf:
            for member in tf:
                # The "data" filter rejects absolute paths, "..", device files
                # and links pointing outside target_dir.
                tf.extract(member, target_dir, filter="data")
                if member.isfile():
                    extracted.append(target_dir / member.name.lstrip("/"))
        # A repeated member name overwrites the same file.
        return list(dict.fromkeys(extracted))


_EXTRACTORS: dict[ArchiveFormat, Extractor] = {
    ArchiveFormat.ZIP: ZipExtractor(),
    ArchiveFormat.TAR: TarExtractor(gzip=ArchiveFormat.TAR.gzip),
    ArchiveFormat.TAR_GZ: TarExtractor(gzip=ArchiveFormat.TAR_GZ.gzip),
}


def get_extractor(fmt: ArchiveFormat) -> Extractor:
    return _EXTRACTORS[fmt]


def _prepare_target(target_dir: Path, overwrite: bool) -> None:
    if target_dir.exists() and not target_dir.is_dir():
        raise AlreadyExistsError(f"Target {target_dir} exists and is not a directory")
    target_dir.mkdir(parents=True, exist_ok=True)
    if not overwrite and any(target_dir.iterdir()):
        raise TargetNotEmptyError(
            f"Target directory {target_dir} is not empty, set overwrite=true to overwrite existing files"
        )


def extract_archive(spec: ExtractionSpec) -> OperationResult:
    """Extract spec.archive_path into spec.target_dir.

    Raises:
        NotFoundError: the archive does not exist.
        UnsupportedFormatError: the filename has no known archive suffix.
        TargetNotEmptyError: overwrite is false and the target has entries.
        ArchiveReadError: the archive is corrupt, unreadable or unsafe.
    """
    archive_path = spec.archive_path
    if not archive_path.is_file():
        raise NotFoundError(f"Archive {archive_path} does not exist")

    fmt = classify_archive(archive_path)
    _prepare_target(spec.target_dir, spec.overwrite)

    extractor = get_extractor(fmt)
    try:
        files = extractor.extract(archive_path, spec.target_dir)
    except ArchiveReadError:
        raise
    except _READ_ERRORS as exc:
        raise ArchiveReadError(f"Failed to extract {archive_path}: {exc}") from exc

    total = 0
    for path in files:
        try:
            total += path.stat().st_size
        except OSError:
            logger.warning("Extracted file %s disappeared before it could be measured", path)

    result = OperationResult(
        items_processed=len(files),
        total_bytes_in=archive_path.stat().st_size,
        total_bytes_out=total,
        output_paths=tuple(files),
    )
    logger.info(
        "Extracted %s archive %s into %s (%d files, %d bytes)",
        fmt.label,
        archive_path,
        spec.target_dir,
        len(files),
        total,
    )
    return result
