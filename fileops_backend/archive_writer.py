"""Create ZIP / TAR / TAR.GZ archives from files and folders.

Every top-level input is stored under its basename; folder contents keep their
structure below it ("docs/sub/a.txt"). Same-named top-level inputs are not
renamed: both are written and the later one wins on extraction.

A partially written archive is left on disk when writing fails.
"""
from __future__ import annotations

import abc
import logging
import tarfile
import zipfile
from pathlib import Path
from typing import BinaryIO, Iterator

from .errors import ArchiveWriteError, NotFoundError
from .formats import ArchiveFormat
from .models import ArchiveSpec, OperationResult
from .walker import tree_size, walk

logger = logging.getLogger(__name__)


class ArchiveBuilder(abc.ABC):
    """Writes the inputs of an ArchiveSpec into an open output stream."""

    @abc.abstractmethod
    def write(self, out: BinaryIO, spec: ArchiveSpec, skip: Path) -> int:
        """Write all inputs and return the number of files stored."""


def _top_level_name(path: Path) -> str:
    # Path("docs/").name is already "docs"; resolve() covers "." and "..".
    return path.name or path.resolve().name


def _warn_on_collisions(inputs: tuple[Path, ...]) -> None:
    seen: dict[str, Path] = {}
    for path in inputs:
        name = _top_level_name(path)
        if name in seen:
            logger.warning(
                "Inputs %s and %s share the archive name %r; the later one wins on extraction",
                seen[name],
                path,
                name,
            )
        seen[name] = path


def _is_output(path: Path, skip: Path) -> bool:
    try:
        return path.resolve() == skip
    except OSError:
        return False


class ZipBuilder(ArchiveBuilder):
    def write(self, out: BinaryIO, spec: ArchiveSpec, skip: Path) -> int:
        written = 0
        with zipfile.ZipFile(
            out,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=spec.compression_level,
        ) as zf:
            for path in spec.inputs:
                name = _top_level_name(path)
                if not path.is_dir():
                    if not path.is_file():
                        logger.warning("Skipping %s: not a regular file", path)
                        continue
                    zf.write(path, arcname=name)
                    written += 1
                    continue

                zf.write(path, arcname=f"{name}/")
                for entry in walk(path, include_dirs=True):
                    if _is_output(entry.absolute_path, skip):
                        continue
                    try:
                        zf.write(entry.absolute_path, arcname=f"{name}/{entry.relative_path}")
                    except OSError as exc:
                        logger.warning("Skipping %s: %s", entry.absolute_path, exc)
                        continue
                    if not entry.is_directory:
                        written += 1
        return written


class TarBuilder(ArchiveBuilder):
    """Plain or gzip-compressed TAR; folders are flattened to a file list first."""

    def __init__(self, gzip: bool = False) -> None:
        self.gzip = gzip

    def _file_list(self, spec: ArchiveSpec, skip: Path) -> Iterator[tuple[Path, str]]:
        for path in spec.inputs:
            name = _top_level_name(path)
            if not path.is_dir():
                if not path.is_file():
                    logger.warning("Skipping %s: not a regular file", path)
                    continue
                yield path, name
                continue
            for entry in walk(path):
                if _is_output(entry.absolute_path, skip):
                    continue
                yield entry.absolute_path, f"{name}/{entry.relative_path}"

    def write(self, out: BinaryIO, spec: ArchiveSpec, skip: Path) -> int:
        files = list(self._file_list(spec, skip))
        if self.gzip:
            # The numeric level only matters as a gzip hint.
            tf = tarfile.open(
                fileobj=out,
                mode="w:gz",
                compresslevel=spec.compression_level,
                dereference=True,
            )
        else:
            tf = tarfile.open(fileobj=out, mode="w", dereference=True)

        written = 0
        top_level = set(spec.inputs)
        with tf:
            for source, arcname in files:
                try:
                    tf.add(str(source), arcname=arcname, recursive=False)
                except OSError as exc:
                    if source in top_level:
                        raise
                    logger.warning("Skipping %s: %s", source, exc)
                    continue
                written += 1
        return written


_BUILDERS: dict[ArchiveFormat, ArchiveBuilder] = {
    ArchiveFormat.ZIP: ZipBuilder(),
    ArchiveFormat.TAR: TarBuilder(gzip=ArchiveFormat.TAR.gzip),
    ArchiveFormat.TAR_GZ: TarBuilder(gzip=ArchiveFormat.TAR_GZ.gzip),
}


def get_builder(fmt: ArchiveFormat) -> ArchiveBuilder:
    return _BUILDERS[fmt]


def create_archive(spec: ArchiveSpec) -> OperationResult:
    """Pack spec.inputs into spec.output_path.

    Raises:
        NotFoundError: an input does not exist at validation time.
        InvalidArgumentError: no inputs or a compression level outside 0-9.
        ArchiveWriteError: the output cannot be opened, or an input vanished
            or failed to read while writing.
    """
    spec.validate()

    try:
        original_size = sum(tree_size(path) for path in spec.inputs)
    except NotFoundError as exc:
        raise ArchiveWriteError(str(exc)) from exc

    output_path = spec.output_path
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        out = open(output_path, "wb")
    except OSError as exc:
        raise ArchiveWriteError(f"Cannot open output {output_path}: {exc}") from exc

    _warn_on_collisions(spec.inputs)
    builder = get_builder(spec.format)
    try:
        with out:
            written = builder.write(out, spec, output_path.resolve())
    except (OSError, NotFoundError, tarfile.TarError) as exc:
        raise ArchiveWriteError(f"Failed to write {output_path}: {exc}") from exc

    compressed_size = output_path.stat().st_size
    result = OperationResult(
        items_processed=written,
        total_bytes_in=original_size,
        total_bytes_out=compressed_size,
        output_paths=(output_path,),
    )
    logger.info(
        "Created %s archive %s (%d files, %d -> %d bytes)",
        spec.format.label,
        output_path,
        written,
        original_size,
        compressed_size,
    )
    return result
