from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_FOLDER
from .errors import AlreadyExistsError, FileOpsError, InvalidArgumentError, NotFoundError
from .models import OperationResult
from .walker import count_files as _count, summarize, tree_size, walk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListedEntry:
    name: str
    is_directory: bool
    size_bytes: int


def _resolve_folder(folder: str | Path | None) -> Path:
    path = Path(folder).expanduser() if folder else DEFAULT_FOLDER
    if not path.exists():
        raise NotFoundError(f"Path {path} does not exist")
    if not path.is_dir():
        raise NotFoundError(f"Path {path} is not a folder")
    return path


def count_files(folder: str | Path | None = None) -> tuple[Path, int, OperationResult]:
    """Count the entries directly inside folder, plus all files below it.

    Returns (folder, top_level_entries, result) where result.items_processed is
    the recursive file count and result.total_bytes_out their total size.
    """
    path = _resolve_folder(folder)
    top_level = sum(1 for _ in path.iterdir())
    stats = summarize(path)
    result = OperationResult(
        items_processed=stats.files,
        total_bytes_in=stats.total_bytes,
        total_bytes_out=stats.total_bytes,
    )
    return path, top_level, result


def list_files(folder: str | Path | None = None, include_hidden: bool = False) -> tuple[Path, list[ListedEntry]]:
    path = _resolve_folder(folder)
    rows: list[ListedEntry] = []
    for child in sorted(path.iterdir(), key=lambda p: p.name):
        if not include_hidden and child.name.startswith("."):
            continue
        try:
            is_dir = child.is_dir()
            size = 0 if is_dir else child.stat().st_size
        except OSError as exc:
            logger.warning("Skipping %s: %s", child, exc)
            continue
        rows.append(ListedEntry(name=child.name, is_directory=is_dir, size_bytes=size))
    return path, rows


def _is_within(child: Path, parent: Path) -> bool:
    child, parent = child.resolve(), parent.resolve()
    return child == parent or parent in child.parents


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def copy_files(
    source: str | Path,
    target: str | Path,
    overwrite: bool = False,
    preserve_timestamps: bool = True,
) -> OperationResult:
    source, target = Path(source), Path(target)
    if not source.exists():
        raise NotFoundError(f"Source file or folder {source} does not exist")
    if target.exists() and not overwrite:
        raise AlreadyExistsError(f"Target path {target} already exists, set overwrite=true to overwrite")

    is_dir = source.is_dir()
    if is_dir and _is_within(target, source):
        raise InvalidArgumentError(f"Cannot copy {source} into itself ({target})")
    size = tree_size(source)

    copy_function = shutil.copy2 if preserve_timestamps else shutil.copy
    if is_dir:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, target, copy_function=copy_function, dirs_exist_ok=overwrite)
        files = _count(walk(target))
    else:
        target.parent.mkdir(parents=True, exist_ok=True)
        copy_function(source, target)
        files = 1

    if not target.exists():
        raise FileOpsError("Copy finished but the target was not found")

    logger.info("Copied %s -> %s (%d files, %d bytes)", source, target, files, size)
    return OperationResult(
        items_processed=files,
        total_bytes_in=size,
        total_bytes_out=tree_size(target),
        output_paths=(target,),
    )


def move_files(source: str | Path, target: str | Path, overwrite: bool = False) -> tuple[OperationResult, bool]:
    """Move source to target.

    Returns (result, replaced) where replaced tells whether an existing target
    was overwritten.
    """
    source, target = Path(source), Path(target)
    if not source.exists():
        raise NotFoundError(f"Source file or folder {source} does not exist")
    if os.path.abspath(source) == os.path.abspath(target):
        raise InvalidArgumentError("Source and target paths must differ")

    target_exists = target.exists()
    if target_exists and not overwrite:
        raise AlreadyExistsError(f"Target path {target} already exists, set overwrite=true to overwrite")

    is_dir = source.is_dir()
    if is_dir and _is_within(target, source):
        raise InvalidArgumentError(f"Cannot move {source} into itself ({target})")

    # Measure before moving; the source is gone afterwards.
    size = tree_size(source)
    files = _count(walk(source)) if is_dir else 1

    target.parent.mkdir(parents=True, exist_ok=True)
    if target_exists:
        _remove(target)
    shutil.move(str(source), str(target))

    if not target.exists():
        raise FileOpsError("Move finished but the target was not found")
    if source.exists():
        raise FileOpsError("Move finished but the source still exists")

    logger.info("Moved %s -> %s (%d files, %d bytes)", source, target, files, size)
    result = OperationResult(
        items_processed=files,
        total_bytes_in=size,
        total_bytes_out=size,
        output_paths=(target,),
    )
    return result, target_exists
