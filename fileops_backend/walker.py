"""Depth-first filesystem walks with skip-and-continue error handling.

One unreadable file or broken link must not abort a whole-tree operation, so
per-entry errors are logged and skipped. Only a missing root is fatal.
"""
from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Iterable, Iterator

from .errors import NotFoundError
from .models import FileEntry, TreeStats

logger = logging.getLogger(__name__)


def _children(directory: Path, prefix: str) -> list[tuple[Path, str]]:
    """Return (path, relative path) pairs for a directory, in reverse name order.

    Reverse order so that popping them off a stack visits them A-Z.
    """
    with os.scandir(directory) as it:
        names = sorted(entry.name for entry in it)
    return [(directory / name, f"{prefix}{name}") for name in reversed(names)]


def walk(root: str | Path, include_dirs: bool = False) -> Iterator[FileEntry]:
    """Yield entries under root, depth-first, in name order.

    Directories are traversed but only yielded when include_dirs is set.
    Uses an explicit stack so deep trees don't hit the recursion limit.
    Symlinks are followed; a directory whose (device, inode) was already
    visited is treated as a cycle and skipped.
    """
    root = Path(root)
    try:
        root_stat = root.stat()
    except OSError:
        raise NotFoundError(f"Path {root} does not exist")
    if not stat.S_ISDIR(root_stat.st_mode):
        raise NotFoundError(f"Path {root} is not a directory")

    visited = {(root_stat.st_dev, root_stat.st_ino)}
    try:
        stack = _children(root, "")
    except OSError as exc:
        logger.warning("Skipping unreadable directory %s: %s", root, exc)
        return

    while stack:
        path, rel = stack.pop()
        try:
            st = path.stat()
        except OSError as exc:
            logger.warning("Skipping %s: %s", path, exc)
            continue

        if stat.S_ISREG(st.st_mode):
            yield FileEntry(
                absolute_path=path.absolute(),
                relative_path=rel,
                is_directory=False,
                size_bytes=st.st_size,
            )
            continue
        if not stat.S_ISDIR(st.st_mode):
            # FIFOs, sockets and device nodes would block or fail on read.
            logger.warning("Skipping %s: not a regular file", path)
            continue

        key = (st.st_dev, st.st_ino)
        if key in visited:
            logger.warning("Skipping %s: directory already visited (symlink cycle)", path)
            continue
        visited.add(key)

        if include_dirs:
            yield FileEntry(
                absolute_path=path.absolute(),
                relative_path=rel,
                is_directory=True,
                size_bytes=0,
            )
        try:
            stack.extend(_children(path, f"{rel}/"))
        except OSError as exc:
            logger.warning("Skipping unreadable directory %s: %s", path, exc)


def count_files(entries: Iterable[FileEntry]) -> int:
    return sum(1 for entry in entries if not entry.is_directory)


def total_size(entries: Iterable[FileEntry]) -> int:
    return sum(entry.size_bytes for entry in entries if not entry.is_directory)


def summarize(root: str | Path) -> TreeStats:
    """Fold a directory walk into file/directory counts and total bytes."""
    files = directories = total = 0
    for entry in walk(root, include_dirs=True):
        if entry.is_directory:
            directories += 1
        else:
            files += 1
            total += entry.size_bytes
    return TreeStats(files=files, directories=directories, total_bytes=total)


def tree_size(path: str | Path) -> int:
    """Size of a file, or the recursive size of all files under a directory."""
    path = Path(path)
    try:
        st = path.stat()
    except OSError:
        raise NotFoundError(f"Path {path} does not exist")
    if stat.S_ISDIR(st.st_mode):
        return total_size(walk(path))
    return st.st_size
