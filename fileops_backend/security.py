from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

_DRIVE_RE = re.compile(r"^[A-Za-z]:")


def is_safe_basename(name: str) -> bool:
    """Allow only a bare filename such as an output prefix (no separators)."""
    if not isinstance(name, str) or not name.strip():
        return False
    if name in (".", "..") or "/" in name or "\\" in name:
        return False
    return name == Path(name).name


def is_unsafe_member_name(name: str) -> bool:
    """True for archive member names that could escape the target directory."""
    if not name or not name.strip():
        return True
    # Absolute paths, UNC prefixes and Windows drive letters. Colons elsewhere
    # are ordinary filename characters on POSIX.
    if name.startswith(("/", "\\")) or _DRIVE_RE.match(name):
        return True
    return ".." in PurePosixPath(name.replace("\\", "/")).parts


def safe_join(target_dir: Path, member_name: str) -> Path:
    """Resolve member_name under target_dir, refusing anything that lands outside.

    Raises ValueError on traversal; the archive reader reports it as a
    corrupt archive.
    """
    root = target_dir.resolve()
    resolved = (root / member_name).resolve()
    if resolved != root and root not in resolved.parents:
        raise ValueError(f"Archive member {member_name!r} escapes {target_dir}")
    return resolved
