"""
crate-stager: filesystem utilities

File: src/crate_stager/utils/fs.py

Purpose
- Provide minimal filesystem helpers for atomic writes, containment checks and
  conflict removal.

Functional requirements
- Atomic writes use temp files in the destination directory and replace in a single step.
- Containment checks are lexical after resolution and never require the child to exist.
- Entry removal never traverses into symlink targets.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from pathlib import Path

PathLike = str | os.PathLike[str]

__all__ = [
    "atomic_write",
    "is_within",
    "remove_entry",
]


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> None:
    """
    Atomically write ``data`` to ``path``.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``.
    """

    target = Path(path)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    payload = data if isinstance(data, bytes) else data.encode(encoding)
    try:
        with os.fdopen(fd, "wb") as file_handle:
            file_handle.write(payload)
            file_handle.flush()
            os.fsync(file_handle.fileno())
        os.replace(temp_path, target)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def is_within(child: PathLike, parent: PathLike, *, allow_equal: bool = True) -> bool:
    """Return ``True`` if resolved ``child`` lies under resolved ``parent``.

    With ``allow_equal=False`` the child must be a strict descendant.
    """

    resolved_parent = Path(parent).resolve(strict=False)
    resolved_child = Path(child).resolve(strict=False)
    if resolved_child == resolved_parent:
        return allow_equal
    return _is_relative_to(resolved_child, resolved_parent)


def remove_entry(path: PathLike) -> None:
    """Remove ``path``: directories recursively, anything else (symlinks included) by unlink."""

    target = Path(path)
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
        return
    target.unlink()


def _is_relative_to(child: Path, parent: Path) -> bool:
    try:
        child.relative_to(parent)
    except ValueError:
        return False
    return True
