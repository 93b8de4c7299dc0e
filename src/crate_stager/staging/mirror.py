"""Recursive copy of the build crate source tree into the staging directory."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from crate_stager.errors import MirrorError
from crate_stager.utils.fs import remove_entry

logger = logging.getLogger(__name__)


def mirror_tree(source_dir: Path | str, dest_dir: Path | str) -> None:
    """Copy every directory and file under ``source_dir`` into ``dest_dir``.

    Entries already present at a destination file path are removed first, never
    merged. Only plain directory structure and regular file bytes are copied.
    Symlinks to files and directories are followed; permission bits are not
    preserved.
    """

    source = Path(source_dir)
    dest = Path(dest_dir)
    try:
        entries = sorted(os.scandir(source), key=lambda item: item.name)
    except OSError as exc:
        raise MirrorError("Cannot read directory", source) from exc

    for entry in entries:
        entry_path = Path(entry.path)
        out_path = dest / entry.name
        try:
            is_dir = entry.is_dir()
        except OSError as exc:
            raise MirrorError("Cannot get directory entry file type", entry_path) from exc

        if is_dir:
            try:
                out_path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise MirrorError("Cannot create directory", out_path) from exc
            mirror_tree(entry_path, out_path)
        else:
            _copy_file(entry_path, out_path)


def _copy_file(source: Path, dest: Path) -> None:
    if dest.exists() or dest.is_symlink():
        try:
            remove_entry(dest)
        except OSError as exc:
            raise MirrorError("Cannot clear conflicting entry", dest) from exc

    try:
        in_file = source.open("rb")
    except OSError as exc:
        raise MirrorError("Cannot open input file", source) from exc
    with in_file:
        try:
            out_file = dest.open("xb")
        except OSError as exc:
            raise MirrorError("Couldn't create output file", dest) from exc
        with out_file:
            try:
                shutil.copyfileobj(in_file, out_file)
            except OSError as exc:
                raise MirrorError("Cannot copy file content", source) from exc
    logger.debug("Copied %s -> %s", source, dest)


__all__ = ["mirror_tree"]
