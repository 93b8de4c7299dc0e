"""
crate-stager: manifest path rewriting

File: src/crate_stager/staging/manifest.py

Purpose
- Re-anchor relative dependency paths in a staged ``Cargo.toml`` so they still
  resolve after the crate was copied away from its original location.

Functional requirements
- Pattern-based text substitution, not a TOML parse: every literal occurrence of
  the four ``path`` spellings is rewritten, including ones inside comments.
- Output differs from input only where those spellings occur.
- Not idempotent; apply exactly once per staged manifest.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final

from crate_stager.errors import ManifestError
from crate_stager.utils.fs import atomic_write

logger = logging.getLogger(__name__)

# The spellings never overlap, so replacement order does not change the result.
PATH_LITERAL_PREFIXES: Final[tuple[str, ...]] = (
    'path = "',
    'path="',
    "path = '",
    "path='",
)

_SIMPLE_ESCAPES: Final[dict[str, str]] = {
    "\t": "\\t",
    "\r": "\\r",
    "\n": "\\n",
    "\\": "\\\\",
    '"': '\\"',
    "'": "\\'",
}


def escape_base_dir(base_dir: Path | str) -> str:
    """Return ``base_dir`` as text safe to embed inside a quoted manifest string."""

    parts: list[str] = []
    for char in str(base_dir):
        escaped = _SIMPLE_ESCAPES.get(char)
        if escaped is not None:
            parts.append(escaped)
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            parts.append(f"\\u{ord(char):04x}")
        else:
            parts.append(char)
    return "".join(parts)


def qualify_manifest_paths_in_text(manifest_text: str, base_dir: Path | str) -> str:
    """Insert ``<base_dir>/`` right after the opening quote of every path literal."""

    escaped = escape_base_dir(base_dir)
    qualified = manifest_text
    for prefix in PATH_LITERAL_PREFIXES:
        qualified = qualified.replace(prefix, f"{prefix}{escaped}/")
    return qualified


def qualify_manifest_paths(manifest_path: Path | str, base_dir: Path | str) -> None:
    """Rewrite the manifest at ``manifest_path`` in place."""

    path = Path(manifest_path)
    try:
        with path.open(encoding="utf-8", newline="") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError("Can't read Cargo.toml to stream from", path) from exc

    qualified = qualify_manifest_paths_in_text(text, base_dir)

    try:
        atomic_write(path, qualified)
    except OSError as exc:
        raise ManifestError("Failed to write modified Cargo.toml at", path) from exc
    logger.debug("Qualified dependency paths in %s against %s", path, base_dir)


__all__ = [
    "PATH_LITERAL_PREFIXES",
    "escape_base_dir",
    "qualify_manifest_paths",
    "qualify_manifest_paths_in_text",
]
