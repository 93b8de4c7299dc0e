"""Utility exports for filesystem helpers."""

from crate_stager.utils.fs import atomic_write, is_within, remove_entry

__all__ = [
    "atomic_write",
    "is_within",
    "remove_entry",
]
