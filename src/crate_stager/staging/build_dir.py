"""Scoped staging directory where the build crate is compiled and run."""

from __future__ import annotations

import logging
import shutil
import tempfile
import time
from pathlib import Path
from typing import TYPE_CHECKING

from crate_stager.constants import STAGING_DIR_PREFIX
from crate_stager.errors import StagingCleanupError, StagingPathError
from crate_stager.utils.fs import is_within

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

logger = logging.getLogger(__name__)


class StagingDirectory:
    """Exclusively owned directory under the system temp root.

    Use as a context manager; the directory is removed exactly once when the
    scope exits, whether the body succeeded or raised. The name only has
    second granularity, so two runs started within the same second share a
    path.
    """

    def __init__(self, path: Path, temp_root: Path) -> None:
        self.path = path
        self.temp_root = temp_root
        self._active = True

    @classmethod
    def acquire(
        cls,
        *,
        temp_root: Path | str | None = None,
        now_fn: Callable[[], float] | None = None,
        prefix: str = STAGING_DIR_PREFIX,
    ) -> StagingDirectory:
        """Create ``<temp root>/<prefix><unix seconds>`` and return its handle."""

        root = Path(tempfile.gettempdir() if temp_root is None else temp_root).absolute()
        seconds = int((now_fn or time.time)())
        path = root / f"{prefix}{seconds}"
        path.mkdir(parents=True, exist_ok=True)
        logger.debug("Created build crate staging dir: %s", path)
        return cls(path, root)

    @property
    def is_active(self) -> bool:
        return self._active

    def release(self) -> None:
        """Recursively delete the staging directory after checking it is under the temp root."""

        if not self._active:
            return
        if not is_within(self.path, self.temp_root, allow_equal=False):
            raise StagingPathError(self.path, self.temp_root)

        self._active = False
        logger.info("Removing build crate staging dir: %s", self.path)
        try:
            shutil.rmtree(self.path)
        except OSError as exc:
            raise StagingCleanupError(self.path) from exc

    def __enter__(self) -> StagingDirectory:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "active" if self._active else "released"
        return f"StagingDirectory(path={str(self.path)!r}, {state})"


__all__ = ["StagingDirectory"]
