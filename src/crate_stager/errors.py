"""Error hierarchy for staged build-crate runs.

Every failure in the pipeline is fatal; these types only exist so the CLI
boundary can map them to distinct exit codes.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import subprocess

    from crate_stager.staging.process_runner import ProcessInvocation


class StagedBuildError(RuntimeError):
    """Base error for staged build failures."""


class StagingError(StagedBuildError):
    """Base error for staging directory lifecycle failures."""


class StagingPathError(StagingError):
    """Raised when a staging path escapes the temp root; nothing is deleted."""

    def __init__(self, path: Path, temp_root: Path) -> None:
        super().__init__(
            f"refusing to delete staging dir {path} outside temp root {temp_root}"
        )
        self.path = path
        self.temp_root = temp_root


class StagingCleanupError(StagingError):
    """Raised when the staging directory cannot be removed."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Couldn't clean up build dir: {path}")
        self.path = path


class MirrorError(StagedBuildError):
    """Raised when copying the build crate tree fails."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class ManifestError(StagedBuildError):
    """Raised when the staged manifest cannot be read or written back."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{message} {path}")
        self.path = path


class BuildProcessError(StagedBuildError):
    """Raised when the compile or build-script process fails to spawn or exits non-zero."""

    def __init__(
        self,
        message: str,
        invocation: ProcessInvocation,
        result: subprocess.CompletedProcess[bytes] | None = None,
    ) -> None:
        detail = f"{message} with {result!r}" if result is not None else message
        super().__init__(detail)
        self.invocation = invocation
        self.result = result

    @property
    def returncode(self) -> int | None:
        return None if self.result is None else self.result.returncode


__all__ = [
    "BuildProcessError",
    "ManifestError",
    "MirrorError",
    "StagedBuildError",
    "StagingCleanupError",
    "StagingError",
    "StagingPathError",
]
