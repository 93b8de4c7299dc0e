"""Executable CLI entrypoint for ``crate_stager``."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

from crate_stager.config import ConfigLoadError
from crate_stager.errors import (
    BuildProcessError,
    ManifestError,
    MirrorError,
    StagingError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence


class ExitCode(IntEnum):
    """Deterministic process exit-code contract."""

    SUCCESS = 0
    BUILD_FAILED = 1
    CONFIG_ERROR = 2
    STAGING_ERROR = 3
    INTERNAL_ERROR = 4


def exit_code_for(exc: BaseException) -> ExitCode:
    """Map a pipeline failure to its exit code."""

    if isinstance(exc, BuildProcessError):
        return ExitCode.BUILD_FAILED
    if isinstance(exc, ConfigLoadError):
        return ExitCode.CONFIG_ERROR
    if isinstance(exc, (StagingError, MirrorError, ManifestError)):
        return ExitCode.STAGING_ERROR
    return ExitCode.INTERNAL_ERROR


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Entrypoint used by ``python -m crate_stager`` and the console script."""

    try:
        from crate_stager.ui.cli import run_cli

        return _normalize_exit_code(run_cli(argv))
    except SystemExit as exc:
        return _normalize_exit_code(exc.code)
    except Exception as exc:  # noqa: BLE001 - CLI boundary normalization.
        exit_code = exit_code_for(exc)
        _emit_failure(exc, exit_code)
        return int(exit_code)


def _normalize_exit_code(raw_code: object) -> int:
    if isinstance(raw_code, int) and raw_code in {code.value for code in ExitCode}:
        return raw_code
    if raw_code is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw_code, str) and raw_code.strip():
        _write_stderr(raw_code.strip())
    return int(ExitCode.INTERNAL_ERROR)


def _emit_failure(exc: BaseException, exit_code: ExitCode) -> None:
    if exit_code is ExitCode.INTERNAL_ERROR:
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
        return
    _write_stderr(str(exc).strip() or exc.__class__.__name__)


def _write_stderr(message: str) -> None:
    sys.stderr.write(message.rstrip("\n") + "\n")


__all__ = ["ExitCode", "cli_entrypoint", "exit_code_for"]
