"""
crate-stager: staged build orchestration

File: src/crate_stager/orchestrator.py

Purpose
- Run a build crate in isolation from the caller's project tree: stage,
  rewrite manifest paths, compile, execute, release.

Functional requirements
- Strictly linear pipeline with no retries and no partial success.
- Required environment is resolved before any filesystem action.
- The staging directory is released on every exit path.
"""

from __future__ import annotations

import logging
import sys
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from crate_stager.config import (
    BuildEnvironment,
    ConfigLoadError,
    StagingSettings,
    load_environment,
)
from crate_stager.constants import RERUN_IF_CHANGED_DIRECTIVE
from crate_stager.errors import StagedBuildError
from crate_stager.staging import (
    StagingDirectory,
    compile_build_crate,
    mirror_tree,
    qualify_manifest_paths,
    run_build_script,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import TextIO

logger = logging.getLogger(__name__)


class RunState(StrEnum):
    """Forward-only lifecycle of one staged build."""

    INIT = "init"
    STAGED = "staged"
    MANIFEST_REWRITTEN = "manifest_rewritten"
    COMPILED = "compiled"
    EXECUTED = "executed"
    RELEASED_SUCCESS = "released_success"
    RELEASED_ABORTED = "released_aborted"


class StagedBuild:
    """One run of the stage/rewrite/compile/execute/release pipeline.

    ``environment`` defaults to a snapshot of ``os.environ`` taken when
    :meth:`run` starts. ``temp_root`` and ``now_fn`` only exist to pin the
    staging location.
    """

    def __init__(
        self,
        build_crate_src: Path | str,
        *,
        environment: BuildEnvironment | None = None,
        settings: StagingSettings | None = None,
        directive_stream: TextIO | None = None,
        temp_root: Path | str | None = None,
        now_fn: Callable[[], float] | None = None,
    ) -> None:
        self.build_crate_src = Path(build_crate_src)
        self._environment = environment
        self._settings = settings or StagingSettings()
        self._directive_stream = directive_stream
        self._temp_root = temp_root
        self._now_fn = now_fn
        self._state = RunState.INIT
        self._staging_path: Path | None = None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def staging_path(self) -> Path | None:
        """Path of the staging directory once acquired (it no longer exists after ``run``)."""

        return self._staging_path

    def run(self) -> None:
        if self._state is not RunState.INIT:
            raise StagedBuildError(f"staged build already ran (state: {self._state.value})")

        src = self.build_crate_src
        settings = self._settings
        self._emit_rerun_directive(src)

        executable_name = executable_name_for(src)
        environment = self._environment or load_environment()
        base_dir = settings.base_dir(environment)

        staging = StagingDirectory.acquire(
            temp_root=self._temp_root,
            now_fn=self._now_fn,
            prefix=settings.staging_prefix,
        )
        self._staging_path = staging.path

        outcome = RunState.RELEASED_ABORTED
        try:
            with staging:
                logger.info(
                    "Copying build crate source from %s to %s",
                    src,
                    staging.path,
                    extra={"build_crate_src": str(src), "staging_dir": str(staging.path)},
                )
                mirror_tree(src, staging.path)
                self._advance(RunState.STAGED)

                # Having copied the crate, relative paths in the manifest must be re-anchored.
                qualify_manifest_paths(staging.path / settings.manifest_name, base_dir)
                self._advance(RunState.MANIFEST_REWRITTEN)

                compile_build_crate(staging.path, environment, cargo_args=settings.cargo_args)
                self._advance(RunState.COMPILED)

                run_build_script(
                    staging.path,
                    executable_name,
                    src,
                    target_dir=settings.target_dir,
                    profile=settings.profile,
                )
                self._advance(RunState.EXECUTED)
            outcome = RunState.RELEASED_SUCCESS
        finally:
            self._state = outcome
            logger.debug("Staged build finished: %s", outcome.value)

    def _advance(self, state: RunState) -> None:
        logger.debug("Staged build state: %s -> %s", self._state.value, state.value)
        self._state = state

    def _emit_rerun_directive(self, src: Path) -> None:
        stream = sys.stdout if self._directive_stream is None else self._directive_stream
        print(f"{RERUN_IF_CHANGED_DIRECTIVE}{src}", file=stream, flush=True)


def executable_name_for(build_crate_src: Path) -> str:
    """The binary is named after the last component of the build crate source dir."""

    name = build_crate_src.name
    if name in {"", ".", ".."}:
        raise ConfigLoadError(
            f"Couldn't get file name from build crate src dir: {build_crate_src}"
        )
    return name


def run_build_crate(
    build_crate_src: Path | str,
    *,
    environment: BuildEnvironment | None = None,
    settings: StagingSettings | None = None,
    directive_stream: TextIO | None = None,
) -> None:
    """Stage, compile and run the build crate at ``build_crate_src``.

    Returns ``None`` on success; every failure raises and leaves no staging
    directory behind.

    The rerun directive is always written to ``directive_stream``. The
    ``Copying ...`` and ``Removing ...`` progress lines go through the
    ``crate_stager`` logger, so they only reach stdout once the caller has
    installed a handler, for example with
    :func:`crate_stager.observability.setup_logging`.
    """

    StagedBuild(
        build_crate_src,
        environment=environment,
        settings=settings,
        directive_stream=directive_stream,
    ).run()


__all__ = ["RunState", "StagedBuild", "executable_name_for", "run_build_crate"]
