"""Compile and execute steps for a staged build crate.

Both steps block until the child exits and hand the child this process's own
stdout/stderr, so toolchain and build-script output streams through verbatim.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from crate_stager.constants import (
    DEFAULT_CARGO_ARGS,
    DEFAULT_PROFILE,
    ENV_CARGO,
    ENV_PATH,
    ENV_RUSTUP_HOME,
    ENV_RUSTUP_TOOLCHAIN,
    ENV_SSH_AUTH_SOCK,
    ENV_SYSTEMROOT,
    ENV_TEMP,
    TARGET_DIR,
)
from crate_stager.errors import BuildProcessError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from crate_stager.config.schema import BuildEnvironment

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProcessInvocation:
    """One child process: ``env=None`` inherits the current environment."""

    program: str
    args: tuple[str, ...]
    cwd: Path
    env: Mapping[str, str] | None = field(default=None)

    @property
    def command(self) -> list[str]:
        return [self.program, *self.args]


def compile_environment(
    environment: BuildEnvironment,
    *,
    system_root: str | None = None,
) -> dict[str, str]:
    """Return the complete environment handed to the toolchain; nothing else is inherited."""

    if system_root is None:
        system_root = os.environ.get(ENV_SYSTEMROOT, "")
    return {
        ENV_CARGO: environment.cargo,
        ENV_TEMP: environment.temp,
        ENV_SYSTEMROOT: system_root,
        ENV_PATH: environment.path,
        ENV_SSH_AUTH_SOCK: environment.ssh_auth_sock,
        ENV_RUSTUP_HOME: environment.rustup_home,
        ENV_RUSTUP_TOOLCHAIN: environment.rustup_toolchain,
    }


def run_invocation(
    invocation: ProcessInvocation,
    *,
    description: str,
) -> subprocess.CompletedProcess[bytes]:
    """Run ``invocation`` with inherited streams; raise unless it exits with status 0."""

    logger.debug("Running %s in %s", invocation.command, invocation.cwd)
    try:
        result = subprocess.run(
            invocation.command,
            cwd=invocation.cwd,
            env=None if invocation.env is None else dict(invocation.env),
            check=False,
        )
    except OSError as exc:
        raise BuildProcessError(f"failed to {description}", invocation) from exc

    if result.returncode != 0:
        raise BuildProcessError(f"Failed to {description}", invocation, result)
    return result


def compile_build_crate(
    build_dir: Path,
    environment: BuildEnvironment,
    *,
    cargo_args: Sequence[str] = DEFAULT_CARGO_ARGS,
    system_root: str | None = None,
) -> subprocess.CompletedProcess[bytes]:
    """Build the staged crate with a cleared environment, cwd = staging directory."""

    invocation = ProcessInvocation(
        program=environment.cargo,
        args=tuple(cargo_args),
        cwd=build_dir,
        env=compile_environment(environment, system_root=system_root),
    )
    return run_invocation(invocation, description=f"compile build crate at {build_dir}")


def build_script_path(
    build_dir: Path,
    executable_name: str,
    *,
    target_dir: str = TARGET_DIR,
    profile: str = DEFAULT_PROFILE,
) -> Path:
    """Location of the compiled binary under the staged build-output tree."""

    filename = f"{executable_name}.exe" if os.name == "nt" else executable_name
    return build_dir / target_dir / profile / filename


def run_build_script(
    build_dir: Path,
    executable_name: str,
    working_dir: Path,
    *,
    target_dir: str = TARGET_DIR,
    profile: str = DEFAULT_PROFILE,
) -> subprocess.CompletedProcess[bytes]:
    """Run the compiled build script from the original, unstaged source directory."""

    script = build_script_path(build_dir, executable_name, target_dir=target_dir, profile=profile)
    invocation = ProcessInvocation(program=str(script), args=(), cwd=working_dir)
    return run_invocation(invocation, description=f"run build script at {script}")


__all__ = [
    "ProcessInvocation",
    "build_script_path",
    "compile_build_crate",
    "compile_environment",
    "run_build_script",
    "run_invocation",
]
