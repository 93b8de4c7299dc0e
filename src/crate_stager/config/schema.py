"""
crate-stager: config value types.

File: src/crate_stager/config/schema.py

Purpose
- Typed, immutable views of the host build tool environment and of the
  staging settings that shape one run.

Functional requirements
- ``BuildEnvironment`` holds exactly the variables the pipeline consumes.
- ``StagingSettings`` defaults reproduce the fixed layout: ``cargo build -vv``,
  ``target/debug/<name>``, ``Cargo.toml`` at the crate root.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Final

from crate_stager.constants import (
    DEFAULT_BUILD_CRATE_DIRNAME,
    DEFAULT_CARGO_ARGS,
    DEFAULT_PROFILE,
    ENV_CARGO,
    ENV_MANIFEST_DIR,
    ENV_PATH,
    ENV_RUSTUP_HOME,
    ENV_RUSTUP_TOOLCHAIN,
    ENV_SSH_AUTH_SOCK,
    ENV_TEMP,
    MANIFEST_FILENAME,
    STAGING_DIR_PREFIX,
    TARGET_DIR,
)

_LOG_LEVELS: Final[frozenset[str]] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ConfigLoadError(ValueError):
    """Raised when the environment or config file cannot be loaded or coerced."""


@dataclass(frozen=True, slots=True)
class BuildEnvironment:
    """Variables supplied by the host build tool for one staged run."""

    cargo: str
    path: str
    manifest_dir: Path
    temp: str = ""
    ssh_auth_sock: str = ""
    rustup_home: str = ""
    rustup_toolchain: str = ""

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> BuildEnvironment:
        return cls(
            cargo=_required(environ, ENV_CARGO),
            path=_required(environ, ENV_PATH),
            manifest_dir=Path(_required(environ, ENV_MANIFEST_DIR)),
            temp=environ.get(ENV_TEMP, ""),
            ssh_auth_sock=environ.get(ENV_SSH_AUTH_SOCK, ""),
            rustup_home=environ.get(ENV_RUSTUP_HOME, ""),
            rustup_toolchain=environ.get(ENV_RUSTUP_TOOLCHAIN, ""),
        )


@dataclass(frozen=True, slots=True)
class StagingSettings:
    """Tunable layout of a staged run; defaults match the host build tool conventions."""

    cargo_args: tuple[str, ...] = DEFAULT_CARGO_ARGS
    profile: str = DEFAULT_PROFILE
    target_dir: str = TARGET_DIR
    manifest_name: str = MANIFEST_FILENAME
    build_crate_dirname: str = DEFAULT_BUILD_CRATE_DIRNAME
    staging_prefix: str = STAGING_DIR_PREFIX
    log_level: str = "INFO"
    log_file: Path | None = field(default=None)

    def __post_init__(self) -> None:
        if not self.cargo_args:
            raise ConfigLoadError("cargo_args must not be empty")
        for name in ("profile", "target_dir", "manifest_name", "staging_prefix"):
            if not getattr(self, name).strip():
                raise ConfigLoadError(f"{name} must be a non-empty string")
        if self.log_level.upper() not in _LOG_LEVELS:
            allowed = ", ".join(sorted(_LOG_LEVELS))
            raise ConfigLoadError(f"log_level must be one of: {allowed}")

    def base_dir(self, environment: BuildEnvironment) -> Path:
        """Directory the build crate's relative dependency paths were written against."""

        if not self.build_crate_dirname:
            return environment.manifest_dir
        return environment.manifest_dir / self.build_crate_dirname

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(item.name for item in fields(cls))


def _required(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    if value is None:
        raise ConfigLoadError(f"Can't get {name} from env")
    return value


__all__ = ["BuildEnvironment", "ConfigLoadError", "StagingSettings"]
