"""
crate-stager: runtime config loader.

File: src/crate_stager/config/loader.py

Purpose
- Capture the host build tool environment as an explicit ``BuildEnvironment``.
- Load staging settings from defaults, TOML file, env vars, and CLI overrides.

What should be included in this file
- Precedence logic: CLI > env (CRATE_STAGER_) > file > defaults.
- TOML loading via ``tomllib``.
- Path normalization relative to config file location.

Functional requirements
- Reject unknown keys and values of the wrong type with ``ConfigLoadError``.
"""

from __future__ import annotations

import os
import shlex
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from crate_stager.config.schema import BuildEnvironment, ConfigLoadError, StagingSettings

DEFAULT_CONFIG_FILE: Final[str] = "crate-stager.toml"
ENV_PREFIX: Final[str] = "CRATE_STAGER_"
_SETTINGS_TABLE: Final[str] = "staging"


def load_environment(environ: Mapping[str, str] | None = None) -> BuildEnvironment:
    """Snapshot the variables the pipeline consumes; defaults to ``os.environ``."""

    return BuildEnvironment.from_environ(os.environ if environ is None else environ)


def load_settings(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    cli_overrides: Mapping[str, object] | None = None,
) -> StagingSettings:
    """Load effective settings with deterministic precedence: CLI > env > file > defaults."""

    resolved_path = _resolve_config_path(config_path)
    env_map = os.environ if environ is None else environ

    values: dict[str, Any] = {}
    file_payload = _load_toml_file(resolved_path, required=config_path is not None)
    for key, raw in file_payload.items():
        values[key] = _coerce(key, raw, source=str(resolved_path), base_dir=resolved_path.parent)

    for key in StagingSettings.field_names():
        env_name = f"{ENV_PREFIX}{key.upper()}"
        raw_env = env_map.get(env_name)
        if raw_env is None:
            continue
        raw_value: object = shlex.split(raw_env) if key == "cargo_args" else raw_env
        values[key] = _coerce(key, raw_value, source=env_name, base_dir=Path.cwd())

    for key, raw in (cli_overrides or {}).items():
        if raw is None:
            continue
        values[key] = _coerce(key, raw, source="command line", base_dir=Path.cwd())

    return StagingSettings(**values)


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc

    table = parsed.get(_SETTINGS_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigLoadError(f"[{_SETTINGS_TABLE}] must be a table: {path}")
    return table


def _coerce(key: str, value: object, *, source: str, base_dir: Path) -> object:
    if key not in StagingSettings.field_names():
        raise ConfigLoadError(f"unknown setting {key!r} in {source}")

    if key == "cargo_args":
        if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
            return tuple(value)
        raise ConfigLoadError(f"setting 'cargo_args' in {source} must be a list of strings")

    if key == "log_file":
        if isinstance(value, Path):
            return value
        if isinstance(value, str) and value.strip():
            candidate = Path(value).expanduser()
            return candidate if candidate.is_absolute() else (base_dir / candidate).resolve()
        raise ConfigLoadError(f"setting 'log_file' in {source} must be a non-empty path")

    if not isinstance(value, str):
        raise ConfigLoadError(f"setting {key!r} in {source} must be a string")
    if key == "log_level":
        return value.strip().upper()
    return value


__all__ = ["DEFAULT_CONFIG_FILE", "ENV_PREFIX", "load_environment", "load_settings"]
