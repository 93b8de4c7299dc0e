"""
crate-stager config package public API.

File: src/crate_stager/config/__init__.py

Purpose
- Export the explicit build environment, staging settings and their loaders.

Functional requirements
- Environment variables are read once per run and threaded through as values.
- Fail fast with clear load errors before any filesystem action.
"""

from crate_stager.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    load_environment,
    load_settings,
)
from crate_stager.config.schema import (
    BuildEnvironment,
    ConfigLoadError,
    StagingSettings,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "BuildEnvironment",
    "ConfigLoadError",
    "StagingSettings",
    "load_environment",
    "load_settings",
]
