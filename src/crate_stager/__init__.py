"""
crate-stager: staged build-crate runner

File: src/crate_stager/__init__.py

Purpose
- Package root. Re-exports the single pipeline entry point and its error types.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from crate_stager.config import BuildEnvironment, ConfigLoadError, StagingSettings
from crate_stager.errors import (
    BuildProcessError,
    ManifestError,
    MirrorError,
    StagedBuildError,
    StagingCleanupError,
    StagingError,
    StagingPathError,
)
from crate_stager.orchestrator import RunState, StagedBuild, run_build_crate

__version__ = "0.1.0"

__all__ = [
    "BuildEnvironment",
    "BuildProcessError",
    "ConfigLoadError",
    "ManifestError",
    "MirrorError",
    "RunState",
    "StagedBuild",
    "StagedBuildError",
    "StagingCleanupError",
    "StagingError",
    "StagingPathError",
    "StagingSettings",
    "__version__",
    "run_build_crate",
]
