"""Stable constants shared across the staging pipeline."""

from __future__ import annotations

from typing import Final

# Host build tool protocol.
RERUN_IF_CHANGED_DIRECTIVE: Final[str] = "cargo:rerun-if-changed="

# Build crate layout.
MANIFEST_FILENAME: Final[str] = "Cargo.toml"
TARGET_DIR: Final[str] = "target"
DEFAULT_PROFILE: Final[str] = "debug"
DEFAULT_CARGO_ARGS: Final[tuple[str, ...]] = ("build", "-vv")
DEFAULT_BUILD_CRATE_DIRNAME: Final[str] = "build-script"

# Staging directory naming: <temp root>/<prefix><unix seconds>.
STAGING_DIR_PREFIX: Final[str] = "build-script-"

# Environment variables handed to the toolchain when compiling.
ENV_CARGO: Final[str] = "CARGO"
ENV_TEMP: Final[str] = "TEMP"
ENV_PATH: Final[str] = "PATH"
ENV_SSH_AUTH_SOCK: Final[str] = "SSH_AUTH_SOCK"
ENV_MANIFEST_DIR: Final[str] = "CARGO_MANIFEST_DIR"
ENV_RUSTUP_HOME: Final[str] = "RUSTUP_HOME"
ENV_RUSTUP_TOOLCHAIN: Final[str] = "RUSTUP_TOOLCHAIN"
# For LLVM dll initialization on Windows.
ENV_SYSTEMROOT: Final[str] = "SYSTEMROOT"

__all__ = [
    "DEFAULT_BUILD_CRATE_DIRNAME",
    "DEFAULT_CARGO_ARGS",
    "DEFAULT_PROFILE",
    "ENV_CARGO",
    "ENV_MANIFEST_DIR",
    "ENV_PATH",
    "ENV_RUSTUP_HOME",
    "ENV_RUSTUP_TOOLCHAIN",
    "ENV_SSH_AUTH_SOCK",
    "ENV_SYSTEMROOT",
    "ENV_TEMP",
    "MANIFEST_FILENAME",
    "RERUN_IF_CHANGED_DIRECTIVE",
    "STAGING_DIR_PREFIX",
    "TARGET_DIR",
]
