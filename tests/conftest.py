"""Shared fixtures: an isolated temp root and a fake host build environment."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

from crate_stager.config import BuildEnvironment


@pytest.fixture
def temp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``tempfile.gettempdir()`` at a private directory for the test."""

    root = tmp_path / "system-tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def build_environment(tmp_path: Path) -> BuildEnvironment:
    manifest_dir = tmp_path / "project"
    manifest_dir.mkdir(exist_ok=True)
    return BuildEnvironment(
        cargo="cargo",
        path=os.environ.get("PATH", ""),
        manifest_dir=manifest_dir,
        temp="/tmp-for-toolchain",
        ssh_auth_sock="/run/ssh-agent.sock",
        rustup_home="/opt/rustup",
        rustup_toolchain="stable",
    )
