"""
End-to-end staged build runs against a fake toolchain.

Coverage:
- manifest re-anchoring seen by the toolchain
- compile in the staging dir, execute from the original source dir
- staging dir removal on success and on build failure
- CLI `run` wiring, including the rerun directive on stdout
"""

from __future__ import annotations

import json
import os
import stat
import sys
from pathlib import Path

import pytest

from crate_stager.config import BuildEnvironment, StagingSettings
from crate_stager.errors import BuildProcessError
from crate_stager.orchestrator import RunState, StagedBuild, run_build_crate
from crate_stager.ui.cli import run_cli

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(os.name == "nt", reason="fake toolchain relies on shebang scripts"),
]

_FAKE_CARGO = """\
import json, os, pathlib, re, stat, sys

cwd = pathlib.Path.cwd()
manifest = (cwd / "Cargo.toml").read_text(encoding="utf-8")
json.dump(
    {{"cwd": str(cwd), "argv": sys.argv[1:], "env": dict(os.environ), "manifest": manifest}},
    open({report!r}, "w"),
)
if "FAIL_BUILD" in manifest:
    print("error: could not compile", file=sys.stderr)
    raise SystemExit(101)
binary = cwd / "target" / "debug" / {executable!r}
binary.parent.mkdir(parents=True, exist_ok=True)
binary.write_text(
    "#!" + {python!r} + "\\n"
    "import pathlib\\n"
    "print('hello from build script')\\n"
    "pathlib.Path('generated.rs').write_text('// generated\\\\n')\\n"
)
binary.chmod(binary.stat().st_mode | stat.S_IXUSR)
"""


def _write_executable(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_cargo(tmp_path: Path) -> tuple[Path, Path]:
    report = tmp_path / "cargo-report.json"
    body = _FAKE_CARGO.format(report=str(report), executable="build-script", python=sys.executable)
    cargo = _write_executable(tmp_path / "fake-cargo", f"#!{sys.executable}\n{body}")
    return cargo, report


@pytest.fixture
def build_crate(tmp_path: Path) -> Path:
    src = tmp_path / "project" / "build-script"
    (src / "src").mkdir(parents=True)
    (src / "Cargo.toml").write_text(
        '[package]\nname = "build-script"\n\n[dependencies]\ndep = { path = "../lib" }\n',
        encoding="utf-8",
    )
    (src / "src" / "main.rs").write_text('fn main() { println!("hello"); }\n', encoding="utf-8")
    return src


def _environment(cargo: Path, manifest_dir: Path) -> BuildEnvironment:
    return BuildEnvironment(
        cargo=str(cargo),
        path=os.environ.get("PATH", ""),
        manifest_dir=manifest_dir,
        rustup_toolchain="stable",
    )


def test_end_to_end_stage_compile_execute_release(
    build_crate: Path,
    fake_cargo: tuple[Path, Path],
    temp_root: Path,
    capfd: pytest.CaptureFixture[str],
) -> None:
    cargo, report = fake_cargo
    build = StagedBuild(
        build_crate,
        environment=_environment(cargo, Path("/proj")),
        settings=StagingSettings(build_crate_dirname=""),
        now_fn=lambda: 1_700_000_000.0,
    )

    build.run()

    payload = json.loads(report.read_text(encoding="utf-8"))
    staging = temp_root / "build-script-1700000000"
    assert Path(payload["cwd"]).resolve() == staging.resolve()
    assert payload["argv"] == ["build", "-vv"]
    assert 'dep = { path = "/proj/../lib" }' in payload["manifest"]
    assert payload["env"]["RUSTUP_TOOLCHAIN"] == "stable"
    assert payload["env"]["CARGO"] == str(cargo)

    assert (build_crate / "generated.rs").read_text(encoding="utf-8") == "// generated\n"
    assert not (staging / "generated.rs").exists()
    assert build.state is RunState.RELEASED_SUCCESS
    assert not staging.exists()
    assert list(temp_root.iterdir()) == []

    out = capfd.readouterr().out
    assert out.startswith(f"cargo:rerun-if-changed={build_crate}\n")
    assert "hello from build script" in out


def test_end_to_end_build_failure_cleans_up(
    build_crate: Path,
    fake_cargo: tuple[Path, Path],
    temp_root: Path,
    capfd: pytest.CaptureFixture[str],
) -> None:
    cargo, _ = fake_cargo
    manifest = build_crate / "Cargo.toml"
    manifest.write_text(manifest.read_text(encoding="utf-8") + "# FAIL_BUILD\n", encoding="utf-8")

    with pytest.raises(BuildProcessError) as excinfo:
        run_build_crate(build_crate, environment=_environment(cargo, build_crate.parent))

    assert excinfo.value.returncode == 101
    assert not (build_crate / "generated.rs").exists()
    assert list(temp_root.iterdir()) == []
    assert "error: could not compile" in capfd.readouterr().err


def test_cli_run_uses_process_environment(
    build_crate: Path,
    fake_cargo: tuple[Path, Path],
    temp_root: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capfd: pytest.CaptureFixture[str],
) -> None:
    cargo, report = fake_cargo
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CARGO", str(cargo))
    monkeypatch.setenv("CARGO_MANIFEST_DIR", str(build_crate.parent))
    monkeypatch.setenv("CRATE_STAGER_LEAK_SENTINEL", "leaked")
    log_file = tmp_path / "logs" / "run.jsonl"

    code = run_cli(["run", str(build_crate), "--log-file", str(log_file)])

    assert code == 0
    payload = json.loads(report.read_text(encoding="utf-8"))
    assert "CRATE_STAGER_LEAK_SENTINEL" not in payload["env"]
    expected_base = build_crate.parent / "build-script"
    assert f'dep = {{ path = "{expected_base}/../lib" }}' in payload["manifest"]
    assert (build_crate / "generated.rs").is_file()

    out = capfd.readouterr().out
    assert out.splitlines()[0] == f"cargo:rerun-if-changed={build_crate}"
    assert "Copying build crate source from" in out
    assert "Removing build crate staging dir" in out

    messages = [json.loads(line)["message"] for line in log_file.read_text().splitlines()]
    assert any(message.startswith("Removing build crate staging dir") for message in messages)
    assert list(temp_root.iterdir()) == []
