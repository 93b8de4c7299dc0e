"""Unit tests for recursive build crate mirroring."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from crate_stager.errors import MirrorError
from crate_stager.staging.mirror import mirror_tree


def _snapshot(root: Path) -> dict[str, bytes | None]:
    tree: dict[str, bytes | None] = {}
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root).as_posix()
        tree[relative] = None if path.is_dir() else path.read_bytes()
    return tree


def _seed_crate(root: Path) -> Path:
    (root / "src" / "bin").mkdir(parents=True)
    (root / "assets" / "empty").mkdir(parents=True)
    (root / "Cargo.toml").write_text('[package]\nname = "gen"\n', encoding="utf-8")
    (root / "src" / "main.rs").write_text('fn main() { println!("hi"); }\n', encoding="utf-8")
    (root / "src" / "bin" / "extra.rs").write_text("fn main() {}\n", encoding="utf-8")
    (root / "assets" / "blob.bin").write_bytes(bytes(range(256)) * 4)
    return root


def test_mirror_reproduces_relative_paths_and_bytes(tmp_path: Path) -> None:
    source = _seed_crate(tmp_path / "gen")
    dest = tmp_path / "staged"
    dest.mkdir()

    mirror_tree(source, dest)

    assert _snapshot(dest) == _snapshot(source)
    assert (dest / "assets" / "empty").is_dir()


def test_mirror_replaces_conflicting_file(tmp_path: Path) -> None:
    source = _seed_crate(tmp_path / "gen")
    dest = tmp_path / "staged"
    (dest / "src").mkdir(parents=True)
    (dest / "src" / "main.rs").write_text("stale content that is much longer\n" * 10)

    mirror_tree(source, dest)

    assert (dest / "src" / "main.rs").read_bytes() == (source / "src" / "main.rs").read_bytes()


def test_mirror_replaces_conflicting_directory_without_merging(tmp_path: Path) -> None:
    source = _seed_crate(tmp_path / "gen")
    dest = tmp_path / "staged"
    conflict = dest / "Cargo.toml"
    conflict.mkdir(parents=True)
    (conflict / "leftover.txt").write_text("leftover", encoding="utf-8")

    mirror_tree(source, dest)

    assert conflict.is_file()
    assert conflict.read_bytes() == (source / "Cargo.toml").read_bytes()


def test_mirror_keeps_unrelated_destination_entries(tmp_path: Path) -> None:
    source = _seed_crate(tmp_path / "gen")
    dest = tmp_path / "staged"
    dest.mkdir()
    (dest / "unrelated.txt").write_text("still here", encoding="utf-8")

    mirror_tree(source, dest)

    assert (dest / "unrelated.txt").read_text(encoding="utf-8") == "still here"


def test_mirror_creates_missing_destination_ancestors(tmp_path: Path) -> None:
    source = _seed_crate(tmp_path / "gen")
    dest = tmp_path / "staged"
    dest.mkdir()

    mirror_tree(source, dest)

    assert (dest / "src" / "bin" / "extra.rs").is_file()


def test_mirror_missing_source_names_path(tmp_path: Path) -> None:
    missing = tmp_path / "does-not-exist"

    with pytest.raises(MirrorError) as excinfo:
        mirror_tree(missing, tmp_path / "staged")

    assert excinfo.value.path == missing
    assert str(missing) in str(excinfo.value)


def test_mirror_directory_over_existing_file_fails(tmp_path: Path) -> None:
    source = _seed_crate(tmp_path / "gen")
    dest = tmp_path / "staged"
    dest.mkdir()
    (dest / "src").write_text("not a directory", encoding="utf-8")

    with pytest.raises(MirrorError, match="Cannot create directory"):
        mirror_tree(source, dest)


@pytest.mark.skipif(os.name == "nt", reason="symlink creation needs privileges on Windows")
def test_mirror_copies_symlinked_file_content(tmp_path: Path) -> None:
    source = tmp_path / "gen"
    source.mkdir()
    target = tmp_path / "real.txt"
    target.write_text("linked content", encoding="utf-8")
    (source / "link.txt").symlink_to(target)
    dest = tmp_path / "staged"
    dest.mkdir()

    mirror_tree(source, dest)

    copied = dest / "link.txt"
    assert not copied.is_symlink()
    assert copied.read_text(encoding="utf-8") == "linked content"


@pytest.mark.skipif(os.name == "nt", reason="symlink creation needs privileges on Windows")
def test_mirror_recurses_into_symlinked_directory(tmp_path: Path) -> None:
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "util.rs").write_text("pub fn util() {}\n", encoding="utf-8")
    source = tmp_path / "gen"
    source.mkdir()
    (source / "shared").symlink_to(Path("..") / "shared", target_is_directory=True)
    dest = tmp_path / "staged"
    dest.mkdir()

    mirror_tree(source, dest)

    copied = dest / "shared"
    assert copied.is_dir()
    assert not copied.is_symlink()
    assert (copied / "util.rs").read_text(encoding="utf-8") == "pub fn util() {}\n"
