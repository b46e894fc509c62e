"""Tests for the best-effort filesystem helpers."""

from __future__ import annotations

from conftest import write_file, write_json

from readiness.fs_utils import (
    first_existing,
    read_json,
    read_package_scripts,
    read_text,
    to_posix,
    walk_files,
)


def test_read_text_missing_file_is_none(tmp_path):
    assert read_text(tmp_path / "nope.txt") is None


def test_read_text_is_bounded(tmp_path):
    write_file(tmp_path / "big.txt", "x" * 100)

    assert read_text(tmp_path / "big.txt", max_bytes=10) == "x" * 10


def test_read_json_rejects_invalid_and_non_objects(tmp_path):
    write_file(tmp_path / "bad.json", "{not json")
    write_json(tmp_path / "list.json", [1, 2])
    write_json(tmp_path / "ok.json", {"a": 1})

    assert read_json(tmp_path / "bad.json") is None
    assert read_json(tmp_path / "list.json") is None
    assert read_json(tmp_path / "ok.json") == {"a": 1}


def test_package_scripts(tmp_path):
    write_json(tmp_path / "package.json", {"scripts": {"test": "jest"}})

    assert read_package_scripts(tmp_path) == {"test": "jest"}
    assert read_package_scripts(tmp_path / "missing") == {}


def test_to_posix(tmp_path):
    assert to_posix(tmp_path, tmp_path) == "."
    assert to_posix(tmp_path, tmp_path / "a" / "b.txt") == "a/b.txt"


def test_walk_files_prunes_ignored_dirs(tmp_path):
    write_file(tmp_path / "src" / "main.py")
    write_file(tmp_path / "node_modules" / "dep" / "index.js")
    write_file(tmp_path / ".git" / "HEAD")

    found = sorted(to_posix(tmp_path, p) for p in walk_files(tmp_path))

    assert found == ["src/main.py"]


def test_walk_files_stops_at_cap(tmp_path):
    for i in range(10):
        write_file(tmp_path / f"f{i}.txt")

    assert len(list(walk_files(tmp_path, max_files=3))) == 3


def test_first_existing_returns_candidate_as_given(tmp_path):
    write_file(tmp_path / ".github" / "CODEOWNERS")

    assert first_existing(tmp_path, ["CODEOWNERS", ".github/CODEOWNERS"]) == ".github/CODEOWNERS"
    assert first_existing(tmp_path, ["nothing"]) is None
