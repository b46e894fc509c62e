"""Tests for git metadata probes."""

from __future__ import annotations

from readiness.git_info import detect_repo_root, get_git_metadata, get_repo_url
from readiness.models import GitMetadata

INSIDE = ("git", "rev-parse", "--is-inside-work-tree")


def test_git_missing_gives_empty_metadata(tmp_path, fake_run):
    fake_run({INSIDE: FileNotFoundError("git")})

    assert get_git_metadata(tmp_path) == GitMetadata()
    assert get_repo_url(tmp_path) is None


def test_not_a_work_tree(tmp_path, fake_run):
    calls = fake_run({INSIDE: (128, "")})

    assert get_git_metadata(tmp_path) == GitMetadata()
    assert calls == [list(INSIDE)]


def test_clean_checkout_without_upstream(tmp_path, fake_run):
    fake_run({
        INSIDE: (0, "true\n"),
        ("git", "rev-parse", "HEAD"): (0, "abc123\n"),
        ("git", "rev-parse", "--abbrev-ref", "HEAD"): (0, "main\n"),
        ("git", "status", "--porcelain"): (0, ""),
    })

    meta = get_git_metadata(tmp_path)

    assert meta.commit_hash == "abc123"
    assert meta.branch == "main"
    assert meta.has_local_changes is False
    assert meta.has_non_remote_commits is None


def test_dirty_checkout_ahead_of_upstream(tmp_path, fake_run):
    fake_run({
        INSIDE: (0, "true\n"),
        ("git", "rev-parse", "HEAD"): (0, "abc123\n"),
        ("git", "rev-parse", "--abbrev-ref", "HEAD"): (0, "feature\n"),
        ("git", "status", "--porcelain"): (0, " M README.md\n"),
        ("git", "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"): (0, "origin/feature\n"),
        ("git", "rev-list", "--count", "@{u}..HEAD"): (0, "2\n"),
    })

    meta = get_git_metadata(tmp_path)

    assert meta.has_local_changes is True
    assert meta.has_non_remote_commits is True


def test_repo_url(tmp_path, fake_run):
    fake_run({("git", "config", "--get", "remote.origin.url"): (0, "git@github.com:acme/app.git\n")})

    assert get_repo_url(tmp_path) == "git@github.com:acme/app.git"


def test_detect_repo_root(tmp_path, fake_run):
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    fake_run({("git", "rev-parse", "--show-toplevel"): (0, f"{tmp_path}\n")})

    assert detect_repo_root(nested) == tmp_path.resolve()


def test_detect_repo_root_outside_git(tmp_path, fake_run):
    fake_run({})

    assert detect_repo_root(tmp_path) == tmp_path.resolve()
