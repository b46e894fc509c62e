"""
Shared pytest fixtures for agent-readiness tests.

Fixture repositories are built under tmp_path with the writer helpers
below; nothing touches the real working tree.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from readiness.discovery import discover_apps  # noqa: E402
from readiness.models import AppInfo, GitMetadata, RepoContext, RunOptions  # noqa: E402


def write_file(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_json(path: Path, data: Any) -> Path:
    return write_file(path, json.dumps(data, indent=2))


def make_context(root: Path, apps: list[AppInfo] | None = None, **options: Any) -> RepoContext:
    """RepoContext without git probes; apps default to discovery"""
    return RepoContext(
        root=root,
        apps=tuple(discover_apps(root) if apps is None else apps),
        repo_url=None,
        git=GitMetadata(),
        options=RunOptions(**options),
    )


ROOT_APP = AppInfo(id=".", path=".", description="Repository root")


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """Empty repository root"""
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def ready_repo(repo: Path) -> Path:
    """Repository meeting every Level 1 criterion"""
    write_file(repo / "README.md", "# Sample\n\nRun: npm start\nTest: npm test\n")
    write_file(repo / "AGENTS.md", "# Agent Instructions\n")
    write_json(repo / "package.json", {
        "name": "root-app",
        "scripts": {"lint": "eslint .", "test": "vitest"},
    })
    write_json(repo / "tsconfig.json", {"compilerOptions": {"strict": True}})
    return repo


@pytest.fixture
def workspace_repo(repo: Path) -> Path:
    """npm workspace with apps/api (lint script) and apps/web (no lint)"""
    write_json(repo / "package.json", {"name": "mono", "private": True, "workspaces": ["apps/*"]})
    write_json(repo / "apps" / "api" / "package.json", {
        "name": "api",
        "description": "HTTP API",
        "scripts": {"lint": "eslint .", "test": "jest"},
    })
    write_json(repo / "apps" / "web" / "package.json", {
        "name": "web",
        "scripts": {"test": "vitest"},
    })
    return repo


@pytest.fixture
def fake_run(monkeypatch) -> Callable:
    """
    Replace subprocess.run with a table lookup.

    Usage: fake_run({("git", "rev-parse", "HEAD"): (0, "abc\\n")})
    Unlisted commands exit 1 with no output. A value that is an exception
    instance is raised instead.
    """
    import subprocess

    calls: list[list[str]] = []

    def install(table: dict) -> list[list[str]]:
        def run(argv, **kwargs):
            calls.append(list(argv))
            outcome = table.get(tuple(argv), (1, ""))
            if isinstance(outcome, BaseException):
                raise outcome
            code, stdout = outcome
            return subprocess.CompletedProcess(argv, code, stdout=stdout, stderr="")

        monkeypatch.setattr(subprocess, "run", run)
        return calls

    return install
