"""Tests for integration command resolution and execution."""

from __future__ import annotations

import subprocess

from conftest import ROOT_APP, make_context, write_file, write_json

from readiness.integration import (
    INTEGRATION_TIMEOUT_SECONDS,
    check_integration_runnable,
    resolve_command,
    resolve_for_repo,
    run_command,
)
from readiness.models import CriterionStatus


def test_resolve_prefers_package_scripts(repo):
    write_json(repo / "package.json", {"scripts": {"e2e": "playwright test", "test:integration": "vitest -c int"}})
    write_file(repo / "Makefile", "integration:\n\tgo test ./...\n")

    command = resolve_command(repo)

    assert command.argv == ["npm", "run", "test:integration"]
    assert command.cwd == repo


def test_resolve_make_target(repo):
    write_file(repo / "Makefile", "build:\n\tgo build\n\ntest-integration:\n\tgo test -tags=integration ./...\n")

    assert resolve_command(repo).argv == ["make", "test-integration"]


def test_resolve_pytest_integration_dir(repo):
    write_file(repo / "pyproject.toml", "[project]\nname = 'svc'\n")
    (repo / "tests" / "integration").mkdir(parents=True)

    assert resolve_command(repo).display == "pytest tests/integration"


def test_resolve_go_integration_files(repo):
    write_file(repo / "go.mod", "module svc\n")
    write_file(repo / "internal" / "db" / "db_integration_test.go", "package db\n")

    assert resolve_command(repo).argv == ["go", "test", "-tags=integration", "./..."]


def test_resolve_nothing(repo):
    write_file(repo / "go.mod", "module svc\n")

    assert resolve_command(repo) is None


def test_resolve_for_repo_falls_through_to_apps(workspace_repo):
    write_json(workspace_repo / "apps" / "web" / "package.json", {"scripts": {"e2e": "playwright test"}})

    command = resolve_for_repo(make_context(workspace_repo))

    assert command.argv == ["npm", "run", "e2e"]
    assert command.cwd == workspace_repo / "apps" / "web"


def test_disabled_by_default(repo):
    result = check_integration_runnable(make_context(repo, apps=[ROOT_APP]))

    assert result.status is CriterionStatus.NOT_EVALUATED
    assert result.rationale == "Integration execution disabled (use --run-integration)."


def test_enabled_without_command_fails(repo):
    result = check_integration_runnable(make_context(repo, apps=[ROOT_APP], run_integration=True))

    assert result.status is CriterionStatus.FAIL
    assert result.rationale == "No integration test command found."


def test_passing_run(repo, fake_run):
    write_json(repo / "package.json", {"scripts": {"test:integration": "vitest"}})
    calls = fake_run({("npm", "run", "test:integration"): (0, "ok")})

    result = check_integration_runnable(make_context(repo, apps=[ROOT_APP], run_integration=True))

    assert calls == [["npm", "run", "test:integration"]]
    assert result.status is CriterionStatus.PASS
    assert result.rationale == "Integration tests passed: npm run test:integration."


def test_failing_run_reports_exit_code(repo, fake_run):
    write_json(repo / "package.json", {"scripts": {"integration": "jest -c int"}})
    fake_run({("npm", "run", "integration"): (3, "")})

    result = check_integration_runnable(make_context(repo, apps=[ROOT_APP], run_integration=True))

    assert result.status is CriterionStatus.FAIL
    assert "exit code 3" in result.rationale


def test_timeout_is_a_failure(repo, fake_run):
    write_json(repo / "package.json", {"scripts": {"e2e": "playwright test"}})
    fake_run({("npm", "run", "e2e"): subprocess.TimeoutExpired(["npm"], INTEGRATION_TIMEOUT_SECONDS)})

    result = check_integration_runnable(make_context(repo, apps=[ROOT_APP], run_integration=True))

    assert result.status is CriterionStatus.FAIL
    assert result.rationale.startswith(f"Integration tests timed out after {INTEGRATION_TIMEOUT_SECONDS}s")


def test_spawn_error(repo, fake_run):
    write_file(repo / "Makefile", "integration:\n\t./run.sh\n")
    fake_run({("make", "integration"): FileNotFoundError("make not installed")})

    outcome = run_command(resolve_command(repo))

    assert outcome.success is False
    assert outcome.error == "make not installed"
