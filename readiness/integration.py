"""
Integration Test Runner

Resolves a best-guess integration test command for the repository and,
when the run opts in, executes it once with a fixed timeout.
"""

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from readiness.fs_utils import is_directory, is_file, read_package_scripts, read_text, walk_files
from readiness.models import CriterionCheck, RepoContext

logger = logging.getLogger(__name__)


INTEGRATION_TIMEOUT_SECONDS = 90

PACKAGE_SCRIPTS = ["test:integration", "integration", "test:e2e", "e2e"]

MAKE_TARGET = re.compile(r"^(integration|test-integration|integration-test)\s*:", re.MULTILINE)


@dataclass
class IntegrationCommand:
    """A command and the directory to run it in"""
    argv: list[str]
    cwd: Path

    @property
    def display(self) -> str:
        return " ".join(self.argv)


@dataclass
class RunOutcome:
    """Result of executing an integration command"""
    success: bool
    exit_code: Optional[int] = None
    error: Optional[str] = None
    timed_out: bool = False


def resolve_command(app_dir: Path) -> Optional[IntegrationCommand]:
    """Best-guess integration command for one directory"""
    scripts = read_package_scripts(app_dir)
    for name in PACKAGE_SCRIPTS:
        if name in scripts:
            return IntegrationCommand(["npm", "run", name], app_dir)

    makefile = read_text(app_dir / "Makefile")
    if makefile:
        match = MAKE_TARGET.search(makefile)
        if match:
            return IntegrationCommand(["make", match.group(1)], app_dir)

    is_python = is_file(app_dir / "pyproject.toml") or is_file(app_dir / "requirements.txt")
    if is_python and is_directory(app_dir / "tests" / "integration"):
        return IntegrationCommand(["pytest", "tests/integration"], app_dir)

    if is_file(app_dir / "go.mod"):
        for path in walk_files(app_dir):
            if path.name.endswith("_integration_test.go"):
                return IntegrationCommand(["go", "test", "-tags=integration", "./..."], app_dir)

    return None


def resolve_for_repo(ctx: RepoContext) -> Optional[IntegrationCommand]:
    """First directory that resolves, starting from the repo root"""
    candidates = [ctx.root] + [ctx.app_root(app) for app in ctx.apps if app.path != "."]
    for directory in candidates:
        command = resolve_command(directory)
        if command:
            logger.debug("Resolved integration command '%s' in %s", command.display, directory)
            return command
    return None


def run_command(command: IntegrationCommand,
                timeout: int = INTEGRATION_TIMEOUT_SECONDS) -> RunOutcome:
    """Execute the command; the child is killed if the timeout expires"""
    try:
        result = subprocess.run(
            command.argv,
            cwd=str(command.cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return RunOutcome(success=False, timed_out=True)
    except (OSError, subprocess.SubprocessError) as e:
        return RunOutcome(success=False, error=str(e))

    logger.debug("'%s' exited with %d", command.display, result.returncode)
    return RunOutcome(success=result.returncode == 0, exit_code=result.returncode)


def check_integration_runnable(ctx: RepoContext) -> CriterionCheck:
    if not ctx.options.run_integration:
        return CriterionCheck.not_evaluated("Integration execution disabled (use --run-integration).")

    command = resolve_for_repo(ctx)
    if command is None:
        return CriterionCheck.failed("No integration test command found.")

    outcome = run_command(command)
    if outcome.success:
        return CriterionCheck.passed(f"Integration tests passed: {command.display}.")
    if outcome.timed_out:
        return CriterionCheck.failed(
            f"Integration tests timed out after {INTEGRATION_TIMEOUT_SECONDS}s: {command.display}.")
    if outcome.error:
        return CriterionCheck.failed(
            f"Integration tests could not start ({command.display}): {outcome.error}")
    return CriterionCheck.failed(
        f"Integration tests failed with exit code {outcome.exit_code}: {command.display}.")
