"""
Git Metadata

Reads commit, branch and sync state by shelling out to git. Every probe
returns None when git is missing, the directory is not a repository, or
the command fails.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from readiness.models import GitMetadata

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 10


def run_git(cwd: Path, *args: str) -> Optional[str]:
    """Run a git command and return its stripped stdout, or None"""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("git %s failed: %s", " ".join(args), e)
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip()


def detect_repo_root(start: Path) -> Path:
    """Top level of the enclosing work tree, or start itself"""
    top = run_git(start, "rev-parse", "--show-toplevel")
    return Path(top).resolve() if top else Path(start).resolve()


def get_git_metadata(root: Path) -> GitMetadata:
    if run_git(root, "rev-parse", "--is-inside-work-tree") != "true":
        return GitMetadata()

    commit_hash = run_git(root, "rev-parse", "HEAD")
    branch = run_git(root, "rev-parse", "--abbrev-ref", "HEAD")

    status = run_git(root, "status", "--porcelain")
    has_local_changes = None if status is None else len(status) > 0

    has_non_remote_commits = None
    upstream = run_git(root, "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}")
    if upstream:
        ahead = run_git(root, "rev-list", "--count", "@{u}..HEAD")
        if ahead is not None and ahead.isdigit():
            has_non_remote_commits = int(ahead) > 0

    return GitMetadata(
        commit_hash=commit_hash or None,
        branch=branch or None,
        has_local_changes=has_local_changes,
        has_non_remote_commits=has_non_remote_commits,
    )


def get_repo_url(root: Path) -> Optional[str]:
    return run_git(root, "config", "--get", "remote.origin.url") or None
