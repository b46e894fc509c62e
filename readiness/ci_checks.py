"""
CI Workflow Checks

Criteria judged from the text of CI definitions (GitHub Actions workflows
plus the common single-file providers). Each passing check cites the
workflow files that matched as evidence.

Some checks need more than local text to be meaningful; they report
NOT_EVALUATED unless CI signals were enabled for the run.
"""

import logging
import re
from pathlib import Path

from readiness.fs_utils import first_existing, is_directory, is_file, read_text, to_posix
from readiness.models import CriterionCheck, RepoContext

logger = logging.getLogger(__name__)


WORKFLOW_DIR = ".github/workflows"

SINGLE_FILE_PIPELINES = [
    ".gitlab-ci.yml",
    "azure-pipelines.yml",
    "Jenkinsfile",
    ".circleci/config.yml",
    "bitbucket-pipelines.yml",
]

RELEASE_CONFIGS = [
    ".goreleaser.yml", ".goreleaser.yaml",
    "release-please-config.json", ".releaserc", ".releaserc.json",
    ".changeset",
]

CACHE_PATTERN = re.compile(
    r"(actions/cache@|^\s*cache\s*:|cache-dependency-path|--mount=type=cache|restore_cache)",
    re.MULTILINE | re.IGNORECASE,
)
STRATEGY_PATTERN = re.compile(r"^\s*strategy\s*:", re.MULTILINE)
MATRIX_PATTERN = re.compile(r"^\s*matrix\s*:", re.MULTILINE)
PARALLEL_PATTERN = re.compile(r"^\s*parallel\s*:", re.MULTILINE)
DEPLOY_PATTERN = re.compile(
    r"\b(deploy|deployment|release|publish|goreleaser|semantic-release|changesets)\b",
    re.IGNORECASE,
)
FLAKY_PATTERN = re.compile(
    r"(\bflak(y|e|iness)\b|\bquarantine\b|rerunfailures|rerun-failed|--reruns?\b"
    r"|--retry\b|--retries\b|retryTimes|retry-on-failure|nick-fields/retry|buildpulse)",
    re.IGNORECASE,
)
AGENT_PATTERN = re.compile(
    r"(\bclaude\b|anthropics/|\bcodex\b|openai/|\bcopilot\b|\bdevin\b|openhands"
    r"|\baider\b|coderabbit|ai[- ]agent|coding[- ]agent)",
    re.IGNORECASE,
)
CANCEL_PATTERN = re.compile(r"cancel-in-progress\s*:\s*true", re.IGNORECASE)
TIMEOUT_PATTERN = re.compile(r"timeout-minutes\s*:\s*(\d+)", re.IGNORECASE)
PUSH_TRIGGER_PATTERN = re.compile(
    r"(^\s*push\s*:|^\s*schedule\s*:|^on\s*:\s*\[?[^\n]*\bpush\b|^on\s*:\s*push\b)",
    re.MULTILINE,
)

FAST_FEEDBACK_TIMEOUT_MINUTES = 15

SIGNALS_REQUIRED = "Requires --ci-provider github or --signals github."


def list_workflow_files(root: Path) -> list[Path]:
    """CI definition files, GitHub workflows first, in name order"""
    files = []
    wf_dir = root / WORKFLOW_DIR
    if is_directory(wf_dir):
        try:
            files.extend(sorted(
                p for p in wf_dir.iterdir()
                if p.suffix in (".yml", ".yaml") and is_file(p)
            ))
        except OSError:
            logger.debug("Cannot list %s", wf_dir)
    for rel in SINGLE_FILE_PIPELINES:
        if is_file(root / rel):
            files.append(root / rel)
    return files


def read_workflows(root: Path) -> list[tuple[str, str]]:
    """(relative path, text) for every readable CI definition"""
    workflows = []
    for path in list_workflow_files(root):
        text = read_text(path)
        if text is not None:
            workflows.append((to_posix(root, path), text))
    return workflows


def matching_workflows(root: Path, *patterns: re.Pattern) -> list[str]:
    """Workflow paths whose text matches ALL patterns"""
    return [
        rel for rel, text in read_workflows(root)
        if all(p.search(text) for p in patterns)
    ]


# ════════════════════════════════════════════════════════════
# UNGATED CHECKS
# ════════════════════════════════════════════════════════════

def check_ci_workflows(ctx: RepoContext) -> CriterionCheck:
    files = [to_posix(ctx.root, p) for p in list_workflow_files(ctx.root)]
    if files:
        return CriterionCheck.passed(f"{len(files)} CI definition(s) found.", files)
    return CriterionCheck.failed("No CI workflow definitions found.")


def check_ci_caching(ctx: RepoContext) -> CriterionCheck:
    hits = matching_workflows(ctx.root, CACHE_PATTERN)
    if hits:
        return CriterionCheck.passed("CI workflows cache dependencies.", hits)
    return CriterionCheck.failed("No caching directives found in CI workflows.")


def check_ci_matrix(ctx: RepoContext) -> CriterionCheck:
    hits = matching_workflows(ctx.root, STRATEGY_PATTERN, MATRIX_PATTERN)
    hits += [h for h in matching_workflows(ctx.root, PARALLEL_PATTERN, MATRIX_PATTERN) if h not in hits]
    if hits:
        return CriterionCheck.passed("CI uses matrix parallelism.", hits)
    return CriterionCheck.failed("No matrix strategy found in CI workflows.")


def check_deploy_automation(ctx: RepoContext) -> CriterionCheck:
    hits = matching_workflows(ctx.root, DEPLOY_PATTERN)
    config = first_existing(ctx.root, RELEASE_CONFIGS)
    if config:
        hits.append(config)
    if hits:
        return CriterionCheck.passed("Deploy or release automation detected.", hits)
    return CriterionCheck.failed("No deploy/release automation found in CI.")


def check_agent_automation(ctx: RepoContext) -> CriterionCheck:
    hits = matching_workflows(ctx.root, AGENT_PATTERN)
    if hits:
        return CriterionCheck.passed("CI workflows invoke coding agents.", hits)
    return CriterionCheck.failed("No agent automation found in CI workflows.")


# ════════════════════════════════════════════════════════════
# SIGNAL-GATED CHECKS
# ════════════════════════════════════════════════════════════

def check_fast_ci_feedback(ctx: RepoContext) -> CriterionCheck:
    if not ctx.options.ci_signals_enabled:
        return CriterionCheck.not_evaluated(SIGNALS_REQUIRED)

    hits = []
    for rel, text in read_workflows(ctx.root):
        timeouts = [int(m) for m in TIMEOUT_PATTERN.findall(text)]
        bounded = bool(timeouts) and max(timeouts) <= FAST_FEEDBACK_TIMEOUT_MINUTES
        if CANCEL_PATTERN.search(text) or bounded:
            hits.append(rel)

    if hits:
        return CriterionCheck.passed(
            "CI cancels superseded runs or bounds job duration.", hits)
    return CriterionCheck.failed(
        f"No cancel-in-progress or timeout-minutes <= {FAST_FEEDBACK_TIMEOUT_MINUTES} in CI workflows.")


def check_flaky_test_detection(ctx: RepoContext) -> CriterionCheck:
    if not ctx.options.ci_signals_enabled:
        return CriterionCheck.not_evaluated(SIGNALS_REQUIRED)

    hits = matching_workflows(ctx.root, FLAKY_PATTERN)
    if hits:
        return CriterionCheck.passed("CI retries or tracks flaky tests.", hits)
    return CriterionCheck.failed("No retry or flaky-test handling found in CI workflows.")


def check_deploy_frequency(ctx: RepoContext) -> CriterionCheck:
    if not ctx.options.ci_signals_enabled:
        return CriterionCheck.not_evaluated(SIGNALS_REQUIRED)

    hits = matching_workflows(ctx.root, DEPLOY_PATTERN, PUSH_TRIGGER_PATTERN)
    if hits:
        return CriterionCheck.passed("Deploys run automatically on push or schedule.", hits)
    return CriterionCheck.failed("No deploy workflow triggered on push or schedule.")
