"""
Criterion Registry

The fixed, ordered table of readiness criteria. Definitions are plain
records; the evaluator for each one is looked up by id in the
REPO_CHECKS / APP_CHECKS dispatch tables, matching its scope.

Levels:
    1 Functional    - code can be run, linted, type checked and tested
    2 Documented    - workflows written down, environment reproducible
    3 Standardized  - ownership, observability and CI conventions enforced
    4 Optimized     - fast, parallel, measured feedback loops
    5 Autonomous    - agents operate in CI within stated guardrails
"""

from dataclasses import dataclass
from typing import Callable, Optional

from readiness import checks, ci_checks, integration
from readiness.models import AppInfo, CriterionCheck, CriterionScope, RepoContext


LEVEL_NAMES = {
    1: "Functional",
    2: "Documented",
    3: "Standardized",
    4: "Optimized",
    5: "Autonomous",
}

REPO = CriterionScope.REPO
APP = CriterionScope.APP


@dataclass(frozen=True)
class CriterionDefinition:
    """Static description of one criterion"""
    id: str
    title: str
    level: int
    pillar: str
    scope: CriterionScope
    recommendation: str                  # may contain {apps}
    fallback_recommendation: Optional[str] = None


CRITERIA: list[CriterionDefinition] = [
    # Level 1
    CriterionDefinition(
        "readme", "README with run/test/build guidance", 1, "Documentation", REPO,
        "Add a README.md with clear run/build/test instructions."),
    CriterionDefinition(
        "lint_config", "Lint configuration per app", 1, "Style & Validation", APP,
        "Add lint config or lint script for: {apps}.",
        "Add lint configuration for each app."),
    CriterionDefinition(
        "type_check", "Type checking configured per app", 1, "Build System", APP,
        "Add strict type checking configs for: {apps}.",
        "Add type checking configuration for each app."),
    CriterionDefinition(
        "unit_tests", "Unit test command or config per app", 1, "Testing", APP,
        "Add unit test configuration or command for: {apps}.",
        "Add unit tests or test command for each app."),

    # Level 2
    CriterionDefinition(
        "agents_md", "AGENTS.md instructions", 2, "Documentation", REPO,
        "Add AGENTS.md with repo workflow and guardrails."),
    CriterionDefinition(
        "devcontainer", "Reproducible dev environment hints", 2, "Dev Environment", REPO,
        "Add .devcontainer/devcontainer.json or equivalent setup hints."),
    CriterionDefinition(
        "precommit_hooks", "Pre-commit hooks configured", 2, "Style & Validation", REPO,
        "Add pre-commit hooks (pre-commit, husky, or lint-staged)."),
    CriterionDefinition(
        "env_template", "Environment variable template", 2, "Dev Environment", REPO,
        "Add a .env.example listing required environment variables."),
    CriterionDefinition(
        "ci_workflows", "CI pipeline defined", 2, "Build System", REPO,
        "Add a CI workflow (e.g. .github/workflows/ci.yml) that lints and tests."),
    CriterionDefinition(
        "lockfile", "Dependency lockfile per app", 2, "Build System", APP,
        "Commit a dependency lockfile for: {apps}.",
        "Commit dependency lockfiles for each app."),

    # Level 3
    CriterionDefinition(
        "codeowners", "Code ownership defined", 3, "Security & Governance", REPO,
        "Add a CODEOWNERS file so changes route to reviewers."),
    CriterionDefinition(
        "pr_template", "Pull request template", 3, "Security & Governance", REPO,
        "Add .github/pull_request_template.md with a verification checklist."),
    CriterionDefinition(
        "dependency_updates", "Automated dependency updates", 3, "Security & Governance", REPO,
        "Enable Dependabot or Renovate for dependency updates."),
    CriterionDefinition(
        "structured_logging", "Structured logging per app", 3, "Observability", APP,
        "Adopt a structured logging library in: {apps}.",
        "Adopt a structured logging library in each app."),
    CriterionDefinition(
        "tracing", "Distributed tracing per app", 3, "Observability", APP,
        "Add tracing SDK and instrumentation entrypoint for: {apps}.",
        "Add tracing instrumentation for each app."),
    CriterionDefinition(
        "integration_tests", "Integration tests per app", 3, "Testing", APP,
        "Add integration or end-to-end tests for: {apps}.",
        "Add integration tests for each app."),
    CriterionDefinition(
        "ci_caching", "CI dependency caching", 3, "Build System", REPO,
        "Cache dependencies in CI (actions/cache or setup-* cache options)."),

    # Level 4
    CriterionDefinition(
        "metrics", "Metrics instrumentation per app", 4, "Observability", APP,
        "Add a metrics SDK and instrumentation entrypoint for: {apps}.",
        "Add metrics instrumentation for each app."),
    CriterionDefinition(
        "ci_matrix", "Parallel CI matrix", 4, "Build System", REPO,
        "Split CI jobs with a matrix strategy to parallelize feedback."),
    CriterionDefinition(
        "fast_ci_feedback", "Fast CI feedback", 4, "Build System", REPO,
        "Set timeout-minutes and cancel-in-progress concurrency on CI workflows."),
    CriterionDefinition(
        "integration_tests_runnable", "Integration tests runnable locally", 4, "Testing", REPO,
        "Provide a test:integration script (or make integration) that passes within 90s."),
    CriterionDefinition(
        "deploy_automation", "Automated deploy/release", 4, "Build System", REPO,
        "Automate deploy or release from CI."),
    CriterionDefinition(
        "flaky_test_detection", "Flaky test detection", 4, "Testing", REPO,
        "Add test retries or flaky-test reporting to CI."),

    # Level 5
    CriterionDefinition(
        "deploy_frequency", "Continuous deployment", 5, "Build System", REPO,
        "Trigger deploys automatically on merge to the main branch."),
    CriterionDefinition(
        "agent_automation", "Agents wired into CI", 5, "Autonomy", REPO,
        "Add a workflow that runs a coding agent on issues or pull requests."),
    CriterionDefinition(
        "agent_guardrails", "Agent guardrails documented", 5, "Autonomy", REPO,
        "State what agents must never do (and what needs approval) in AGENTS.md."),
]


RepoCheck = Callable[[RepoContext], CriterionCheck]
AppCheck = Callable[[RepoContext, AppInfo], CriterionCheck]

REPO_CHECKS: dict[str, RepoCheck] = {
    "readme": checks.check_readme,
    "agents_md": checks.check_agents_md,
    "devcontainer": checks.check_devcontainer,
    "precommit_hooks": checks.check_precommit,
    "env_template": checks.check_env_template,
    "ci_workflows": ci_checks.check_ci_workflows,
    "codeowners": checks.check_codeowners,
    "pr_template": checks.check_pr_template,
    "dependency_updates": checks.check_dependency_updates,
    "ci_caching": ci_checks.check_ci_caching,
    "ci_matrix": ci_checks.check_ci_matrix,
    "fast_ci_feedback": ci_checks.check_fast_ci_feedback,
    "integration_tests_runnable": integration.check_integration_runnable,
    "deploy_automation": ci_checks.check_deploy_automation,
    "flaky_test_detection": ci_checks.check_flaky_test_detection,
    "deploy_frequency": ci_checks.check_deploy_frequency,
    "agent_automation": ci_checks.check_agent_automation,
    "agent_guardrails": checks.check_agent_guardrails,
}

APP_CHECKS: dict[str, AppCheck] = {
    "lint_config": checks.check_lint_config,
    "type_check": checks.check_type_check,
    "unit_tests": checks.check_unit_tests,
    "lockfile": checks.check_lockfile,
    "structured_logging": checks.check_structured_logging,
    "tracing": checks.check_tracing,
    "integration_tests": checks.check_integration_tests,
    "metrics": checks.check_metrics,
}


def get_criterion(criterion_id: str) -> Optional[CriterionDefinition]:
    for definition in CRITERIA:
        if definition.id == criterion_id:
            return definition
    return None


def recommend(definition: CriterionDefinition, failing_apps: list[str]) -> str:
    """Recommendation text, naming the failing apps when there are any"""
    if failing_apps and "{apps}" in definition.recommendation:
        return definition.recommendation.format(apps=", ".join(failing_apps))
    if definition.fallback_recommendation:
        return definition.fallback_recommendation
    return definition.recommendation
