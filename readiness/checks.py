"""
Repository and App Checks

Evaluators for documentation, tooling configuration, governance files and
observability dependencies. Each one is a pure function of the files under
the repository and returns a CriterionCheck; absence is a FAIL (or
NOT_APPLICABLE when there is nothing to judge), never an exception.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from readiness.fs_utils import (
    MAX_SCAN_BYTES,
    first_existing,
    is_directory,
    is_file,
    read_json,
    read_package_scripts,
    read_text,
    to_posix,
    walk_files,
)
from readiness.models import AppInfo, CriterionCheck, RepoContext

logger = logging.getLogger(__name__)


ESLINT_FILES = [
    ".eslintrc", ".eslintrc.js", ".eslintrc.cjs", ".eslintrc.json",
    ".eslintrc.yaml", ".eslintrc.yml",
    "eslint.config.js", "eslint.config.mjs", "eslint.config.cjs", "eslint.config.ts",
]

LINT_FILES = ESLINT_FILES + [
    ".ruff.toml", "ruff.toml", ".pylintrc", "pylintrc", ".flake8",
    "setup.cfg", "tox.ini",
    ".golangci.yml", ".golangci.yaml", "golangci.yml", "golangci.yaml",
    "biome.json", "clippy.toml", ".rubocop.yml",
]

TEST_CONFIG_FILES = [
    "jest.config.js", "jest.config.cjs", "jest.config.mjs", "jest.config.ts",
    "vitest.config.ts", "vitest.config.js", "vitest.config.mjs",
    "pytest.ini", "tox.ini", "phpunit.xml", ".mocharc.json", ".mocharc.yml",
]

TEST_DIRS = ["tests", "__tests__", "test", "spec"]

TYPECHECK_FILES = ["pyrightconfig.json", "mypy.ini", ".mypy.ini"]

README_FILES = ["README.md", "README.rst", "README.txt", "README"]

ENV_TEMPLATES = [".env.example", ".env.sample", ".env.template", "env.example"]

CODEOWNERS_FILES = ["CODEOWNERS", ".github/CODEOWNERS", "docs/CODEOWNERS"]

PR_TEMPLATES = [
    ".github/pull_request_template.md",
    ".github/PULL_REQUEST_TEMPLATE.md",
    ".github/PULL_REQUEST_TEMPLATE",
    "pull_request_template.md",
    "PULL_REQUEST_TEMPLATE.md",
    "docs/pull_request_template.md",
]

DEPENDENCY_BOTS = [
    ".github/dependabot.yml", ".github/dependabot.yaml",
    "renovate.json", "renovate.json5", ".renovaterc", ".renovaterc.json",
    ".github/renovate.json", ".github/renovate.json5",
]

LOCKFILES = [
    "package-lock.json", "npm-shrinkwrap.json", "yarn.lock", "pnpm-lock.yaml", "bun.lockb",
    "poetry.lock", "uv.lock", "Pipfile.lock", "pdm.lock",
    "go.sum", "Cargo.lock", "gradle.lockfile", "composer.lock", "Gemfile.lock",
]

INTEGRATION_DIRS = [
    "integration", "integration_tests", "e2e",
    "tests/integration", "tests/e2e", "test/integration", "test/e2e",
    "cypress",
]

INTEGRATION_CONFIGS = [
    "playwright.config.ts", "playwright.config.js",
    "cypress.config.ts", "cypress.config.js", "cypress.json",
]

# Files whose text lists dependencies
DEPENDENCY_MANIFESTS = [
    "package.json", "pyproject.toml", "requirements.txt", "requirements-dev.txt",
    "Pipfile", "setup.py", "go.mod", "Cargo.toml", "pom.xml", "build.gradle",
]

SOURCE_EXTENSIONS = {
    ".js", ".mjs", ".cjs", ".ts", ".tsx", ".jsx",
    ".py", ".go", ".rs", ".java", ".kt", ".rb",
}

README_TEST = re.compile(r"\b(test|tests|testing|pytest|go test|cargo test)\b")
README_BUILD = re.compile(r"\b(build|compile)\b")
README_RUN = re.compile(r"\b(run|start|serve)\b")

GUARDRAIL_PATTERN = re.compile(
    r"\b(never|do not|don't|must not|forbidden|not allowed|requires? (human )?approval)\b",
    re.IGNORECASE,
)

LOGGING_DEPS = re.compile(
    r"(\bpino\b|\bwinston\b|\bbunyan\b|\bstructlog\b|\bloguru\b|python-json-logger"
    r"|go\.uber\.org/zap|uber-go/zap|sirupsen/logrus|rs/zerolog|log/slog"
    r"|\btracing-subscriber\b|\bslog\b|logback|log4j)",
    re.IGNORECASE,
)


# ════════════════════════════════════════════════════════════
# SHARED HELPERS
# ════════════════════════════════════════════════════════════

def rel(ctx: RepoContext, path: Path) -> str:
    return to_posix(ctx.root, path)


def has_any_manifest(app_dir: Path) -> bool:
    return any(is_file(app_dir / name) for name in DEPENDENCY_MANIFESTS)


def package_dependencies(app_dir: Path) -> list[str]:
    """Dependency names declared in app_dir/package.json"""
    pkg = read_json(app_dir / "package.json") or {}
    names = []
    for section in ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies"):
        deps = pkg.get(section)
        if isinstance(deps, dict):
            names.extend(str(name) for name in deps)
    return names


def manifest_texts(app_dir: Path) -> list[tuple[str, str]]:
    """(filename, dependency text) for each manifest present in app_dir"""
    texts = []
    for name in DEPENDENCY_MANIFESTS:
        path = app_dir / name
        if not is_file(path):
            continue
        if name == "package.json":
            text = "\n".join(package_dependencies(app_dir))
        else:
            text = read_text(path) or ""
        texts.append((name, text))
    return texts


def find_dependency(app_dir: Path, pattern: re.Pattern) -> Optional[str]:
    """Name of the first manifest whose dependencies match pattern"""
    for name, text in manifest_texts(app_dir):
        if pattern.search(text):
            return name
    return None


def scan_sources(root: Path, pattern: re.Pattern) -> Optional[Path]:
    """First source file under root whose text matches pattern (bounded walk)"""
    for path in walk_files(root):
        if path.suffix.lower() not in SOURCE_EXTENSIONS:
            continue
        text = read_text(path, max_bytes=MAX_SCAN_BYTES)
        if text and pattern.search(text):
            return path
    return None


# ════════════════════════════════════════════════════════════
# DOCUMENTATION
# ════════════════════════════════════════════════════════════

def check_readme(ctx: RepoContext) -> CriterionCheck:
    name = first_existing(ctx.root, README_FILES)
    if not name:
        return CriterionCheck.failed("README.md not found.")

    lower = (read_text(ctx.root / name) or "").lower()
    has_test = bool(README_TEST.search(lower))
    has_build = bool(README_BUILD.search(lower))
    has_run = bool(README_RUN.search(lower))

    if has_test and (has_build or has_run):
        return CriterionCheck.passed(f"{name} includes run/build/test guidance.", [name])
    return CriterionCheck.failed(f"{name} found but missing clear run/build/test guidance.")


def check_agents_md(ctx: RepoContext) -> CriterionCheck:
    if not is_file(ctx.root / "AGENTS.md"):
        return CriterionCheck.failed("AGENTS.md not found.")
    return CriterionCheck.passed("AGENTS.md present at repo root.", ["AGENTS.md"])


def check_agent_guardrails(ctx: RepoContext) -> CriterionCheck:
    text = read_text(ctx.root / "AGENTS.md")
    if text is None:
        return CriterionCheck.failed("AGENTS.md not found.")
    if GUARDRAIL_PATTERN.search(text):
        return CriterionCheck.passed("AGENTS.md states explicit agent guardrails.", ["AGENTS.md"])
    return CriterionCheck.failed("AGENTS.md has no explicit guardrails (never/must not/approval).")


# ════════════════════════════════════════════════════════════
# DEV ENVIRONMENT & GOVERNANCE
# ════════════════════════════════════════════════════════════

def check_devcontainer(ctx: RepoContext) -> CriterionCheck:
    found = first_existing(ctx.root, [".devcontainer/devcontainer.json", ".devcontainer.json"])
    if found:
        return CriterionCheck.passed("Dev container configuration found.", [found])
    return CriterionCheck.failed("No devcontainer configuration found.")


def check_precommit(ctx: RepoContext) -> CriterionCheck:
    found = first_existing(ctx.root, [".pre-commit-config.yaml", ".pre-commit-config.yml", ".husky"])
    if found:
        return CriterionCheck.passed("Pre-commit tooling detected.", [found])

    pkg = read_json(ctx.root / "package.json") or {}
    if "lint-staged" in read_package_scripts(ctx.root) or "lint-staged" in pkg:
        return CriterionCheck.passed("lint-staged configured in package.json.", ["package.json"])

    return CriterionCheck.failed("No pre-commit tooling detected.")


def check_env_template(ctx: RepoContext) -> CriterionCheck:
    found = first_existing(ctx.root, ENV_TEMPLATES)
    if found:
        return CriterionCheck.passed("Environment template found.", [found])
    return CriterionCheck.failed("No .env.example or equivalent template found.")


def check_codeowners(ctx: RepoContext) -> CriterionCheck:
    found = first_existing(ctx.root, CODEOWNERS_FILES)
    if found:
        return CriterionCheck.passed("CODEOWNERS file found.", [found])
    return CriterionCheck.failed("No CODEOWNERS file found.")


def check_pr_template(ctx: RepoContext) -> CriterionCheck:
    found = first_existing(ctx.root, PR_TEMPLATES)
    if found:
        return CriterionCheck.passed("Pull request template found.", [found])
    return CriterionCheck.failed("No pull request template found.")


def check_dependency_updates(ctx: RepoContext) -> CriterionCheck:
    found = first_existing(ctx.root, DEPENDENCY_BOTS)
    if found:
        return CriterionCheck.passed("Automated dependency updates configured.", [found])
    return CriterionCheck.failed("No Dependabot or Renovate configuration found.")


# ════════════════════════════════════════════════════════════
# PER-APP TOOLING
# ════════════════════════════════════════════════════════════

def check_lint_config(ctx: RepoContext, app: AppInfo) -> CriterionCheck:
    app_dir = ctx.app_root(app)
    config = first_existing(app_dir, LINT_FILES)
    if config:
        return CriterionCheck.passed(
            "Lint configuration or script detected.", [rel(ctx, app_dir / config)])

    if "lint" in read_package_scripts(app_dir):
        return CriterionCheck.passed(
            "Lint configuration or script detected.", [rel(ctx, app_dir / "package.json")])

    pyproject = read_text(app_dir / "pyproject.toml")
    if pyproject and re.search(r"^\[tool\.(ruff|pylint|flake8)", pyproject, re.MULTILINE):
        return CriterionCheck.passed(
            "pyproject.toml includes lint tool config.", [rel(ctx, app_dir / "pyproject.toml")])

    return CriterionCheck.failed("No lint config or lint script found in app.")


def check_type_check(ctx: RepoContext, app: AppInfo) -> CriterionCheck:
    app_dir = ctx.app_root(app)

    typed = first_existing(app_dir, ["go.mod", "Cargo.toml"])
    if typed:
        return CriterionCheck.passed(
            "Typed language module detected (Go/Rust).", [rel(ctx, app_dir / typed)])

    tsconfig = app_dir / "tsconfig.json"
    if is_file(tsconfig):
        config = read_json(tsconfig) or {}
        options = config.get("compilerOptions") or {}
        if not isinstance(options, dict):
            options = {}
        if options.get("strict") or options.get("strictNullChecks") or options.get("noImplicitAny"):
            return CriterionCheck.passed(
                "tsconfig.json with strict options detected.", [rel(ctx, tsconfig)])
        return CriterionCheck.failed("tsconfig.json found but strict options missing.")

    config = first_existing(app_dir, TYPECHECK_FILES)
    if config:
        return CriterionCheck.passed(
            f"Type check config found ({config}).", [rel(ctx, app_dir / config)])

    pyproject = read_text(app_dir / "pyproject.toml")
    if pyproject and re.search(r"\[tool\.mypy\]|\[tool\.pyright\]", pyproject):
        return CriterionCheck.passed(
            "pyproject.toml includes type checking tool config.",
            [rel(ctx, app_dir / "pyproject.toml")])

    return CriterionCheck.failed("No type checking configuration found.")


def check_unit_tests(ctx: RepoContext, app: AppInfo) -> CriterionCheck:
    app_dir = ctx.app_root(app)

    if "test" in read_package_scripts(app_dir):
        return CriterionCheck.passed(
            "Unit test command or config detected.", [rel(ctx, app_dir / "package.json")])

    config = first_existing(app_dir, TEST_CONFIG_FILES)
    if config:
        return CriterionCheck.passed(
            "Unit test command or config detected.", [rel(ctx, app_dir / config)])

    for name in TEST_DIRS:
        if is_directory(app_dir / name):
            return CriterionCheck.passed(
                "Unit test directory detected.", [rel(ctx, app_dir / name)])

    pyproject = read_text(app_dir / "pyproject.toml")
    if pyproject and "[tool.pytest.ini_options]" in pyproject:
        return CriterionCheck.passed(
            "pyproject.toml includes pytest config.", [rel(ctx, app_dir / "pyproject.toml")])

    return CriterionCheck.failed("No unit test command/config detected.")


def check_lockfile(ctx: RepoContext, app: AppInfo) -> CriterionCheck:
    app_dir = ctx.app_root(app)
    if not has_any_manifest(app_dir):
        return CriterionCheck.not_applicable("No dependency manifest in app.")

    for base in (app_dir, ctx.root):
        found = first_existing(base, LOCKFILES)
        if found:
            return CriterionCheck.passed("Dependency lockfile found.", [rel(ctx, base / found)])

    return CriterionCheck.failed("No dependency lockfile found for app or repo root.")


def check_integration_tests(ctx: RepoContext, app: AppInfo) -> CriterionCheck:
    app_dir = ctx.app_root(app)

    found = first_existing(app_dir, INTEGRATION_DIRS + INTEGRATION_CONFIGS)
    if found:
        return CriterionCheck.passed("Integration tests detected.", [rel(ctx, app_dir / found)])

    scripts = read_package_scripts(app_dir)
    if any("integration" in name or "e2e" in name for name in scripts):
        return CriterionCheck.passed(
            "Integration test script detected.", [rel(ctx, app_dir / "package.json")])

    return CriterionCheck.failed("No integration or end-to-end tests detected.")


# ════════════════════════════════════════════════════════════
# OBSERVABILITY
# ════════════════════════════════════════════════════════════

TRACING_DEPS = re.compile(
    r"(opentelemetry|dd-trace|\bddtrace\b|jaeger-client|zipkin|elastic-apm"
    r"|@sentry/tracing|go\.opentelemetry\.io/otel|aws-xray-sdk)",
    re.IGNORECASE,
)

TRACING_ENTRYPOINTS = [
    "tracing.ts", "tracing.js", "instrumentation.ts", "instrumentation.js",
    "otel.ts", "otel.js",
    "src/tracing.ts", "src/tracing.js", "src/instrumentation.ts",
    "src/instrumentation.js", "src/otel.ts", "src/otel.js",
    "tracing.py", "telemetry.py", "otel.py",
    "app/tracing.py", "src/tracing.py", "app/telemetry.py",
    "tracing.go", "telemetry/tracing.go", "internal/telemetry/tracing.go",
]

TRACING_CODE = re.compile(
    r"(NodeSDK\s*\(|TracerProvider\s*\(|get_tracer\s*\(|getTracer\s*\("
    r"|start_as_current_span|startActiveSpan|sdktrace\.NewTracerProvider|otel\.Tracer\s*\()"
)

METRICS_DEPS = re.compile(
    r"(prom-client|prometheus[_-]client|client_golang|@opentelemetry/sdk-metrics"
    r"|opentelemetry-exporter-prometheus|go\.opentelemetry\.io/otel/metric"
    r"|\bstatsd\b|hot-shots|datadog|micrometer)",
    re.IGNORECASE,
)

METRICS_ENTRYPOINTS = [
    "metrics.ts", "metrics.js", "src/metrics.ts", "src/metrics.js",
    "metrics.py", "app/metrics.py", "src/metrics.py",
    "metrics.go", "internal/metrics/metrics.go", "telemetry/metrics.go",
]

METRICS_CODE = re.compile(
    r"(collectDefaultMetrics|new\s+(client\.)?(Counter|Histogram|Gauge|Summary)\s*\("
    r"|MeterProvider\s*\(|get_meter\s*\(|getMeter\s*\(|promauto\.New"
    r"|prometheus\.New(Counter|Histogram|Gauge)|start_http_server\s*\()"
)


def check_composite_telemetry(ctx: RepoContext, app: AppInfo, kind: str,
                              deps: re.Pattern, entrypoints: list[str],
                              code: re.Pattern) -> CriterionCheck:
    """
    Pass only with BOTH a dependency and an instrumentation signal.

    The instrumentation signal is a conventional entrypoint file, or, when
    telemetry scanning is enabled, a matching pattern in app sources.
    """
    app_dir = ctx.app_root(app)
    if not has_any_manifest(app_dir):
        return CriterionCheck.not_applicable("No dependency manifest in app.")

    manifest = find_dependency(app_dir, deps)
    entry = first_existing(app_dir, entrypoints)

    if manifest and entry:
        return CriterionCheck.passed(
            f"{kind.capitalize()} dependency and instrumentation entrypoint found.",
            [rel(ctx, app_dir / manifest), rel(ctx, app_dir / entry)],
        )

    if manifest and ctx.options.telemetry_scan:
        hit = scan_sources(app_dir, code)
        if hit:
            return CriterionCheck.passed(
                f"{kind.capitalize()} dependency found and setup detected in source.",
                [rel(ctx, app_dir / manifest), rel(ctx, hit)],
            )

    if manifest:
        hint = "" if ctx.options.telemetry_scan else " (deep scan disabled)"
        return CriterionCheck.failed(
            f"{kind.capitalize()} dependency found but no instrumentation entrypoint detected{hint}."
        )
    if entry:
        return CriterionCheck.failed(
            f"Instrumentation file found but no {kind} dependency declared.")
    return CriterionCheck.failed(f"No {kind} dependency or instrumentation found.")


def check_tracing(ctx: RepoContext, app: AppInfo) -> CriterionCheck:
    return check_composite_telemetry(ctx, app, "tracing", TRACING_DEPS, TRACING_ENTRYPOINTS, TRACING_CODE)


def check_metrics(ctx: RepoContext, app: AppInfo) -> CriterionCheck:
    return check_composite_telemetry(ctx, app, "metrics", METRICS_DEPS, METRICS_ENTRYPOINTS, METRICS_CODE)


def check_structured_logging(ctx: RepoContext, app: AppInfo) -> CriterionCheck:
    app_dir = ctx.app_root(app)
    if not has_any_manifest(app_dir):
        return CriterionCheck.not_applicable("No dependency manifest in app.")

    manifest = find_dependency(app_dir, LOGGING_DEPS)
    if manifest:
        return CriterionCheck.passed(
            "Structured logging library declared.", [rel(ctx, app_dir / manifest)])
    return CriterionCheck.failed("No structured logging library found in manifests.")
