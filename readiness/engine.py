"""
Readiness Engine

Runs every criterion against a repository, aggregates per-app outcomes,
scores the five maturity levels and derives the next action items.

Evaluation is sequential: one criterion at a time, one app at a time, in
registry and discovery order. Evaluator exceptions are not caught here;
a defect in a check aborts the run.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Optional

from readiness.criteria import APP_CHECKS, CRITERIA, REPO_CHECKS, CriterionDefinition, recommend
from readiness.discovery import discover_apps
from readiness.git_info import get_git_metadata, get_repo_url
from readiness.models import (
    ActionItem,
    CriterionCheck,
    CriterionMeta,
    CriterionResult,
    CriterionScope,
    CriterionStatus,
    LevelDetail,
    LevelSummary,
    ReadinessReport,
    RepoContext,
    RunOptions,
)

logger = logging.getLogger(__name__)


SCHEMA_VERSION = "0.2.0"
GATE = 0.8
LEVELS = (1, 2, 3, 4, 5)
MAX_ACTION_ITEMS = 3

NO_EVALUATOR = CriterionCheck.not_evaluated("No evaluator provided.")


def build_context(root: Path, options: Optional[RunOptions] = None) -> RepoContext:
    """Assemble the read-only context for one run"""
    root = Path(root).resolve()
    return RepoContext(
        root=root,
        apps=tuple(discover_apps(root)),
        repo_url=get_repo_url(root),
        git=get_git_metadata(root),
        options=options or RunOptions(),
    )


def build_report(root: Path, tool_version: str,
                 options: Optional[RunOptions] = None) -> ReadinessReport:
    ctx = build_context(root, options)

    results, meta = evaluate_criteria(ctx, CRITERIA)
    summary = score_levels(results)
    action_items = get_action_items(ctx, results, summary, CRITERIA)

    return ReadinessReport(
        schema_version=SCHEMA_VERSION,
        tool_version=tool_version,
        report_id=str(uuid.uuid4()),
        created_at=int(time.time() * 1000),
        repo_root=str(ctx.root),
        repo_url=ctx.repo_url,
        git=ctx.git,
        apps=list(ctx.apps),
        results=results,
        criteria_meta=meta,
        level_summary=summary,
        action_items=action_items,
        signals=build_signals(ctx.options),
    )


def build_signals(options: RunOptions) -> Optional[dict]:
    if not (options.ci_provider or options.signals):
        return None
    signals = {}
    if options.ci_provider:
        signals["ciProvider"] = options.ci_provider
    if options.signals:
        signals["deploySource"] = options.signals
    signals["notes"] = "Signals derived from local heuristics; API signals not enabled."
    return signals


# ════════════════════════════════════════════════════════════
# CRITERION EVALUATION
# ════════════════════════════════════════════════════════════

def evaluate_criteria(
    ctx: RepoContext,
    criteria: list[CriterionDefinition],
    repo_checks: Optional[dict] = None,
    app_checks: Optional[dict] = None,
) -> tuple[dict[str, CriterionResult], dict[str, CriterionMeta]]:
    """
    Score every criterion.

    Args:
        ctx: Repository context
        criteria: Ordered definitions; output maps keep this order
        repo_checks / app_checks: Dispatch tables (default: the registry's)

    Returns:
        (results by id, status metadata by id)
    """
    repo_checks = REPO_CHECKS if repo_checks is None else repo_checks
    app_checks = APP_CHECKS if app_checks is None else app_checks

    results: dict[str, CriterionResult] = {}
    meta: dict[str, CriterionMeta] = {}

    for definition in criteria:
        if definition.scope is CriterionScope.REPO:
            result, status = _evaluate_repo(ctx, definition, repo_checks.get(definition.id))
        else:
            result, status = _evaluate_apps(ctx, definition, app_checks.get(definition.id))

        logger.debug("%s: %s (%d/%d)", definition.id, status.value,
                     result.numerator, result.denominator)
        results[definition.id] = result
        meta[definition.id] = CriterionMeta(
            level=definition.level,
            scope=definition.scope,
            pillar=definition.pillar,
            status=status,
        )

    return results, meta


def _new_result(definition: CriterionDefinition, numerator: int, denominator: int,
                rationale: str) -> CriterionResult:
    return CriterionResult(
        id=definition.id,
        title=definition.title,
        level=definition.level,
        pillar=definition.pillar,
        scope=definition.scope,
        numerator=numerator,
        denominator=denominator,
        rationale=rationale,
    )


def _evaluate_repo(ctx, definition, evaluator):
    check = evaluator(ctx) if evaluator else NO_EVALUATOR
    scored = check.status in (CriterionStatus.PASS, CriterionStatus.FAIL)

    result = _new_result(
        definition,
        numerator=1 if check.status is CriterionStatus.PASS else 0,
        denominator=1 if scored else 0,
        rationale=check.rationale,
    )
    result.evidence = list(check.evidence)
    return result, check.status


def _evaluate_apps(ctx, definition, evaluator):
    if not ctx.apps:
        return _new_result(definition, 0, 0, "No apps discovered."), CriterionStatus.NOT_APPLICABLE

    numerator = 0
    denominator = 0
    failing_apps: list[str] = []
    saw_not_evaluated = False
    evidence: list[str] = []

    for app in ctx.apps:
        check = evaluator(ctx, app) if evaluator else NO_EVALUATOR
        if check.status is CriterionStatus.PASS:
            numerator += 1
            denominator += 1
        elif check.status is CriterionStatus.FAIL:
            denominator += 1
            failing_apps.append(app.path)
        elif check.status is CriterionStatus.NOT_EVALUATED:
            saw_not_evaluated = True
        for item in check.evidence:
            if item not in evidence:
                evidence.append(item)

    if denominator == 0:
        if saw_not_evaluated:
            rationale = "Not evaluated for apps (missing required signals)."
        else:
            rationale = "Not applicable for discovered apps."
    elif not failing_apps:
        rationale = "All apps satisfied this criterion."
    elif len(failing_apps) == len(ctx.apps):
        rationale = "No apps satisfied this criterion."
    else:
        rationale = f"Missing for: {', '.join(failing_apps)}."

    if denominator == 0:
        status = CriterionStatus.NOT_EVALUATED if saw_not_evaluated else CriterionStatus.NOT_APPLICABLE
    elif numerator == denominator:
        status = CriterionStatus.PASS
    else:
        status = CriterionStatus.FAIL

    result = _new_result(definition, numerator, denominator, rationale)
    result.evidence = evidence
    result.failing_apps = failing_apps
    return result, status


# ════════════════════════════════════════════════════════════
# LEVEL SCORING
# ════════════════════════════════════════════════════════════

def score_levels(results: dict[str, CriterionResult], gate: float = GATE) -> LevelSummary:
    """
    Completion per level and the highest contiguously unlocked level.

    A level with nothing scored has completion 0 and stays locked, so it
    also caps every level above it.
    """
    levels: dict[int, LevelDetail] = {}
    for level in LEVELS:
        level_results = [r for r in results.values() if r.level == level]
        pass_count = sum(r.numerator for r in level_results)
        evaluated_count = sum(r.denominator for r in level_results)
        completion = pass_count / evaluated_count if evaluated_count > 0 else 0.0
        levels[level] = LevelDetail(
            completion=completion,
            evaluated_count=evaluated_count,
            pass_count=pass_count,
            unlocked=evaluated_count > 0 and completion >= gate,
        )

    achieved = 0
    for level in LEVELS:
        if not levels[level].unlocked:
            break
        achieved = level

    return LevelSummary(
        achieved_level=achieved,
        next_level=None if achieved >= LEVELS[-1] else achieved + 1,
        gate=gate,
        levels=levels,
    )


# ════════════════════════════════════════════════════════════
# ACTION ITEMS
# ════════════════════════════════════════════════════════════

def get_action_items(
    ctx: RepoContext,
    results: dict[str, CriterionResult],
    summary: LevelSummary,
    criteria: list[CriterionDefinition],
    limit: int = MAX_ACTION_ITEMS,
) -> list[ActionItem]:
    """Top unmet criteria of the next level, most failing scope units first"""
    if summary.next_level is None:
        return []

    missing = []
    for definition in criteria:
        if definition.level != summary.next_level:
            continue
        result = results.get(definition.id)
        if result is None or result.denominator == 0:
            continue
        if result.missing_count > 0:
            missing.append((definition, result))

    # sort is stable, so ties keep registry order
    missing.sort(key=lambda entry: entry[1].missing_count, reverse=True)

    return [
        ActionItem(
            criterion_id=definition.id,
            title=definition.title,
            details=recommend(definition, result.failing_apps or []),
        )
        for definition, result in missing[:limit]
    ]
