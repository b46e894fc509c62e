"""
Readiness Data Model

Dataclasses shared by discovery, criteria, scoring and rendering.
Attribute names are snake_case; `to_dict()` produces the camelCase
JSON document described by the report schema.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Any


class CriterionScope(Enum):
    """Whether a criterion is evaluated once per repo or once per app"""
    REPO = "repo"
    APP = "app"


class CriterionStatus(Enum):
    """Outcome of a single check"""
    PASS = "pass"
    FAIL = "fail"
    NOT_APPLICABLE = "not_applicable"    # nothing to evaluate
    NOT_EVALUATED = "not_evaluated"      # needs an opt-in capability


@dataclass(frozen=True)
class AppInfo:
    """A discovered workspace member (or the repo root as fallback)"""
    id: str
    path: str                            # posix, "." for repo root
    description: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"path": self.path}
        if self.description:
            data["description"] = self.description
        if self.type:
            data["type"] = self.type
        return data


@dataclass(frozen=True)
class GitMetadata:
    """Snapshot of git state; every field is None when unknown"""
    commit_hash: Optional[str] = None
    branch: Optional[str] = None
    has_local_changes: Optional[bool] = None
    has_non_remote_commits: Optional[bool] = None


@dataclass(frozen=True)
class RunOptions:
    """
    Feature toggles for a run.

    telemetry_scan:  scan source files for tracing/metrics setup when a
                     dependency is present but no entrypoint file is found
    run_integration: execute the resolved integration test command
    ci_provider:     "github" enables CI-signal checks
    signals:         "github", alternate opt-in for the same checks
    """
    telemetry_scan: bool = False
    run_integration: bool = False
    ci_provider: Optional[str] = None
    signals: Optional[str] = None

    @property
    def ci_signals_enabled(self) -> bool:
        return self.ci_provider == "github" or self.signals == "github"


@dataclass(frozen=True)
class RepoContext:
    """Read-only bundle threaded through every evaluator"""
    root: Path
    apps: tuple[AppInfo, ...]
    repo_url: Optional[str]
    git: GitMetadata
    options: RunOptions = field(default_factory=RunOptions)

    def app_root(self, app: AppInfo) -> Path:
        return self.root if app.path == "." else self.root / app.path


@dataclass(frozen=True)
class CriterionCheck:
    """Evaluator output for one repo or one app"""
    status: CriterionStatus
    rationale: str
    evidence: tuple[str, ...] = ()

    @classmethod
    def passed(cls, rationale: str, evidence=()) -> "CriterionCheck":
        return cls(CriterionStatus.PASS, rationale, tuple(evidence))

    @classmethod
    def failed(cls, rationale: str, evidence=()) -> "CriterionCheck":
        return cls(CriterionStatus.FAIL, rationale, tuple(evidence))

    @classmethod
    def not_applicable(cls, rationale: str) -> "CriterionCheck":
        return cls(CriterionStatus.NOT_APPLICABLE, rationale)

    @classmethod
    def not_evaluated(cls, rationale: str) -> "CriterionCheck":
        return cls(CriterionStatus.NOT_EVALUATED, rationale)


@dataclass
class CriterionResult:
    """Aggregated score for one criterion"""
    id: str
    title: str
    level: int
    pillar: str
    scope: CriterionScope
    numerator: int
    denominator: int
    rationale: str
    evidence: list[str] = field(default_factory=list)
    failing_apps: list[str] = field(default_factory=list)

    @property
    def missing_count(self) -> int:
        return self.denominator - self.numerator

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "level": self.level,
            "pillar": self.pillar,
            "scope": self.scope.value,
            "numerator": self.numerator,
            "denominator": self.denominator,
            "rationale": self.rationale,
        }
        if self.evidence:
            data["evidence"] = list(self.evidence)
        if self.failing_apps:
            data["failingApps"] = list(self.failing_apps)
        return data


@dataclass
class CriterionMeta:
    """Status classification kept beside each result"""
    level: int
    scope: CriterionScope
    pillar: str
    status: CriterionStatus

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "scope": self.scope.value,
            "pillar": self.pillar,
            "status": self.status.value,
        }


@dataclass
class LevelDetail:
    """Completion of one maturity level"""
    completion: float
    evaluated_count: int
    pass_count: int
    unlocked: bool

    def to_dict(self) -> dict:
        return {
            "completion": self.completion,
            "evaluatedCount": self.evaluated_count,
            "passCount": self.pass_count,
            "unlocked": self.unlocked,
        }


@dataclass
class LevelSummary:
    """Achieved and next level derived from per-level details"""
    achieved_level: int
    next_level: Optional[int]
    gate: float
    levels: dict[int, LevelDetail]

    def to_dict(self) -> dict:
        return {
            "achievedLevel": self.achieved_level,
            "nextLevel": self.next_level,
            "gate": self.gate,
            "levels": {str(k): v.to_dict() for k, v in self.levels.items()},
        }


@dataclass
class ActionItem:
    """A prioritized remediation for the next level"""
    criterion_id: str
    title: str
    details: str

    def to_dict(self) -> dict:
        return {
            "criterionId": self.criterion_id,
            "title": self.title,
            "details": self.details,
        }


@dataclass
class ReadinessReport:
    """Complete output of one run"""
    schema_version: str
    tool_version: str
    report_id: str
    created_at: int                      # epoch milliseconds
    repo_root: str
    repo_url: Optional[str]
    git: GitMetadata
    apps: list[AppInfo]
    results: dict[str, CriterionResult]
    criteria_meta: dict[str, CriterionMeta]
    level_summary: LevelSummary
    action_items: list[ActionItem] = field(default_factory=list)
    signals: Optional[dict] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "schemaVersion": self.schema_version,
            "toolVersion": self.tool_version,
            "reportId": self.report_id,
            "createdAt": self.created_at,
            "repoRoot": self.repo_root,
            "repoUrl": self.repo_url,
            "commitHash": self.git.commit_hash,
            "branch": self.git.branch,
            "hasLocalChanges": self.git.has_local_changes,
            "hasNonRemoteCommits": self.git.has_non_remote_commits,
            "apps": {app.id: app.to_dict() for app in self.apps},
            "report": {cid: r.to_dict() for cid, r in self.results.items()},
            "criteriaMeta": {cid: m.to_dict() for cid, m in self.criteria_meta.items()},
            "levels": {str(k): v.to_dict() for k, v in self.level_summary.levels.items()},
            "levelSummary": self.level_summary.to_dict(),
        }
        if self.signals:
            data["signals"] = dict(self.signals)
        data["actionItems"] = [item.to_dict() for item in self.action_items]
        return data
