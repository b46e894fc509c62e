"""
Agent Readiness - Core Module
"""

__version__ = "0.2.0"

from readiness.errors import ReadinessError, ConfigError, ReportInputError
from readiness.models import (
    AppInfo,
    CriterionCheck,
    CriterionResult,
    CriterionScope,
    CriterionStatus,
    GitMetadata,
    LevelSummary,
    ReadinessReport,
    RepoContext,
    RunOptions,
)
from readiness.criteria import CRITERIA, LEVEL_NAMES, CriterionDefinition, get_criterion
from readiness.engine import (
    GATE,
    SCHEMA_VERSION,
    build_report,
    evaluate_criteria,
    get_action_items,
    score_levels,
)
from readiness.discovery import discover_apps
from readiness.render import render_console, render_markdown
from readiness.validate import ValidationResult, default_schema_path, load_report, validate_report

__all__ = [
    "__version__",
    # Errors
    "ReadinessError",
    "ConfigError",
    "ReportInputError",
    # Model
    "AppInfo",
    "CriterionCheck",
    "CriterionResult",
    "CriterionScope",
    "CriterionStatus",
    "GitMetadata",
    "LevelSummary",
    "ReadinessReport",
    "RepoContext",
    "RunOptions",
    # Registry
    "CRITERIA",
    "LEVEL_NAMES",
    "CriterionDefinition",
    "get_criterion",
    # Engine
    "GATE",
    "SCHEMA_VERSION",
    "build_report",
    "evaluate_criteria",
    "get_action_items",
    "score_levels",
    "discover_apps",
    # Output
    "render_console",
    "render_markdown",
    "ValidationResult",
    "default_schema_path",
    "load_report",
    "validate_report",
]
