"""
Report Validation

Checks a report document against the bundled JSON schema. Every schema
violation is collected, not just the first.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import jsonschema

from readiness.errors import ReportInputError

logger = logging.getLogger(__name__)


SCHEMA_FILENAME = "readiness-report.schema.json"


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def default_schema_path() -> Path:
    return Path(__file__).parent / "schemas" / SCHEMA_FILENAME


def load_schema(schema_path: Optional[Path] = None) -> dict:
    path = Path(schema_path) if schema_path else default_schema_path()
    return json.loads(path.read_text(encoding="utf-8"))


def format_error(error: jsonschema.ValidationError) -> str:
    location = "".join(f"/{part}" for part in error.absolute_path) or "(root)"
    return f"{location} {error.message}".strip()


def validate_report(report: Any, schema_path: Optional[Path] = None) -> ValidationResult:
    schema = load_schema(schema_path)
    validator = jsonschema.Draft7Validator(schema)
    errors = sorted(validator.iter_errors(report), key=lambda e: [str(p) for p in e.absolute_path])
    messages = [format_error(e) for e in errors]
    logger.debug("Schema validation found %d error(s)", len(messages))
    return ValidationResult(valid=not messages, errors=messages)


def load_report(path: Path) -> Any:
    """Read a report JSON file written by a previous run"""
    path = Path(path)
    if not path.is_file():
        raise ReportInputError(f"Report not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ReportInputError(f"Report is not valid JSON ({path}): {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ReportInputError(f"Cannot read report {path}: {e}") from e
