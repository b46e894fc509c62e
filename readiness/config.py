"""
Run Configuration

Resolves RunOptions from CLI flags and an optional `.agent-readiness.yml`
file at the repository root. Explicit flags win over the file, and the
file wins over dataclass defaults.
"""

import logging
from pathlib import Path
from typing import Optional, Any

import yaml

from readiness.errors import ConfigError
from readiness.models import RunOptions

logger = logging.getLogger(__name__)


CONFIG_FILENAMES = [".agent-readiness.yml", ".agent-readiness.yaml"]

SIGNAL_PROVIDERS = ("github",)

DEFAULT_REPORT_PATH = ".agent-readiness/latest.json"

KNOWN_KEYS = {"telemetry_scan", "run_integration", "ci_provider", "signals", "out"}


def find_config_file(root: Path) -> Optional[Path]:
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_config_file(root: Path) -> dict:
    """Load the repository config file, or {} if there is none"""
    path = find_config_file(root)
    if path is None:
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path.name}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path.name}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping")

    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown keys in {path.name}: {', '.join(unknown)}")

    logger.debug("Loaded config from %s", path)
    return data


def _check_provider(name: str, value: Any) -> Optional[str]:
    if value is None:
        return None
    if value not in SIGNAL_PROVIDERS:
        raise ConfigError(
            f"Unsupported {name} '{value}' (expected one of: {', '.join(SIGNAL_PROVIDERS)})"
        )
    return value


def _check_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false")
    return value


def resolve_options(
    file_config: Optional[dict] = None,
    telemetry_scan: Optional[bool] = None,
    run_integration: Optional[bool] = None,
    ci_provider: Optional[str] = None,
    signals: Optional[str] = None,
) -> RunOptions:
    """Merge explicit values over the config file over defaults"""
    cfg = file_config or {}
    defaults = RunOptions()

    def pick(explicit, key, default):
        if explicit is not None:
            return explicit
        return cfg.get(key, default)

    return RunOptions(
        telemetry_scan=_check_bool(
            "telemetry_scan", pick(telemetry_scan, "telemetry_scan", defaults.telemetry_scan)),
        run_integration=_check_bool(
            "run_integration", pick(run_integration, "run_integration", defaults.run_integration)),
        ci_provider=_check_provider(
            "ci_provider", pick(ci_provider, "ci_provider", defaults.ci_provider)),
        signals=_check_provider(
            "signals", pick(signals, "signals", defaults.signals)),
    )


def resolve_output_path(file_config: Optional[dict], out: Optional[str]) -> Optional[str]:
    """Explicit --out, else the config file's `out`, else no file output"""
    if out:
        return out
    value = (file_config or {}).get("out")
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError("out must be a non-empty path")
    return value
