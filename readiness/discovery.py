"""
Workspace Discovery

Finds the apps (workspace members) of a repository:
1. package.json `workspaces` or pnpm-workspace.yaml `packages`
2. conventional app directories (apps/, packages/, services/, libs/)
3. the repository root as a single app
"""

import logging
from pathlib import Path
from typing import Optional

import yaml

from readiness.fs_utils import (
    is_directory,
    is_file,
    list_subdirectories,
    read_json,
    read_text,
    to_posix,
    walk_directories,
)
from readiness.models import AppInfo

logger = logging.getLogger(__name__)


# Manifest file -> ecosystem
MANIFEST_FILES = {
    'package.json': 'node',
    'pyproject.toml': 'python',
    'requirements.txt': 'python',
    'setup.py': 'python',
    'go.mod': 'go',
    'Cargo.toml': 'rust',
    'pom.xml': 'java',
    'build.gradle': 'java',
    'build.gradle.kts': 'java',
}

DEFAULT_APP_DIRS = ["apps", "packages", "services", "libs"]

WORKSPACE_WALK_IGNORE = {"node_modules", ".git", "dist", "build"}


def discover_apps(root: Path) -> list[AppInfo]:
    """Return the ordered, non-empty list of apps under root"""
    root = Path(root)
    apps: dict[str, AppInfo] = {}

    for pattern in read_workspace_patterns(root):
        for app_dir in expand_workspace_pattern(root, pattern):
            info = build_app_info(root, app_dir)
            if info and info.path not in apps:
                apps[info.path] = info

    if not apps:
        for dir_name in DEFAULT_APP_DIRS:
            base = root / dir_name
            if not is_directory(base):
                continue
            for child in list_subdirectories(base):
                info = build_app_info(root, base / child)
                if info and info.path not in apps:
                    apps[info.path] = info

    if not apps:
        info = build_app_info(root, root, allow_no_manifest=True)
        apps[info.path] = info

    logger.debug("Discovered apps: %s", ", ".join(apps))
    return list(apps.values())


def has_manifest(directory: Path) -> bool:
    return any(is_file(directory / name) for name in MANIFEST_FILES)


def detect_app_type(directory: Path) -> Optional[str]:
    for name, kind in MANIFEST_FILES.items():
        if is_file(directory / name):
            return kind
    return None


def build_app_info(root: Path, app_dir: Path, allow_no_manifest: bool = False) -> Optional[AppInfo]:
    if not has_manifest(app_dir) and not allow_no_manifest:
        return None

    rel = to_posix(root, app_dir)
    description = "Repository root" if rel == "." else None
    pkg = read_json(app_dir / "package.json")
    if pkg and isinstance(pkg.get("description"), str) and pkg["description"].strip():
        description = pkg["description"].strip()

    return AppInfo(
        id=rel,
        path=rel,
        description=description,
        type=detect_app_type(app_dir),
    )


def read_workspace_patterns(root: Path) -> list[str]:
    """Workspace globs from package.json, falling back to pnpm-workspace.yaml"""
    pkg = read_json(root / "package.json")
    if pkg and pkg.get("workspaces"):
        workspaces = pkg["workspaces"]
        if isinstance(workspaces, dict):
            workspaces = workspaces.get("packages") or []
        patterns = [str(p) for p in workspaces if isinstance(p, str)] if isinstance(workspaces, list) else []
        if patterns:
            return patterns

    raw = read_text(root / "pnpm-workspace.yaml")
    if raw:
        return parse_pnpm_workspace(raw)

    return []


def parse_pnpm_workspace(raw: str) -> list[str]:
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError:
        logger.debug("Ignoring malformed pnpm-workspace.yaml")
        return []
    if not isinstance(data, dict):
        return []
    packages = data.get("packages") or []
    if not isinstance(packages, list):
        return []
    return [str(p).strip() for p in packages if isinstance(p, str) and p.strip()]


def expand_workspace_pattern(root: Path, pattern: str) -> list[Path]:
    normalized = pattern.replace("\\", "/").strip()
    if not normalized or normalized.startswith("!"):
        return []
    if normalized.startswith("./"):
        normalized = normalized[2:]

    if "*" not in normalized:
        resolved = root / normalized
        return [resolved] if is_directory(resolved) else []

    if "**" in normalized:
        base_dir = root / normalized.split("**")[0].rstrip("/")
        if not is_directory(base_dir):
            return []
        return [d for d in walk_directories(base_dir, WORKSPACE_WALK_IGNORE) if has_manifest(d)]

    base_dir = root / normalized.split("*")[0].rstrip("/")
    if not is_directory(base_dir):
        return []
    return [
        base_dir / name
        for name in list_subdirectories(base_dir)
        if has_manifest(base_dir / name)
    ]
