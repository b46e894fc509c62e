"""
Filesystem Helpers

Best-effort probes used by discovery and criteria. Every helper returns
an explicit empty value (False, None, []) instead of raising, since a
missing file is an ordinary outcome when inspecting a repository.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Iterator

logger = logging.getLogger(__name__)


# Directories never descended into by bounded walks
IGNORED_DIRS = {
    '.git', 'node_modules', 'dist', 'build', 'target', 'out',
    '.venv', 'venv', '__pycache__', '.tox',
    '.mypy_cache', '.pytest_cache', '.ruff_cache',
    'vendor', 'coverage', '.next',
}

# Hard caps for pattern scans
MAX_SCAN_FILES = 2000
MAX_SCAN_BYTES = 200_000


def path_exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError:
        return False


def is_directory(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def read_text(path: Path, max_bytes: int = MAX_SCAN_BYTES) -> Optional[str]:
    """Read up to max_bytes of a file as UTF-8, or None if unreadable"""
    try:
        with open(path, "rb") as f:
            data = f.read(max_bytes)
    except OSError:
        return None
    return data.decode("utf-8", errors="replace")


def read_json(path: Path) -> Optional[dict]:
    """Parse a JSON object file, or None when missing or invalid"""
    raw = read_text(path, max_bytes=5_000_000)
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.debug("Ignoring invalid JSON in %s", path)
        return None
    return data if isinstance(data, dict) else None


def read_package_scripts(directory: Path) -> dict[str, str]:
    """Return the `scripts` table of directory/package.json (empty if none)"""
    pkg = read_json(directory / "package.json")
    scripts = (pkg or {}).get("scripts")
    if not isinstance(scripts, dict):
        return {}
    return {str(k): str(v) for k, v in scripts.items()}


def list_subdirectories(directory: Path) -> list[str]:
    """Sorted names of immediate subdirectories"""
    try:
        return sorted(entry.name for entry in directory.iterdir() if entry.is_dir())
    except OSError:
        return []


def to_posix(root: Path, path: Path) -> str:
    """Path relative to root in posix form ("." for root itself)"""
    try:
        rel = path.relative_to(root)
    except ValueError:
        return path.as_posix()
    return rel.as_posix() or "."


def walk_directories(root: Path, ignore=IGNORED_DIRS) -> list[Path]:
    """All directories under root (inclusive), skipping ignored names"""
    results = []
    seen = set()
    stack = [root]
    while stack:
        current = stack.pop()
        try:
            key = current.resolve()
        except OSError:
            continue
        if key in seen:
            continue
        seen.add(key)
        results.append(current)
        for name in reversed(list_subdirectories(current)):
            if name in ignore:
                continue
            stack.append(current / name)
    return results


def walk_files(root: Path, ignore=IGNORED_DIRS,
               max_files: int = MAX_SCAN_FILES) -> Iterator[Path]:
    """
    Yield files under root using an explicit stack.

    Stops after max_files files have been yielded. Ignored directory
    names are pruned wherever they appear.
    """
    visited = 0
    stack = [root]
    while stack:
        current = stack.pop()
        try:
            entries = sorted(current.iterdir(), key=lambda p: p.name)
        except OSError:
            continue
        subdirs = []
        for entry in entries:
            try:
                if entry.is_symlink():
                    continue
                if entry.is_dir():
                    if entry.name not in ignore:
                        subdirs.append(entry)
                    continue
            except OSError:
                continue
            yield entry
            visited += 1
            if visited >= max_files:
                logger.debug("File walk under %s stopped at %d files", root, max_files)
                return
        stack.extend(reversed(subdirs))


def first_existing(base: Path, candidates) -> Optional[str]:
    """First candidate (relative to base) that exists, as given"""
    for rel in candidates:
        if path_exists(base / rel):
            return rel
    return None
