"""Locate a named skill inside an arbitrary cloned repository."""

from __future__ import annotations

import logging
from collections import deque
from pathlib import Path

from autoskills.frontmatter import read_declared_name
from autoskills.repository import SKILL_FILE

logger = logging.getLogger(__name__)

CONVENTIONAL_PARENTS = ("", "skills", "src", "packages", "plugins", "agents")
PLUGIN_SUBDIRS = ("skills", "agents", "")
SKIPPED_DIRS = frozenset(
    {".git", ".hg", ".svn", "node_modules", ".venv", "venv", "__pycache__"}
)


def _has_skill_file(path: Path) -> bool:
    return (path / SKILL_FILE).is_file()


def _subdirs(path: Path) -> list[Path]:
    try:
        return sorted(p for p in path.iterdir() if p.is_dir() and not p.is_symlink())
    except OSError as exc:
        logger.warning("Cannot scan %s: %s", path, exc)
        return []


def conventional_candidates(base: Path, name: str) -> list[Path]:
    """Conventional locations of a skill folder, in lookup order."""
    candidates = [
        base / parent / name if parent else base / name for parent in CONVENTIONAL_PARENTS
    ]
    plugins = base / "plugins"
    if plugins.is_dir():
        for plugin in _subdirs(plugins):
            candidates.extend(
                plugin / sub / name if sub else plugin / name for sub in PLUGIN_SUBDIRS
            )
    return candidates


def scan_for_skill(base: Path, name: str) -> Path | None:
    """Breadth-first search for a SKILL.md declaring `name` or living in a `name` folder."""
    queue: deque[Path] = deque([base])
    while queue:
        current = queue.popleft()
        if _has_skill_file(current) and (
            current.name == name or read_declared_name(current / SKILL_FILE) == name
        ):
            return current
        queue.extend(p for p in _subdirs(current) if p.name not in SKIPPED_DIRS)
    return None


def resolve_skill_source(base: Path, name: str) -> Path | None:
    """
    function_purpose: Find the directory holding skill `name` inside a repository checkout.

    Lookup order:
    1. repository root, when its SKILL.md declares `name`
    2. conventional folders (<name>, skills/<name>, ..., plugins/*/skills/<name>)
    3. breadth-first scan of the whole tree
    """
    root_skill = base / SKILL_FILE
    if root_skill.is_file() and read_declared_name(root_skill) == name:
        return base

    for candidate in conventional_candidates(base, name):
        if _has_skill_file(candidate):
            return candidate

    return scan_for_skill(base, name)
