"""Data models for the skill library."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_VERSION = "1.0.0"


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        # `key: [a, b]` lines parse as lists even for free text
        return ", ".join(str(item) for item in value)
    return str(value)


def _as_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(item) for item in value if str(item)]
    if isinstance(value, str) and value:
        return [value]
    return []


@dataclass
class SkillMeta:
    """Frontmatter fields of a personal skill."""

    name: str
    description: str = ""
    version: str = DEFAULT_VERSION
    tags: list[str] = field(default_factory=list)
    created: str = ""
    updated: str = ""

    @classmethod
    def from_mapping(cls, meta: Mapping[str, Any], fallback_name: str) -> SkillMeta:
        """Build from parsed frontmatter, using the directory name when `name` is missing."""
        return cls(
            name=_as_str(meta.get("name")) or fallback_name,
            description=_as_str(meta.get("description")),
            version=_as_str(meta.get("version")) or DEFAULT_VERSION,
            tags=_as_list(meta.get("tags")),
            created=_as_str(meta.get("created")),
            updated=_as_str(meta.get("updated")),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "tags": list(self.tags),
            "created": self.created,
            "updated": self.updated,
        }


@dataclass
class Skill:
    """A parsed SKILL.md: metadata, markdown body and file location."""

    meta: SkillMeta
    content: str
    path: Path

    @property
    def name(self) -> str:
        return self.meta.name

    def to_dict(self) -> dict[str, Any]:
        data = self.meta.to_mapping()
        data["content"] = self.content
        data["path"] = str(self.path)
        return data


@dataclass
class SkillSummary:
    name: str
    description: str
    path: Path

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "path": str(self.path)}


@dataclass
class PublicSkill:
    """A skill published in an external repository, as reported by the search command."""

    owner: str
    repo: str
    skill: str
    url: str
    installs: int = 0

    @property
    def package(self) -> str:
        return f"{self.owner}/{self.repo}@{self.skill}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "package": self.package,
            "owner": self.owner,
            "repo": self.repo,
            "skill": self.skill,
            "url": self.url,
            "installs": self.installs,
        }


class LinkStatus(str, enum.Enum):
    """Outcome of creating a discovery symlink. Failures are reported, never raised."""

    CREATED = "created"
    EXISTS = "exists"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class WriteResult:
    path: Path
    link: LinkStatus
