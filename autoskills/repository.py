"""
autoskills.repository

Directory-per-skill storage of personal skills:

    <skills_dir>/<name>/SKILL.md
    <skills_dir>/<name>/{scripts,references,assets}/...   (opaque payload)

Every created or added skill is mirrored into `agents_skills_dir` with a symbolic link
so agent runtimes can discover it. Link creation is best-effort: the outcome is
returned as a LinkStatus and failures are logged, never raised.

There is no locking. Two processes sharing one skills directory can race on
create/delete.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from autoskills import frontmatter
from autoskills.config import AutoskillsConfig
from autoskills.errors import (
    InvalidInputError,
    SkillError,
    SkillExistsError,
    SkillNotFoundError,
    UnsupportedBodyError,
)
from autoskills.models import (
    DEFAULT_VERSION,
    LinkStatus,
    Skill,
    SkillMeta,
    SkillSummary,
    WriteResult,
)

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"
RESOURCE_DIRS = ("scripts", "references", "assets")
SKILL_NAME_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
USE_WHEN = "Use when: "
TAG_RESERVED = frozenset(",[]")
IGNORED_ON_COPY = shutil.ignore_patterns(".git")

SKILL_TEMPLATE = """---
name: {skill_name}
description: [TODO: Complete and informative explanation of what the skill does and when to use it. Include WHEN to use this skill - specific scenarios, file types, or tasks that trigger it.]
---

# {skill_title}

## Overview

[TODO: 1-2 sentences explaining what this skill enables]

## When to Use

[TODO: Describe the specific scenarios, file types, or tasks that should trigger this skill]

## Instructions

[TODO: Step-by-step instructions for the agent to follow]

## Resources (Optional)

This skill can include optional resource directories:

- **scripts/**: Executable code (Python/Bash/etc.) for automation
- **references/**: Documentation to be loaded into context as needed
- **assets/**: Files used in output (templates, images, fonts, etc.)

Delete this section and any unneeded directories when done.
"""


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def title_case(name: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-") if word)


def validate_new_name(name: str) -> None:
    if not SKILL_NAME_PATTERN.match(name or ""):
        raise InvalidInputError(
            f'Invalid skill name "{name}". Use lowercase letters, digits and single hyphens.'
        )


def bump_patch(version: str) -> str:
    """Increment the patch component; malformed versions restart from 1.0.0."""
    parts = (version or "").strip().split(".")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        logger.warning("Malformed version %r, restarting from %s", version, DEFAULT_VERSION)
        parts = DEFAULT_VERSION.split(".")
    major, minor, patch = (int(p) for p in parts)
    return f"{major}.{minor}.{patch + 1}"


def single_line(value: str | None) -> str:
    """Collapse runs of whitespace, newlines included, into single spaces."""
    return " ".join((value or "").split())


def clean_tags(tags: Iterable[str]) -> list[str]:
    """Fold tags to single lines; `,` `[` `]` cannot be stored in the list syntax."""
    cleaned = []
    for tag in tags:
        tag = single_line(tag)
        if not tag:
            continue
        if TAG_RESERVED.intersection(tag):
            raise InvalidInputError(f'Invalid tag "{tag}": tags cannot contain "," "[" or "]".')
        cleaned.append(tag)
    return cleaned


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise filesystem failures as SkillError so callers report them."""
    try:
        yield
    except OSError as exc:
        raise SkillError(f"Failed to {action}: {exc}") from exc


def compose_description(base: str, when_to_use: str | None) -> str:
    base = single_line(base)
    trigger = single_line(when_to_use)
    if not trigger:
        return base
    return f"{base} {USE_WHEN}{trigger}" if base else f"{USE_WHEN}{trigger}"


def split_description(description: str) -> tuple[str, str]:
    """Split a stored description into (base, trigger condition)."""
    if description.startswith(USE_WHEN):
        return "", description[len(USE_WHEN) :].strip()
    base, sep, trigger = description.partition(f" {USE_WHEN}")
    if not sep:
        return description.strip(), ""
    return base.strip(), trigger.strip()


def compose_body(title: str, instructions: str) -> str:
    return f"\n# {title}\n\n{instructions}\n"


def split_body(body: str) -> tuple[str, str]:
    """
    Split a body laid out as `# Title` followed by instructions.

    Leading blank lines are allowed. Anything else before the title heading makes
    the body unsupported for structured updates.
    """
    lines = body.splitlines()
    idx = 0
    while idx < len(lines) and not lines[idx].strip():
        idx += 1
    if idx == len(lines):
        raise UnsupportedBodyError("Skill body is empty; expected a '# Title' heading.")

    heading = lines[idx].rstrip()
    if not heading.startswith("# ") or not heading[2:].strip():
        raise UnsupportedBodyError(
            "Skill body does not start with a '# Title' heading; "
            "only metadata fields can be updated."
        )
    instructions = "\n".join(lines[idx + 1 :]).strip("\r\n").rstrip()
    return heading[2:].strip(), instructions


class SkillRepository:
    """CRUD operations over the personal skills directory."""

    def __init__(self, config: AutoskillsConfig) -> None:
        self._config = config

    @property
    def config(self) -> AutoskillsConfig:
        return self._config

    @property
    def skills_dir(self) -> Path:
        return self._config.skills_dir

    @property
    def agents_skills_dir(self) -> Path:
        return self._config.agents_skills_dir

    def skill_dir(self, name: str) -> Path:
        """Directory of a skill; rejects names that would escape the skills root."""
        if (
            not name
            or name in (".", "..")
            or "/" in name
            or "\\" in name
            or name != name.strip()
        ):
            raise InvalidInputError(f'Invalid skill name "{name}".')
        return self.skills_dir / name

    def exists(self, name: str) -> bool:
        return (self.skill_dir(name) / SKILL_FILE).is_file()

    # --- Read ---
    def list_skills(self) -> list[SkillSummary]:
        """
        function_purpose: Enumerate skills stored directly under the skills root.

        Directories without SKILL.md are ignored; unreadable files are logged and skipped.
        """
        with storage_errors(f"read skills directory {self.skills_dir}"):
            self.skills_dir.mkdir(parents=True, exist_ok=True)
            entries = sorted(self.skills_dir.iterdir())
        summaries: list[SkillSummary] = []
        for entry in entries:
            if not entry.is_dir():
                continue
            skill_file = entry / SKILL_FILE
            if not skill_file.is_file():
                continue
            try:
                meta, _ = frontmatter.read_document(skill_file)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable skill %s: %s", skill_file, exc)
                continue
            parsed = SkillMeta.from_mapping(meta, entry.name)
            summaries.append(
                SkillSummary(name=parsed.name, description=parsed.description, path=skill_file)
            )
        return summaries

    def get_skill(self, name: str) -> Skill | None:
        skill_file = self.skill_dir(name) / SKILL_FILE
        if not skill_file.is_file():
            return None
        try:
            meta, body = frontmatter.read_document(skill_file)
        except (OSError, UnicodeDecodeError) as exc:
            raise SkillError(f"Cannot read {skill_file}: {exc}") from exc
        return Skill(meta=SkillMeta.from_mapping(meta, name), content=body, path=skill_file)

    # --- Write ---
    def create_skill(
        self,
        name: str,
        description: str,
        title: str,
        when_to_use: str | None,
        instructions: str,
        tags: Iterable[str] = (),
    ) -> WriteResult:
        """
        function_purpose: Create a new skill directory with a generated SKILL.md.

        Fails with SkillExistsError when the slot is occupied; nothing is touched then.
        """
        validate_new_name(name)
        skill_dir = self.skill_dir(name)
        if skill_dir.exists():
            raise SkillExistsError(
                f'Skill "{name}" already exists. Use update_skill to modify it.'
            )

        today = _today()
        meta = SkillMeta(
            name=name,
            description=compose_description(description, when_to_use),
            version=DEFAULT_VERSION,
            tags=clean_tags(tags),
            created=today,
            updated=today,
        )
        content = frontmatter.serialize(
            meta.to_mapping(), compose_body(single_line(title) or title_case(name), instructions)
        )

        skill_file = skill_dir / SKILL_FILE
        with storage_errors(f"create skill {name}"):
            skill_dir.mkdir(parents=True)
            with open(skill_file, "x", encoding="utf-8") as f:
                _ = f.write(content)
        logger.info("Created skill %s at %s", name, skill_file)

        link = self.link_skill(name)
        self.record_operation("create", {"skill": name, "path": str(skill_file)})
        return WriteResult(path=skill_file, link=link)

    def update_skill(
        self,
        name: str,
        description: str | None = None,
        title: str | None = None,
        when_to_use: str | None = None,
        instructions: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> Path:
        """
        function_purpose: Merge the provided fields into an existing skill.

        Blank strings count as not provided. The patch version is bumped and the
        `updated` date refreshed on every call; `created` is preserved. Title and
        instructions are only replaced on bodies shaped as `# Title` + instructions.
        """
        skill_file = self.skill_dir(name) / SKILL_FILE
        if not skill_file.is_file():
            raise SkillNotFoundError(f'Skill "{name}" not found.')

        try:
            raw_meta, body = frontmatter.read_document(skill_file)
        except (OSError, UnicodeDecodeError) as exc:
            raise SkillError(f"Cannot read {skill_file}: {exc}") from exc
        meta = SkillMeta.from_mapping(raw_meta, name)

        new_title = single_line(title)
        new_instructions = (instructions or "").strip("\r\n")
        if new_title or new_instructions.strip():
            current_title, current_instructions = split_body(body)
            body = compose_body(
                new_title or current_title,
                new_instructions if new_instructions.strip() else current_instructions,
            )

        base, trigger = split_description(meta.description)
        if single_line(description):
            base = description
        if single_line(when_to_use):
            trigger = when_to_use

        today = _today()
        meta.description = compose_description(base, trigger)
        meta.version = bump_patch(meta.version)
        if tags is not None:
            meta.tags = clean_tags(tags)
        meta.created = meta.created or today
        meta.updated = today

        merged = dict(raw_meta)
        merged.update(meta.to_mapping())
        with storage_errors(f"write skill {name}"):
            skill_file.write_text(frontmatter.serialize(merged, body), encoding="utf-8")
        logger.info("Updated skill %s to version %s", name, meta.version)
        self.record_operation("update", {"skill": name, "version": meta.version})
        return skill_file

    def delete_skill(self, name: str) -> bool:
        """Remove a skill directory and its discovery link. Returns False if absent."""
        skill_dir = self.skill_dir(name)
        if not skill_dir.exists() and not skill_dir.is_symlink():
            return False

        with storage_errors(f"delete skill {name}"):
            if skill_dir.is_symlink() or skill_dir.is_file():
                skill_dir.unlink()
            else:
                shutil.rmtree(skill_dir)
        self._unlink_discovery(name, skill_dir)
        logger.info("Deleted skill %s", name)
        self.record_operation("delete", {"skill": name})
        return True

    def add_skill(self, source: Path | str, overwrite: bool = False) -> WriteResult:
        """
        function_purpose: Copy an existing skill folder into the library and link it.

        The skill name is the declared frontmatter name, else the folder name.
        """
        source_dir = Path(source).expanduser().resolve()
        skill_md = source_dir / SKILL_FILE
        if not skill_md.is_file():
            raise SkillNotFoundError(f"SKILL.md not found at {skill_md}")

        name = frontmatter.read_declared_name(skill_md) or source_dir.name
        target = self.skill_dir(name)
        if target.exists() and source_dir != target.resolve() and not overwrite:
            raise SkillExistsError(
                f'Skill "{name}" already exists at {target}. Use -y to overwrite.'
            )

        if source_dir != target.resolve():
            with storage_errors(f"copy skill {name} from {source_dir}"):
                self.skills_dir.mkdir(parents=True, exist_ok=True)
                if target.exists():
                    shutil.rmtree(target)
                shutil.copytree(source_dir, target, ignore=IGNORED_ON_COPY)
            logger.info("Copied skill %s from %s", name, source_dir)

        link = self.link_skill(name)
        self.record_operation("add", {"skill": name, "source": str(source_dir)})
        return WriteResult(path=target, link=link)

    def replace_skill_dir(self, name: str, source_dir: Path) -> Path:
        """Replace the local slot for `name` with a copy of `source_dir`."""
        target = self.skill_dir(name)
        with storage_errors(f"install skill {name}"):
            self.skills_dir.mkdir(parents=True, exist_ok=True)
            if target.is_symlink():
                target.unlink()
            elif target.exists():
                shutil.rmtree(target)
            shutil.copytree(source_dir, target, ignore=IGNORED_ON_COPY)
        return target

    def init_skill(self, name: str, parent: Path | str | None = None) -> Path:
        """Scaffold a skill from the template, with empty resource directories."""
        validate_new_name(name)
        skill_dir = Path(parent).expanduser().resolve() / name if parent else self.skill_dir(name)
        if skill_dir.exists():
            raise SkillExistsError(f"Skill directory already exists: {skill_dir}")

        with storage_errors(f"create skill template {skill_dir}"):
            skill_dir.mkdir(parents=True)
            (skill_dir / SKILL_FILE).write_text(
                SKILL_TEMPLATE.format(skill_name=name, skill_title=title_case(name)),
                encoding="utf-8",
            )
            for sub in RESOURCE_DIRS:
                (skill_dir / sub).mkdir()
        logger.info("Initialized skill template %s at %s", name, skill_dir)
        return skill_dir

    # --- Discovery links ---
    def link_skill(self, name: str) -> LinkStatus:
        """
        function_purpose: Mirror a skill into the agents directory with a symlink.

        Idempotent. Returns SKIPPED when the skill directory is missing and FAILED
        (logged) when the OS refuses the link.
        """
        target = self.skill_dir(name)
        link = self.agents_skills_dir / name
        if not target.is_dir():
            return LinkStatus.SKIPPED

        try:
            self.agents_skills_dir.mkdir(parents=True, exist_ok=True)
            if link.exists():
                return LinkStatus.EXISTS
            if link.is_symlink():
                # dangling
                link.unlink()
            os.symlink(target, link, target_is_directory=True)
        except OSError as exc:
            logger.warning("Failed to link %s -> %s: %s", link, target, exc)
            return LinkStatus.FAILED
        logger.info("Linked %s -> %s", link, target)
        return LinkStatus.CREATED

    def _unlink_discovery(self, name: str, target: Path) -> None:
        link = self.agents_skills_dir / name
        try:
            if link.is_symlink() and Path(os.readlink(link)) == target:
                link.unlink()
        except OSError as exc:
            logger.warning("Failed to remove link %s: %s", link, exc)

    # --- Audit ---
    def record_operation(self, op: str, payload: dict[str, Any]) -> None:
        """
        function_purpose: Append a single JSON line describing a mutating operation.

        Logging must not break the main operation; write errors are logged and dropped.
        """
        ts = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
        record: dict[str, Any] = {"ts": ts, "op": op}
        record.update(payload)

        log_file = self._config.ops_log_file
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(log_file, "a", encoding="utf-8") as f:
                _ = f.write(json.dumps(record, ensure_ascii=False) + "\n")
        except OSError:
            logger.warning("Failed to write operation log entry", exc_info=True)

