"""Built-in authoring guides bundled with the package as SKILL.md documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from autoskills import frontmatter
from autoskills.repository import SKILL_FILE

logger = logging.getLogger(__name__)

BUILTIN_DIR = Path(__file__).resolve().parent / "builtin"
SKILL_CREATOR = "skill-creator"
SKILL_UPDATER = "skill-updater"
AUTOSKILL_HANDLER = "autoskill-handler"


def load_guide(name: str) -> dict[str, Any] | None:
    """Return {name, description, instructions} for a bundled guide, or None."""
    path = BUILTIN_DIR / name / SKILL_FILE
    try:
        meta, body = frontmatter.read_document(path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Built-in guide %s unavailable: %s", name, exc)
        return None
    description = meta.get("description")
    return {
        "name": str(meta.get("name") or name),
        "description": description if isinstance(description, str) else "",
        "instructions": body.strip(),
    }
