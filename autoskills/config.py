"""
autoskills.config

Process-wide configuration resolved once at startup and passed into every component.

Environment (optional):
- AUTOSKILLS_DIR: personal skills storage (default: ~/.autoskills/personal-skills)
- AGENTS_SKILLS_DIR: directory of discovery symlinks scanned by agent runtimes (default: ~/.agents/skills)
- AUTOSKILLS_LOG_FILE: rotating log file path (default: ~/.autoskills/logs/autoskills.log)
- AUTOSKILLS_OPS_LOG_FILE: JSON-lines log of mutating operations (default: ~/.autoskills/logs/operations.log)
- AUTOSKILLS_SEARCH_COMMAND: public skill search command, shell-split (default: "npx skills find")
- AUTOSKILLS_GIT: git executable (default: git)
- AUTOSKILLS_CLONE_URL: clone URL template with {owner} and {repo} (default: GitHub https)
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

APP_NAME = "autoskills"
DEFAULT_HOME = Path("~") / ".autoskills"
DEFAULT_SKILLS_DIR = DEFAULT_HOME / "personal-skills"
DEFAULT_AGENTS_SKILLS_DIR = Path("~") / ".agents" / "skills"
DEFAULT_LOG_FILE = DEFAULT_HOME / "logs" / "autoskills.log"
DEFAULT_OPS_LOG_FILE = DEFAULT_HOME / "logs" / "operations.log"
DEFAULT_SEARCH_COMMAND: tuple[str, ...] = ("npx", "skills", "find")
DEFAULT_CLONE_URL = "https://github.com/{owner}/{repo}.git"


def _path_from(environ: Mapping[str, str], key: str, default: Path) -> Path:
    value = (environ.get(key) or "").strip()
    return Path(value or default).expanduser().resolve()


@dataclass(frozen=True)
class AutoskillsConfig:
    """Resolved locations and external commands used by the skill library."""

    skills_dir: Path
    agents_skills_dir: Path
    log_file: Path
    ops_log_file: Path
    search_command: tuple[str, ...] = DEFAULT_SEARCH_COMMAND
    git_command: str = "git"
    clone_url_template: str = DEFAULT_CLONE_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AutoskillsConfig:
        """
        function_purpose: Build a configuration from environment variables.

        Empty values are treated as unset. No directories are created here.
        """
        env = os.environ if environ is None else environ
        search = (env.get("AUTOSKILLS_SEARCH_COMMAND") or "").strip()
        return cls(
            skills_dir=_path_from(env, "AUTOSKILLS_DIR", DEFAULT_SKILLS_DIR),
            agents_skills_dir=_path_from(
                env, "AGENTS_SKILLS_DIR", DEFAULT_AGENTS_SKILLS_DIR
            ),
            log_file=_path_from(env, "AUTOSKILLS_LOG_FILE", DEFAULT_LOG_FILE),
            ops_log_file=_path_from(env, "AUTOSKILLS_OPS_LOG_FILE", DEFAULT_OPS_LOG_FILE),
            search_command=tuple(shlex.split(search)) if search else DEFAULT_SEARCH_COMMAND,
            git_command=(env.get("AUTOSKILLS_GIT") or "").strip() or "git",
            clone_url_template=(env.get("AUTOSKILLS_CLONE_URL") or "").strip()
            or DEFAULT_CLONE_URL,
        )

    def clone_url(self, owner: str, repo: str) -> str:
        return self.clone_url_template.format(owner=owner, repo=repo)
