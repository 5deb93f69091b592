from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import pytest

from autoskills import repository as repository_module
from autoskills.config import APP_NAME, AutoskillsConfig
from autoskills.repository import SkillRepository


def write_tree(root: Path, files: dict[str, str]) -> None:
    """Create files (relative path -> content) under root."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def skill_md(name: str, description: str = "A skill") -> str:
    return f"---\nname: {name}\ndescription: {description}\n---\n\n# {name}\n\nDo things.\n"


class FakeRunner:
    """
    Stand-in for subprocess.run used by the installer.

    `git clone` materializes `repo_files` at the destination; any other command
    returns `search_output`.
    """

    def __init__(
        self,
        repo_files: dict[str, str] | None = None,
        search_output: str = "",
        clone_returncode: int = 0,
        missing: bool = False,
    ) -> None:
        self.repo_files = repo_files or {}
        self.search_output = search_output
        self.clone_returncode = clone_returncode
        self.missing = missing
        self.calls: list[list[str]] = []

    @property
    def clone_destinations(self) -> list[Path]:
        return [Path(c[-1]) for c in self.calls if len(c) > 1 and c[1] == "clone"]

    def __call__(self, args: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(args))
        if self.missing:
            raise FileNotFoundError(2, "No such file or directory", args[0])
        if len(args) > 1 and args[1] == "clone":
            if self.clone_returncode != 0:
                return subprocess.CompletedProcess(
                    args, self.clone_returncode, stdout="fatal: repository not found\n"
                )
            dest = Path(args[-1])
            dest.mkdir(parents=True)
            write_tree(dest, self.repo_files)
            (dest / ".git").mkdir()
            (dest / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
            return subprocess.CompletedProcess(args, 0, stdout="Cloning into 'repo'...\n")
        return subprocess.CompletedProcess(args, 0, stdout=self.search_output)


@pytest.fixture
def config(tmp_path: Path) -> AutoskillsConfig:
    return AutoskillsConfig(
        skills_dir=tmp_path / "personal-skills",
        agents_skills_dir=tmp_path / "agents" / "skills",
        log_file=tmp_path / "logs" / "autoskills.log",
        ops_log_file=tmp_path / "logs" / "operations.log",
    )


@pytest.fixture
def repo(config: AutoskillsConfig) -> SkillRepository:
    return SkillRepository(config)


@pytest.fixture
def today(monkeypatch: pytest.MonkeyPatch):
    """Pin the repository clock; call the returned function to move it."""
    current = {"date": "2026-01-15"}
    monkeypatch.setattr(repository_module, "_today", lambda: current["date"])

    def set_today(value: str) -> None:
        current["date"] = value

    return set_today


@pytest.fixture(autouse=True)
def _reset_app_logger():
    yield
    logger = logging.getLogger(APP_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def blocked_config(tmp_path: Path) -> AutoskillsConfig:
    """Configuration whose skills root sits below a regular file."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory\n", encoding="utf-8")
    return AutoskillsConfig(
        skills_dir=blocker / "skills",
        agents_skills_dir=tmp_path / "agents" / "skills",
        log_file=tmp_path / "logs" / "autoskills.log",
        ops_log_file=tmp_path / "logs" / "operations.log",
    )
