"""
autoskills.installer

Search public skills with an external command and install them from their git
repositories into the personal library.

Both external processes run synchronously without a timeout: a hung command hangs
the call. A missing executable or a non-zero exit is an ordinary, reported failure.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from autoskills.config import AutoskillsConfig
from autoskills.errors import ExternalProcessError, SkillNotFoundError
from autoskills.models import PublicSkill, WriteResult
from autoskills.public import parse_package, parse_search_output
from autoskills.repository import SkillRepository, storage_errors
from autoskills.resolver import resolve_skill_source

logger = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class SkillInstaller:
    """Public skill search and git-based installation."""

    def __init__(
        self,
        repository: SkillRepository,
        config: AutoskillsConfig | None = None,
        run: Runner = subprocess.run,
    ) -> None:
        self._repository = repository
        self._config = config or repository.config
        self._run = run

    def _execute(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        """Run a command with stderr folded into stdout. OSError propagates."""
        executable = shutil.which(args[0]) or args[0]
        return self._run(
            [executable, *args[1:]],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )

    def search(self, query: str) -> list[PublicSkill]:
        """
        function_purpose: Query the public skill index.

        Returns an empty list when the search command cannot be run; the exit status
        is otherwise ignored and whatever parses is returned.
        """
        args = [*self._config.search_command, query]
        try:
            res = self._execute(args)
        except OSError as exc:
            logger.warning("Skill search failed: %s (%s)", " ".join(args), exc)
            return []

        if res.returncode != 0:
            logger.info("Skill search exited with %s: %s", res.returncode, " ".join(args))
        results = parse_search_output(res.stdout or "")
        logger.info("Skill search %r returned %d result(s)", query, len(results))
        return results

    def _clone(self, owner: str, repo: str, dest: Path) -> None:
        url = self._config.clone_url(owner, repo)
        args = [self._config.git_command, "clone", "--depth=1", url, str(dest)]
        try:
            res = self._execute(args)
        except OSError as exc:
            raise ExternalProcessError(f"Failed to run git clone: {exc}") from exc

        output = (res.stdout or "").strip()
        if res.returncode != 0:
            raise ExternalProcessError(f"Failed to clone repository: {output}", output)
        logger.info("Cloned %s\n%s", url, output)

    def install(self, package: str) -> WriteResult:
        """
        function_purpose: Install `owner/repo@skill` into the personal library.

        The repository is cloned into a scratch directory that is always removed.
        An existing local skill with the same name is replaced.
        """
        owner, repo, skill = parse_package(package)
        self._repository.skill_dir(skill)

        with storage_errors(f"install {package}"), tempfile.TemporaryDirectory(
            prefix="skills-install-", ignore_cleanup_errors=True
        ) as scratch:
            checkout = Path(scratch) / "repo"
            self._clone(owner, repo, checkout)

            source = resolve_skill_source(checkout, skill)
            if source is None:
                raise SkillNotFoundError(
                    f'Skill "{skill}" not found in repository {owner}/{repo}'
                )
            logger.info("Resolved %s to %s", package, source.relative_to(checkout))
            target = self._repository.replace_skill_dir(skill, source)

        link = self._repository.link_skill(skill)
        payload: dict[str, Any] = {"skill": skill, "package": package, "link": link.value}
        self._repository.record_operation("install", payload)
        return WriteResult(path=target, link=link)
