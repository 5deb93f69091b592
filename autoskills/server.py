"""
autoskills.server

FastMCP stdio server exposing a personal library of agent skills as MCP tools.

Server-level documentation:
- Purpose: Let an agent keep its own reusable skills (SKILL.md documents) and grow the
  library from completed tasks and from publicly published skills.
- Why use it:
  * List, read, create, update and delete personal skills
  * Search public skills and install the best match into the personal library
  * Review finished tasks to decide whether a skill should be created or improved
- Transport: STDIO (ideal for clients that spawn the server process)
- Responses: every tool returns exactly one JSON text payload; failures are reported in
  the payload ("success": false) instead of raising
- Logging: Console (stderr) + rotating file logs

Environment: see autoskills.config.

Usage:
  python -m autoskills          # starts stdio server
  autoskills-server             # same, via console script

- As a module within MCP client config (stdio):
  command: python
  args: ["-m", "autoskills"]
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastmcp import FastMCP

from autoskills import __version__
from autoskills.config import APP_NAME, AutoskillsConfig
from autoskills.errors import InvalidInputError, SkillError
from autoskills.guides import (
    AUTOSKILL_HANDLER,
    SKILL_CREATOR,
    SKILL_UPDATER,
    load_guide,
)
from autoskills.installer import SkillInstaller
from autoskills.log import configure_logging
from autoskills.models import PublicSkill
from autoskills.repository import SkillRepository

SERVER_NAME = APP_NAME
MAX_SEARCH_RESULTS = 10

logger = logging.getLogger(__name__)


def _failure(exc: SkillError) -> dict[str, Any]:
    return {"success": False, "error": str(exc), "error_type": exc.kind}


class SkillTools:
    """
    Request handlers behind the MCP tools.

    Each handler performs one repository or installer call and returns a plain dict.
    No state is kept between calls.
    """

    def __init__(self, repository: SkillRepository, installer: SkillInstaller) -> None:
        self._repository = repository
        self._installer = installer

    @property
    def skills_dir(self) -> str:
        return str(self._repository.skills_dir)

    def server_info(self) -> dict[str, Any]:
        return {
            "name": SERVER_NAME,
            "version": __version__,
            "skills_dir": self.skills_dir,
            "agents_skills_dir": str(self._repository.agents_skills_dir),
            "transport": "stdio",
        }

    def list_skills(self) -> dict[str, Any]:
        try:
            skills = self._repository.list_skills()
        except SkillError as exc:
            return _failure(exc)
        return {
            "skills_dir": self.skills_dir,
            "count": len(skills),
            "skills": [s.to_dict() for s in skills],
        }

    def get_skill(self, name: str) -> dict[str, Any]:
        try:
            skill = self._repository.get_skill(name)
        except SkillError as exc:
            return _failure(exc)
        if skill is None:
            return {
                "success": False,
                "error": f'Skill "{name}" not found.',
                "error_type": "not_found",
            }
        return {"success": True, "skill": skill.to_dict()}

    def create_skill(
        self,
        name: str,
        description: str,
        title: str,
        when_to_use: str,
        instructions: str,
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        try:
            result = self._repository.create_skill(
                name, description, title, when_to_use, instructions, tags or []
            )
        except SkillError as exc:
            return _failure(exc)
        return {
            "success": True,
            "message": f'Skill "{name}" created successfully.',
            "path": str(result.path),
            "skills_dir": self.skills_dir,
            "link": result.link.value,
        }

    def update_skill(
        self,
        name: str,
        description: str | None = None,
        title: str | None = None,
        when_to_use: str | None = None,
        instructions: str | None = None,
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        try:
            path = self._repository.update_skill(
                name,
                description=description,
                title=title,
                when_to_use=when_to_use,
                instructions=instructions,
                tags=tags,
            )
        except SkillError as exc:
            return _failure(exc)
        return {
            "success": True,
            "message": f'Skill "{name}" updated successfully.',
            "path": str(path),
        }

    def delete_skill(self, name: str) -> dict[str, Any]:
        try:
            deleted = self._repository.delete_skill(name)
        except SkillError as exc:
            return _failure(exc)
        return {
            "success": deleted,
            "message": f'Skill "{name}" deleted.' if deleted else f'Skill "{name}" not found.',
        }

    def _pick(self, results: list[PublicSkill], candidate: str) -> PublicSkill:
        for result in results:
            if candidate and result.skill == candidate:
                return result
        return results[0]

    def _install(self, choice: PublicSkill) -> dict[str, Any]:
        outcome: dict[str, Any] = {"package": choice.package, "url": choice.url}
        try:
            if self._repository.exists(choice.skill):
                outcome.update(
                    status="already_installed",
                    path=str(self._repository.skill_dir(choice.skill)),
                )
                return outcome
            result = self._installer.install(choice.package)
        except SkillError as exc:
            logger.warning("Install of %s failed: %s", choice.package, exc)
            outcome.update(status="failed", error=str(exc), error_type=exc.kind)
            return outcome
        outcome.update(status="installed", path=str(result.path), link=result.link.value)
        return outcome

    def search_skill(
        self,
        task_context: str | None = None,
        candidate_skill: str | None = None,
        query: str | None = None,
    ) -> dict[str, Any]:
        """
        function_purpose: Find a skill for the task, preferring the personal library.

        A candidate already in the library is returned without searching. Otherwise the
        public index is searched and the best match installed.
        """
        candidate = (candidate_skill or "").strip()
        if candidate:
            try:
                local = self._repository.get_skill(candidate)
            except SkillError:
                local = None
            if local is not None:
                return {
                    "success": True,
                    "source": "local",
                    "skill": {
                        "name": local.name,
                        "description": local.meta.description,
                        "path": str(local.path),
                    },
                    "suggestion": (
                        f'Skill "{local.name}" is already in your personal library. '
                        f'Call get_skill("{local.name}") and follow its instructions.'
                    ),
                }

        search_query = next(
            (q.strip() for q in (query, candidate_skill, task_context) if q and q.strip()),
            "",
        )
        if not search_query:
            return _failure(
                InvalidInputError(
                    "Provide at least one of query, candidate_skill or task_context."
                )
            )

        results = self._installer.search(search_query)
        payload: dict[str, Any] = {
            "success": True,
            "source": "public",
            "query": search_query,
            "count": len(results),
            "results": [r.to_dict() for r in results[:MAX_SEARCH_RESULTS]],
            "install": None,
        }
        if not results:
            payload["suggestion"] = (
                "No public skill matched. Solve the task directly, then call review_task "
                "so the solution can be kept as a personal skill."
            )
            return payload

        install = self._install(self._pick(results, candidate))
        payload["install"] = install
        name = install["package"].rsplit("@", 1)[-1]
        if install["status"] == "failed":
            payload["suggestion"] = (
                f"Installing {install['package']} failed ({install['error']}). "
                "Review the other results or solve the task directly."
            )
        else:
            payload["suggestion"] = (
                f'Skill "{name}" is available in your personal library. '
                f'Call get_skill("{name}") and follow its instructions for: '
                f"{(task_context or search_query).strip()}"
            )
        return payload

    def _skill_details(self, names: list[str]) -> str:
        lines = []
        for name in names:
            try:
                skill = self._repository.get_skill(name)
            except SkillError:
                skill = None
            if skill is None:
                lines.append(f"- **{name}**: (not found in personal skills)")
            else:
                lines.append(f"- **{skill.meta.name}**: {skill.meta.description}")
        return "\n".join(lines)

    def review_task(
        self,
        task_description: str,
        solution_summary: str,
        skills_used: list[str] | None = None,
        skill_execution_smooth: bool | None = None,
        skill_issues: str | None = None,
    ) -> dict[str, Any]:
        """
        function_purpose: Recommend a follow-up for a finished task.

        - skills used and ran smoothly -> "none"
        - skills used with issues      -> "suggest_improve"
        - no skills used               -> "suggest_create"

        Without an explicit skill_execution_smooth flag, a run counts as smooth when no
        skill_issues were reported.
        """
        used = [s for s in (skills_used or []) if s and s.strip()]
        issues = (skill_issues or "").strip()

        if used:
            smooth = skill_execution_smooth if skill_execution_smooth is not None else not issues
            if smooth:
                return {
                    "action": "none",
                    "reason": "The skill(s) used performed well during this task. No changes needed.",
                    "skills_reviewed": used,
                }
            return {
                "action": "suggest_improve",
                "message": (
                    "The following skill(s) were used but did not execute smoothly:\n\n"
                    f"{self._skill_details(used)}\n\n"
                    f"Issues encountered: {issues or 'unspecified'}\n\n"
                    "Would you like me to improve this skill to better handle this type of task?"
                ),
                "skills_to_improve": used,
                "issues": issues,
                "task_description": task_description,
                "solution_summary": solution_summary,
                "guide": load_guide(SKILL_UPDATER),
            }

        try:
            existing = [s.name for s in self._repository.list_skills()]
        except SkillError as exc:
            logger.warning("Cannot list existing skills: %s", exc)
            existing = []
        return {
            "action": "suggest_create",
            "message": (
                "This task was completed without using any personal skills. "
                "The solution may be worth packaging as a reusable skill.\n\n"
                f"**Task**: {task_description}\n**Solution**: {solution_summary}\n\n"
                f"Existing personal skills: {', '.join(existing) or '(none)'}\n\n"
                "Would you like me to create a new personal skill from this solution "
                "so it can be reused in similar tasks?"
            ),
            "task_description": task_description,
            "solution_summary": solution_summary,
            "existing_skills": existing,
            "guide": load_guide(SKILL_CREATOR),
        }

    def autoskill_quick(
        self,
        skill_hint: str | None = None,
        skills_used: list[str] | None = None,
        task_context: str | None = None,
        skill_execution_smooth: bool | None = None,
        skill_issues: str | None = None,
    ) -> dict[str, Any]:
        """Handle the /autoskill command: create or improve without asking first."""
        handler_guide = load_guide(AUTOSKILL_HANDLER)
        hint = (skill_hint or "").strip()
        if hint:
            return {
                "action": "direct_create",
                "message": f'Creating new skill from your hint: "{hint}"',
                "skill_hint": hint,
                "guide": load_guide(SKILL_CREATOR),
                "handler_guide": handler_guide,
            }

        used = [s for s in (skills_used or []) if s and s.strip()]
        if used:
            direct = skill_execution_smooth is False
            return {
                "action": "direct_improve" if direct else "suggest_improve",
                "message": (
                    "Auto-improving skill(s) based on execution issues:"
                    if direct
                    else "The following skill(s) were used. Would you like to improve them?"
                ),
                "skills_to_improve": used,
                "skills_details": self._skill_details(used),
                "issues": skill_issues or "",
                "task_context": task_context or "",
                "guide": load_guide(SKILL_UPDATER),
                "handler_guide": handler_guide,
            }

        return {
            "action": "auto_create",
            "message": "Auto-creating skill from current task context.",
            "task_context": task_context or "",
            "guide": load_guide(SKILL_CREATOR),
            "handler_guide": handler_guide,
        }


def _dump(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False)


INSTRUCTIONS = (
    "autoskills MCP Server\n"
    "\n"
    "Purpose:\n"
    "- Maintain a personal library of agent skills (SKILL.md documents with frontmatter)\n"
    "  and grow it from completed tasks and from publicly published skills.\n"
    "\n"
    "Workflow:\n"
    "- Before a task: list_skills(), or search_skill(task_context, candidate_skill?) to find\n"
    "  a personal skill or install a public one; then get_skill(name) and follow it.\n"
    "- After a task: review_task(task_description, solution_summary, skills_used?, ...)\n"
    "  and act on its recommendation with create_skill or update_skill.\n"
    "- When the user types /autoskill: autoskill_quick(...).\n"
    "\n"
    "Exposed tools:\n"
    "- server_info(): server name, version, directories, transport\n"
    "- list_skills(): {skills_dir, count, skills[]}\n"
    "- get_skill(name): metadata, markdown content and path\n"
    "- create_skill(name, description, title, when_to_use, instructions, tags?)\n"
    "- update_skill(name, description?, title?, when_to_use?, instructions?, tags?): bumps patch version\n"
    "- delete_skill(name)\n"
    "- search_skill(task_context?, candidate_skill?, query?): search public skills and install the best match\n"
    "- review_task(task_description, solution_summary, skills_used?, skill_execution_smooth?, skill_issues?)\n"
    "- autoskill_quick(skill_hint?, skills_used?, task_context?, skill_execution_smooth?, skill_issues?)\n"
    "\n"
    "Responses:\n"
    "- Every tool returns one JSON text payload. Failures carry success=false, error and error_type.\n"
    "\n"
    "Environment configuration:\n"
    "- AUTOSKILLS_DIR       : personal skills directory (default: ~/.autoskills/personal-skills)\n"
    "- AGENTS_SKILLS_DIR    : discovery symlink directory (default: ~/.agents/skills)\n"
    "- AUTOSKILLS_LOG_FILE  : rotating log file (default: ~/.autoskills/logs/autoskills.log)\n"
)


def build_server(
    config: AutoskillsConfig, installer: SkillInstaller | None = None
) -> FastMCP:
    """
    function_purpose: Create the FastMCP server with every skill tool registered.

    Components are built from the given configuration once; tools share them.
    """
    repository = SkillRepository(config)
    tools = SkillTools(repository, installer or SkillInstaller(repository, config))
    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)

    @mcp.tool
    def server_info() -> str:
        """
        function_purpose: Return server name, version, skills directories and transport.

        Usage:
        - Call once when connecting to learn where skills are stored.
        """
        return _dump(tools.server_info())

    @mcp.tool
    def list_skills() -> str:
        """
        function_purpose: List all personal skills in the skills library.

        Returns JSON: {skills_dir, count, skills: [{name, description, path}]}
        """
        return _dump(tools.list_skills())

    @mcp.tool
    def get_skill(name: str) -> str:
        """
        function_purpose: Read the full content of a specific personal skill.

        Args:
        - name: str   Name of the skill to read

        Returns JSON: {success, skill: {name, description, version, tags, created, updated, content, path}}
        or {success: false, error} when the skill does not exist.
        """
        return _dump(tools.get_skill(name))

    @mcp.tool
    def create_skill(
        name: str,
        description: str,
        title: str,
        when_to_use: str,
        instructions: str,
        tags: list[str] | None = None,
    ) -> str:
        """
        function_purpose: Create a new personal skill from a completed task solution.

        Args:
        - name: str              Unique skill identifier (lowercase letters, digits, hyphens)
        - description: str      Short description for matching and triggering
        - title: str             Display title for the skill
        - when_to_use: str       When this skill should be triggered
        - instructions: str      Step-by-step instructions for the agent to follow
        - tags: list[str]        Optional tags for categorization

        Fails (success=false) if a skill with that name already exists; use update_skill instead.
        """
        return _dump(
            tools.create_skill(name, description, title, when_to_use, instructions, tags)
        )

    @mcp.tool
    def update_skill(
        name: str,
        description: str | None = None,
        title: str | None = None,
        when_to_use: str | None = None,
        instructions: str | None = None,
        tags: list[str] | None = None,
    ) -> str:
        """
        function_purpose: Update an existing personal skill with improvements.

        Only provided fields change. The patch version is bumped and the updated date
        refreshed on every call.
        """
        return _dump(
            tools.update_skill(name, description, title, when_to_use, instructions, tags)
        )

    @mcp.tool
    def delete_skill(name: str) -> str:
        """function_purpose: Delete a personal skill from the library."""
        return _dump(tools.delete_skill(name))

    @mcp.tool
    def search_skill(
        task_context: str | None = None,
        candidate_skill: str | None = None,
        query: str | None = None,
    ) -> str:
        """
        function_purpose: Find a skill for the current task and make it available locally.

        Description:
        - If candidate_skill is already a personal skill, it is returned without searching.
        - Otherwise searches public skills (query, else candidate_skill, else task_context)
          and installs the most popular match into the personal library.

        Returns JSON: {success, source, results[], install, suggestion}
        """
        return _dump(tools.search_skill(task_context, candidate_skill, query))

    @mcp.tool
    def review_task(
        task_description: str,
        solution_summary: str,
        skills_used: list[str] | None = None,
        skill_execution_smooth: bool | None = None,
        skill_issues: str | None = None,
    ) -> str:
        """
        function_purpose: Review a completed task and decide whether to suggest creating a
        new skill or improving an existing one. Call this after finishing a task.

        Returns JSON with action "none", "suggest_improve" or "suggest_create" plus guidance.
        """
        return _dump(
            tools.review_task(
                task_description,
                solution_summary,
                skills_used,
                skill_execution_smooth,
                skill_issues,
            )
        )

    @mcp.tool
    def autoskill_quick(
        skill_hint: str | None = None,
        skills_used: list[str] | None = None,
        task_context: str | None = None,
        skill_execution_smooth: bool | None = None,
        skill_issues: str | None = None,
    ) -> str:
        """
        function_purpose: Quick command for /autoskill that skips the agent's own judgment.

        - skill_hint given: create a skill from that text
        - skills_used given: improve those skills
        - otherwise: create a skill from task_context
        """
        return _dump(
            tools.autoskill_quick(
                skill_hint, skills_used, task_context, skill_execution_smooth, skill_issues
            )
        )

    return mcp


# --- Entry points ---
def run(config: AutoskillsConfig | None = None) -> None:
    """
    function_purpose: Entry point to start the MCP stdio server.

    - Resolves configuration once
    - Configures logging
    - Runs FastMCP stdio server
    """
    config = config or AutoskillsConfig.from_env()
    app_logger = configure_logging(config)
    app_logger.info(
        "Server starting with skills_dir=%s agents_skills_dir=%s",
        str(config.skills_dir),
        str(config.agents_skills_dir),
    )
    build_server(config).run()  # stdio transport by default


if __name__ == "__main__":
    run()
