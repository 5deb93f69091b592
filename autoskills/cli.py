"""
autoskills.cli

Command line tool for managing personal skills outside the MCP server.

Usage:
  autoskills init <name> [--path <dir>]   Create a new skill template
  autoskills add <path> [-y]              Add a skill (copies to personal-skills, creates symlink)
  autoskills list                         List all personal skills
  autoskills help                         Show help

Exit status is 1 on usage errors and conflicts, 0 otherwise.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from autoskills.config import AutoskillsConfig
from autoskills.errors import SkillError
from autoskills.log import configure_logging
from autoskills.models import LinkStatus
from autoskills.repository import SkillRepository

DESCRIPTION_WIDTH = 60

EPILOG = """\
Environment Variables:
  AUTOSKILLS_DIR       Personal skills storage (default: ~/.autoskills/personal-skills)
  AGENTS_SKILLS_DIR    Agent skills symlink directory (default: ~/.agents/skills)

Examples:
  autoskills init my-skill
  autoskills init my-skill --path ./skills
  autoskills add ./my-skill -y
  autoskills list
"""


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit status 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="autoskills",
        description="Autoskills CLI - Manage personal AI agent skills",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="<command>", parser_class=_Parser)

    p_init = sub.add_parser("init", help="Create a new skill template")
    p_init.add_argument("name", help="Skill name (lowercase, hyphens)")
    p_init.add_argument(
        "--path", metavar="DIR", help="Output directory (default: the personal skills directory)"
    )

    p_add = sub.add_parser(
        "add", help="Add a skill (copies to personal-skills, creates symlink)"
    )
    p_add.add_argument("path", help="Folder containing SKILL.md")
    p_add.add_argument(
        "-y", "--yes", action="store_true", help="Auto-confirm overwrites"
    )

    sub.add_parser("list", help="List all personal skills")
    sub.add_parser("help", help="Show this help message")
    return parser


def _init(repository: SkillRepository, name: str, path: str | None) -> int:
    skill_dir = repository.init_skill(name, path)
    print(f"Created skill directory: {skill_dir}")
    print("Created SKILL.md")
    print("Created resource directories (scripts/, references/, assets/)")
    print(f'\nSkill "{name}" initialized at {skill_dir}')
    print("\nNext steps:")
    print("1. Edit SKILL.md to complete the TODO items")
    print("2. Delete unused resource directories")
    print(f"3. Run: autoskills add {skill_dir} -y")
    return 0


def _add(repository: SkillRepository, path: str, overwrite: bool) -> int:
    result = repository.add_skill(path, overwrite=overwrite)
    print(f"Skill stored at {result.path}")
    link = repository.agents_skills_dir / result.path.name
    if result.link is LinkStatus.CREATED:
        print(f"Created symlink: {link}")
    elif result.link is LinkStatus.FAILED:
        print(f"Warning: failed to create symlink {link}", file=sys.stderr)
    print(f'\nSkill "{result.path.name}" added successfully!')
    return 0


def _list(repository: SkillRepository) -> int:
    skills_dir = repository.skills_dir
    skills = repository.list_skills() if skills_dir.is_dir() else []
    if not skills:
        print("No personal skills found.")
    else:
        print(f"\nPersonal Skills ({len(skills)}):\n")
        for skill in skills:
            description = skill.description
            if not description:
                description = "(no description)"
            elif len(description) > DESCRIPTION_WIDTH:
                description = description[:DESCRIPTION_WIDTH] + "..."
            print(f"  - {skill.name}")
            print(f"    {description}\n")
    print(f"Skills directory: {skills_dir}")
    return 0


def main(
    argv: Sequence[str] | None = None, config: AutoskillsConfig | None = None
) -> int:
    """
    function_purpose: Run one CLI command and return the process exit status.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    if args.command in (None, "help"):
        parser.print_help()
        return 0

    config = config or AutoskillsConfig.from_env()
    logger = configure_logging(config, console_level=logging.WARNING)
    repository = SkillRepository(config)

    try:
        if args.command == "init":
            return _init(repository, args.name, args.path)
        if args.command == "add":
            return _add(repository, args.path, args.yes)
        return _list(repository)
    except SkillError as exc:
        logger.info("Command %s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
