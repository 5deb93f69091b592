"""Exceptions raised by the skill library."""

from __future__ import annotations


class SkillError(Exception):
    """Base class for expected, reportable failures."""

    kind = "error"


class SkillNotFoundError(SkillError):
    kind = "not_found"


class SkillExistsError(SkillError):
    kind = "already_exists"


class InvalidInputError(SkillError, ValueError):
    kind = "invalid_input"


class UnsupportedBodyError(InvalidInputError):
    """Skill body does not follow the `# Title` + instructions layout."""

    kind = "unsupported_body"


class ExternalProcessError(SkillError):
    """An external command was missing or exited non-zero."""

    kind = "external_process"

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output
