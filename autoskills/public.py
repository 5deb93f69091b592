"""
autoskills.public

Translation boundary for the external skill search command. Its output is plain
terminal text, not a stable format; everything that knows its shape lives here.

Expected lines (ANSI colors stripped):

    acme/tools@deploy-helper 1.2K installs
    └ https://skills.sh/acme/tools/deploy-helper
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from autoskills.errors import InvalidInputError
from autoskills.models import PublicSkill

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
RESULT_LINE = re.compile(
    r"^(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+)@(?P<skill>[\w./ -]+?)\s+"
    r"(?P<count>\d[\d,]*(?:\.\d+)?[KkMm]?)\s+installs?$"
)
URL_PREFIX = re.compile(r"^[└\\|]\s*")
PACKAGE = re.compile(r"^(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+)@(?P<skill>[\w.-]+)$")
DEFAULT_URL = "https://skills.sh/{owner}/{repo}/{skill}"

_MULTIPLIERS = {"k": 1_000, "m": 1_000_000}


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE.sub("", text).replace("\r", "")


def parse_install_count(text: str) -> int:
    """Parse `950`, `1,024`, `1.2K` or `3M` into an integer count; junk gives 0."""
    clean = text.strip().lower().replace(",", "")
    multiplier = 1
    if clean[-1:] in _MULTIPLIERS:
        multiplier = _MULTIPLIERS[clean[-1]]
        clean = clean[:-1]
    try:
        return int(Decimal(clean) * multiplier)
    except (InvalidOperation, ValueError, OverflowError):
        return 0


def parse_search_output(output: str) -> list[PublicSkill]:
    """
    function_purpose: Extract public skill results from raw search command output.

    Unmatched lines are ignored. Results are sorted by install count, highest first.
    """
    lines = [line.strip() for line in strip_ansi(output).split("\n")]
    lines = [line for line in lines if line]

    results: list[PublicSkill] = []
    for idx, line in enumerate(lines):
        match = RESULT_LINE.match(line)
        if not match:
            continue
        owner, repo = match["owner"], match["repo"]
        skill = match["skill"].strip()

        url = DEFAULT_URL.format(owner=owner, repo=repo, skill=skill)
        if idx + 1 < len(lines):
            candidate = URL_PREFIX.sub("", lines[idx + 1])
            if candidate.startswith("https://"):
                url = candidate

        results.append(
            PublicSkill(
                owner=owner,
                repo=repo,
                skill=skill,
                url=url,
                installs=parse_install_count(match["count"]),
            )
        )

    results.sort(key=lambda r: r.installs, reverse=True)
    return results


def parse_package(package: str) -> tuple[str, str, str]:
    """Split `owner/repo@skill` into its parts."""
    match = PACKAGE.match((package or "").strip())
    if not match:
        raise InvalidInputError(
            f"Invalid package format: {package}. Expected: owner/repo@skill-name"
        )
    return match["owner"], match["repo"], match["skill"]
