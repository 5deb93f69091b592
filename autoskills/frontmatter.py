"""
autoskills.frontmatter

Parse and serialize the `---` delimited metadata block at the top of a SKILL.md.

Grammar (one entry per line between the opening and closing `---` lines):

    key: value
    key: [item, item, item]

Values wrapped in `[...]` are lists of comma-separated, stripped items; every other
value is a stripped string. Lines without a `:` are ignored. Anything after the
closing delimiter line is the body, kept verbatim.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple, Union

import yaml

logger = logging.getLogger(__name__)

DELIMITER = "---"
KEY_ORDER = ("name", "description", "version", "tags", "created", "updated")

MetaValue = Union[str, list[str]]


class Document(NamedTuple):
    meta: dict[str, MetaValue]
    body: str


def _split(text: str) -> tuple[list[str], str] | None:
    """Return (metadata lines, body) or None when there is no complete block."""
    pos = 0
    opened = False
    meta_lines: list[str] = []
    while pos < len(text):
        end = text.find("\n", pos)
        line_end = len(text) if end == -1 else end
        next_pos = len(text) if end == -1 else end + 1
        line = text[pos:line_end].rstrip("\r")
        if not opened:
            if line.strip() != DELIMITER:
                return None
            opened = True
        elif line.strip() == DELIMITER:
            return meta_lines, text[next_pos:]
        else:
            meta_lines.append(line)
        pos = next_pos
    return None


def _parse_value(raw: str) -> MetaValue:
    value = raw.strip()
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1].strip()
        if not inner:
            return []
        return [item.strip() for item in inner.split(",")]
    return value


def _parse_lines(lines: list[str]) -> dict[str, MetaValue]:
    meta: dict[str, MetaValue] = {}
    for line in lines:
        key, sep, value = line.partition(":")
        if not sep:
            continue
        meta[key.strip()] = _parse_value(value)
    return meta


def parse(text: str) -> Document:
    """
    function_purpose: Split a skill document into its metadata mapping and body.

    Input without a leading `---` line, or without a closing one, is returned as
    body with empty metadata.
    """
    split = _split(text)
    if split is None:
        return Document({}, text)
    lines, body = split
    return Document(_parse_lines(lines), body)


def _format_value(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(str(item) for item in value) + "]"
    return str(value)


def serialize(meta: dict[str, MetaValue], body: str = "") -> str:
    """
    function_purpose: Render metadata and body back into a skill document.

    Known keys come first in KEY_ORDER, remaining keys follow in insertion order.
    """
    keys = [k for k in KEY_ORDER if k in meta]
    keys.extend(k for k in meta if k not in KEY_ORDER)
    lines = [DELIMITER]
    lines.extend(f"{key}: {_format_value(meta[key])}" for key in keys)
    lines.append(DELIMITER)
    return "\n".join(lines) + "\n" + body


def read_document(path: Path) -> Document:
    return parse(path.read_text(encoding="utf-8"))


def read_declared_name(path: Path) -> str | None:
    """
    Declared `name` of a SKILL.md, or None.

    Third-party skills use YAML frontmatter (folded descriptions, quoted values), so
    the block is loaded with yaml first and the line grammar is the fallback.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return None

    split = _split(text)
    if split is None:
        return None
    lines, _ = split

    try:
        data = yaml.safe_load("\n".join(lines))
    except yaml.YAMLError:
        data = None
    if not isinstance(data, dict):
        data = _parse_lines(lines)

    name = data.get("name")
    if name is None or isinstance(name, (list, dict)):
        return None
    name = str(name).strip()
    return name or None
