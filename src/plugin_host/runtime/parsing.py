"""
Markdown parsing - frontmatter split, code fences and headings.

Frontmatter is the YAML block between a leading ``---`` line and the next
``---`` (or ``...``) line. Everything after it is the Markdown body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import yaml

from plugin_host.contracts import CodeFence
from plugin_host.runtime.errors import FrontmatterError

_OPEN_RE = re.compile(r"^---\s*$")
_CLOSE_RE = re.compile(r"^(---|\.\.\.)\s*$")
_FENCE_OPEN_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_HEADING_RE = re.compile(r"^ {0,3}#{1,6}\s+(?P<text>.*?)(?:\s+#+)?\s*$")


@dataclass
class FrontmatterBlock:
    """Location of the frontmatter block inside a file."""
    yaml_text: str | None  # None when the file has no frontmatter
    body: str
    body_line: int  # 1-based line of the first body line
    open_line: int  # 1-based line of the opening ---


def locate_frontmatter(text: str) -> FrontmatterBlock:
    """
    Find the frontmatter block without parsing it.

    A UTF-8 BOM and blank lines before the opening ``---`` are tolerated.

    Raises:
        FrontmatterError: If the block is opened but never closed
    """
    text = text.lstrip("\ufeff")
    lines = text.splitlines(keepends=True)

    index = 0
    while index < len(lines) and not lines[index].strip():
        index += 1

    if index >= len(lines) or not _OPEN_RE.match(lines[index].rstrip("\r\n")):
        return FrontmatterBlock(yaml_text=None, body=text, body_line=1, open_line=0)

    open_index = index
    for close_index in range(open_index + 1, len(lines)):
        if _CLOSE_RE.match(lines[close_index].rstrip("\r\n")):
            return FrontmatterBlock(
                yaml_text="".join(lines[open_index + 1:close_index]),
                body="".join(lines[close_index + 1:]),
                body_line=close_index + 2,
                open_line=open_index + 1,
            )

    raise FrontmatterError("Frontmatter block is never closed", line=open_index + 1)


def load_frontmatter_yaml(yaml_text: str, open_line: int = 1) -> dict[str, Any]:
    """
    Parse frontmatter YAML into a mapping.

    Args:
        yaml_text: Text between the frontmatter delimiters
        open_line: File line of the opening delimiter, for error positions

    Returns:
        Parsed mapping ({} for an empty block)

    Raises:
        FrontmatterError: If the YAML is invalid or not a mapping
    """
    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = open_line + 1 + mark.line if mark is not None else open_line
        problem = getattr(e, "problem", None) or str(e)
        raise FrontmatterError(f"Invalid YAML frontmatter: {problem}", line=line) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"Frontmatter must be a mapping, got {type(data).__name__}",
            line=open_line,
        )
    return data


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """
    Split YAML frontmatter from markdown body.

    Returns (metadata_dict, body_text). If no frontmatter, returns ({}, full_text).

    Raises:
        FrontmatterError: If the frontmatter block is malformed
    """
    block = locate_frontmatter(text)
    if block.yaml_text is None:
        return {}, block.body
    return load_frontmatter_yaml(block.yaml_text, block.open_line), block.body


def _fence_language(info: str) -> str | None:
    info = info.strip()
    if not info:
        return None
    word = info.split()[0].strip("{}").lstrip(".")
    return word.lower() or None


def extract_code_fences(body: str, line_offset: int = 0) -> list[CodeFence]:
    """
    Extract fenced code blocks from a markdown body.

    Args:
        body: Markdown text
        line_offset: Added to line numbers so they refer to the whole file

    Returns:
        Fences in document order; an unterminated fence runs to the end
    """
    fences: list[CodeFence] = []
    lines = body.splitlines()
    index = 0
    while index < len(lines):
        match = _FENCE_OPEN_RE.match(lines[index])
        if not match or (match.group("fence")[0] == "`" and "`" in match.group("info")):
            index += 1
            continue

        fence = match.group("fence")
        close_re = re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}\s*$")
        start = index
        content: list[str] = []
        index += 1
        while index < len(lines) and not close_re.match(lines[index]):
            content.append(lines[index])
            index += 1

        fences.append(CodeFence(
            language=_fence_language(match.group("info")),
            content="\n".join(content),
            line=start + 1 + line_offset,
        ))
        index += 1

    return fences


def first_heading(body: str) -> str | None:
    """Return the text of the first ATX heading outside code fences."""
    in_fence: str | None = None
    for line in body.splitlines():
        match = _FENCE_OPEN_RE.match(line)
        if in_fence is None and match:
            in_fence = match.group("fence")
            continue
        if in_fence is not None:
            stripped = line.strip()
            if stripped.startswith(in_fence[0] * len(in_fence)) and not stripped.strip(in_fence[0]):
                in_fence = None
            continue
        heading = _HEADING_RE.match(line)
        if heading:
            return heading.group("text").strip() or None
    return None
