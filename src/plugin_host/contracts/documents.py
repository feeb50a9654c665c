"""Document models - one parsed corpus file each."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .frontmatter import (
    AgentFrontmatter,
    CommandFrontmatter,
    DocumentKind,
    SkillFrontmatter,
    normalize_sasmp_version,
)


class ParseErrorKind(str, Enum):
    """Why a document's frontmatter could not be used."""

    MISSING = "missing"  # No frontmatter block at all
    YAML = "yaml"  # Block present but not a valid YAML mapping
    SCHEMA = "schema"  # Valid YAML that fails the kind's model


class CodeFence(BaseModel):
    """A fenced code block inside a document body."""
    model_config = ConfigDict(frozen=True)

    language: Optional[str] = None
    content: str = ""
    line: int = Field(..., ge=1, description="Line of the opening fence in the file")


class Document(BaseModel):
    """A single agent, skill or command file."""

    kind: DocumentKind
    name: str
    path: Path
    relative_path: str
    frontmatter: Optional[Union[AgentFrontmatter, SkillFrontmatter, CommandFrontmatter]] = None
    raw_frontmatter: Dict[str, Any] = Field(default_factory=dict)
    body: str = ""
    body_line: int = Field(default=1, description="File line where the body starts")
    fences: List[CodeFence] = Field(default_factory=list)
    title: Optional[str] = None
    parse_error: Optional[str] = None
    error_kind: Optional[ParseErrorKind] = None
    error_line: Optional[int] = None

    @property
    def is_valid(self) -> bool:
        """Whether frontmatter parsed and validated."""
        return self.parse_error is None and self.frontmatter is not None

    @property
    def description(self) -> str:
        if self.frontmatter is not None:
            return self.frontmatter.description
        value = self.raw_frontmatter.get("description")
        return value.strip() if isinstance(value, str) else ""

    @property
    def sasmp_version(self) -> Optional[str]:
        if self.frontmatter is not None:
            return self.frontmatter.sasmp_version
        for key in ("sasmp_version", "sasmp", "schema_version"):
            if key in self.raw_frontmatter:
                return normalize_sasmp_version(self.raw_frontmatter[key])
        return None

    @property
    def triggers(self) -> List[str]:
        return list(getattr(self.frontmatter, "triggers", []) or [])

    @property
    def capabilities(self) -> List[str]:
        return list(getattr(self.frontmatter, "capabilities", []) or [])

    @property
    def model(self) -> Optional[str]:
        return getattr(self.frontmatter, "model", None)

    def summary(self) -> Dict[str, Any]:
        """Short JSON-friendly view used by listings."""
        return {
            "kind": self.kind.value,
            "name": self.name,
            "description": self.description,
            "path": self.relative_path,
            "sasmp_version": self.sasmp_version,
            "valid": self.is_valid,
        }

    def detail(self, include_body: bool = True) -> Dict[str, Any]:
        """Full JSON-friendly view with frontmatter and, optionally, body."""
        data = self.summary()
        data["title"] = self.title
        data["frontmatter"] = (
            self.frontmatter.model_dump(mode="json")
            if self.frontmatter is not None
            else self.raw_frontmatter
        )
        data["parse_error"] = self.parse_error
        if include_body:
            data["body"] = self.body
        return data


class LoadIssue(BaseModel):
    """A file the loader could not turn into a document."""
    model_config = ConfigDict(frozen=True)

    path: str
    message: str
