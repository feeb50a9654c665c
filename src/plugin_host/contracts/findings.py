"""Lint finding models."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Finding severity, ordered info < warning < error."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}


class LintFinding(BaseModel):
    """One problem found in the corpus."""
    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(..., pattern=r"^[A-Z]+\d{3}$")
    severity: Severity
    message: str
    path: str
    line: Optional[int] = None
    document: Optional[str] = None

    def location(self) -> str:
        return f"{self.path}:{self.line}" if self.line else self.path


class LintReport(BaseModel):
    """Result of a lint run over a corpus."""

    findings: List[LintFinding] = Field(default_factory=list)
    documents_checked: int = 0
    rules_run: List[str] = Field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        """Number of findings per severity (every severity present)."""
        counter = Counter(f.severity.value for f in self.findings)
        return {s.value: counter.get(s.value, 0) for s in Severity}

    def has_failures(self, threshold: Severity = Severity.ERROR) -> bool:
        """Whether any finding is at or above the threshold."""
        return any(f.severity >= threshold for f in self.findings)

    def by_rule(self) -> Dict[str, List[LintFinding]]:
        grouped: Dict[str, List[LintFinding]] = {}
        for finding in self.findings:
            grouped.setdefault(finding.rule_id, []).append(finding)
        return grouped

    def sorted(self) -> List[LintFinding]:
        """Findings ordered by path, line, then rule id."""
        return sorted(
            self.findings,
            key=lambda f: (f.path, f.line or 0, f.rule_id),
        )
