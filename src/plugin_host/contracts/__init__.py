"""
Plugin Host Contract Models

This module provides the canonical models for corpus documents, their
frontmatter and lint findings. All contract-related types should be
imported from here.
"""

from .frontmatter import (
    # Enums
    BondType,
    DocumentKind,
    RetryStrategy,
    # Policy models
    CircuitBreakerPolicy,
    ErrorHandlingPolicy,
    TokenOptimization,
    # Frontmatter
    AgentFrontmatter,
    BondedSkillRef,
    CommandFrontmatter,
    PluginManifest,
    SkillFrontmatter,
    FRONTMATTER_MODELS,
    normalize_sasmp_version,
)

from .documents import (
    CodeFence,
    Document,
    LoadIssue,
    ParseErrorKind,
)

from .findings import (
    LintFinding,
    LintReport,
    Severity,
)

__all__ = [
    # Enums
    "BondType",
    "DocumentKind",
    "RetryStrategy",
    # Policy models
    "CircuitBreakerPolicy",
    "ErrorHandlingPolicy",
    "TokenOptimization",
    # Frontmatter
    "AgentFrontmatter",
    "BondedSkillRef",
    "CommandFrontmatter",
    "PluginManifest",
    "SkillFrontmatter",
    "FRONTMATTER_MODELS",
    "normalize_sasmp_version",
    # Documents
    "CodeFence",
    "Document",
    "LoadIssue",
    "ParseErrorKind",
    # Findings
    "LintFinding",
    "LintReport",
    "Severity",
]
