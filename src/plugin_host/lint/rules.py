"""
Lint rules for a plugin corpus.

Each rule inspects the loaded corpus and yields findings. Rules never raise
for bad content: a broken document is a finding, not an exception.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Iterable, Iterator

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for

from plugin_host.config import Settings
from plugin_host.contracts import (
    AgentFrontmatter,
    Document,
    DocumentKind,
    LintFinding,
    ParseErrorKind,
    Severity,
    SkillFrontmatter,
)
from plugin_host.lint.languages import tag_mismatch
from plugin_host.runtime.bonding import BondGraph, resolve_bonds
from plugin_host.runtime.corpus import Corpus


@dataclass
class LintContext:
    """What every rule gets to look at."""
    corpus: Corpus
    settings: Settings
    extra: dict[str, Any] = field(default_factory=dict)

    @cached_property
    def bonds(self) -> BondGraph:
        return resolve_bonds(self.corpus)


class LintRule(ABC):
    """Base class for lint rules."""

    rule_id: str = ""
    severity: Severity = Severity.WARNING
    description: str = ""

    @abstractmethod
    def check(self, ctx: LintContext) -> Iterable[LintFinding]:
        """Yield findings for the corpus."""

    def finding(
        self,
        doc: Document | None,
        message: str,
        line: int | None = None,
        severity: Severity | None = None,
        path: str | None = None,
    ) -> LintFinding:
        return LintFinding(
            rule_id=self.rule_id,
            severity=severity or self.severity,
            message=message,
            path=path or (doc.relative_path if doc is not None else "."),
            line=line,
            document=doc.name if doc is not None else None,
        )


# Rule registry, in registration order
RULES: dict[str, type[LintRule]] = {}


def register_rule(cls: type[LintRule]) -> type[LintRule]:
    """Class decorator that adds a rule to the registry."""
    if cls.rule_id in RULES:
        raise ValueError(f"Duplicate rule id: {cls.rule_id}")
    RULES[cls.rule_id] = cls
    return cls


def get_rules(
    select: Iterable[str] | None = None,
    ignore: Iterable[str] | None = None,
) -> list[LintRule]:
    """
    Instantiate registered rules.

    Args:
        select: Only these rule ids (empty or None means all)
        ignore: Rule ids to drop

    Raises:
        ValueError: If a selected or ignored id is not registered
    """
    select = [s.upper() for s in (select or [])]
    ignore = [i.upper() for i in (ignore or [])]
    unknown = [r for r in select + ignore if r not in RULES]
    if unknown:
        raise ValueError(f"Unknown rule id(s): {', '.join(unknown)}")
    return [
        cls() for rule_id, cls in RULES.items()
        if (not select or rule_id in select) and rule_id not in ignore
    ]


# =============================================================================
# Frontmatter
# =============================================================================

@register_rule
class FrontmatterParsesRule(LintRule):
    rule_id = "FM001"
    severity = Severity.ERROR
    description = "Frontmatter is present (agents, skills) and parses as a YAML mapping"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for doc in ctx.corpus.documents:
            if doc.error_kind in (ParseErrorKind.MISSING, ParseErrorKind.YAML):
                yield self.finding(doc, doc.parse_error or "Invalid frontmatter", line=doc.error_line)


@register_rule
class FrontmatterSchemaRule(LintRule):
    rule_id = "FM002"
    severity = Severity.ERROR
    description = "Frontmatter fields have the types the host expects"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for doc in ctx.corpus.documents:
            if doc.error_kind == ParseErrorKind.SCHEMA:
                yield self.finding(doc, f"Invalid {doc.kind.value} frontmatter: {doc.parse_error}", line=1)


@register_rule
class DescriptionRule(LintRule):
    rule_id = "FM003"
    severity = Severity.WARNING
    description = "Frontmatter carries a non-empty description"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for doc in ctx.corpus.documents:
            if not doc.is_valid:
                continue
            if doc.kind == DocumentKind.COMMAND and not doc.raw_frontmatter:
                continue
            if not doc.description:
                yield self.finding(doc, f"{doc.kind.value} '{doc.name}' has no description", line=1)


# =============================================================================
# Bonds
# =============================================================================

@register_rule
class BondedAgentRule(LintRule):
    rule_id = "BND001"
    severity = Severity.ERROR
    description = "Every bonded_agent names an existing agent"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for ref in ctx.bonds.unresolved:
            if ref.target_kind == DocumentKind.AGENT:
                yield self.finding(
                    ref.source,
                    f"Skill '{ref.source.name}' is bonded to unknown agent '{ref.target}'",
                )


@register_rule
class BondedSkillRule(LintRule):
    rule_id = "BND002"
    severity = Severity.ERROR
    description = "Every bonded_skills entry names an existing skill"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for ref in ctx.bonds.unresolved:
            if ref.target_kind == DocumentKind.SKILL:
                yield self.finding(
                    ref.source,
                    f"Agent '{ref.source.name}' is bonded to unknown skill '{ref.target}'",
                )


@register_rule
class BondTypeRule(LintRule):
    rule_id = "BND003"
    severity = Severity.WARNING
    description = "bond_type values are PRIMARY_BOND, SECONDARY_BOND or SUPPORT_BOND"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for doc in ctx.corpus.documents:
            fm = doc.frontmatter
            if isinstance(fm, AgentFrontmatter):
                for ref in fm.bonded_skills:
                    if not ref.bond_type_known:
                        yield self.finding(
                            doc,
                            f"Unknown bond_type '{ref.declared_bond_type}' for skill "
                            f"'{ref.name}', treated as SECONDARY_BOND",
                        )
            elif isinstance(fm, SkillFrontmatter) and not fm.bond_type_known:
                yield self.finding(
                    doc,
                    f"Unknown bond_type '{fm.declared_bond_type}', treated as SECONDARY_BOND",
                )


# =============================================================================
# Commands
# =============================================================================

def documented_command_name(doc: Document) -> str | None:
    """The name a command file documents: frontmatter name, else a /heading."""
    raw = doc.raw_frontmatter.get("name")
    if isinstance(raw, str) and raw.strip():
        return raw.strip().lstrip("/")
    if doc.title and doc.title.startswith("/"):
        return doc.title[1:].split()[0] if doc.title[1:].split() else None
    return None


@register_rule
class CommandNameRule(LintRule):
    rule_id = "CMD001"
    severity = Severity.ERROR
    description = "A command's documented name matches its filename stem"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for doc in ctx.corpus.commands():
            documented = documented_command_name(doc)
            if documented is not None and documented != doc.path.stem:
                yield self.finding(
                    doc,
                    f"Command documents '/{documented}' but file is '{doc.path.name}'",
                )


@register_rule
class CommandUndocumentedRule(LintRule):
    rule_id = "CMD002"
    severity = Severity.WARNING
    description = "A command documents its own name (frontmatter name or /heading)"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for doc in ctx.corpus.commands():
            if doc.error_kind is None and documented_command_name(doc) is None:
                yield self.finding(doc, f"Command '{doc.path.stem}' never states its /name")


# =============================================================================
# Code fences
# =============================================================================

@register_rule
class FenceTagRule(LintRule):
    rule_id = "FENCE001"
    severity = Severity.WARNING
    description = "Code fences carry a language tag"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for doc in ctx.corpus.documents:
            for fence in doc.fences:
                if fence.language is None:
                    yield self.finding(doc, "Code fence has no language tag", line=fence.line)


@register_rule
class FenceLanguageRule(LintRule):
    rule_id = "FENCE002"
    severity = Severity.WARNING
    description = "Code fence language tags agree with their content"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for doc in ctx.corpus.documents:
            for fence in doc.fences:
                detected = tag_mismatch(fence.language, fence.content)
                if detected is not None:
                    yield self.finding(
                        doc,
                        f"Fence tagged '{fence.language}' looks like {detected}",
                        line=fence.line,
                    )


# =============================================================================
# Names and versions
# =============================================================================

@register_rule
class DuplicateNameRule(LintRule):
    rule_id = "NAME001"
    severity = Severity.WARNING
    description = "Names are unique within a document kind"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for kind in DocumentKind:
            for name, docs in ctx.corpus.duplicates(kind).items():
                first = docs[0]
                for doc in docs[1:]:
                    yield self.finding(
                        doc,
                        f"Duplicate {kind.value} name '{name}' (first defined in {first.relative_path})",
                    )


@register_rule
class SkillDirectoryNameRule(LintRule):
    rule_id = "NAME002"
    severity = Severity.WARNING
    description = "A skill's name matches its directory"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for doc in ctx.corpus.skills():
            if doc.is_valid and doc.name != doc.path.parent.name:
                yield self.finding(
                    doc,
                    f"Skill name '{doc.name}' differs from directory '{doc.path.parent.name}'",
                )


def _version_key(version: str) -> tuple:
    """Numeric ordering for X.Y.Z versions; unparseable ones sort lowest."""
    try:
        return (1, tuple(int(p) for p in version.split(".")), version)
    except ValueError:
        return (0, (), version)


@register_rule
class VersionDriftRule(LintRule):
    rule_id = "VER001"
    severity = Severity.INFO
    description = "The corpus uses a single SASMP version"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        versions = Counter(d.sasmp_version for d in ctx.corpus.documents if d.sasmp_version)
        if len(versions) < 2:
            return
        majority = max(versions, key=lambda v: (versions[v], _version_key(v)))
        for doc in ctx.corpus.documents:
            if doc.sasmp_version and doc.sasmp_version != majority:
                yield self.finding(
                    doc,
                    f"SASMP {doc.sasmp_version} differs from the corpus majority {majority}",
                )


@register_rule
class UnknownVersionRule(LintRule):
    rule_id = "VER002"
    severity = Severity.WARNING
    description = "SASMP versions are ones the host recognises"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        known = set(ctx.settings.known_sasmp_versions)
        for doc in ctx.corpus.documents:
            if doc.sasmp_version and doc.sasmp_version not in known:
                yield self.finding(doc, f"Unrecognised SASMP version '{doc.sasmp_version}'")


# =============================================================================
# Schemas, manifest, load issues
# =============================================================================

@register_rule
class SchemaValidityRule(LintRule):
    rule_id = "SCH001"
    severity = Severity.ERROR
    description = "input_schema and output_schema are valid JSON Schema"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for doc in ctx.corpus.documents:
            for key in ("input_schema", "output_schema"):
                if key not in doc.raw_frontmatter:
                    continue
                schema = doc.raw_frontmatter[key]
                if schema is None:
                    continue
                if not isinstance(schema, dict):
                    yield self.finding(doc, f"{key} must be a mapping, got {type(schema).__name__}")
                    continue
                validator = validator_for(schema, default=Draft202012Validator)
                try:
                    validator.check_schema(schema)
                except SchemaError as e:
                    where = "/".join(str(p) for p in e.path) or "<root>"
                    yield self.finding(doc, f"{key} is not valid JSON Schema at {where}: {e.message}")


@register_rule
class ManifestPathsRule(LintRule):
    rule_id = "MAN001"
    severity = Severity.ERROR
    description = "Paths listed in the plugin manifest exist"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        manifest = ctx.corpus.manifest
        if manifest is None or ctx.corpus.manifest_path is None:
            return
        manifest_rel = ctx.corpus.manifest_path.relative_to(ctx.corpus.root).as_posix()
        for section in ("agents", "skills", "commands"):
            for entry in getattr(manifest, section):
                target = ctx.corpus.root / entry.removeprefix("./").lstrip("/")
                if not target.exists():
                    yield self.finding(
                        None,
                        f"Manifest {section} entry '{entry}' does not exist",
                        path=manifest_rel,
                    )


@register_rule
class LoadIssueRule(LintRule):
    rule_id = "LOAD001"
    severity = Severity.ERROR
    description = "Every corpus file can be read"

    def check(self, ctx: LintContext) -> Iterator[LintFinding]:
        for issue in ctx.corpus.issues:
            yield self.finding(None, issue.message, path=issue.path)
