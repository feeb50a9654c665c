"""
Frontmatter Schemas - Pydantic models for agent, skill and command metadata.

These models describe the YAML frontmatter found at the top of every corpus
document. Unlike a strict contract, they accept unknown keys: the corpus mixes
SASMP v1.3.0 and v2.0.0 conventions, and a host must load both. Type drift
inside known keys (a string where a mapping is expected) still fails model
validation and is reported by the linter.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class DocumentKind(str, Enum):
    """The three kinds of corpus documents."""

    AGENT = "agent"
    SKILL = "skill"
    COMMAND = "command"


class BondType(str, Enum):
    """Strength of an agent/skill bond."""

    PRIMARY = "PRIMARY_BOND"
    SECONDARY = "SECONDARY_BOND"
    SUPPORT = "SUPPORT_BOND"

    @classmethod
    def parse(cls, value: Any) -> Optional["BondType"]:
        """Parse a declared bond type, returning None when unrecognised."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        text = str(value).strip().upper().replace("-", "_").replace(" ", "_")
        if text and not text.endswith("_BOND"):
            text = f"{text}_BOND"
        for member in cls:
            if member.value == text:
                return member
        return None


class RetryStrategy(str, Enum):
    """Retry strategies named in error_handling blocks."""

    NONE = "none"
    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL_BACKOFF = "exponential_backoff"


# Scan order matters: "exponential" wins over "linear" in mixed prose, and a
# bare "backoff" only counts when no other strategy is named
_STRATEGY_KEYWORDS = [
    (RetryStrategy.EXPONENTIAL_BACKOFF, ("exponential",)),
    (RetryStrategy.LINEAR, ("linear",)),
    (RetryStrategy.FIXED, ("fixed", "constant")),
    (RetryStrategy.NONE, ("none", "no_retry", "no retry", "disabled")),
    (RetryStrategy.EXPONENTIAL_BACKOFF, ("backoff",)),
]

_VERSION_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?$")


def normalize_sasmp_version(value: Any) -> Optional[str]:
    """
    Normalise a SASMP version to X.Y.Z.

    YAML reads an unquoted ``1.3`` as a float, so numbers are accepted too.
    Unparseable values are returned stripped, unchanged, for the linter.
    """
    if value is None or value == "":
        return None
    text = str(value).strip()
    match = _VERSION_RE.match(text)
    if not match:
        return text
    major, minor, patch = match.groups()
    return f"{major}.{minor or 0}.{patch or 0}"


def _as_str_list(value: Any) -> List[str]:
    """Coerce scalar, comma string, mapping or list metadata into strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, dict):
        return [str(k) for k in value.keys()]
    if isinstance(value, (list, tuple)):
        items: List[str] = []
        for item in value:
            if isinstance(item, dict):
                if "name" in item:
                    items.append(str(item["name"]))
                elif len(item) == 1:
                    items.append(str(next(iter(item))))
                else:
                    items.append(str(item))
            elif item is not None:
                items.append(str(item).strip())
        return [i for i in items if i]
    return [str(value)]


# =============================================================================
# POLICY MODELS
# =============================================================================

class CircuitBreakerPolicy(BaseModel):
    """Circuit breaker thresholds declared for an agent."""
    model_config = ConfigDict(extra="allow")

    failure_threshold: int = Field(default=5, ge=1, le=100)
    reset_timeout_seconds: float = Field(default=60.0, gt=0, le=3600)


class ErrorHandlingPolicy(BaseModel):
    """
    Error handling policy parsed from an agent's ``error_handling`` block.

    Corpus files write this either as structured YAML or as free text such as
    ``"retry_strategy: exponential_backoff, fallback: escalate_to_human"``.
    Both forms end up here.
    """
    model_config = ConfigDict(extra="allow")

    retry_strategy: RetryStrategy = RetryStrategy.EXPONENTIAL_BACKOFF
    max_retries: int = Field(default=3, ge=0, le=10)
    base_delay_seconds: float = Field(default=1.0, gt=0, le=60.0)
    max_delay_seconds: float = Field(default=30.0, gt=0, le=3600.0)
    backoff_factor: float = Field(default=2.0, ge=1.0, le=10.0)
    circuit_breaker: Optional[CircuitBreakerPolicy] = None
    fallback: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_free_text(cls, data: Any) -> Any:
        if isinstance(data, str):
            text = data.lower()
            coerced: Dict[str, Any] = {"retry_strategy": cls._scan_strategy(text)}
            if "circuit" in text:
                coerced["circuit_breaker"] = {}
            fallback = re.search(r"fallback\s*[:=]\s*([\w\-]+)", text)
            if fallback:
                coerced["fallback"] = fallback.group(1)
            return coerced
        if isinstance(data, dict):
            data = dict(data)
            for alias in ("strategy", "retry"):
                if alias in data and "retry_strategy" not in data:
                    data["retry_strategy"] = data.pop(alias)
            for alias in ("retries", "max_attempts"):
                if alias in data and "max_retries" not in data:
                    data["max_retries"] = data.pop(alias)
            strategy = data.get("retry_strategy")
            if isinstance(strategy, str):
                data["retry_strategy"] = cls._scan_strategy(strategy.lower())
            elif isinstance(strategy, dict):
                nested = dict(strategy)
                kind = nested.pop("type", None) or nested.pop("name", "")
                data["retry_strategy"] = cls._scan_strategy(str(kind).lower())
                for key, value in nested.items():
                    data.setdefault(key, value)
            fallback = data.get("fallback")
            if fallback is not None and not isinstance(fallback, str):
                data["fallback"] = str(fallback)
            breaker = data.get("circuit_breaker")
            if breaker is True or isinstance(breaker, str):
                data["circuit_breaker"] = {}
            elif breaker is False:
                data["circuit_breaker"] = None
        return data

    @staticmethod
    def _scan_strategy(text: str) -> RetryStrategy:
        for strategy, keywords in _STRATEGY_KEYWORDS:
            if any(k in text for k in keywords):
                return strategy
        return RetryStrategy.EXPONENTIAL_BACKOFF


class TokenOptimization(BaseModel):
    """Token budget hints; carried as metadata only."""
    model_config = ConfigDict(extra="allow")

    max_tokens: Optional[int] = None
    strategy: Optional[str] = None


# =============================================================================
# BONDS
# =============================================================================

class BondedSkillRef(BaseModel):
    """A skill reference declared by an agent."""
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    bond_type: BondType = BondType.PRIMARY
    declared_bond_type: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_reference(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data.strip()}
        if isinstance(data, dict):
            data = dict(data)
            if "name" not in data and "skill" in data:
                data["name"] = data.pop("skill")
            if "bond_type" not in data and "type" in data:
                data["bond_type"] = data.pop("type")
            if "name" not in data and len(data) == 1:
                # {skill-name: PRIMARY_BOND}
                key, value = next(iter(data.items()))
                data = {"name": key, "bond_type": value}
            raw = data.get("bond_type")
            if raw is None:
                # {skill-name: } or bond_type: null
                data.pop("bond_type", None)
            else:
                data["declared_bond_type"] = str(raw)
                data["bond_type"] = BondType.parse(raw) or BondType.SECONDARY
        return data

    @property
    def bond_type_known(self) -> bool:
        """Whether the declared bond type was a recognised value."""
        return self.declared_bond_type is None or BondType.parse(self.declared_bond_type) is not None


# =============================================================================
# FRONTMATTER MODELS
# =============================================================================

class _Frontmatter(BaseModel):
    """Fields shared by every document kind."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    description: str = ""
    sasmp_version: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("sasmp_version", "sasmp", "schema_version"),
    )

    @field_validator("description", mode="before")
    @classmethod
    def coerce_description(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("sasmp_version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Optional[str]:
        return normalize_sasmp_version(v)


class AgentFrontmatter(_Frontmatter):
    """Frontmatter of an ``agents/*.md`` persona document."""

    name: str = Field(..., min_length=1, max_length=128)
    model: Optional[str] = None
    tools: List[str] = Field(default_factory=list)
    capabilities: List[str] = Field(default_factory=list)
    triggers: List[str] = Field(default_factory=list)
    input_schema: Optional[Dict[str, Any]] = None
    output_schema: Optional[Dict[str, Any]] = None
    error_handling: Optional[ErrorHandlingPolicy] = None
    token_optimization: Optional[TokenOptimization] = None
    bonded_skills: List[BondedSkillRef] = Field(
        default_factory=list,
        validation_alias=AliasChoices("bonded_skills", "skills"),
    )

    @field_validator("tools", mode="before")
    @classmethod
    def split_tools(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return _as_str_list(v)

    @field_validator("capabilities", "triggers", mode="before")
    @classmethod
    def coerce_lists(cls, v: Any) -> List[str]:
        return _as_str_list(v)

    @field_validator("bonded_skills", mode="before")
    @classmethod
    def coerce_bonds(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, (str, dict)):
            if isinstance(v, dict) and "name" not in v and "skill" not in v:
                return [{k: val} for k, val in v.items()]
            return [v]
        return v

    @field_validator("token_optimization", mode="before")
    @classmethod
    def coerce_token_hint(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return {"strategy": "enabled" if v else "disabled"}
        if isinstance(v, str):
            return {"strategy": v}
        return v


class SkillFrontmatter(_Frontmatter):
    """Frontmatter of a ``skills/<name>/SKILL.md`` reference document."""

    name: str = Field(..., min_length=1, max_length=128)
    bonded_agent: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("bonded_agent", "bonded_agents"),
    )
    bond_type: BondType = BondType.PRIMARY
    declared_bond_type: Optional[str] = None
    capabilities: List[str] = Field(default_factory=list)
    triggers: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def keep_declared_bond(cls, data: Any) -> Any:
        if isinstance(data, dict) and "bond_type" in data:
            data = dict(data)
            raw = data.pop("bond_type")
            if raw is not None:
                data["declared_bond_type"] = str(raw)
                data["bond_type"] = BondType.parse(raw) or BondType.SECONDARY
        return data

    @field_validator("bonded_agent", "capabilities", "triggers", mode="before")
    @classmethod
    def coerce_lists(cls, v: Any) -> List[str]:
        return _as_str_list(v)

    @property
    def bond_type_known(self) -> bool:
        """Whether the declared bond type was a recognised value."""
        return self.declared_bond_type is None or BondType.parse(self.declared_bond_type) is not None


class CommandFrontmatter(_Frontmatter):
    """Frontmatter of a ``commands/*.md`` slash-command document."""

    name: Optional[str] = None
    argument_hint: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("argument_hint", "argument-hint"),
    )
    allowed_tools: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("allowed_tools", "allowed-tools"),
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lstrip("/") or None
        return v

    @field_validator("allowed_tools", mode="before")
    @classmethod
    def split_tools(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return _as_str_list(v)


class PluginManifest(BaseModel):
    """Plugin manifest (``.claude-plugin/plugin.json``)."""
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    version: Optional[str] = None
    description: str = ""
    author: Optional[Any] = None
    agents: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    commands: List[str] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        return None if v is None else str(v)

    @field_validator("agents", "skills", "commands", mode="before")
    @classmethod
    def coerce_paths(cls, v: Any) -> List[str]:
        return _as_str_list(v)


FRONTMATTER_MODELS = {
    DocumentKind.AGENT: AgentFrontmatter,
    DocumentKind.SKILL: SkillFrontmatter,
    DocumentKind.COMMAND: CommandFrontmatter,
}
