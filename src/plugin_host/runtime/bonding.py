"""
Bond resolution - link agents to the skills they declare.

Bonds can be declared from either side: an agent lists ``bonded_skills`` and
a skill names its ``bonded_agent``. Both sides are merged into one graph.
Dangling references are collected, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from plugin_host.contracts import (
    AgentFrontmatter,
    BondType,
    Document,
    DocumentKind,
    SkillFrontmatter,
)
from plugin_host.observability import get_logger
from plugin_host.runtime.corpus import Corpus

logger = get_logger(__name__)

_BOND_ORDER = {BondType.PRIMARY: 0, BondType.SECONDARY: 1, BondType.SUPPORT: 2}


@dataclass(frozen=True)
class Bond:
    """A resolved agent/skill relationship."""
    agent: str
    skill: str
    bond_type: BondType
    declared_by: DocumentKind

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent": self.agent,
            "skill": self.skill,
            "bond_type": self.bond_type.value,
            "declared_by": self.declared_by.value,
        }


@dataclass(frozen=True)
class UnresolvedBond:
    """A bond whose target document does not exist."""
    source: Document
    target: str
    target_kind: DocumentKind

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.name,
            "source_kind": self.source.kind.value,
            "source_path": self.source.relative_path,
            "target": self.target,
            "target_kind": self.target_kind.value,
        }


@dataclass
class BondGraph:
    """Resolved bonds plus references that did not resolve."""
    bonds: list[Bond] = field(default_factory=list)
    unresolved: list[UnresolvedBond] = field(default_factory=list)
    skill_names: list[str] = field(default_factory=list)

    def skills_for(self, agent: str) -> list[Bond]:
        """Bonds of an agent, primary bonds first."""
        return sorted(
            (b for b in self.bonds if b.agent == agent),
            key=lambda b: (_BOND_ORDER[b.bond_type], b.skill),
        )

    def agents_for(self, skill: str) -> list[Bond]:
        """Bonds of a skill, primary bonds first."""
        return sorted(
            (b for b in self.bonds if b.skill == skill),
            key=lambda b: (_BOND_ORDER[b.bond_type], b.agent),
        )

    def primary_agent(self, skill: str) -> str | None:
        for bond in self.agents_for(skill):
            if bond.bond_type == BondType.PRIMARY:
                return bond.agent
        return None

    def orphan_skills(self) -> list[str]:
        """Skills that no resolved bond touches."""
        bonded = {b.skill for b in self.bonds}
        return [name for name in self.skill_names if name not in bonded]

    def to_dict(self) -> dict[str, Any]:
        return {
            "bonds": [b.to_dict() for b in self.bonds],
            "unresolved": [u.to_dict() for u in self.unresolved],
            "orphan_skills": self.orphan_skills(),
        }


def resolve_bonds(corpus: Corpus) -> BondGraph:
    """
    Build the bond graph of a corpus.

    When both sides declare the same pair, one bond is kept and the agent
    side's bond type wins.

    Args:
        corpus: Loaded corpus

    Returns:
        BondGraph
    """
    agent_names = set(corpus.names(DocumentKind.AGENT))
    skill_names = corpus.names(DocumentKind.SKILL)
    skill_set = set(skill_names)

    graph = BondGraph(skill_names=skill_names)
    index: dict[tuple[str, str], Bond] = {}

    for agent in corpus.agents():
        if not isinstance(agent.frontmatter, AgentFrontmatter):
            continue
        for ref in agent.frontmatter.bonded_skills:
            if ref.name not in skill_set:
                graph.unresolved.append(UnresolvedBond(agent, ref.name, DocumentKind.SKILL))
                continue
            index[(agent.name, ref.name)] = Bond(
                agent=agent.name,
                skill=ref.name,
                bond_type=ref.bond_type,
                declared_by=DocumentKind.AGENT,
            )

    for skill in corpus.skills():
        if not isinstance(skill.frontmatter, SkillFrontmatter):
            continue
        for agent_name in skill.frontmatter.bonded_agent:
            if agent_name not in agent_names:
                graph.unresolved.append(UnresolvedBond(skill, agent_name, DocumentKind.AGENT))
                continue
            index.setdefault((agent_name, skill.name), Bond(
                agent=agent_name,
                skill=skill.name,
                bond_type=skill.frontmatter.bond_type,
                declared_by=DocumentKind.SKILL,
            ))

    graph.bonds = sorted(index.values(), key=lambda b: (b.agent, b.skill))
    if graph.unresolved:
        logger.info(f"{len(graph.unresolved)} bond references did not resolve")
    return graph
