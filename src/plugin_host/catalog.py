"""
Catalog export - a single JSON/YAML view of the corpus.

The catalog lists every agent, skill and command with its metadata and
resolved bonds, so other tools can consume the corpus without parsing
Markdown.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from plugin_host.contracts import Document
from plugin_host.observability import get_logger
from plugin_host.runtime.bonding import BondGraph, resolve_bonds
from plugin_host.runtime.corpus import Corpus

logger = get_logger(__name__)

CATALOG_FORMATS = ("json", "yaml")


def _entry(doc: Document) -> dict[str, Any]:
    return {
        "name": doc.name,
        "description": doc.description,
        "path": doc.relative_path,
        "sasmp_version": doc.sasmp_version,
        "model": doc.model,
        "capabilities": doc.capabilities,
        "triggers": doc.triggers,
        "valid": doc.is_valid,
    }


def build_catalog(corpus: Corpus, bonds: BondGraph | None = None) -> dict[str, Any]:
    """
    Build the catalog dict.

    Args:
        corpus: Loaded corpus
        bonds: Resolved bonds. Resolved from the corpus when omitted

    Returns:
        Dict with plugin, agents, skills, commands and totals sections
    """
    bonds = bonds or resolve_bonds(corpus)

    if corpus.manifest is not None:
        plugin = corpus.manifest.model_dump(
            mode="json", include={"name", "version", "description", "author"}
        )
    else:
        plugin = {"name": corpus.root.name, "version": None, "description": "", "author": None}

    agents = []
    for doc in corpus.agents():
        entry = _entry(doc)
        entry["skills"] = [
            {"name": b.skill, "bond_type": b.bond_type.value} for b in bonds.skills_for(doc.name)
        ]
        agents.append(entry)

    skills = []
    for doc in corpus.skills():
        entry = _entry(doc)
        entry["agents"] = [
            {"name": b.agent, "bond_type": b.bond_type.value} for b in bonds.agents_for(doc.name)
        ]
        skills.append(entry)

    commands = []
    for doc in corpus.commands():
        commands.append({
            "name": doc.name,
            "command": f"/{doc.name}",
            "description": doc.description,
            "argument_hint": getattr(doc.frontmatter, "argument_hint", None),
            "path": doc.relative_path,
        })

    return {
        "plugin": plugin,
        "agents": agents,
        "skills": skills,
        "commands": commands,
        "totals": {
            "agents": len(agents),
            "skills": len(skills),
            "commands": len(commands),
            "bonds": len(bonds.bonds),
            "unresolved_bonds": len(bonds.unresolved),
        },
    }


def dump_catalog(catalog: dict[str, Any], fmt: str = "json") -> str:
    """Serialise a catalog to text."""
    if fmt == "json":
        return json.dumps(catalog, indent=2) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(catalog, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unsupported catalog format: {fmt} (expected one of {', '.join(CATALOG_FORMATS)})")


def write_catalog(catalog: dict[str, Any], path: Path | str, fmt: str = "json") -> Path:
    """
    Write a catalog to disk.

    Args:
        catalog: Catalog from build_catalog
        path: Output file
        fmt: "json" or "yaml"

    Returns:
        The written path
    """
    text = dump_catalog(catalog, fmt)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info(f"Wrote {fmt} catalog to {path}")
    return path
