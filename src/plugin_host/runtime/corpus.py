"""Corpus - the loaded set of documents under one root."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from plugin_host.contracts import Document, DocumentKind, LoadIssue, PluginManifest
from plugin_host.runtime.errors import DocumentNotFoundError


def _as_kind(kind: DocumentKind | str | None) -> DocumentKind | None:
    if kind is None or isinstance(kind, DocumentKind):
        return kind
    return DocumentKind(kind)


@dataclass
class Corpus:
    """
    Documents loaded from one corpus root.

    Names are not unique: the same ``name`` may appear on several documents
    of one kind. ``get`` returns the first in load order, ``find`` returns
    all of them.
    """
    root: Path
    documents: list[Document] = field(default_factory=list)
    issues: list[LoadIssue] = field(default_factory=list)
    manifest: PluginManifest | None = None
    manifest_path: Path | None = None

    def by_kind(self, kind: DocumentKind | str) -> list[Document]:
        kind = _as_kind(kind)
        return [d for d in self.documents if d.kind == kind]

    def agents(self) -> list[Document]:
        return self.by_kind(DocumentKind.AGENT)

    def skills(self) -> list[Document]:
        return self.by_kind(DocumentKind.SKILL)

    def commands(self) -> list[Document]:
        return self.by_kind(DocumentKind.COMMAND)

    def find(self, name: str, kind: DocumentKind | str | None = None) -> list[Document]:
        """All documents with this name, optionally restricted to a kind."""
        kind = _as_kind(kind)
        return [
            d for d in self.documents
            if d.name == name and (kind is None or d.kind == kind)
        ]

    def get(self, name: str, kind: DocumentKind | str | None = None) -> Document:
        """
        First document with this name.

        Raises:
            DocumentNotFoundError: If no document has that name
        """
        matches = self.find(name, kind)
        if not matches:
            where = f" {_as_kind(kind).value}" if kind is not None else ""
            raise DocumentNotFoundError(f"No{where} document named '{name}'")
        return matches[0]

    def has(self, name: str, kind: DocumentKind | str | None = None) -> bool:
        return bool(self.find(name, kind))

    def names(self, kind: DocumentKind | str | None = None) -> list[str]:
        """Unique names in load order."""
        kind = _as_kind(kind)
        seen: dict[str, None] = {}
        for doc in self.documents:
            if kind is None or doc.kind == kind:
                seen.setdefault(doc.name, None)
        return list(seen)

    def duplicates(self, kind: DocumentKind | str) -> dict[str, list[Document]]:
        """Names carried by more than one document of the kind."""
        grouped: dict[str, list[Document]] = {}
        for doc in self.by_kind(kind):
            grouped.setdefault(doc.name, []).append(doc)
        return {name: docs for name, docs in grouped.items() if len(docs) > 1}

    def sasmp_versions(self) -> dict[str | None, list[Document]]:
        """Documents grouped by declared SASMP version."""
        grouped: dict[str | None, list[Document]] = {}
        for doc in self.documents:
            grouped.setdefault(doc.sasmp_version, []).append(doc)
        return grouped

    def __len__(self) -> int:
        return len(self.documents)
