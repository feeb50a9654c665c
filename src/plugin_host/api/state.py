"""Loaded corpus held by the API app."""
from __future__ import annotations

from pathlib import Path

from fastapi import Request

from plugin_host.config import Settings, get_settings
from plugin_host.observability import get_logger
from plugin_host.runtime import (
    BondGraph,
    CommandRouter,
    Corpus,
    TriggerIndex,
    load_corpus,
    resolve_bonds,
)

logger = get_logger(__name__)


class HostState:
    """Corpus plus the indexes built from it, rebuilt together on reload."""

    def __init__(self, root: Path | str | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.root = self.settings.resolve_root(root)
        self.corpus: Corpus
        self.bonds: BondGraph
        self.triggers: TriggerIndex
        self.commands: CommandRouter
        self.reload()

    def reload(self) -> Corpus:
        """
        Load the corpus from disk and rebuild indexes.

        Raises:
            CorpusNotFoundError: If the root no longer exists
        """
        corpus = load_corpus(self.root, settings=self.settings)
        self.corpus = corpus
        self.bonds = resolve_bonds(corpus)
        self.triggers = TriggerIndex(corpus, settings=self.settings)
        self.commands = CommandRouter(corpus)
        logger.info(f"Serving {len(corpus)} documents from {self.root}")
        return corpus

    def counts(self) -> dict[str, int]:
        return {
            "agents": len(self.corpus.agents()),
            "skills": len(self.corpus.skills()),
            "commands": len(self.corpus.commands()),
        }


def get_state(request: Request) -> HostState:
    """FastAPI dependency returning the app's HostState."""
    return request.app.state.host
