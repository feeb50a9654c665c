"""FastAPI application."""
import logging
from pathlib import Path

from fastapi import FastAPI

from plugin_host import __version__
from plugin_host.api.routes import corpus, health
from plugin_host.api.state import HostState
from plugin_host.config import Settings
from plugin_host.observability import setup_logging


def create_app(corpus_root: Path | str | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Create the read-only corpus API.

    The corpus is loaded once here and kept on ``app.state.host`` until
    ``POST /v1/reload``.

    Args:
        corpus_root: Corpus root. Defaults to settings.corpus_root
        settings: Settings instance. Defaults to the global settings

    Raises:
        CorpusNotFoundError: If the corpus root does not exist
    """
    # Keep handlers the CLI already installed
    if not logging.getLogger().handlers:
        setup_logging()

    app = FastAPI(
        title="Plugin Host",
        description="Read-only host for an agent/skill/command plugin corpus",
        version=__version__,
    )
    app.state.host = HostState(corpus_root, settings=settings)

    app.include_router(health.router, tags=["health"])
    app.include_router(corpus.router, tags=["corpus"])

    @app.get("/")
    def root() -> dict:
        """Root endpoint."""
        state: HostState = app.state.host
        return {
            "service": "plugin-host",
            "version": __version__,
            "corpus_root": str(state.root),
            "plugin": state.corpus.manifest.name if state.corpus.manifest else state.root.name,
            "docs": "/docs",
        }

    return app
