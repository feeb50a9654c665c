"""
Plugin Host CLI - Command-line interface for the corpus host.

Commands:
- lint: Lint the corpus
- list / show: Browse documents
- bonds / match / command: Inspect routing
- catalog: Export the corpus
- serve: Run the HTTP API
"""

from .main import cli, main

__all__ = ["cli", "main"]
