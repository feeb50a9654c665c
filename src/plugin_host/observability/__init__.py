"""Observability package."""
from plugin_host.observability.logging import (
    get_logger,
    setup_logging,
    with_doc_context,
)

__all__ = ["get_logger", "setup_logging", "with_doc_context"]
