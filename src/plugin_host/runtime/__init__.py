"""Runtime package."""
from plugin_host.runtime.bonding import Bond, BondGraph, UnresolvedBond, resolve_bonds
from plugin_host.runtime.corpus import Corpus
from plugin_host.runtime.dispatch import (
    CommandInvocation,
    CommandRouter,
    ResolvedCommand,
    TriggerIndex,
    TriggerMatch,
)
from plugin_host.runtime.errors import (
    CommandSyntaxError,
    CorpusNotFoundError,
    DocumentNotFoundError,
    FrontmatterError,
    PluginHostError,
    UnknownCommandError,
)
from plugin_host.runtime.loader import CorpusLoader, load_corpus
from plugin_host.runtime.parsing import (
    extract_code_fences,
    first_heading,
    split_frontmatter,
)
from plugin_host.runtime.policy import (
    BreakerState,
    CircuitBreaker,
    RetrySchedule,
    default_policy,
    effective_policy,
)

__all__ = [
    "Bond",
    "BondGraph",
    "BreakerState",
    "CircuitBreaker",
    "CommandInvocation",
    "CommandRouter",
    "CommandSyntaxError",
    "Corpus",
    "CorpusLoader",
    "CorpusNotFoundError",
    "default_policy",
    "DocumentNotFoundError",
    "effective_policy",
    "extract_code_fences",
    "first_heading",
    "FrontmatterError",
    "load_corpus",
    "PluginHostError",
    "resolve_bonds",
    "ResolvedCommand",
    "RetrySchedule",
    "split_frontmatter",
    "TriggerIndex",
    "TriggerMatch",
    "UnknownCommandError",
    "UnresolvedBond",
]
