"""
Dispatch - route user text to agents/skills and slash commands to documents.

Trigger matching:
- An explicit ``triggers`` phrase found in the text (whole words,
  case-insensitive) scores 1.0.
- Otherwise the score is the share of the text's keywords found in the
  document's capabilities, description and name, scaled below 1.0 so a
  keyword match never outranks a trigger.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field

from plugin_host.config import Settings, get_settings
from plugin_host.contracts import Document, DocumentKind
from plugin_host.observability import get_logger
from plugin_host.runtime.corpus import Corpus
from plugin_host.runtime.errors import CommandSyntaxError, UnknownCommandError

logger = get_logger(__name__)

KEYWORD_SCALE = 0.9

_TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9+#.\-]*")
_COMMAND_RE = re.compile(r"^/(?P<name>[a-z0-9][a-z0-9\-:]*)(?:\s+(?P<args>.*))?$", re.DOTALL | re.IGNORECASE)

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "can", "do", "for", "from",
    "how", "i", "in", "into", "is", "it", "me", "my", "of", "on", "or", "please",
    "should", "that", "the", "this", "to", "want", "what", "which", "with", "you",
    "your", "help", "learn", "about",
})

_KIND_ORDER = {DocumentKind.AGENT: 0, DocumentKind.SKILL: 1, DocumentKind.COMMAND: 2}


def tokenize(text: str) -> list[str]:
    """Lower-case keyword tokens without stop words."""
    tokens = (t.rstrip(".-") for t in _TOKEN_RE.findall(text.lower()))
    return [t for t in tokens if t and t not in STOP_WORDS]


@dataclass(frozen=True)
class TriggerMatch:
    """A document matched against user text."""
    document: Document
    score: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "kind": self.document.kind.value,
            "name": self.document.name,
            "score": round(self.score, 3),
            "reason": self.reason,
        }


@dataclass
class _IndexEntry:
    document: Document
    phrases: list[re.Pattern] = field(default_factory=list)
    phrase_text: list[str] = field(default_factory=list)
    keywords: set[str] = field(default_factory=set)


class TriggerIndex:
    """Index of trigger phrases and keywords for agents and skills."""

    def __init__(self, corpus: Corpus, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._entries: list[_IndexEntry] = []
        for doc in corpus.agents() + corpus.skills():
            entry = _IndexEntry(document=doc)
            for phrase in doc.triggers:
                phrase = phrase.strip().lower()
                if phrase:
                    entry.phrase_text.append(phrase)
                    entry.phrases.append(re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)"))
            keyword_source = " ".join([doc.name.replace("-", " "), doc.description, *doc.capabilities])
            entry.keywords = set(tokenize(keyword_source))
            self._entries.append(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def match(
        self,
        text: str,
        limit: int | None = None,
        kind: DocumentKind | str | None = None,
    ) -> list[TriggerMatch]:
        """
        Rank documents for a piece of user text.

        Args:
            text: User text
            limit: Maximum number of matches (default from settings)
            kind: Restrict to agents or skills

        Returns:
            Matches sorted by score, then kind (agents first), then name
        """
        limit = self.settings.match_limit if limit is None else limit
        if kind is not None and not isinstance(kind, DocumentKind):
            kind = DocumentKind(kind)

        lowered = text.strip().lower()
        if not lowered:
            return []
        tokens = set(tokenize(lowered))

        matches: list[TriggerMatch] = []
        for entry in self._entries:
            doc = entry.document
            if kind is not None and doc.kind != kind:
                continue

            hit = next(
                (p for p, rx in zip(entry.phrase_text, entry.phrases) if rx.search(lowered)),
                None,
            )
            if hit is not None:
                matches.append(TriggerMatch(doc, 1.0, f"trigger '{hit}'"))
                continue

            if not tokens or not entry.keywords:
                continue
            shared = tokens & entry.keywords
            score = KEYWORD_SCALE * len(shared) / len(tokens)
            if shared and score >= self.settings.trigger_min_score:
                matches.append(TriggerMatch(doc, score, "keywords: " + ", ".join(sorted(shared))))

        matches.sort(key=lambda m: (-m.score, _KIND_ORDER[m.document.kind], m.document.name))
        return matches[:limit] if limit > 0 else matches


# =============================================================================
# Slash commands
# =============================================================================

@dataclass(frozen=True)
class CommandInvocation:
    """A parsed slash-command line."""
    name: str
    arguments: tuple[str, ...]
    raw: str

    @property
    def argument_text(self) -> str:
        return " ".join(self.arguments)


@dataclass(frozen=True)
class ResolvedCommand:
    """A slash command bound to its command document."""
    invocation: CommandInvocation
    document: Document

    def to_dict(self) -> dict:
        return {
            "command": self.invocation.name,
            "arguments": list(self.invocation.arguments),
            "description": self.document.description,
            "argument_hint": getattr(self.document.frontmatter, "argument_hint", None),
            "path": self.document.relative_path,
            "body": self.document.body,
        }


class CommandRouter:
    """Parse slash-command lines and resolve them to command documents."""

    def __init__(self, corpus: Corpus):
        self.corpus = corpus

    def available(self) -> list[str]:
        return sorted(self.corpus.names(DocumentKind.COMMAND))

    @staticmethod
    def parse(line: str) -> CommandInvocation:
        """
        Parse ``/name arg1 "arg 2"``.

        Raises:
            CommandSyntaxError: If the line is not a slash command or quoting is broken
        """
        raw = line.strip()
        match = _COMMAND_RE.match(raw)
        if not match:
            raise CommandSyntaxError(f"Not a slash command: {line!r}")
        try:
            arguments = tuple(shlex.split(match.group("args") or ""))
        except ValueError as e:
            raise CommandSyntaxError(f"Cannot parse arguments of /{match.group('name')}: {e}") from e
        return CommandInvocation(name=match.group("name").lower(), arguments=arguments, raw=raw)

    def resolve(self, line: str) -> ResolvedCommand:
        """
        Resolve a slash-command line to its document.

        Raises:
            CommandSyntaxError: If the line cannot be parsed
            UnknownCommandError: If no command document has the name
        """
        invocation = self.parse(line)
        matches = self.corpus.find(invocation.name, DocumentKind.COMMAND)
        if not matches:
            raise UnknownCommandError(invocation.name, self.available())
        logger.debug(f"Resolved /{invocation.name} to {matches[0].relative_path}")
        return ResolvedCommand(invocation=invocation, document=matches[0])
