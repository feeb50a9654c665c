"""Corpus routes: listings, lookups, matching, bonds, lint and command resolution."""
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from plugin_host.api.state import HostState, get_state
from plugin_host.contracts import DocumentKind
from plugin_host.lint import LintRunner, report_to_dict
from plugin_host.observability import get_logger
from plugin_host.runtime import (
    CommandSyntaxError,
    CorpusNotFoundError,
    UnknownCommandError,
)

logger = get_logger(__name__)
router = APIRouter()

_PLURAL_KINDS = {
    "agents": DocumentKind.AGENT,
    "skills": DocumentKind.SKILL,
    "commands": DocumentKind.COMMAND,
}


class ResolveCommandRequest(BaseModel):
    """Request model for resolving a slash command."""

    line: str = Field(..., min_length=1, description="Slash-command line, e.g. /learn-path frontend")


class ResolveCommandResponse(BaseModel):
    """Resolved command document and parsed arguments."""

    command: str = Field(..., description="Command name without the slash")
    arguments: list[str] = Field(default_factory=list, description="Parsed arguments")
    description: str = Field(default="", description="Command description")
    argument_hint: str | None = Field(default=None, description="Argument hint from frontmatter")
    path: str = Field(..., description="Command document path relative to the corpus root")
    body: str = Field(default="", description="Command document body")


def _summaries(state: HostState, kind: DocumentKind) -> dict[str, Any]:
    docs = state.corpus.by_kind(kind)
    return {"count": len(docs), "items": [d.summary() for d in docs]}


@router.get("/v1/agents")
def list_agents(state: HostState = Depends(get_state)) -> dict:
    """List agent summaries."""
    return _summaries(state, DocumentKind.AGENT)


@router.get("/v1/skills")
def list_skills(state: HostState = Depends(get_state)) -> dict:
    """List skill summaries."""
    return _summaries(state, DocumentKind.SKILL)


@router.get("/v1/commands")
def list_commands(state: HostState = Depends(get_state)) -> dict:
    """List command summaries."""
    return _summaries(state, DocumentKind.COMMAND)


@router.get("/v1/match")
def match_text(
    q: str = Query(..., min_length=1, description="User text to route"),
    limit: int | None = Query(default=None, ge=1, le=100),
    kind: str | None = Query(default=None, pattern="^(agent|skill)$"),
    state: HostState = Depends(get_state),
) -> dict:
    """
    Rank agents and skills for a piece of user text.

    Returns:
        Query echo plus matches, best first
    """
    matches = state.triggers.match(q, limit=limit, kind=kind)
    return {"query": q, "matches": [m.to_dict() for m in matches]}


@router.get("/v1/bonds")
def get_bonds(state: HostState = Depends(get_state)) -> dict:
    """Resolved bonds, unresolved references and orphan skills."""
    return state.bonds.to_dict()


@router.get("/v1/lint")
def get_lint(state: HostState = Depends(get_state)) -> dict:
    """Lint the served corpus."""
    report = LintRunner(settings=state.settings).run(state.corpus)
    return report_to_dict(report)


@router.post("/v1/commands/resolve", response_model=ResolveCommandResponse)
def resolve_command(
    request: ResolveCommandRequest,
    state: HostState = Depends(get_state),
) -> ResolveCommandResponse:
    """
    Resolve a slash-command line to its command document.

    Raises:
        HTTPException: 400 on a malformed line, 404 on an unknown command
    """
    try:
        resolved = state.commands.resolve(request.line)
    except CommandSyntaxError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnknownCommandError as e:
        raise HTTPException(status_code=404, detail=str(e))

    logger.info(
        "Command resolved via API",
        extra={"command": resolved.invocation.name, "document": resolved.document.name},
    )
    return ResolveCommandResponse(**resolved.to_dict())


@router.post("/v1/reload")
def reload_corpus(state: HostState = Depends(get_state)) -> dict:
    """
    Reload the corpus from disk.

    Raises:
        HTTPException: 404 if the corpus root has gone away
    """
    try:
        state.reload()
    except CorpusNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"status": "reloaded", "documents": state.counts()}


@router.get("/v1/{kind}/{name}")
def get_document(
    kind: str,
    name: str,
    include_all: bool = Query(default=False, alias="all", description="Return every document with this name"),
    body: bool = Query(default=True, description="Include the Markdown body"),
    state: HostState = Depends(get_state),
) -> dict:
    """
    Get one document with frontmatter and body.

    Raises:
        HTTPException: If the kind is unknown or no document has the name
    """
    doc_kind = _PLURAL_KINDS.get(kind)
    if doc_kind is None:
        raise HTTPException(status_code=404, detail=f"Unknown document kind: {kind}")

    matches = state.corpus.find(name, doc_kind)
    if not matches:
        raise HTTPException(status_code=404, detail=f"No {doc_kind.value} document named '{name}'")

    if include_all:
        return {"count": len(matches), "items": [d.detail(include_body=body) for d in matches]}
    return matches[0].detail(include_body=body)
