"""
Plugin Host CLI - Main entry point.

Provides commands for:
- Linting a plugin corpus
- Listing and showing agents, skills and commands
- Inspecting bonds, trigger matches and slash commands
- Exporting a catalog
- Serving the corpus over HTTP
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click

from plugin_host.catalog import CATALOG_FORMATS, build_catalog, dump_catalog, write_catalog
from plugin_host.config import get_settings
from plugin_host.contracts import DocumentKind, Severity
from plugin_host.lint import FORMATTERS, LintRunner
from plugin_host.observability import setup_logging
from plugin_host.runtime import (
    CommandRouter,
    CommandSyntaxError,
    Corpus,
    CorpusNotFoundError,
    TriggerIndex,
    UnknownCommandError,
    load_corpus,
    resolve_bonds,
)

_KIND_CHOICE = click.Choice([k.value for k in DocumentKind])


@click.group()
@click.option(
    "--root", "-r",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Corpus root (default: PLUGIN_HOST_CORPUS_ROOT or the current directory)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress output")
@click.pass_context
def cli(ctx: click.Context, root: Optional[Path], verbose: bool, quiet: bool):
    """Plugin Host - load, lint and serve an agent/skill/command corpus."""
    ctx.ensure_object(dict)

    if verbose:
        setup_logging(level="DEBUG")
    elif quiet:
        setup_logging(level="ERROR")
    else:
        setup_logging()

    ctx.obj["root"] = root
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


def _load(ctx: click.Context) -> Corpus:
    try:
        return load_corpus(ctx.obj.get("root"))
    except CorpusNotFoundError as e:
        raise click.ClickException(str(e))


def _dump(data) -> str:
    return json.dumps(data, indent=2, default=str)


# ==============================================================================
# Lint
# ==============================================================================

@cli.command("lint")
@click.option(
    "--format", "-f", "fmt",
    type=click.Choice(sorted(FORMATTERS)),
    default="text",
    show_default=True,
    help="Report format",
)
@click.option(
    "--fail-on",
    type=click.Choice([s.value for s in Severity]),
    default=None,
    help="Lowest severity that fails the run (default: PLUGIN_HOST_FAIL_ON or error)",
)
@click.option("--select", multiple=True, help="Only run this rule id (repeatable)")
@click.option("--ignore", multiple=True, help="Skip this rule id (repeatable)")
@click.pass_context
def lint_cmd(
    ctx: click.Context,
    fmt: str,
    fail_on: Optional[str],
    select: tuple[str, ...],
    ignore: tuple[str, ...],
):
    """
    Lint the corpus.

    Exits 1 when any finding reaches the --fail-on severity.

    Examples:

        plugin-host --root ./my-plugin lint

        plugin-host lint --format json --fail-on warning --ignore VER001
    """
    settings = get_settings()
    corpus = _load(ctx)
    try:
        runner = LintRunner(
            settings=settings,
            select=list(select) or None,
            ignore=list(ignore) or None,
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--select/--ignore")

    report = runner.run(corpus)
    click.echo(FORMATTERS[fmt](report))

    threshold = Severity(fail_on or settings.fail_on)
    if report.has_failures(threshold):
        sys.exit(1)


# ==============================================================================
# Lookups
# ==============================================================================

@cli.command("list")
@click.option("--kind", "-k", type=_KIND_CHOICE, default=None, help="Only this document kind")
@click.pass_context
def list_cmd(ctx: click.Context, kind: Optional[str]):
    """List documents in the corpus."""
    corpus = _load(ctx)
    docs = corpus.by_kind(kind) if kind else corpus.documents
    if not docs:
        click.echo("No documents found")
        return
    for doc in docs:
        marker = "" if doc.is_valid else "  [invalid]"
        click.echo(f"{doc.kind.value:<8} {doc.name:<32} {doc.description[:60]}{marker}")


@cli.command("show")
@click.argument("name")
@click.option("--kind", "-k", type=_KIND_CHOICE, default=None, help="Document kind")
@click.option("--body/--no-body", default=True, show_default=True, help="Include the Markdown body")
@click.pass_context
def show_cmd(ctx: click.Context, name: str, kind: Optional[str], body: bool):
    """
    Show one document as JSON.

    NAME: Document name (a leading "/" is allowed for commands)
    """
    corpus = _load(ctx)
    matches = corpus.find(name.lstrip("/"), kind)
    if not matches:
        click.echo(f"Error: No document named '{name}'", err=True)
        sys.exit(1)
    if len(matches) > 1:
        click.echo(
            f"Note: {len(matches)} documents are named '{name}', showing {matches[0].relative_path}",
            err=True,
        )
    click.echo(_dump(matches[0].detail(include_body=body)))


@cli.command("bonds")
@click.option(
    "--format", "-f", "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
)
@click.pass_context
def bonds_cmd(ctx: click.Context, fmt: str):
    """Show agent/skill bonds."""
    graph = resolve_bonds(_load(ctx))
    if fmt == "json":
        click.echo(_dump(graph.to_dict()))
        return

    for bond in graph.bonds:
        click.echo(
            f"{bond.agent} -> {bond.skill} ({bond.bond_type.value}, declared by {bond.declared_by.value})"
        )
    for ref in graph.unresolved:
        click.echo(f"! {ref.source.name} -> {ref.target} (missing {ref.target_kind.value})")
    orphans = graph.orphan_skills()
    if orphans:
        click.echo(f"Orphan skills: {', '.join(orphans)}")


@cli.command("match")
@click.argument("text")
@click.option("--limit", "-n", type=click.IntRange(min=1), default=None, help="Maximum matches")
@click.option("--kind", "-k", type=click.Choice(["agent", "skill"]), default=None)
@click.pass_context
def match_cmd(ctx: click.Context, text: str, limit: Optional[int], kind: Optional[str]):
    """
    Rank agents and skills for a piece of user text.

    TEXT: What the user asked for
    """
    index = TriggerIndex(_load(ctx))
    matches = index.match(text, limit=limit, kind=kind)
    if not matches:
        click.echo("No matches")
        return
    for m in matches:
        click.echo(f"{m.score:.2f}  {m.document.kind.value:<6} {m.document.name:<32} {m.reason}")


@cli.command("command")
@click.argument("line")
@click.pass_context
def command_cmd(ctx: click.Context, line: str):
    """
    Resolve a slash-command line to its command document.

    LINE: e.g. "/learn-path frontend"

    Exits 1 for an unknown command, 2 for a malformed line.
    """
    router = CommandRouter(_load(ctx))
    try:
        resolved = router.resolve(line)
    except CommandSyntaxError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    except UnknownCommandError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    data = resolved.to_dict()
    click.echo(f"Command: /{data['command']}")
    click.echo(f"Arguments: {json.dumps(data['arguments'])}")
    if data["argument_hint"]:
        click.echo(f"Usage: /{data['command']} {data['argument_hint']}")
    click.echo(f"Document: {data['path']}")
    click.echo("")
    click.echo(data["body"].rstrip())


# ==============================================================================
# Catalog and server
# ==============================================================================

@cli.command("catalog")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option(
    "--format", "-f", "fmt",
    type=click.Choice(list(CATALOG_FORMATS)),
    default="json",
    show_default=True,
)
@click.pass_context
def catalog_cmd(ctx: click.Context, output: Optional[Path], fmt: str):
    """Export a JSON or YAML catalog of the corpus."""
    catalog = build_catalog(_load(ctx))
    if output is None:
        click.echo(dump_catalog(catalog, fmt), nl=False)
        return
    write_catalog(catalog, output, fmt)
    if not ctx.obj.get("quiet"):
        click.echo(f"Catalog written to {output}")


@cli.command("serve")
@click.option("--host", default=None, help="Bind host (default: PLUGIN_HOST_API_HOST)")
@click.option("--port", type=int, default=None, help="Bind port (default: PLUGIN_HOST_API_PORT)")
@click.pass_context
def serve_cmd(ctx: click.Context, host: Optional[str], port: Optional[int]):
    """Serve the corpus over HTTP."""
    import uvicorn

    from plugin_host.api.main import create_app

    settings = get_settings()
    try:
        app = create_app(ctx.obj.get("root"), settings=settings)
    except CorpusNotFoundError as e:
        raise click.ClickException(str(e))

    uvicorn.run(app, host=host or settings.api_host, port=port or settings.api_port, log_config=None)


# ==============================================================================
# Entry Point
# ==============================================================================

def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
