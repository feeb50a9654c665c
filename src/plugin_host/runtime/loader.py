"""
Corpus Loader - read agents, skills and commands from a plugin directory.

Layout:
    <root>/
        agents/*.md
        skills/<name>/SKILL.md
        commands/*.md
        .claude-plugin/plugin.json   (optional)

Per-file problems never abort a load: a broken document is kept with its
parse error so the linter can report it.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from plugin_host.config import Settings, get_settings
from plugin_host.contracts import (
    FRONTMATTER_MODELS,
    Document,
    DocumentKind,
    LoadIssue,
    ParseErrorKind,
    PluginManifest,
)
from plugin_host.observability import get_logger, with_doc_context
from plugin_host.runtime.corpus import Corpus
from plugin_host.runtime.errors import CorpusNotFoundError, FrontmatterError
from plugin_host.runtime.parsing import (
    extract_code_fences,
    first_heading,
    load_frontmatter_yaml,
    locate_frontmatter,
)

logger = get_logger(__name__)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(x) for x in item["loc"]) or "<root>"
        parts.append(f"{loc}: {item['msg']}")
    return "; ".join(parts)


class CorpusLoader:
    """Load a plugin corpus from disk."""

    def __init__(self, root: Path | str | None = None, settings: Settings | None = None):
        """
        Initialize the loader.

        Args:
            root: Corpus root. Defaults to settings.corpus_root
            settings: Settings instance. Defaults to the global settings
        """
        self.settings = settings or get_settings()
        self.root = self.settings.resolve_root(root)

    def load(self) -> Corpus:
        """
        Load every document under the root.

        Returns:
            Corpus with documents in deterministic (sorted) order

        Raises:
            CorpusNotFoundError: If the root is not a directory
        """
        if not self.root.is_dir():
            raise CorpusNotFoundError(f"Corpus root not found: {self.root}")

        corpus = Corpus(root=self.root)
        for kind, paths in self._discover().items():
            for path in paths:
                try:
                    corpus.documents.append(self.load_document(path, kind))
                except (OSError, UnicodeDecodeError) as e:
                    issue = LoadIssue(path=self._relative(path), message=f"Cannot read file: {e}")
                    corpus.issues.append(issue)
                    logger.warning(
                        issue.message,
                        extra=with_doc_context(document=issue.path, doc_kind=kind.value),
                    )

        self._load_manifest(corpus)

        logger.info(
            "Corpus loaded",
            extra=with_doc_context(
                corpus_root=self.root,
                agents=len(corpus.agents()),
                skills=len(corpus.skills()),
                commands=len(corpus.commands()),
                issues=len(corpus.issues),
            ),
        )
        return corpus

    def _discover(self) -> dict[DocumentKind, list[Path]]:
        settings = self.settings
        found: dict[DocumentKind, list[Path]] = {kind: [] for kind in DocumentKind}

        agents_dir = self.root / settings.agents_dir
        commands_dir = self.root / settings.commands_dir
        skills_dir = self.root / settings.skills_dir

        if agents_dir.is_dir():
            found[DocumentKind.AGENT] = sorted(p for p in agents_dir.glob("*.md") if p.is_file())
        else:
            logger.debug(f"No agents directory at {agents_dir}")

        if skills_dir.is_dir():
            found[DocumentKind.SKILL] = sorted(
                d / settings.skill_filename
                for d in skills_dir.iterdir()
                if d.is_dir() and (d / settings.skill_filename).is_file()
            )
        else:
            logger.debug(f"No skills directory at {skills_dir}")

        if commands_dir.is_dir():
            found[DocumentKind.COMMAND] = sorted(p for p in commands_dir.glob("*.md") if p.is_file())
        else:
            logger.debug(f"No commands directory at {commands_dir}")

        return found

    def _relative(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    def _fallback_name(self, path: Path, kind: DocumentKind) -> str:
        if kind == DocumentKind.SKILL and path.name == self.settings.skill_filename:
            return path.parent.name
        return path.stem

    def load_document(self, path: Path, kind: DocumentKind) -> Document:
        """
        Parse one file into a Document.

        Frontmatter failures are recorded on the document, not raised.

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not UTF-8
        """
        text = path.read_text(encoding="utf-8")
        doc = Document(
            kind=kind,
            name=self._fallback_name(path, kind),
            path=path,
            relative_path=self._relative(path),
        )

        try:
            block = locate_frontmatter(text)
        except FrontmatterError as e:
            doc.body = text
            doc.parse_error = str(e)
            doc.error_kind = ParseErrorKind.YAML
            doc.error_line = e.line
            self._finish(doc, body_line=1)
            return doc

        doc.body = block.body
        if block.yaml_text is None:
            raw: dict = {}
            if kind != DocumentKind.COMMAND:
                doc.parse_error = "No YAML frontmatter"
                doc.error_kind = ParseErrorKind.MISSING
        else:
            try:
                raw = load_frontmatter_yaml(block.yaml_text, block.open_line)
            except FrontmatterError as e:
                doc.parse_error = f"{e} (line {e.line})" if e.line else str(e)
                doc.error_kind = ParseErrorKind.YAML
                doc.error_line = e.line
                self._finish(doc, body_line=block.body_line)
                return doc

        doc.raw_frontmatter = raw
        if isinstance(raw.get("name"), str) and raw["name"].strip():
            doc.name = raw["name"].strip().lstrip("/")

        if doc.error_kind is None:
            model = FRONTMATTER_MODELS[kind]
            try:
                doc.frontmatter = model.model_validate(raw)
            except ValidationError as e:
                doc.parse_error = _format_validation_error(e)
                doc.error_kind = ParseErrorKind.SCHEMA

        self._finish(doc, body_line=block.body_line)
        return doc

    def _finish(self, doc: Document, body_line: int) -> None:
        doc.body_line = body_line
        doc.fences = extract_code_fences(doc.body, line_offset=body_line - 1)
        doc.title = first_heading(doc.body)
        if doc.parse_error:
            logger.warning(
                f"Frontmatter problem in {doc.relative_path}: {doc.parse_error}",
                extra=with_doc_context(document=doc.name, doc_kind=doc.kind.value),
            )

    def _load_manifest(self, corpus: Corpus) -> None:
        for candidate in self.settings.manifest_paths:
            path = self.root / candidate
            if not path.is_file():
                continue
            corpus.manifest_path = path
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                corpus.manifest = PluginManifest.model_validate(data)
            except json.JSONDecodeError as e:
                corpus.issues.append(LoadIssue(path=candidate, message=f"Invalid manifest JSON: {e}"))
            except ValidationError as e:
                corpus.issues.append(
                    LoadIssue(path=candidate, message=f"Invalid manifest: {_format_validation_error(e)}")
                )
            except OSError as e:
                corpus.issues.append(LoadIssue(path=candidate, message=f"Cannot read manifest: {e}"))
            return


def load_corpus(root: Path | str | None = None, settings: Settings | None = None) -> Corpus:
    """Load a corpus with a fresh loader."""
    return CorpusLoader(root, settings=settings).load()
