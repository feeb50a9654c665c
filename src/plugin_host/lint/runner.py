"""Lint runner - apply rules to a corpus and collect a report."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from plugin_host.config import Settings, get_settings
from plugin_host.contracts import LintFinding, LintReport, Severity
from plugin_host.lint.rules import LintContext, LintRule, get_rules
from plugin_host.observability import get_logger, with_doc_context
from plugin_host.runtime.corpus import Corpus
from plugin_host.runtime.loader import load_corpus

logger = get_logger(__name__)

CRASH_RULE_ID = "LINT000"


class LintRunner:
    """Run lint rules over a loaded corpus."""

    def __init__(
        self,
        rules: list[LintRule] | None = None,
        settings: Settings | None = None,
        select: Iterable[str] | None = None,
        ignore: Iterable[str] | None = None,
    ):
        """
        Initialize the runner.

        Args:
            rules: Explicit rule instances. Defaults to the registry filtered
                by select/ignore
            settings: Settings instance. Defaults to the global settings
            select: Rule ids to run. Defaults to settings.lint_select
            ignore: Rule ids to skip. Defaults to settings.lint_ignore

        Raises:
            ValueError: If select or ignore names an unknown rule
        """
        self.settings = settings or get_settings()
        if rules is None:
            rules = get_rules(
                select=self.settings.lint_select if select is None else select,
                ignore=self.settings.lint_ignore if ignore is None else ignore,
            )
        self.rules = rules

    def run(self, corpus: Corpus) -> LintReport:
        """
        Lint a corpus.

        A rule that raises does not stop the run; it becomes an error
        finding with id LINT000.

        Returns:
            LintReport with findings sorted by path, line and rule id
        """
        ctx = LintContext(corpus=corpus, settings=self.settings)
        findings: list[LintFinding] = []

        for rule in self.rules:
            try:
                rule_findings = list(rule.check(ctx))
            except Exception as e:
                logger.exception(
                    f"Lint rule {rule.rule_id} failed",
                    extra=with_doc_context(corpus_root=corpus.root, rule_id=rule.rule_id),
                )
                rule_findings = [
                    LintFinding(
                        rule_id=CRASH_RULE_ID,
                        severity=Severity.ERROR,
                        message=f"Rule {rule.rule_id} crashed: {type(e).__name__}: {e}",
                        path=".",
                    )
                ]
            findings.extend(rule_findings)

        report = LintReport(
            findings=findings,
            documents_checked=len(corpus),
            rules_run=[rule.rule_id for rule in self.rules],
        )
        report.findings = report.sorted()

        logger.info(
            "Lint finished",
            extra=with_doc_context(corpus_root=corpus.root, **report.counts()),
        )
        return report


def lint_corpus(
    root: Path | str | None = None,
    settings: Settings | None = None,
    select: Iterable[str] | None = None,
    ignore: Iterable[str] | None = None,
) -> LintReport:
    """Load and lint the corpus under root."""
    settings = settings or get_settings()
    corpus = load_corpus(root, settings=settings)
    return LintRunner(settings=settings, select=select, ignore=ignore).run(corpus)
