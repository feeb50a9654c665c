"""Report formatters for the lint CLI and API."""

from __future__ import annotations

import json
from typing import Any

from plugin_host.contracts import LintReport


def report_to_dict(report: LintReport) -> dict[str, Any]:
    """JSON-friendly view of a report."""
    return {
        "documents_checked": report.documents_checked,
        "rules_run": report.rules_run,
        "counts": report.counts(),
        "findings": [f.model_dump(mode="json") for f in report.sorted()],
    }


def format_json(report: LintReport) -> str:
    return json.dumps(report_to_dict(report), indent=2)


def format_text(report: LintReport) -> str:
    """
    One line per finding, then a summary line.

    Example:
        agents/a.md:3: warning FENCE001 Code fence has no language tag
        1 document(s) checked: 0 error(s), 1 warning(s), 0 info
    """
    lines = [
        f"{f.location()}: {f.severity.value} {f.rule_id} {f.message}"
        for f in report.sorted()
    ]
    counts = report.counts()
    lines.append(
        f"{report.documents_checked} document(s) checked: "
        f"{counts['error']} error(s), {counts['warning']} warning(s), {counts['info']} info"
    )
    return "\n".join(lines)


FORMATTERS = {
    "text": format_text,
    "json": format_json,
}
