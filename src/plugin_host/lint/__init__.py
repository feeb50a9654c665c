"""Lint package."""
from plugin_host.lint.formatters import FORMATTERS, format_json, format_text, report_to_dict
from plugin_host.lint.languages import detect_language, language_family, tag_mismatch
from plugin_host.lint.rules import RULES, LintContext, LintRule, get_rules, register_rule
from plugin_host.lint.runner import CRASH_RULE_ID, LintRunner, lint_corpus

__all__ = [
    "CRASH_RULE_ID",
    "detect_language",
    "format_json",
    "format_text",
    "FORMATTERS",
    "get_rules",
    "language_family",
    "lint_corpus",
    "LintContext",
    "LintRule",
    "LintRunner",
    "register_rule",
    "report_to_dict",
    "RULES",
    "tag_mismatch",
]
