"""
Code fence language heuristics.

Detection is conservative: a language is reported only when
its signals clearly outweigh every other language's. Fences tagged with a
language outside the known families are never second-guessed.
"""

from __future__ import annotations

import json
import re

import yaml

LANGUAGE_FAMILIES: dict[str, str] = {
    "python": "python", "py": "python", "python3": "python",
    "javascript": "javascript", "js": "javascript", "jsx": "javascript",
    "mjs": "javascript", "cjs": "javascript",
    "typescript": "javascript", "ts": "javascript", "tsx": "javascript",
    "json": "json", "jsonc": "json", "json5": "json",
    "yaml": "yaml", "yml": "yaml",
    "sql": "sql", "postgresql": "sql", "postgres": "sql", "mysql": "sql", "sqlite": "sql",
    "bash": "bash", "sh": "bash", "shell": "bash", "zsh": "bash",
    "console": "bash", "shell-session": "bash",
    "hcl": "hcl", "terraform": "hcl", "tf": "hcl",
    "dockerfile": "dockerfile", "docker": "dockerfile",
}

# (declared, detected) pairs that are not contradictions
COMPATIBLE = frozenset({
    ("yaml", "json"),
    ("javascript", "json"),
})

_SIGNALS: dict[str, list[re.Pattern]] = {
    "python": [
        re.compile(r"^\s*def \w+\(.*\)\s*(->\s*[^:]+)?:\s*$", re.M),
        re.compile(r"^\s*class \w+(\(.*\))?:\s*$", re.M),
        re.compile(r"^\s*from [\w.]+ import \w", re.M),
        re.compile(r"^\s*import [\w.]+(\s+as \w+)?\s*$", re.M),
        re.compile(r"\bself\.\w+"),
        re.compile(r"^\s*(elif|except|with) .*:\s*$", re.M),
        re.compile(r"\bprint\("),
    ],
    "javascript": [
        re.compile(r"\b(const|let|var)\s+[\w{}\[\], ]+\s*="),
        re.compile(r"=>"),
        re.compile(r"\bfunction\s*\w*\s*\("),
        re.compile(r"^\s*import .+ from ['\"]", re.M),
        re.compile(r"^\s*export (default|const|function|class|interface|type)\b", re.M),
        re.compile(r"\bconsole\.\w+\("),
        re.compile(r"\brequire\(['\"]"),
        re.compile(r"^\s*interface \w+\s*\{", re.M),
    ],
    "sql": [
        re.compile(r"^\s*SELECT\b", re.M),
        re.compile(r"^\s*(INSERT INTO|UPDATE \w+ SET|DELETE FROM)\b", re.M),
        re.compile(r"^\s*(CREATE|ALTER|DROP) (TABLE|INDEX|VIEW|SCHEMA)\b", re.M),
        re.compile(r"^\s*FROM \w+", re.M),
        re.compile(r"^\s*WHERE\b", re.M),
        re.compile(r"^\s*(GROUP|ORDER) BY\b", re.M),
    ],
    "bash": [
        re.compile(r"^#!/(usr/)?bin/(env )?(ba|z)?sh", re.M),
        re.compile(r"^\s*\$ \w", re.M),
        re.compile(
            r"^\s*(npm|npx|yarn|pnpm|pip|pip3|kubectl|helm|git|cd|mkdir|curl|wget|brew|"
            r"apt-get|apt|sudo|export|echo|chmod|docker|terraform)\s",
            re.M,
        ),
        re.compile(r"\s&&\s"),
    ],
    "hcl": [
        re.compile(r'^\s*(resource|provider|variable|module|output|data|locals|terraform)\s*("[^"]*"\s*)*\{', re.M),
        re.compile(r"^\s*\w+\s*=\s*var\.\w+", re.M),
    ],
    "dockerfile": [
        re.compile(r"^FROM\s+\S+", re.M),
        re.compile(r"^(RUN|COPY|ADD|CMD|ENTRYPOINT|WORKDIR|EXPOSE|ENV|ARG)\s", re.M),
    ],
}

_YAML_LINE_RE = re.compile(r"^\s*(- )?[\w\-\"'./]+:(\s|$)")


def language_family(tag: str | None) -> str | None:
    """Family of a fence tag, or None for tags we do not check."""
    if not tag:
        return None
    return LANGUAGE_FAMILIES.get(tag.lower())


def _score(content: str) -> dict[str, int]:
    scores = {family: sum(1 for rx in rxs if rx.search(content)) for family, rxs in _SIGNALS.items()}

    stripped = content.strip()
    if stripped[:1] in ("{", "[") and stripped[-1:] in ("}", "]"):
        try:
            json.loads(stripped)
            scores["json"] = 5
        except ValueError:
            pass

    lines = [ln for ln in content.splitlines() if ln.strip() and not ln.strip().startswith("#")]
    if lines and scores.get("json", 0) == 0:
        yaml_lines = sum(1 for ln in lines if _YAML_LINE_RE.match(ln) or ln.strip().startswith("- "))
        if yaml_lines >= 2 and yaml_lines / len(lines) >= 0.8:
            try:
                if isinstance(yaml.safe_load(content), (dict, list)):
                    scores["yaml"] = 3
            except yaml.YAMLError:
                pass

    # FROM ... alone also matches SQL; require a second instruction
    if scores["dockerfile"] < 2:
        scores["dockerfile"] = 0
    return scores


def detect_language(content: str) -> str | None:
    """
    Detect the language family of fenced content.

    Returns:
        Family name, or None unless one family clearly dominates
    """
    if not content.strip():
        return None
    scores = _score(content)
    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    (best, best_score), (_, runner_up) = ranked[0], ranked[1]
    if best_score >= 2 and best_score >= 2 * runner_up:
        return best
    return None


def _parses_as(family: str, content: str) -> bool:
    """Whether content loads as a mapping or sequence in a data format."""
    try:
        if family == "yaml":
            data = yaml.safe_load(content)
        elif family == "json":
            data = json.loads(content)
        else:
            return False
    except (ValueError, yaml.YAMLError):
        return False
    return isinstance(data, (dict, list))


def tag_mismatch(tag: str | None, content: str) -> str | None:
    """
    Return the detected family when it contradicts the tag.

    Content that shows any signal of the declared family is accepted, and so
    is YAML or JSON that loads as a mapping or sequence.
    """
    declared = language_family(tag)
    if declared is None:
        return None
    if _parses_as(declared, content):
        return None
    scores = _score(content)
    if scores.get(declared, 0) > 0:
        return None
    detected = detect_language(content)
    if detected is None or detected == declared or (declared, detected) in COMPATIBLE:
        return None
    return detected
