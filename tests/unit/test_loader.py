"""Tests for the corpus loader."""
import pytest

from plugin_host.contracts import (
    AgentFrontmatter,
    CommandFrontmatter,
    DocumentKind,
    ParseErrorKind,
    SkillFrontmatter,
)
from plugin_host.runtime import CorpusLoader, CorpusNotFoundError, load_corpus


class TestCorpusLoader:
    """Test loading the drifted fixture corpus."""

    def test_counts(self, corpus):
        assert len(corpus.agents()) == 5
        assert len(corpus.skills()) == 4
        assert len(corpus.commands()) == 4
        assert len(corpus) == 13

    def test_deterministic_order(self, corpus):
        assert [d.path.name for d in corpus.agents()] == [
            "backend-developer.md",
            "broken-agent.md",
            "frontend-developer.md",
            "frontend-legacy.md",
            "no-name.md",
        ]
        assert [d.relative_path for d in corpus.skills()][0] == "skills/docker-basics/SKILL.md"

    def test_valid_agent(self, corpus):
        doc = corpus.get("backend-developer", DocumentKind.AGENT)

        assert doc.is_valid
        assert isinstance(doc.frontmatter, AgentFrontmatter)
        assert doc.model == "opus"
        assert doc.sasmp_version == "2.0.0"
        assert doc.title == "Backend Developer"
        assert doc.body_line == 18

    def test_fences_have_file_lines(self, corpus):
        doc = corpus.get("backend-developer", DocumentKind.AGENT)

        assert [(f.language, f.line) for f in doc.fences] == [(None, 21), ("javascript", 25)]

    def test_broken_yaml_is_kept(self, corpus):
        doc = corpus.get("broken-agent")

        assert not doc.is_valid
        assert doc.error_kind is ParseErrorKind.YAML
        assert doc.error_line is not None
        assert "Invalid YAML" in doc.parse_error
        assert doc.title == "Broken"

    def test_schema_error_is_kept(self, corpus):
        doc = corpus.get("no-name")

        assert doc.error_kind is ParseErrorKind.SCHEMA
        assert "name" in doc.parse_error
        # Raw frontmatter still answers questions
        assert doc.description == "Agent without a name"
        assert doc.sasmp_version == "1.3.0"

    def test_skill_name_from_frontmatter(self, corpus):
        doc = corpus.get("python-fundamentals", DocumentKind.SKILL)

        assert isinstance(doc.frontmatter, SkillFrontmatter)
        assert doc.path.parent.name == "python-basics"
        assert doc.sasmp_version == "1.3.0"

    def test_commands_without_frontmatter(self, corpus):
        doc = corpus.get("assess", DocumentKind.COMMAND)

        assert doc.is_valid
        assert doc.raw_frontmatter == {}
        assert doc.title == "/assess"

    def test_command_frontmatter(self, corpus):
        doc = corpus.get("learn-path", DocumentKind.COMMAND)

        assert isinstance(doc.frontmatter, CommandFrontmatter)
        assert doc.frontmatter.argument_hint == "<roadmap>"

    def test_unreadable_file_becomes_issue(self, corpus):
        assert [i.path for i in corpus.issues] == ["commands/binary.md"]
        assert "Cannot read file" in corpus.issues[0].message

    def test_manifest(self, corpus):
        assert corpus.manifest is not None
        assert corpus.manifest.name == "roadmap-plugin"
        assert corpus.manifest_path.name == "plugin.json"


class TestLoaderEdgeCases:
    """Test loader behaviour on small hand-made corpora."""

    def test_missing_root(self, tmp_path):
        with pytest.raises(CorpusNotFoundError):
            load_corpus(tmp_path / "nope")

    def test_empty_root(self, tmp_path):
        corpus = load_corpus(tmp_path)

        assert len(corpus) == 0
        assert corpus.manifest is None

    def test_agent_without_frontmatter(self, tmp_path, make_corpus):
        make_corpus(tmp_path, {"agents/plain.md": "# Plain agent\n"})

        doc = load_corpus(tmp_path).get("plain")

        assert doc.error_kind is ParseErrorKind.MISSING
        assert doc.parse_error == "No YAML frontmatter"

    def test_unclosed_frontmatter(self, tmp_path, make_corpus):
        make_corpus(tmp_path, {"skills/x/SKILL.md": "---\nname: x\n# never closed\n"})

        doc = load_corpus(tmp_path).get("x")

        assert doc.error_kind is ParseErrorKind.YAML
        assert doc.error_line == 1

    def test_skill_dir_without_skill_file_is_ignored(self, tmp_path, make_corpus):
        make_corpus(tmp_path, {"skills/empty/README.md": "# nothing\n"})

        assert load_corpus(tmp_path).skills() == []

    def test_invalid_manifest_json(self, tmp_path, make_corpus):
        make_corpus(tmp_path, {"plugin.json": "{not json"})

        corpus = load_corpus(tmp_path)

        assert corpus.manifest is None
        assert corpus.issues[0].path == "plugin.json"
        assert "Invalid manifest JSON" in corpus.issues[0].message

    def test_custom_layout(self, tmp_path, settings, make_corpus):
        settings.agents_dir = "personas"
        make_corpus(tmp_path, {"personas/a.md": "---\nname: a\ndescription: x\n---\n"})

        corpus = CorpusLoader(tmp_path, settings=settings).load()

        assert corpus.names(DocumentKind.AGENT) == ["a"]
