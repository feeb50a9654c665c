"""Tests for bond resolution."""
from plugin_host.contracts import BondType, DocumentKind
from plugin_host.runtime import resolve_bonds


class TestResolveBonds:
    """Test resolve_bonds on the drifted corpus."""

    def test_resolved_pairs(self, corpus):
        graph = resolve_bonds(corpus)

        assert [(b.agent, b.skill) for b in graph.bonds] == [
            ("backend-developer", "docker-basics"),
            ("backend-developer", "sql-queries"),
            ("frontend-developer", "react-fundamentals"),
        ]

    def test_agent_side_wins(self, corpus):
        graph = resolve_bonds(corpus)

        # sql-queries says SUPPORT_BOND, backend-developer lists it without a type
        bond = next(b for b in graph.bonds if b.skill == "sql-queries")
        assert bond.bond_type is BondType.PRIMARY
        assert bond.declared_by is DocumentKind.AGENT

    def test_skill_side_only(self, corpus):
        graph = resolve_bonds(corpus)

        bond = next(b for b in graph.bonds if b.skill == "docker-basics")
        assert bond.bond_type is BondType.SECONDARY
        assert bond.declared_by is DocumentKind.SKILL

    def test_unresolved(self, corpus):
        graph = resolve_bonds(corpus)

        unresolved = {(u.source.name, u.target, u.target_kind) for u in graph.unresolved}
        assert unresolved == {
            ("frontend-developer", "missing-skill", DocumentKind.SKILL),
            ("python-fundamentals", "ghost-agent", DocumentKind.AGENT),
        }

    def test_queries(self, corpus):
        graph = resolve_bonds(corpus)

        assert [b.skill for b in graph.skills_for("backend-developer")] == ["sql-queries", "docker-basics"]
        assert graph.primary_agent("react-fundamentals") == "frontend-developer"
        assert graph.primary_agent("docker-basics") is None
        assert graph.orphan_skills() == ["python-fundamentals"]

    def test_to_dict(self, corpus):
        data = resolve_bonds(corpus).to_dict()

        assert set(data) == {"bonds", "unresolved", "orphan_skills"}
        assert data["bonds"][0]["bond_type"] == "SECONDARY_BOND"
        assert data["unresolved"][0]["source_path"].startswith(("agents/", "skills/"))

    def test_invalid_documents_are_skipped(self, corpus):
        graph = resolve_bonds(corpus)

        assert all(b.agent != "no-name" for b in graph.bonds)
