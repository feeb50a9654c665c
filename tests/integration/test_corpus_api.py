"""Integration tests for the corpus API endpoints."""
import pytest
from fastapi.testclient import TestClient

from plugin_host.api.main import create_app
from plugin_host.runtime import CorpusNotFoundError


@pytest.fixture
def client(corpus_root):
    return TestClient(create_app(corpus_root))


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["documents"] == {"agents": 5, "skills": 4, "commands": 4}


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["service"] == "plugin-host"
    assert response.json()["plugin"] == "roadmap-plugin"


def test_missing_root_fails_at_startup(tmp_path):
    with pytest.raises(CorpusNotFoundError):
        create_app(tmp_path / "missing")


def test_list_documents(client):
    """Test the three listing endpoints."""
    agents = client.get("/v1/agents").json()
    skills = client.get("/v1/skills").json()
    commands = client.get("/v1/commands").json()

    assert agents["count"] == 5
    assert skills["count"] == 4
    assert [c["name"] for c in commands["items"]] == ["assess", "learn-path", "notes", "progress"]
    assert set(agents["items"][0]) == {"kind", "name", "description", "path", "sasmp_version", "valid"}


def test_get_document(client):
    response = client.get("/v1/skills/react-fundamentals")

    assert response.status_code == 200
    data = response.json()
    assert data["frontmatter"]["bonded_agent"] == ["frontend-developer"]
    assert "# React Fundamentals" in data["body"]


def test_get_document_without_body(client):
    data = client.get("/v1/agents/backend-developer", params={"body": "false"}).json()

    assert "body" not in data


def test_get_document_duplicates(client):
    first = client.get("/v1/agents/frontend-developer").json()
    every = client.get("/v1/agents/frontend-developer", params={"all": "true"}).json()

    assert first["path"] == "agents/frontend-developer.md"
    assert every["count"] == 2
    assert [d["path"] for d in every["items"]] == [
        "agents/frontend-developer.md",
        "agents/frontend-legacy.md",
    ]


def test_get_invalid_document_shows_error(client):
    data = client.get("/v1/agents/broken-agent").json()

    assert data["valid"] is False
    assert "Invalid YAML" in data["parse_error"]


@pytest.mark.parametrize("path", ["/v1/agents/nobody", "/v1/widgets/x"])
def test_get_document_not_found(client, path):
    response = client.get(path)

    assert response.status_code == 404
    assert "detail" in response.json()


def test_match(client):
    response = client.get("/v1/match", params={"q": "explain react hooks", "limit": 2})

    assert response.status_code == 200
    matches = response.json()["matches"]
    assert [(m["kind"], m["name"]) for m in matches] == [
        ("agent", "frontend-developer"),
        ("skill", "react-fundamentals"),
    ]


def test_match_requires_query(client):
    assert client.get("/v1/match").status_code == 422


def test_bonds(client):
    data = client.get("/v1/bonds").json()

    assert len(data["bonds"]) == 3
    assert data["orphan_skills"] == ["python-fundamentals"]


def test_lint(client):
    data = client.get("/v1/lint").json()

    assert data["counts"] == {"info": 4, "warning": 9, "error": 8}
    assert data["documents_checked"] == 13


def test_resolve_command(client):
    response = client.post("/v1/commands/resolve", json={"line": "/learn-path \"full stack\""})

    assert response.status_code == 200
    data = response.json()
    assert data["command"] == "learn-path"
    assert data["arguments"] == ["full stack"]
    assert data["argument_hint"] == "<roadmap>"


def test_resolve_unknown_command(client):
    response = client.post("/v1/commands/resolve", json={"line": "/teleport"})

    assert response.status_code == 404
    assert "Unknown command" in response.json()["detail"]


def test_resolve_syntax_error(client):
    response = client.post("/v1/commands/resolve", json={"line": "no slash"})

    assert response.status_code == 400


def test_reload_picks_up_new_files(client, corpus_root):
    (corpus_root / "commands" / "review.md").write_text("# /review\n\nReview progress.\n", encoding="utf-8")

    response = client.post("/v1/reload")

    assert response.status_code == 200
    assert response.json()["documents"]["commands"] == 5
    assert client.get("/v1/commands/review").status_code == 200
