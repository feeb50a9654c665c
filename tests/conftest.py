"""Pytest configuration and fixtures."""
import json
import os
from pathlib import Path

import pytest

# Set test environment variables
os.environ["PLUGIN_HOST_ENV"] = "test"
os.environ["PLUGIN_HOST_LOG_FORMAT"] = "text"


FRONTEND_DEVELOPER = """\
---
name: frontend-developer
description: Frontend roadmap mentor for React and CSS
model: sonnet
sasmp_version: "1.3.0"
tools: Read, Write, Bash
capabilities:
  - react
  - css
  - accessibility
triggers:
  - frontend roadmap
  - react
bonded_skills:
  - name: react-fundamentals
    bond_type: PRIMARY_BOND
  - name: missing-skill
    bond_type: SECONDARY_BOND
error_handling: "retry_strategy: exponential_backoff, fallback: escalate_to_human"
output_schema:
  type: object
  properties:
    plan:
      type: string
---

# Frontend Developer

Install the basics first:

```bash
npm install react react-dom
```
"""

BACKEND_DEVELOPER = """\
---
name: backend-developer
description: Backend persona for services and APIs
model: opus
sasmp_version: "2.0.0"
capabilities: [python, databases, apis]
triggers: [backend roadmap]
bonded_skills:
  - sql-queries
error_handling:
  retry_strategy: linear
  max_retries: 2
  circuit_breaker:
    failure_threshold: 3
input_schema:
  type: objekt
---

# Backend Developer

```
SELECT * FROM users;
```

```javascript
def handler(event):
    import json
    return json.dumps(event)
```
"""

FRONTEND_LEGACY = """\
---
name: frontend-developer
description: Older frontend persona
sasmp_version: "1.3.0"
---

# Frontend Developer (legacy)
"""

BROKEN_AGENT = """\
---
name: broken-agent
description: [unclosed
---

# Broken
"""

NO_NAME_AGENT = """\
---
description: Agent without a name
sasmp_version: "1.3.0"
---

# Nameless
"""

REACT_SKILL = """\
---
name: react-fundamentals
description: Components, hooks and JSX
sasmp_version: "1.3.0"
bonded_agent: frontend-developer
bond_type: PRIMARY_BOND
capabilities: [react, jsx]
triggers: [react hooks]
---

# React Fundamentals

```tsx
const App = () => <div>Hello</div>;
export default App;
```
"""

SQL_SKILL = """\
---
name: sql-queries
description: Writing SQL queries
sasmp_version: "2.0.0"
bonded_agent: backend-developer
bond_type: SUPPORT_BOND
---

# SQL Queries
"""

PYTHON_SKILL = """\
---
name: python-fundamentals
sasmp_version: 1.3
bonded_agent: ghost-agent
bond_type: TERTIARY_BOND
---

# Python Fundamentals

```python
def greet(name):
    return f"Hello {name}"
```
"""

DOCKER_SKILL = """\
---
name: docker-basics
description: Containers for backend services
sasmp_version: "3.1"
bonded_agent: backend-developer
bond_type: SECONDARY_BOND
---

# Docker Basics

```yaml
FROM python:3.12-slim
RUN pip install -r requirements.txt
COPY . /app
```
"""

LEARN_PATH_COMMAND = """\
---
name: learn-path
description: Start a learning path for a roadmap
argument-hint: "<roadmap>"
sasmp_version: "2.0.0"
---

# /learn-path

Pick the agent bonded to the requested roadmap and start the path.
"""

ASSESS_COMMAND = """\
# /assess

Run a skill assessment.
"""

PROGRESS_COMMAND = """\
# /track-progress

Show progress across roadmaps.
"""

NOTES_COMMAND = """\
# Notes

Free-form notes about the plugin.
"""

MANIFEST = {
    "name": "roadmap-plugin",
    "version": "1.0.0",
    "description": "Roadmap teaching plugin",
    "author": {"name": "Roadmap Team"},
    "agents": ["./agents/frontend-developer.md", "./agents/missing.md"],
    "skills": ["./skills/react-fundamentals"],
    "commands": ["./commands"],
}

CORPUS_FILES = {
    "agents/frontend-developer.md": FRONTEND_DEVELOPER,
    "agents/backend-developer.md": BACKEND_DEVELOPER,
    "agents/frontend-legacy.md": FRONTEND_LEGACY,
    "agents/broken-agent.md": BROKEN_AGENT,
    "agents/no-name.md": NO_NAME_AGENT,
    "skills/react-fundamentals/SKILL.md": REACT_SKILL,
    "skills/sql-queries/SKILL.md": SQL_SKILL,
    "skills/python-basics/SKILL.md": PYTHON_SKILL,
    "skills/docker-basics/SKILL.md": DOCKER_SKILL,
    "commands/learn-path.md": LEARN_PATH_COMMAND,
    "commands/assess.md": ASSESS_COMMAND,
    "commands/progress.md": PROGRESS_COMMAND,
    "commands/notes.md": NOTES_COMMAND,
}


def write_corpus(root: Path, files: dict[str, str], manifest: dict | None = None) -> Path:
    """Write corpus files (and optionally a manifest) under root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    if manifest is not None:
        manifest_path = root / ".claude-plugin" / "plugin.json"
        manifest_path.parent.mkdir(parents=True, exist_ok=True)
        manifest_path.write_text(json.dumps(manifest), encoding="utf-8")
    return root


@pytest.fixture
def make_corpus():
    """Return the corpus writer for tests that build their own layout."""
    return write_corpus


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reset the global settings singleton around every test."""
    from plugin_host.config import reset_settings

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def corpus_root(tmp_path):
    """
    A small plugin corpus with deliberate drift.

    Drift included: duplicate agent name, mixed SASMP versions, broken YAML,
    missing agent name, dangling bonds both ways, unknown bond type, skill
    name/directory mismatch, untagged and mislabelled fences, invalid JSON
    Schema, mismatched and undocumented commands, a non-UTF-8 file and a
    manifest entry that does not exist.
    """
    root = write_corpus(tmp_path / "plugin", CORPUS_FILES, MANIFEST)
    (root / "commands" / "binary.md").write_bytes(b"\xff\xfe\x00not utf-8")
    return root


@pytest.fixture
def clean_root(tmp_path):
    """A corpus with no lint findings."""
    files = {
        "agents/frontend-developer.md": (
            "---\nname: frontend-developer\ndescription: Frontend mentor\n"
            "sasmp_version: \"2.0.0\"\nbonded_skills: [react-fundamentals]\n---\n\n# Frontend\n"
        ),
        "skills/react-fundamentals/SKILL.md": (
            "---\nname: react-fundamentals\ndescription: React basics\n"
            "sasmp_version: \"2.0.0\"\nbonded_agent: frontend-developer\n---\n\n"
            "# React\n\n```jsx\nconst x = <App />;\n```\n"
        ),
        "commands/learn-path.md": "# /learn-path\n\nStart a path.\n",
    }
    return write_corpus(tmp_path / "clean", files)


@pytest.fixture
def settings():
    """Fresh settings instance."""
    from plugin_host.config import get_settings

    return get_settings()


@pytest.fixture
def corpus(corpus_root, settings):
    """The drifted corpus, loaded."""
    from plugin_host.runtime import load_corpus

    return load_corpus(corpus_root, settings=settings)
