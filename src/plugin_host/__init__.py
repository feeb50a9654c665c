"""Plugin host: load, lint and serve an agent/skill/command plugin corpus."""

__version__ = "0.1.0"
