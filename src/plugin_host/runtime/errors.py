"""Runtime exceptions."""


class PluginHostError(Exception):
    """Base exception for plugin host errors."""

    pass


class CorpusNotFoundError(PluginHostError):
    """Raised when the corpus root does not exist."""

    pass


class FrontmatterError(PluginHostError):
    """Raised when a frontmatter block is not a valid YAML mapping."""

    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.line = line


class DocumentNotFoundError(PluginHostError, KeyError):
    """Raised when a lookup names a document that is not loaded."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "document not found"


class CommandSyntaxError(PluginHostError):
    """Raised when a slash-command line cannot be parsed."""

    pass


class UnknownCommandError(PluginHostError):
    """Raised when a slash command has no command document."""

    def __init__(self, name: str, available: list[str]):
        listing = ", ".join(f"/{n}" for n in available) or "none"
        super().__init__(f"Unknown command: /{name} (available: {listing})")
        self.name = name
        self.available = available
