"""Error taxonomy shared by the CLI and the HTTP service."""


class TabclipError(Exception):
    """Base class for every error tabclip reports to its caller."""


class ConfigurationError(TabclipError):
    """Unsupported option value, detected before any source is read."""


class SourceOpenError(TabclipError):
    """A named input file could not be opened."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"{name}: {reason}")
        self.name = name


class SniffError(TabclipError):
    """No candidate delimiter won on the buffered content."""

    def __init__(self, message: str = "unknown format", candidates=None):
        super().__init__(message)
        self.candidates = list(candidates or [])


class RenderError(TabclipError):
    """Read, parse or write failure while streaming a table."""


class ClipboardError(TabclipError):
    """The clipboard process could not be started or exited badly."""
