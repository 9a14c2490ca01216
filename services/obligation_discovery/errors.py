"""
Discovery Errors
================

Failure taxonomy for an obligation discovery run.

Only ``ValidationError`` and ``SessionError`` ever leave the pipeline;
query-level conditions are absorbed where they occur.

Version: 0.1.0
"""

from collections.abc import Sequence


class DiscoveryError(Exception):
    """Base class for discovery failures."""


class ValidationError(DiscoveryError):
    """A mandatory request field is missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class QueryError(DiscoveryError):
    """A single search query failed; the run continues without its records."""


class ControlsNotFound(QueryError):
    """None of the known selectors matched one or more search controls."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Could not find search controls: {', '.join(self.missing)}"
        )


class QueryTimeout(DiscoveryError):
    """No results indicator appeared within the wait budget."""


class SessionError(DiscoveryError):
    """The browser session failed to start or died mid-run."""
