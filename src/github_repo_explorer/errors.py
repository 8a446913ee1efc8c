"""Exception types raised by the explorer core and the GitHub gateway."""

from __future__ import annotations

import json


class ExplorerError(Exception):
    """Base class for all explorer errors."""

    pass


class ConfigError(ExplorerError):
    """Raised when the GitHub credential or repository route is missing or malformed."""

    pass


class OrphanEntryError(ExplorerError):
    """Raised by strict tree building when an entry's parent is absent."""

    def __init__(self, path: str, parent_path: str):
        self.path = path
        self.parent_path = parent_path
        super().__init__(f"Parent '{parent_path}' of '{path}' is not in the listing")


class UpstreamError(ExplorerError):
    """An upstream request that failed with a status code and a body.

    The body is kept verbatim; it is what the UI shows to the user.
    """

    def __init__(self, status: int | None, body: str):
        self.status = status
        self.body = body
        super().__init__(body)

    @property
    def message(self) -> str:
        """GitHub's JSON ``message`` field when present, otherwise the raw body."""
        try:
            data = json.loads(self.body)
        except (json.JSONDecodeError, TypeError):
            return self.body
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return self.body


class FetchError(UpstreamError):
    """Raised when an upstream read returns a non-success status."""

    pass


class CommitError(UpstreamError):
    """Raised when a commit is rejected, locally or by GitHub.

    ``status`` is ``None`` when the commit was refused before any request
    was sent (missing message, no base revision, not editing).
    """

    pass


class NotEditable(ExplorerError):
    """Raised when edit mode is requested for image or binary content."""

    def __init__(self, path: str, kind: str):
        self.path = path
        self.kind = kind
        super().__init__(f"{path} is not editable ({kind} content)")
