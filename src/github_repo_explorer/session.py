"""Preview/edit session for the currently inspected file.

The controller owns a single ``PreviewSession`` and moves it through the
preview and editing modes:

    preview --enter_edit--> editing(source) <--toggle--> editing(rendered)
    editing --commit ok--> preview (re-fetched)
    editing --commit failed--> editing (draft kept)
    editing --cancel--> preview (last applied preview, no re-fetch)
    any --select_file--> preview (new path)

Every ``select_file`` replaces the session object; responses that arrive
for a session that is no longer current are dropped, so a slow fetch can
never overwrite a newer selection.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .classifier import Classification, ContentKind, classify, decode_text, is_markdown
from .editor import html_to_markdown, markdown_to_html, render_markdown_text
from .errors import CommitError, ExplorerError, FetchError, NotEditable
from .gateway import GitHubGateway

logger = logging.getLogger(__name__)

BINARY_PLACEHOLDER = "Binary file cannot be previewed"


def preview_content(data: bytes, classification: Classification) -> str:
    """Text to show for fetched bytes: base64 for images, decoded text, or a placeholder."""
    if classification.is_image:
        return base64.b64encode(data).decode("ascii")
    if classification.is_text:
        return decode_text(data)
    return BINARY_PLACEHOLDER


class Mode(str, Enum):
    PREVIEW = "preview"
    EDITING = "editing"


class EditorMode(str, Enum):
    SOURCE = "source"
    RENDERED = "rendered"


@dataclass
class PreviewSession:
    """Content and mode of the file being looked at."""

    path: str
    raw_content: bytes = b""
    content: str = ""
    content_kind: ContentKind | None = None
    mime_type: str | None = None
    rendered_html: str | None = None
    mode: Mode = Mode.PREVIEW
    editor_mode: EditorMode = EditorMode.SOURCE
    base_revision: str | None = None
    draft_content: str | None = None
    rendered_draft: str | None = None
    error: str | None = None
    loading: bool = False

    @property
    def is_editing(self) -> bool:
        return self.mode is Mode.EDITING

    @property
    def can_edit(self) -> bool:
        """Only successfully previewed text offers the edit action."""
        return self.content_kind is ContentKind.TEXT and self.error is None

    def clear_edit_state(self) -> None:
        self.mode = Mode.PREVIEW
        self.editor_mode = EditorMode.SOURCE
        self.base_revision = None
        self.draft_content = None
        self.rendered_draft = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        kind = self.content_kind
        return {
            "path": self.path,
            "content": self.content,
            "contentKind": kind.value if kind else None,
            "isImage": kind is ContentKind.IMAGE,
            "isBinary": kind is ContentKind.BINARY,
            "mimeType": self.mime_type,
            "renderedHtml": self.rendered_html,
            "mode": self.mode.value,
            "editorMode": self.editor_mode.value if self.is_editing else None,
            "baseRevision": self.base_revision,
            "draftContent": self.draft_content,
            "renderedDraft": self.rendered_draft,
            "canEdit": self.can_edit,
            "error": self.error,
            "loading": self.loading,
        }


class SessionController:
    """Drives the preview session against one repository branch."""

    def __init__(self, gateway: GitHubGateway, default_branch: str):
        self.gateway = gateway
        self.default_branch = default_branch
        self.session: PreviewSession | None = None

    def _is_current(self, session: PreviewSession) -> bool:
        return self.session is session

    async def select_file(self, path: str) -> PreviewSession:
        """Load ``path`` for read-only preview.

        Raises:
            FetchError: GitHub refused the read; the body is also kept on
                the session as inline error text.
        """
        session = PreviewSession(path=path, loading=True)
        self.session = session
        try:
            raw = await self.gateway.fetch_raw(path, self.default_branch)
        except FetchError as e:
            if not self._is_current(session):
                logger.debug(f"Dropping failed fetch for superseded selection {path}")
                return self.session
            session.loading = False
            session.error = e.body
            raise

        if not self._is_current(session):
            logger.debug(f"Dropping fetch for superseded selection {path}")
            return self.session

        classification = classify(path, raw.data, raw.content_type)
        session.raw_content = raw.data
        session.content_kind = classification.kind
        session.mime_type = classification.mime_type
        session.content = preview_content(raw.data, classification)
        if classification.is_text and is_markdown(path):
            session.rendered_html = render_markdown_text(session.content, safe=True)
        session.loading = False
        return session

    async def enter_edit(self, path: str | None = None) -> PreviewSession:
        """Re-fetch the file with its revision token and switch to editing.

        The preview's content is never reused: the sha only comes with the
        edit fetch, and the file may have changed since the preview.

        Raises:
            NotEditable: the content is an image or undecodable binary.
            FetchError: GitHub refused the read.
        """
        session = self.session
        target = path or (session.path if session else None)
        if target is None:
            raise ExplorerError("No file selected")
        if session is None or session.path != target:
            session = PreviewSession(path=target)
            self.session = session

        editable = await self.gateway.fetch_for_edit(target, self.default_branch)

        if not self._is_current(session):
            logger.debug(f"Dropping edit fetch for superseded selection {target}")
            return self.session

        classification = classify(target, editable.data)
        if not classification.is_text:
            raise NotEditable(target, classification.kind.value)

        if session.content_kind is None:
            session.content_kind = classification.kind
        session.draft_content = decode_text(editable.data)
        session.base_revision = editable.sha
        session.rendered_draft = None
        session.mode = Mode.EDITING
        session.editor_mode = EditorMode.SOURCE
        return session

    def _editing_session(self) -> PreviewSession:
        session = self.session
        if session is None or not session.is_editing:
            raise ExplorerError("Not editing a file")
        return session

    def update_draft(self, text: str) -> PreviewSession:
        session = self._editing_session()
        session.draft_content = text
        return session

    def update_rendered(self, html: str) -> PreviewSession:
        session = self._editing_session()
        session.rendered_draft = html
        return session

    def toggle_editor_mode(self) -> PreviewSession:
        """Switch between the source and rendered editors.

        Going back to source re-derives the draft from the rendered HTML,
        which is lossy.
        """
        session = self._editing_session()
        if session.editor_mode is EditorMode.SOURCE:
            session.rendered_draft = markdown_to_html(session.draft_content or "")
            session.editor_mode = EditorMode.RENDERED
        else:
            session.draft_content = html_to_markdown(session.rendered_draft or "")
            session.editor_mode = EditorMode.SOURCE
        return session

    async def commit(self, message: str) -> dict[str, Any]:
        """Push the draft to GitHub and reload the preview.

        Nothing is sent unless there is a message, the session is editing
        text and a base revision was fetched.

        Returns:
            GitHub's response to the write.

        Raises:
            CommitError: refused locally (status None) or by GitHub. The
                draft and editing mode are left intact.
        """
        if not message or not message.strip():
            raise CommitError(None, "Commit message is required")
        session = self.session
        if session is None or not session.is_editing:
            raise CommitError(None, "Not editing a file")
        if session.content_kind is not ContentKind.TEXT:
            raise CommitError(None, f"{session.path} is not a text file")
        if not session.base_revision:
            raise CommitError(None, "No base revision; enter edit mode first")

        result = await self.gateway.put_content(
            path=session.path,
            message=message,
            content=session.draft_content or "",
            sha=session.base_revision,
            branch=self.default_branch,
        )

        path = session.path
        session.clear_edit_state()
        if not self._is_current(session):
            logger.debug(f"Committed {path}; selection moved on, not reloading it")
            return result
        try:
            await self.select_file(path)
        except FetchError as e:
            logger.warning(f"Committed {path} but reloading it failed: {e.body}")
        return result

    def cancel_edit(self) -> PreviewSession | None:
        """Drop all edit state and fall back to the last applied preview."""
        session = self.session
        if session is not None:
            session.clear_edit_state()
        return session
