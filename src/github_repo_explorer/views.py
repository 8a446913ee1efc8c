"""Repository connection and per-browser view sessions.

The repository snapshot (default branch + tree) is fetched once and shared.
Each browser gets its own ``ViewSession`` (navigation state plus preview
controller), identified by a cookie and evicted oldest-first past
MAX_SESSIONS. View operations never raise upstream errors: they land in
the view's inline state instead.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from .config import RepoRoute
from .errors import CommitError, ConfigError, ExplorerError, FetchError, NotEditable
from .gateway import GitHubGateway, RepositorySnapshot
from .navigation import TreeNavigator
from .session import PreviewSession, SessionController

logger = logging.getLogger(__name__)

# Configuration
MAX_SESSIONS = 50
COOKIE_NAME = "explorer_session"

# Global state
_gateway: GitHubGateway | None = None
_route: RepoRoute | None = None
_config_error: str | None = None
_snapshot: RepositorySnapshot | None = None
_views: dict[str, ViewSession] = {}  # view_id -> ViewSession


def configure(gateway: GitHubGateway, route: RepoRoute) -> None:
    """Point the server at a repository. Clears any cached snapshot and views."""
    global _gateway, _route, _config_error, _snapshot
    _gateway = gateway
    _route = route
    _config_error = None
    _snapshot = None
    _views.clear()


def set_config_error(message: str) -> None:
    """Record a configuration problem to report on every request."""
    global _gateway, _route, _config_error, _snapshot
    _gateway = None
    _route = None
    _config_error = message
    _snapshot = None
    _views.clear()


def reset() -> None:
    """Forget all repository and view state (for testing)."""
    global _gateway, _route, _config_error, _snapshot
    _gateway = None
    _route = None
    _config_error = None
    _snapshot = None
    _views.clear()


def get_gateway() -> GitHubGateway:
    """Get the configured gateway.

    Raises:
        ConfigError: If no repository is configured.
    """
    if _gateway is None or _route is None:
        raise ConfigError(_config_error or "Server configuration error: missing GitHub settings")
    return _gateway


def get_route() -> RepoRoute | None:
    return _route


async def get_snapshot() -> RepositorySnapshot:
    """Bootstrap the repository on first use.

    Raises:
        ConfigError: If no repository is configured.
        FetchError: If GitHub refused one of the bootstrap reads.
    """
    global _snapshot
    gateway = get_gateway()
    if _snapshot is None:
        _snapshot = await gateway.bootstrap(initial_path=_route.initial_path if _route else None)
    return _snapshot


@dataclass
class ViewSession:
    """One browser's navigation state and preview session."""

    view_id: str
    navigator: TreeNavigator
    controller: SessionController
    notice: str | None = None
    last_access: float = field(default_factory=time.monotonic)

    @property
    def session(self) -> PreviewSession | None:
        return self.controller.session

    def toggle(self, path: str) -> bool | None:
        self.notice = None
        return self.navigator.toggle(path)

    async def select(self, path: str) -> PreviewSession | None:
        """Select a file in the tree and load its preview."""
        self.notice = None
        event = self.navigator.select(path)
        if event is None:
            return self.session
        try:
            await self.controller.select_file(event.path)
        except FetchError as e:
            # The error text is already on the preview session
            logger.debug(f"Preview of {event.path} failed: {e.status}")
        return self.session

    async def edit(self) -> PreviewSession | None:
        self.notice = None
        try:
            await self.controller.enter_edit()
        except NotEditable:
            self.notice = "The selected file cannot be edited"
        except FetchError as e:
            self.notice = f"Failed to load file for editing: {e.body}"
        except ExplorerError as e:
            self.notice = str(e)
        return self.session

    def update_draft(self, content: str) -> None:
        try:
            self.controller.update_draft(content)
        except ExplorerError as e:
            self.notice = str(e)

    def toggle_editor_mode(self, rendered_html: str | None = None) -> None:
        """Flip the editor sub-mode, taking the browser's rendered HTML first."""
        self.notice = None
        try:
            if rendered_html is not None:
                self.controller.update_rendered(rendered_html)
            self.controller.toggle_editor_mode()
        except ExplorerError as e:
            self.notice = str(e)

    async def commit(self, message: str, content: str | None = None) -> bool:
        """Commit the draft, optionally replacing it with ``content`` first."""
        self.notice = None
        try:
            if content is not None:
                self.controller.update_draft(content)
            await self.controller.commit(message)
        except CommitError as e:
            self.notice = f"Commit failed: {e.body}"
            return False
        except ExplorerError as e:
            self.notice = str(e)
            return False
        self.notice = "Commit succeeded"
        return True

    def cancel(self) -> None:
        self.notice = None
        self.controller.cancel_edit()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        session = self.session
        return {
            "selectedPath": self.navigator.selected_path,
            "initialPath": self.navigator.initial_path,
            "rows": [row.to_dict() for row in self.navigator.rows()],
            "session": session.to_dict() if session else None,
            "notice": self.notice,
        }


def get_oldest_view_id() -> str | None:
    if not _views:
        return None
    return min(_views.items(), key=lambda item: item[1].last_access)[0]


async def get_view(view_id: str | None) -> ViewSession:
    """Get the browser's view session, creating it when unknown.

    Raises:
        ConfigError: If no repository is configured.
        FetchError: If bootstrapping the repository failed.
    """
    if view_id and view_id in _views:
        view = _views[view_id]
        view.last_access = time.monotonic()
        return view

    snapshot = await get_snapshot()
    if len(_views) >= MAX_SESSIONS:
        oldest_id = get_oldest_view_id()
        if oldest_id:
            logger.info(f"View session limit reached, removing oldest: {oldest_id}")
            _views.pop(oldest_id, None)

    view = ViewSession(
        view_id=uuid.uuid4().hex,
        navigator=TreeNavigator(snapshot.roots, snapshot.initial_path),
        controller=SessionController(get_gateway(), snapshot.default_branch),
    )
    _views[view.view_id] = view
    logger.debug(f"Created view session {view.view_id}")
    return view


def view_count() -> int:
    return len(_views)
