"""Async client for the GitHub REST calls the explorer needs.

Three reads bootstrap the view (repository, branch, recursive tree), one
read fetches file content (raw, or JSON with the blob sha for editing) and
one write commits new content through the Contents API.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from .errors import CommitError, FetchError
from .tree import TreeEntry, build_tree, count_entries, filter_entries

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_BRANCH = "main"
DEFAULT_TIMEOUT = 30.0

JSON_MEDIA_TYPE = "application/vnd.github.v3+json"
RAW_MEDIA_TYPE = "application/vnd.github.v3.raw"


@dataclass
class RawContent:
    """File bytes as served by the raw media type."""

    data: bytes
    content_type: str | None = None


@dataclass
class EditableContent:
    """File bytes plus the blob sha a commit must quote."""

    data: bytes
    sha: str


@dataclass
class RepositorySnapshot:
    """Everything fetched at session start."""

    owner: str
    repo: str
    default_branch: str
    roots: list[TreeEntry] = field(default_factory=list)
    initial_path: str | None = None
    entry_count: int = 0
    truncated: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class GitHubGateway:
    """Thin async wrapper over the GitHub REST API for one repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.owner = owner
        self.repo = repo
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def repo_url(self) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}"

    def contents_url(self, path: str) -> str:
        return f"{self.repo_url}/contents/{quote(path.strip('/'))}"

    def _headers(self, accept: str = JSON_MEDIA_TYPE) -> dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": accept,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        accept: str = JSON_MEDIA_TYPE,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        error_cls: type[FetchError] | type[CommitError] = FetchError,
    ) -> httpx.Response:
        """Send one request, turning failures into ``error_cls``.

        Non-success statuses keep GitHub's body verbatim; transport errors
        are reported with status 500 and the exception text.
        """
        try:
            async with self._client() as client:
                response = await client.request(
                    method, url, headers=self._headers(accept), params=params, json=json
                )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise error_cls(500, str(e)) from e

        if response.is_success:
            return response
        logger.warning(f"{method} {url} returned {response.status_code}")
        raise error_cls(response.status_code, response.text)

    async def get_repository(self) -> dict[str, Any]:
        response = await self._request("GET", self.repo_url)
        return response.json()

    async def get_default_branch(self) -> str:
        data = await self.get_repository()
        return data.get("default_branch") or DEFAULT_BRANCH

    async def get_branch_tree_sha(self, branch: str) -> str:
        """Root tree sha of the branch head commit."""
        response = await self._request("GET", f"{self.repo_url}/branches/{quote(branch)}")
        data = response.json()
        try:
            return data["commit"]["commit"]["tree"]["sha"]
        except (KeyError, TypeError) as e:
            raise FetchError(response.status_code, response.text) from e

    async def _get_tree(self, sha: str) -> dict[str, Any]:
        response = await self._request(
            "GET", f"{self.repo_url}/git/trees/{sha}", params={"recursive": "1"}
        )
        data = response.json()
        if data.get("truncated"):
            logger.warning(f"Tree listing for {self.owner}/{self.repo} was truncated by GitHub")
        return data

    async def list_tree(self, sha: str) -> list[dict[str, Any]]:
        """Flat recursive listing of a tree object."""
        data = await self._get_tree(sha)
        return data.get("tree", [])

    async def bootstrap(self, initial_path: str | None = None) -> RepositorySnapshot:
        """Resolve the default branch and build the repository tree."""
        default_branch = await self.get_default_branch()
        tree_sha = await self.get_branch_tree_sha(default_branch)
        data = await self._get_tree(tree_sha)
        items = filter_entries(data.get("tree", []))
        roots = build_tree(items)
        snapshot = RepositorySnapshot(
            owner=self.owner,
            repo=self.repo,
            default_branch=default_branch,
            roots=roots,
            initial_path=initial_path or None,
            entry_count=count_entries(roots),
            truncated=bool(data.get("truncated")),
        )
        logger.info(
            f"Loaded {snapshot.entry_count} entries from {snapshot.full_name}@{default_branch}"
        )
        return snapshot

    async def fetch_raw(self, path: str, ref: str) -> RawContent:
        """Fetch a file's raw bytes at ``ref``."""
        response = await self._request(
            "GET", self.contents_url(path), accept=RAW_MEDIA_TYPE, params={"ref": ref}
        )
        return RawContent(data=response.content, content_type=response.headers.get("content-type"))

    async def fetch_for_edit(self, path: str, ref: str) -> EditableContent:
        """Fetch a file's JSON representation, which carries the blob sha."""
        response = await self._request("GET", self.contents_url(path), params={"ref": ref})
        data = response.json()
        if not isinstance(data, dict) or "sha" not in data:
            raise FetchError(response.status_code, response.text)
        content = data.get("content") or ""
        encoding = data.get("encoding", "base64")
        # Files over 1 MB come back with encoding "none" and no inline content
        if encoding != "base64" or (not content and data.get("size")):
            logger.warning(f"{path} has no inline content (encoding={encoding!r})")
            raise FetchError(413, f"{path} is too large to edit through the contents API")
        raw = base64.b64decode(content)
        return EditableContent(data=raw, sha=data["sha"])

    async def put_content(
        self, path: str, message: str, content: str, sha: str, branch: str
    ) -> dict[str, Any]:
        """Commit new text content for ``path`` on ``branch``.

        Raises:
            CommitError: GitHub rejected the write (stale sha, auth, ...).
        """
        body = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "sha": sha,
            "branch": branch or DEFAULT_BRANCH,
        }
        response = await self._request(
            "PUT", self.contents_url(path), json=body, error_cls=CommitError
        )
        logger.info(f"Committed {path} to {self.owner}/{self.repo}@{body['branch']}")
        return response.json()
