"""Shared fixtures: an in-memory GitHub served through httpx.MockTransport."""

import base64
import json

import httpx
import pytest

from github_repo_explorer import views
from github_repo_explorer.gateway import GitHubGateway

OWNER = "octo"
REPO = "demo"
TREE_SHA = "tree-sha-1"

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
BINARY_BYTES = b"\xff\xfe\x00\x81\x92"


def tree_items() -> list[dict]:
    """A recursive tree listing as GitHub returns it (plus one malformed item)."""
    return [
        {"path": "README.md", "mode": "100644", "type": "blob", "sha": "b1", "size": 24},
        {"path": "docs", "mode": "040000", "type": "tree", "sha": "t1"},
        {"path": "docs/guide.md", "mode": "100644", "type": "blob", "sha": "b2", "size": 30},
        {"path": "docs/img", "mode": "040000", "type": "tree", "sha": "t2"},
        {"path": "docs/img/logo.png", "mode": "100644", "type": "blob", "sha": "b3", "size": 16},
        {"path": "src", "mode": "040000", "type": "tree", "sha": "t3"},
        {"path": "src/app.py", "mode": "100644", "type": "blob", "sha": "b4", "size": 12},
        {"path": "data.bin", "mode": "100644", "type": "blob", "sha": "b5", "size": 5},
        {"path": "broken", "type": "blob", "sha": "b6"},
    ]


class FakeGitHub:
    """Just enough of the GitHub REST API for the explorer."""

    def __init__(self):
        self.default_branch = "main"
        self.files: dict[str, bytes] = {
            "README.md": b"# Demo\n\nHello *world*.\n",
            "docs/guide.md": b"Guide\n=====\n\nRead the docs.\n",
            "docs/img/logo.png": PNG_BYTES,
            "src/app.py": b"print('hi')\n",
            "data.bin": BINARY_BYTES,
        }
        self.shas: dict[str, str] = {path: f"sha-{path}-1" for path in self.files}
        self.items = tree_items()
        self.failures: dict[str, tuple[int, str]] = {}  # url path -> (status, body)
        self.requests: list[httpx.Request] = []
        self.commits: list[dict] = []

    @property
    def repo_prefix(self) -> str:
        return f"/repos/{OWNER}/{REPO}"

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def fail(self, path: str, status: int, body: str) -> None:
        """Make requests to ``path`` (relative to the repo URL) fail."""
        self.failures[self.repo_prefix + path] = (status, body)

    def update_file(self, path: str, data: bytes) -> None:
        self.files[path] = data
        revision = int(self.shas[path].rsplit("-", 1)[1]) + 1
        self.shas[path] = f"sha-{path}-{revision}"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.failures:
            status, body = self.failures[path]
            return httpx.Response(status, text=body)

        if path == self.repo_prefix:
            return httpx.Response(200, json={"full_name": f"{OWNER}/{REPO}", "default_branch": self.default_branch})

        if path == f"{self.repo_prefix}/branches/{self.default_branch}":
            return httpx.Response(
                200, json={"name": self.default_branch, "commit": {"commit": {"tree": {"sha": TREE_SHA}}}}
            )

        if path == f"{self.repo_prefix}/git/trees/{TREE_SHA}":
            return httpx.Response(200, json={"sha": TREE_SHA, "tree": self.items, "truncated": False})

        contents_prefix = f"{self.repo_prefix}/contents/"
        if path.startswith(contents_prefix):
            file_path = path[len(contents_prefix):]
            if request.method == "PUT":
                return self._put(file_path, json.loads(request.content))
            if file_path not in self.files:
                return httpx.Response(404, json={"message": "Not Found"})
            data = self.files[file_path]
            if "raw" in request.headers.get("accept", ""):
                return httpx.Response(
                    200, content=data, headers={"content-type": "application/vnd.github.v3.raw"}
                )
            return httpx.Response(
                200,
                json={
                    "path": file_path,
                    "sha": self.shas[file_path],
                    "encoding": "base64",
                    "content": base64.b64encode(data).decode("ascii"),
                },
            )

        return httpx.Response(404, json={"message": "Not Found"})

    def _put(self, file_path: str, body: dict) -> httpx.Response:
        if file_path not in self.files:
            return httpx.Response(404, json={"message": "Not Found"})
        if body.get("sha") != self.shas[file_path]:
            return httpx.Response(409, json={"message": f"{file_path} does not match {body.get('sha')}"})
        self.commits.append(body)
        self.update_file(file_path, base64.b64decode(body["content"]))
        return httpx.Response(
            200,
            json={
                "content": {"path": file_path, "sha": self.shas[file_path]},
                "commit": {"sha": f"commit-{len(self.commits)}", "message": body["message"]},
            },
        )


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def gateway(fake_github):
    return GitHubGateway(OWNER, REPO, "test-token", transport=fake_github.transport())


@pytest.fixture(autouse=True)
def reset_view_state():
    """Reset repository and view state before and after each test."""
    views.reset()
    yield
    views.reset()


@pytest.fixture
def tree_listing():
    return tree_items()
