"""Content API routes: tree listing, file preview and save.

These endpoints hold no per-browser state; they proxy to GitHub with the
server's credentials. Upstream and configuration errors are turned into
``{"error": ...}`` responses by the handlers registered in server.py.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..classifier import classify
from ..gateway import DEFAULT_BRANCH
from ..models import PreviewResponse, SaveRequest
from ..session import preview_content
from ..views import get_gateway, get_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/tree")
async def get_tree() -> dict:
    """Return the repository tree as nested entries."""
    snapshot = await get_snapshot()
    return {
        "owner": snapshot.owner,
        "repo": snapshot.repo,
        "defaultBranch": snapshot.default_branch,
        "initialPath": snapshot.initial_path,
        "truncated": snapshot.truncated,
        "tree": [entry.to_dict() for entry in snapshot.roots],
    }


@router.get("/preview", response_model_exclude_none=True)
async def preview_file(path: str = "", ref: str = DEFAULT_BRANCH, edit: bool = False) -> PreviewResponse:
    """Fetch file content for preview or editing.

    Args:
        path: Repository path of the file.
        ref: Branch, tag or commit to read from.
        edit: Fetch the JSON representation so the response carries the
              blob sha needed to commit.

    Returns:
        PreviewResponse with content (base64 for images), flags and MIME type.
    """
    if not path:
        return JSONResponse(status_code=400, content={"error": "Missing file path parameter"})

    gateway = get_gateway()
    sha = None
    if edit:
        editable = await gateway.fetch_for_edit(path, ref)
        data, content_type, sha = editable.data, None, editable.sha
    else:
        raw = await gateway.fetch_raw(path, ref)
        data, content_type = raw.data, raw.content_type

    classification = classify(path, data, content_type)
    return PreviewResponse(
        content=preview_content(data, classification),
        is_image=classification.is_image,
        is_binary=classification.is_binary,
        mime_type=classification.mime_type,
        sha=sha,
    )


@router.post("/save")
async def save_file(request: SaveRequest) -> dict:
    """Commit new content for a file, returning GitHub's response.

    Returns:
        The commit metadata from GitHub.
    """
    if not request.path or not request.message or request.content is None or not request.sha:
        return JSONResponse(status_code=400, content={"error": "Missing required parameters"})

    gateway = get_gateway()
    return await gateway.put_content(
        path=request.path,
        message=request.message,
        content=request.content,
        sha=request.sha,
        branch=request.branch or DEFAULT_BRANCH,
    )
