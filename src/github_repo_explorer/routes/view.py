"""Stateful view routes: tree toggling, selection, editing and commits.

Each browser is tracked by the explorer_session cookie. Every route
answers with the full view state; failures are reported in that state
(``notice`` or the preview's ``error``) rather than as error statuses.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..models import CommitRequest, DraftRequest, EditorModeRequest, PathRequest
from ..views import COOKIE_NAME, ViewSession, get_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/view")


async def current_view(request: Request) -> ViewSession:
    return await get_view(request.cookies.get(COOKIE_NAME))


def view_response(view: ViewSession) -> JSONResponse:
    """Serialize the view state and (re)issue its cookie."""
    response = JSONResponse(view.to_dict())
    response.set_cookie(COOKIE_NAME, view.view_id, httponly=True, samesite="lax")
    return response


@router.get("/state")
async def get_state(request: Request) -> JSONResponse:
    view = await current_view(request)
    return view_response(view)


@router.post("/toggle")
async def toggle_node(body: PathRequest, request: Request) -> JSONResponse:
    """Expand or collapse a directory. Files are ignored."""
    view = await current_view(request)
    view.toggle(body.path)
    return view_response(view)


@router.post("/select")
async def select_node(body: PathRequest, request: Request) -> JSONResponse:
    """Select a file and load its preview. Directories are ignored."""
    view = await current_view(request)
    await view.select(body.path)
    return view_response(view)


@router.post("/edit")
async def enter_edit(request: Request) -> JSONResponse:
    view = await current_view(request)
    await view.edit()
    return view_response(view)


@router.post("/draft")
async def update_draft(body: DraftRequest, request: Request) -> JSONResponse:
    view = await current_view(request)
    view.update_draft(body.content)
    return view_response(view)


@router.post("/editor-mode")
async def toggle_editor_mode(body: EditorModeRequest, request: Request) -> JSONResponse:
    """Switch between source and rendered editing."""
    view = await current_view(request)
    view.toggle_editor_mode(body.rendered_html)
    return view_response(view)


@router.post("/commit")
async def commit(body: CommitRequest, request: Request) -> JSONResponse:
    view = await current_view(request)
    await view.commit(body.message, body.content)
    return view_response(view)


@router.post("/cancel")
async def cancel_edit(request: Request) -> JSONResponse:
    view = await current_view(request)
    view.cancel()
    return view_response(view)
