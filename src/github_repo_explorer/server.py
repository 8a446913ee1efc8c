"""FastAPI server for browsing and editing a GitHub repository."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from .config import Config, require_github
from .errors import ConfigError, FetchError, UpstreamError
from .gateway import GitHubGateway
from .rendering import render_error_page, render_index
from .routes import files_router, view_router
from .views import (
    COOKIE_NAME,
    configure,
    get_route,
    get_view,
    set_config_error,
    view_count,
)

logger = logging.getLogger(__name__)


def configure_from_config(config: Config) -> GitHubGateway | None:
    """Configure the repository from loaded settings.

    A missing or malformed credential/route is recorded instead of raised,
    so every page and API call reports it.

    Returns:
        The gateway, or None when the configuration is incomplete.
    """
    try:
        token, route = require_github(config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        set_config_error(str(e))
        return None

    gateway = GitHubGateway(
        owner=route.owner,
        repo=route.repo,
        token=token,
        api_url=config.github.api_url,
        timeout=config.github.timeout,
    )
    configure(gateway, route)
    logger.info(f"Serving {route.full_name}")
    return gateway


app = FastAPI(title="GitHub Repository Explorer")
app.include_router(files_router)
app.include_router(view_router)


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    """Pass GitHub's status and body through to the caller."""
    return JSONResponse(status_code=exc.status or 500, content={"error": exc.body})


@app.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    """Serve the explorer page, or a full-page error if the repository can't be loaded."""
    try:
        view = await get_view(request.cookies.get(COOKIE_NAME))
    except ConfigError as e:
        return HTMLResponse(content=render_error_page(str(e)), status_code=500)
    except FetchError as e:
        logger.warning(f"Failed to load repository: {e.message}")
        return HTMLResponse(content=render_error_page(e.message), status_code=502)

    route = get_route()
    title = route.full_name if route else "Explorer"
    response = HTMLResponse(content=render_index(view, title))
    response.set_cookie(COOKIE_NAME, view.view_id, httponly=True, samesite="lax")
    return response


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    route = get_route()
    return {
        "status": "ok",
        "repository": route.full_name if route else None,
        "sessions": view_count(),
    }
