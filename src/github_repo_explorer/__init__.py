"""GitHub Repository Explorer - Browse, preview and edit a GitHub repository from the browser."""

import asyncio
import logging
import webbrowser
from pathlib import Path
from threading import Timer

import click
from click_default_group import DefaultGroup
import uvicorn

from .config import Config, load_config, require_github
from .errors import ConfigError, FetchError

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def _load(config_file: Path | None, route: str | None) -> Config:
    """Load config files and environment, then apply the --route override."""
    config = load_config([config_file] if config_file is not None else None)
    if route:
        config.github.route = route
    return config


@click.group(cls=DefaultGroup, default="serve", default_if_no_args=True)
@click.version_option(__version__, "-v", "--version")
def main() -> None:
    """GitHub Repository Explorer - Browse and edit a repository in the browser.

    When run without a subcommand, starts the explorer server. The repository
    comes from GITHUB_ROUTE ("owner/repo[/initial/path]") and the credential
    from GITHUB_USER_TOKEN, or from a config file.
    """
    pass


@main.command()
@click.option(
    "--route",
    "-r",
    type=str,
    default=None,
    help="Repository route owner/repo[/path] (overrides GITHUB_ROUTE)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to run the server on (default: 8766)",
)
@click.option(
    "--host",
    type=str,
    default=None,
    help="Host to bind to (default: 127.0.0.1)",
)
@click.option(
    "--no-open",
    is_flag=True,
    help="Don't open browser automatically",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug logging",
)
@click.option(
    "--max-sessions",
    type=int,
    default=None,
    help="Maximum number of browser sessions to keep (default: 50)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read settings from this TOML file instead of the default locations",
)
def serve(
    route: str | None,
    port: int | None,
    host: str | None,
    no_open: bool,
    debug: bool,
    max_sessions: int | None,
    config_file: Path | None,
) -> None:
    """Start the explorer server.

    Serves the repository tree and file previews, and commits edits back
    to the repository's default branch.
    """
    config = _load(config_file, route)
    settings = config.serve
    port = port if port is not None else settings.port
    host = host if host is not None else settings.host
    no_open = no_open or settings.no_open
    debug = debug or settings.debug
    max_sessions = max_sessions if max_sessions is not None else settings.max_sessions

    # Configure logging
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        _, repo_route = require_github(config)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    from . import server, views

    views.MAX_SESSIONS = max_sessions
    server.configure_from_config(config)
    click.echo(f"Repository: {repo_route.full_name}")
    if repo_route.initial_path:
        click.echo(f"Initial path: {repo_route.initial_path}")

    # Open browser after a short delay to let server start
    url = f"http://{host}:{port}"
    if not no_open:

        def open_browser():
            click.echo(f"Opening {url} in browser...")
            webbrowser.open(url)

        Timer(1.0, open_browser).start()
    else:
        click.echo(f"Server running at {url}")

    # Run server
    uvicorn.run(
        server.app,
        host=host,
        port=port,
        log_level="debug" if debug else "warning",
    )


@main.command("tree")
@click.option(
    "--route",
    "-r",
    type=str,
    default=None,
    help="Repository route owner/repo[/path] (overrides GITHUB_ROUTE)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read settings from this TOML file instead of the default locations",
)
def print_tree(route: str | None, config_file: Path | None) -> None:
    """Print the repository's file tree, fully expanded."""
    from .gateway import GitHubGateway
    from .navigation import TreeNavigator

    config = _load(config_file, route)
    try:
        token, repo_route = require_github(config)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    gateway = GitHubGateway(
        owner=repo_route.owner,
        repo=repo_route.repo,
        token=token,
        api_url=config.github.api_url,
        timeout=config.github.timeout,
    )
    try:
        snapshot = asyncio.run(gateway.bootstrap(repo_route.initial_path))
    except FetchError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1)

    click.echo(f"{snapshot.full_name} ({snapshot.default_branch})")
    navigator = TreeNavigator(snapshot.roots, snapshot.initial_path)
    for row in navigator.rows(expand_all=True):
        click.echo(f"{'  ' * row.depth}{row.label}")
    if snapshot.truncated:
        click.echo("(listing truncated by GitHub)", err=True)


if __name__ == "__main__":
    main()
