"""Configuration file and environment support.

Load configuration from TOML files, then the GITHUB_USER_TOKEN and
GITHUB_ROUTE environment variables. CLI arguments always take precedence
over both.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

# Python 3.11+ has tomllib in stdlib, earlier versions need tomli
try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found]

from .errors import ConfigError

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "GITHUB_USER_TOKEN"
ROUTE_ENV_VAR = "GITHUB_ROUTE"


@dataclass
class ServeConfig:
    """Configuration for the serve command."""

    port: int = 8766
    host: str = "127.0.0.1"
    no_open: bool = False
    debug: bool = False
    max_sessions: int = 50


@dataclass
class GitHubConfig:
    """Credential and repository selection."""

    token: str | None = None
    route: str | None = None
    api_url: str = "https://api.github.com"
    timeout: float = 30.0


@dataclass
class Config:
    """Top-level configuration container."""

    serve: ServeConfig = field(default_factory=ServeConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create a Config from a dictionary (e.g., parsed TOML).

        Args:
            data: Dictionary with section keys (serve, github).

        Returns:
            Config instance with values from dict, defaults for missing.
        """
        serve_data = data.get("serve", {})
        github_data = data.get("github", {})

        return cls(
            serve=ServeConfig(**{k: v for k, v in serve_data.items() if hasattr(ServeConfig, k)}),
            github=GitHubConfig(
                **{k: v for k, v in github_data.items() if hasattr(GitHubConfig, k)}
            ),
        )


@dataclass(frozen=True)
class RepoRoute:
    """Parsed ``owner/repo[/subpath]`` route."""

    owner: str
    repo: str
    initial_path: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "serve": {
        "port": 8766,
        "host": "127.0.0.1",
        "no_open": False,
        "debug": False,
        "max_sessions": 50,
    },
    "github": {
        "token": None,
        "route": None,
        "api_url": "https://api.github.com",
        "timeout": 30.0,
    },
}


def get_config_paths() -> list[Path]:
    """Get the list of config file paths to check, in priority order.

    Returns:
        List of paths: global config first, then local (higher priority).
    """
    return [
        Path.home() / ".config" / "github-repo-explorer" / "config.toml",
        Path.cwd() / "github-repo-explorer.toml",
    ]


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary (lower priority).
        override: Override dictionary (higher priority).

    Returns:
        Merged dictionary with override values taking precedence.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(
    config_paths: list[Path] | None = None, environ: Mapping[str, str] | None = None
) -> Config:
    """Load configuration from TOML files and the environment.

    Config files are merged in order (later files override earlier ones)
    on top of DEFAULT_CONFIG; the environment variables override them.

    Args:
        config_paths: List of paths to check. If None, uses get_config_paths().
        environ: Environment mapping. If None, uses os.environ.

    Returns:
        Config instance with merged values.
    """
    if config_paths is None:
        config_paths = get_config_paths()
    if environ is None:
        environ = os.environ

    # Start with defaults
    merged: dict[str, Any] = _deep_merge({}, DEFAULT_CONFIG)

    for path in config_paths:
        if not path.exists():
            continue

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            merged = _deep_merge(merged, data)
            logger.debug(f"Loaded config from {path}")
        except Exception as e:
            logger.warning(f"Failed to parse config file {path}: {e}")

    env_overrides: dict[str, Any] = {}
    if environ.get(TOKEN_ENV_VAR):
        env_overrides["token"] = environ[TOKEN_ENV_VAR]
    if environ.get(ROUTE_ENV_VAR):
        env_overrides["route"] = environ[ROUTE_ENV_VAR]
    if env_overrides:
        merged = _deep_merge(merged, {"github": env_overrides})

    return Config.from_dict(merged)


def parse_route(route: str | None) -> RepoRoute:
    """Split ``owner/repo[/subpath]`` into its parts.

    Raises:
        ConfigError: If the route has fewer than two segments.
    """
    parts = [p for p in (route or "").strip().strip("/").split("/") if p]
    if len(parts) < 2:
        raise ConfigError(
            f"{ROUTE_ENV_VAR} must be at least \"owner/repo\", got {route!r}"
        )
    initial_path = "/".join(parts[2:]) or None
    return RepoRoute(owner=parts[0], repo=parts[1], initial_path=initial_path)


def require_github(config: Config) -> tuple[str, RepoRoute]:
    """Return the token and parsed route, or fail if either is missing.

    Raises:
        ConfigError: If the token or route is not configured.
    """
    github = config.github
    if not github.token or not github.route:
        raise ConfigError(f"{TOKEN_ENV_VAR} or {ROUTE_ENV_VAR} is not set")
    return github.token, parse_route(github.route)
