"""
Configuration loader for changelog_generator.

Settings are resolved from, lowest to highest precedence:

1. built-in defaults;
2. an optional JSON file named ``.changelog_config.json`` in the
   workspace root;
3. environment variables (``CHANGELOG_COMMIT_TYPES``,
   ``CHANGELOG_TEMPLATE_PATH``, ``CHANGELOG_PATH``, ``GITHUB_WORKSPACE``,
   ``GITHUB_REPOSITORY``, ``GITHUB_TOKEN``, ``GITHUB_API_URL``);
4. explicit overrides passed by the caller (the CLI options).

If the configuration file is malformed or a value has the wrong type, a
:class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings or logging errors in
# environments where the root logger may be closed. The CLI configures
# logging explicitly.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILE_NAME = ".changelog_config.json"

DEFAULT_COMMIT_TYPES = (
    "feat:Features,fix:Bug Fixes,perf:Performance Improvements,"
    "refactor:Refactoring,docs:Documentation"
)
DEFAULT_CHANGELOG_PATH = "CHANGELOG.md"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_REQUEST_TIMEOUT = 30.0

DEFAULT_TEMPLATE = """## {{versionName}} ({{date}})

{{.SECTION}}### $title{{.SECTION}}
{{.COMMITS}}- $commit{{.COMMITS}}
"""

# Environment variable -> configuration key
ENV_VARIABLES = {
    "CHANGELOG_COMMIT_TYPES": "commit_types",
    "CHANGELOG_TEMPLATE_PATH": "template_path",
    "CHANGELOG_PATH": "changelog_path",
    "GITHUB_REPOSITORY": "github_repository",
    "GITHUB_TOKEN": "github_token",
    "GITHUB_API_URL": "github_api_url",
}

_STRING_KEYS = ("commit_types", "template_path", "changelog_path", "github_repository", "github_api_url")


class ConfigError(Exception):
    """Raised when the configuration or the template file is missing or invalid."""

    pass


@dataclass
class ChangelogConfig:
    """Resolved configuration for one changelog run.

    Attributes
    ----------
    workspace : Path
        Directory that relative paths are resolved against.
    commit_types : str
        Commit type mapping, e.g. ``"feat:Features,fix:Bug Fixes"``.
    template_path : Optional[Path]
        Template file; ``None`` selects :data:`DEFAULT_TEMPLATE`.
    changelog_path : Path
        Changelog file that rendered sections are prepended to.
    github_repository : Optional[str]
        ``owner/name`` of the GitHub repository, for the GitHub source.
    github_token : Optional[str]
        Token sent with GitHub API requests.
    github_api_url : str
        Base URL of the GitHub REST API.
    request_timeout : float
        Timeout in seconds for GitHub API requests.
    """

    workspace: Path
    commit_types: str = DEFAULT_COMMIT_TYPES
    template_path: Optional[Path] = None
    changelog_path: Path = Path(DEFAULT_CHANGELOG_PATH)
    github_repository: Optional[str] = None
    github_token: Optional[str] = None
    github_api_url: str = DEFAULT_GITHUB_API_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    try:
        content = config_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")
    return data


def _validate(data: Mapping[str, Any]) -> None:
    for key in _STRING_KEYS:
        if key in data and data[key] is not None and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")
    timeout = data.get("request_timeout")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise ConfigError("'request_timeout' must be a number")
        if timeout <= 0:
            raise ConfigError("'request_timeout' must be positive")


def _resolve(workspace: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else workspace / path


def load_config(
    workspace: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ChangelogConfig:
    """Resolve the changelog configuration.

    Args:
        workspace: Workspace root. Defaults to ``GITHUB_WORKSPACE`` or the
                   current working directory.
        environ: Environment to read variables from. Defaults to ``os.environ``.
        overrides: Values that take precedence over every other source.
                   ``None`` values are ignored.

    Returns:
        The resolved :class:`ChangelogConfig`.

    Raises:
        ConfigError: If the configuration file is malformed or a value is invalid.
    """
    env = os.environ if environ is None else environ
    if workspace is None:
        workspace = Path(env["GITHUB_WORKSPACE"]) if env.get("GITHUB_WORKSPACE") else Path.cwd()

    data: Dict[str, Any] = {}
    config_path = workspace / CONFIG_FILE_NAME
    if config_path.exists():
        data.update(_read_config_file(config_path))
        logger.debug("Loaded changelog configuration from: %s", config_path)

    for variable, key in ENV_VARIABLES.items():
        if env.get(variable):
            data[key] = env[variable]

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    unknown = sorted(set(data) - set(_STRING_KEYS) - {"github_token", "request_timeout"})
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    _validate(data)

    config = ChangelogConfig(
        workspace=workspace,
        commit_types=DEFAULT_COMMIT_TYPES if data.get("commit_types") is None else data["commit_types"],
        template_path=_resolve(workspace, data["template_path"]) if data.get("template_path") else None,
        changelog_path=_resolve(workspace, data.get("changelog_path") or DEFAULT_CHANGELOG_PATH),
        github_repository=data.get("github_repository"),
        github_token=data.get("github_token"),
        github_api_url=data.get("github_api_url") or DEFAULT_GITHUB_API_URL,
        request_timeout=float(data.get("request_timeout") or DEFAULT_REQUEST_TIMEOUT),
    )
    logger.debug("Resolved configuration: %s", {**config.__dict__, "github_token": "***" if config.github_token else None})
    return config


def load_template(config: ChangelogConfig) -> str:
    """Return the template text configured in ``config``.

    Falls back to :data:`DEFAULT_TEMPLATE` when no template path is set.

    Raises:
        ConfigError: If the configured template file cannot be read.
    """
    if config.template_path is None:
        logger.debug("No template configured, using the built-in template")
        return DEFAULT_TEMPLATE
    try:
        return config.template_path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to read template file '%s': %s", config.template_path, exc)
        raise ConfigError(f"Cannot read template file {config.template_path}: {exc}") from exc
