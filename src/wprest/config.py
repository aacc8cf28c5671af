"""Client configuration: precedence resolution and credential sources.

* **Precedence** -- :func:`resolve_options` merges explicit arguments,
  ``WPREST_*`` environment variables and the project file ``./wprest.json``
  into one :class:`~wprest.models.ClientOptions`.
* **Credential sources** -- :func:`resolve_credential` reads secrets given
  as ``env:VAR`` or ``file:/path`` so that passwords need not live in the
  project file.
* **Data directory** -- :func:`get_data_dir` is where the CLI writes crash
  logs (XDG compliant on Linux/BSD, ``~/.wprest/`` elsewhere).
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from wprest.exceptions import ConfigError
from wprest.models import ClientOptions, RequestConfig

_APP_NAME = "wprest"
_PROJECT_CONFIG_FILENAME = "wprest.json"

_ENV_VARS = {
    "endpoint": "WPREST_ENDPOINT",
    "username": "WPREST_USERNAME",
    "password": "WPREST_PASSWORD",
    "nonce": "WPREST_NONCE",
}
_SECRET_FIELDS = ("username", "password", "nonce")


def get_data_dir() -> Path:
    """Return the data directory, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/wprest/`` (default ``~/.local/share/wprest/``).
    On macOS/Windows: ``~/.wprest/``.
    """
    system = platform.system()
    if system == "Linux" or system.endswith("BSD"):
        base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
        path = Path(base) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./wprest.json``, or return ``None`` when there is none.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def resolve_options(
    endpoint: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    nonce: Optional[str] = None,
    **overrides: Any,
) -> ClientOptions:
    """Resolve client options with the full precedence chain.

    Precedence (high to low):
        1. Explicit arguments
        2. Environment variables (``WPREST_ENDPOINT``, ``WPREST_USERNAME``,
           ``WPREST_PASSWORD``, ``WPREST_NONCE``)
        3. Project config (``./wprest.json``)
        4. Defaults

    String credentials of the form ``env:VAR`` or ``file:/path`` are
    resolved with :func:`resolve_credential`.

    Args:
        endpoint: API root URL, e.g. ``https://example.com/wp-json``.
        username: Basic auth user name.
        password: Basic auth (application) password.
        nonce: Cookie-auth nonce sent as ``X-WP-Nonce``.
        **overrides: Any other :class:`~wprest.models.ClientOptions` field,
            e.g. ``headers`` or ``request``.

    Raises:
        ConfigError: If no endpoint can be resolved, or a value is invalid.
    """
    merged: dict[str, Any] = {}

    project = load_project_config()
    if project is not None:
        merged.update(project)

    for field, var in _ENV_VARS.items():
        value = os.environ.get(var)
        if value:
            merged[field] = value

    explicit = {"endpoint": endpoint, "username": username, "password": password, "nonce": nonce}
    merged.update({key: value for key, value in explicit.items() if value is not None})
    merged.update(overrides)

    for field in _SECRET_FIELDS:
        value = merged.get(field)
        if isinstance(value, str) and value.startswith(("env:", "file:")):
            merged[field] = resolve_credential(value)

    if not merged.get("endpoint"):
        raise ConfigError(
            "No endpoint configured. Pass one, set WPREST_ENDPOINT "
            f"or add \"endpoint\" to ./{_PROJECT_CONFIG_FILENAME}"
        )
    merged.setdefault("request", RequestConfig())

    try:
        return ClientOptions.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid client options: {exc}") from exc


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts interactively (requires a TTY)

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter credential: ")

    raise ConfigError(f"Unknown credential source format: {source}")
