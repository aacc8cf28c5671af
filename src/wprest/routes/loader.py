"""Load WordPress route dictionaries from a URL, local file, or stdin.

This module handles all I/O for fetching raw route documents and turning them
into validated :class:`~wprest.models.RouteDefinition` mappings. It accepts
JSON and YAML with automatic format detection, and either of two shapes:

* a bare routes mapping, ``{"/wp/v2/posts": {...}, ...}``;
* a full API root response (what ``GET /wp-json/`` returns), whose routes sit
  under a ``routes`` key.

The two public functions are:

* :func:`load_routes` -- Load, parse and validate routes from any source.
* :func:`parse_routes` -- Validate an already-decoded document.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from wprest.exceptions import RouteParseError
from wprest.models import RouteDefinition

logger = logging.getLogger(__name__)


def load_routes(source: str) -> dict[str, RouteDefinition]:
    """Load a routes dictionary from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        Route pattern strings mapped to their definitions.

    Raises:
        RouteParseError: If the source cannot be loaded, parsed or validated.
    """
    if source == "-":
        raw = _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        raw = _load_from_url(source)
    else:
        raw = _load_from_file(source)
    return parse_routes(raw)


def parse_routes(document: dict[str, Any]) -> dict[str, RouteDefinition]:
    """Validate a decoded routes document.

    Args:
        document: Either a routes mapping or an API root response carrying
            one under ``routes``.

    Returns:
        Route pattern strings mapped to their definitions.

    Raises:
        RouteParseError: If the document is not a mapping of route objects.
    """
    # Route keys always start with "/", so a top-level "routes" key marks a root document.
    routes = document["routes"] if "routes" in document else document
    if not isinstance(routes, dict):
        raise RouteParseError(
            f"Routes must be a JSON/YAML object (got {type(routes).__name__})"
        )

    parsed: dict[str, RouteDefinition] = {}
    for pattern, definition in routes.items():
        if isinstance(definition, RouteDefinition):
            parsed[pattern] = definition
            continue
        try:
            parsed[pattern] = RouteDefinition.model_validate(definition)
        except ValidationError as exc:
            raise RouteParseError(f"Invalid route definition for {pattern}: {exc}") from exc

    logger.debug("Parsed %d route definitions", len(parsed))
    return parsed


def _load_from_stdin() -> dict[str, Any]:
    """Read a routes document from stdin.

    Raises:
        RouteParseError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise RouteParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise RouteParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a routes document (usually an API root) from URL.

    Raises:
        RouteParseError: If the URL cannot be fetched or content cannot be parsed.
    """
    try:
        response = httpx.get(
            url,
            timeout=30.0,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise RouteParseError(
            f"HTTP {exc.response.status_code} fetching routes from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise RouteParseError(f"Failed to fetch routes from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a routes document from a local ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        RouteParseError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise RouteParseError(f"Routes file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RouteParseError(f"Failed to read routes file {path}: {exc}") from exc

    if not content.strip():
        raise RouteParseError(f"Routes file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON, falling back to YAML.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Raises:
        RouteParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise RouteParseError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        return _require_mapping(result)

    msg = "Failed to parse routes as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise RouteParseError(msg)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise RouteParseError(f"Routes must be a JSON/YAML object (got {kind})")
    return result
