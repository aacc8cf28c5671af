"""The route set of a stock WordPress install, bundled as package data.

Clients created without an explicit routes dictionary bootstrap from this
set, which covers the ``wp/v2`` and ``oembed/1.0`` namespaces.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources

from wprest.models import RouteDefinition
from wprest.routes.loader import parse_routes

DEFAULT_NAMESPACE = "wp/v2"
"""Namespace whose resources a client exposes directly as attributes."""


@lru_cache(maxsize=1)
def default_routes() -> dict[str, RouteDefinition]:
    """Return the bundled WordPress core routes, parsed once per process."""
    text = (
        resources.files("wprest.routes")
        .joinpath("data/default_routes.json")
        .read_text(encoding="utf-8")
    )
    return parse_routes(json.loads(text))
