"""Route document handling: named groups, path splitting and loading.

Public API:

* :func:`extract_named_group` -- find a ``(?P<name>pattern)`` group in a segment.
* :func:`split_path` -- split a route string on ``/`` keeping groups whole.
* :func:`load_routes` / :func:`parse_routes` -- read and validate route documents.
* :func:`default_routes` -- the bundled WordPress core route set.
"""

from wprest.routes.defaults import DEFAULT_NAMESPACE, default_routes
from wprest.routes.loader import load_routes, parse_routes
from wprest.routes.named_group import NamedGroup, extract_named_group
from wprest.routes.split_path import split_path

__all__ = [
    "DEFAULT_NAMESPACE",
    "NamedGroup",
    "default_routes",
    "extract_named_group",
    "load_routes",
    "parse_routes",
    "split_path",
]
