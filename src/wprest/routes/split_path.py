"""Divide a route string into its hierarchical components."""

from __future__ import annotations

import re

from wprest.routes.named_group import NAMED_GROUP_PATTERN

# The named group pattern with its capture groups made non-capturing, wrapped
# in one outer group so ``re.split`` keeps each matched token.
_NON_CAPTURING = NAMED_GROUP_PATTERN.replace("([^>']+)", "(?:[^>']+)").replace(
    "([^)]*)", "(?:[^)]*)"
)
_GROUP_TOKEN_RE = re.compile(r"([^/]*" + _NON_CAPTURING + r"[^/]*)")


def split_path(path: str) -> list[str]:
    """Split *path* on ``/`` while keeping named groups intact.

    Some plugins register groups whose inner pattern itself contains a
    forward slash, so every group token (with any non-slash text glued to
    it) is pulled out before the remainder is split.

    Args:
        path: A route string such as ``"/wp/v2/posts/(?P<id>[\\d]+)"``.

    Returns:
        The non-empty components in order.

    Example::

        >>> split_path("/plugin/(?P<plugin_slug>[^/]+)/committers/?")
        ['plugin', '(?P<plugin_slug>[^/]+)', 'committers', '?']
    """
    components: list[str] = []
    for part in _GROUP_TOKEN_RE.split(path):
        if not part:
            continue
        if _GROUP_TOKEN_RE.fullmatch(part):
            components.append(part)
            continue
        components.extend(piece for piece in part.split("/") if piece)
    return components
