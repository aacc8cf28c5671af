"""Recognise named capture groups inside WordPress route segments.

WordPress registers dynamic path parts as PCRE named groups, written in one
of three forms::

    (?P<id>[\\d]+)
    (?<id>[\\d]+)
    (?'id'[\\d]+)

Only this convention is understood. The inner pattern runs up to the first
closing parenthesis, so patterns containing nested groups are not supported.
An empty inner pattern (``(?P<id>)``) means "accept any value".
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

NAMED_GROUP_PATTERN = r"\(\?(?:P<|<|')([^>']+)[>']([^)]*)\)"
"""Regular expression source matching one named group; captures name and inner pattern."""

NAMED_GROUP_RE = re.compile(NAMED_GROUP_PATTERN)


class NamedGroup(NamedTuple):
    """A named group found in a segment.

    Attributes:
        name: The group's name, e.g. ``"parent_id"``.
        pattern: The inner validation pattern, possibly ``""``.
        whole_segment: ``True`` when the group is the entire segment, as
            opposed to being glued to literal text (``market=(?P<m>\\w+)``).
    """

    name: str
    pattern: str
    whole_segment: bool


def extract_named_group(segment: str) -> Optional[NamedGroup]:
    """Return the first named group in *segment*, or ``None``.

    Args:
        segment: A single path segment or a full route string.

    Returns:
        A :class:`NamedGroup`, or ``None`` when no well-formed marker is present.

    Example::

        >>> extract_named_group("(?P<id>[\\d]+)")
        NamedGroup(name='id', pattern='[\\\\d]+', whole_segment=True)
        >>> extract_named_group("revisions") is None
        True
    """
    match = NAMED_GROUP_RE.search(segment)
    if match is None:
        return None
    return NamedGroup(
        name=match.group(1),
        pattern=match.group(2),
        whole_segment=match.start() == 0 and match.end() == len(segment),
    )
