"""Query-parameter mixins.

Each function here is attached to generated request builders as a method
(hence the ``self`` parameter) when the endpoint's GET arguments include the
corresponding query argument. See :data:`wprest.mixins.MIXINS`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any

from wprest.exceptions import InvalidUsageError
from wprest.mixins import filters
from wprest.request import UNSET, WPRequest


@dataclass(frozen=True)
class ParamSetter:
    """A mixin that sets one named query parameter: ``request.status("draft")``."""

    name: str

    def __call__(self, request: WPRequest, value: Any) -> WPRequest:
        return request.param(self.name, value)


def param_setter(name: str) -> ParamSetter:
    return ParamSetter(name)


parent = param_setter("parent")
post = param_setter("post")
password = param_setter("password")
status = param_setter("status")
sticky = param_setter("sticky")
categories = param_setter("categories")
exclude_categories = param_setter("categories_exclude")
tags = param_setter("tags")
exclude_tags = param_setter("tags_exclude")


def author(self: WPRequest, author: Any = UNSET) -> WPRequest:
    """Filter by author: a numeric ID sets ``author``, a nicename string the
    ``author_name`` filter, and ``None`` clears both.

    Raises:
        InvalidUsageError: For any other type.
    """
    if author is UNSET:
        return self
    if isinstance(author, str):
        self.param("author", None)
        return filters.filter(self, "author_name", author)
    if isinstance(author, int) and not isinstance(author, bool):
        filters.filter(self, "author_name", None)
        return self.param("author", author)
    if author is None:
        filters.filter(self, "author_name", None)
        return self.param("author", None)
    raise InvalidUsageError("author must be either a nicename string or numeric ID")


def category(self: WPRequest, category: Any) -> WPRequest:
    """Filter by category ID(s), or by slug through the deprecated ``filter`` syntax."""
    if _is_numeric(category):
        return categories(self, category)
    return filters.taxonomy(self, "category", category)


def tag(self: WPRequest, tag: Any) -> WPRequest:
    """Filter by tag ID(s), or by slug through the deprecated ``filter`` syntax."""
    if _is_numeric(tag):
        return tags(self, tag)
    return filters.taxonomy(self, "tag", tag)


def before(self: WPRequest, value: Any) -> WPRequest:
    """Only return items published before *value* (date, datetime or ISO string)."""
    return self.param("before", _iso_date(value))


def after(self: WPRequest, value: Any) -> WPRequest:
    """Only return items published after *value* (date, datetime or ISO string)."""
    return self.param("after", _iso_date(value))


def _is_numeric(value: Any) -> bool:
    if isinstance(value, (list, tuple)):
        return bool(value) and all(_is_numeric(item) for item in value)
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value.strip().isdigit()


def _iso_date(value: Any) -> str:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError as exc:
            raise InvalidUsageError(f"Invalid date: {value!r}") from exc
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time())
    if not isinstance(value, datetime):
        raise InvalidUsageError(f"Invalid date: {value!r}")

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.isoformat(timespec="seconds") + "Z"
    return value.isoformat(timespec="seconds")
