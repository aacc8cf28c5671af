"""``filter[...]`` query mixins.

These map to the ``filter`` query argument some plugin endpoints still
accept. Values are stored on the request and rendered as
``filter[key]=value``; taxonomy terms are joined with ``+``.
"""

from __future__ import annotations

import calendar
from typing import Any, Mapping, Union

from wprest.exceptions import InvalidUsageError
from wprest.request import UNSET, WPRequest, sort_unique


def filter(self: WPRequest, props: Union[str, Mapping[str, Any], None], value: Any = UNSET) -> WPRequest:
    """Set one ``filter[...]`` value, or several from a mapping.

    Setting a filter to ``None`` removes it from the rendered query.
    """
    if not props or (isinstance(props, str) and value is UNSET):
        return self
    if isinstance(props, str):
        props = {props: value}
    self._filters = {**self._filters, **props}
    return self


def taxonomy(self: WPRequest, taxonomy: str, term: Any) -> WPRequest:
    """Restrict results to *term* (or a list of terms) of *taxonomy*.

    ``category`` becomes ``category_name`` for slugs and ``cat`` for IDs;
    ``post_tag`` becomes ``tag``. Terms accumulate across calls.

    Raises:
        InvalidUsageError: Unless *term* is a number, a string, or a list of
            only numbers or only strings.
    """
    terms = list(term) if isinstance(term, (list, tuple)) else [term]
    all_numbers = all(isinstance(t, int) and not isinstance(t, bool) for t in terms)
    all_strings = all(isinstance(t, str) for t in terms)
    if not terms or not (all_numbers or all_strings):
        raise InvalidUsageError(
            "term must be a number, string, or array of numbers or strings"
        )

    if taxonomy == "category":
        taxonomy = "category_name" if all_strings else "cat"
    elif taxonomy == "post_tag":
        taxonomy = "tag"

    existing = self._taxonomy_filters.get(taxonomy, [])
    self._taxonomy_filters[taxonomy] = sort_unique(existing + terms)
    return self


def year(self: WPRequest, year: int) -> WPRequest:
    return filter(self, "year", year)


def month(self: WPRequest, month: Union[int, str]) -> WPRequest:
    """Filter by month number, or by English month name (``"March"``, ``"mar"``).

    Unrecognised names are ignored.
    """
    if isinstance(month, str):
        number = _month_number(month)
        if number is None:
            return self
        month = number
    if isinstance(month, int) and not isinstance(month, bool):
        return filter(self, "monthnum", month)
    return self


def day(self: WPRequest, day: int) -> WPRequest:
    return filter(self, "day", day)


def path(self: WPRequest, path: str) -> WPRequest:
    """Look a page up by its hierarchical path (``"parent/child"``)."""
    return filter(self, "pagename", path)


def _month_number(name: str) -> int | None:
    key = name.strip().lower()
    for number in range(1, 13):
        if key in (calendar.month_name[number].lower(), calendar.month_abbr[number].lower()):
            return number
    return None
