"""Mixin registry keyed by GET query argument name.

When a resource's GET endpoints accept one of the argument names below,
every method in that entry is offered to the resource's request builders
(path setters with the same name take precedence).

Example::

    MIXINS["categories"]   # {"categories": ..., "category": ...}
"""

from __future__ import annotations

from typing import Callable

from wprest.mixins import filters, parameters
from wprest.mixins.parameters import ParamSetter, param_setter

Mixin = Callable[..., object]

MIXINS: dict[str, dict[str, Mixin]] = {
    "categories": {
        "categories": parameters.categories,
        "category": parameters.category,
    },
    "categories_exclude": {
        "exclude_categories": parameters.exclude_categories,
    },
    "tags": {
        "tags": parameters.tags,
        "tag": parameters.tag,
    },
    "tags_exclude": {
        "exclude_tags": parameters.exclude_tags,
    },
    "filter": {
        "filter": filters.filter,
        "taxonomy": filters.taxonomy,
        "year": filters.year,
        "month": filters.month,
        "day": filters.day,
        "path": filters.path,
    },
    "post": {
        "post": parameters.post,
        "for_post": parameters.post,
    },
}

for _name in ("after", "author", "before", "parent", "password", "status", "sticky"):
    MIXINS[_name] = {_name: getattr(parameters, _name)}

__all__ = ["MIXINS", "Mixin", "ParamSetter", "param_setter"]
