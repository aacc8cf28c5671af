"""Fold a WordPress routes dictionary into per-resource trees of level nodes.

Every route string belonging to one namespace is split into components
(:func:`~wprest.routes.split_path`). The first component names the
*resource*; each following component describes one level of that resource's
path. Routes that share a path position are merged into a single
:class:`LevelNode`:

* literal components merge when their text is identical;
* dynamic components (named groups) merge when their inner *pattern* is
  identical, whatever they are called. ``posts/(?P<id>[\\d]+)`` and
  ``posts/(?P<parent>[\\d]+)/revisions`` therefore share the level-1 node,
  whose ``names`` become ``("id", "parent")``.

A literal never merges with a dynamic component, even when the group's
empty pattern leaves only its name to key on (``items/id`` and
``items/(?P<id>)`` stay siblings).

The fold is pure: each step returns new nodes and shares untouched
sub-trees, so building from the same dictionary twice yields equal trees.

Example::

    tree = build_route_tree({
        "/wp/v2/posts": {"namespace": "wp/v2", "methods": ["GET"]},
        "/wp/v2/posts/(?P<id>[\\d]+)": {"namespace": "wp/v2", "methods": ["GET"]},
    })
    posts = tree["wp/v2"]["posts"]
    posts.root.children[MergeKey.group("[\\d]+")].names   # ("id",)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Any, Iterable, Iterator, Mapping, NamedTuple, Optional

from wprest.exceptions import RouteParseError
from wprest.models import RouteDefinition
from wprest.routes.loader import parse_routes
from wprest.routes.named_group import extract_named_group
from wprest.routes.split_path import split_path

logger = logging.getLogger(__name__)

_OPTIONAL_TRAILING_SLASH = re.compile(r"(?:^|/)\?$")


class MergeKey(NamedTuple):
    """Key of a child node. Literal and dynamic components never share a key."""

    dynamic: bool
    text: str

    @classmethod
    def literal(cls, text: str) -> MergeKey:
        return cls(False, text)

    @classmethod
    def group(cls, pattern: str) -> MergeKey:
        return cls(True, pattern)


@dataclass(frozen=True)
class LevelNode:
    """One path position shared by one or more route strings.

    Attributes:
        component: The raw segment text as first seen, used in error messages.
        dynamic: ``True`` when the segment is a named group.
        level: Zero-based depth; level 0 is the resource itself.
        names: Every alias this position was given, in first-seen order.
        pattern: The named group's inner pattern (dynamic nodes only).
        methods: Lower-cased HTTP methods allowed when a route ends here,
            or ``None`` when no route ends at this node.
        children: Child nodes keyed by merge key, or ``None`` at leaves.
    """

    component: str
    dynamic: bool
    level: int
    names: tuple[str, ...] = ()
    pattern: Optional[str] = None
    methods: Optional[tuple[str, ...]] = None
    children: Optional[dict[MergeKey, LevelNode]] = field(default=None, hash=False)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @cached_property
    def _matcher(self) -> re.Pattern[str]:
        return re.compile(self.pattern or "", re.IGNORECASE)

    def validate(self, value: Any) -> bool:
        """Check whether *value* may occupy this node's path slot.

        Dynamic nodes match the whole value against their pattern, case
        insensitively; an empty pattern accepts anything. Literal nodes
        accept only their own text, compared case insensitively.
        """
        text = str(value)
        if not self.dynamic:
            return text.casefold() == self.component.casefold()
        if not self.pattern:
            return True
        return self._matcher.fullmatch(text) is not None

    def dynamic_children(self) -> list[LevelNode]:
        return [child for child in (self.children or {}).values() if child.dynamic]


@dataclass(frozen=True)
class ResourceTree:
    """The merged tree for one resource of one namespace.

    Attributes:
        namespace: The API namespace, e.g. ``"wp/v2"``.
        name: The resource name, e.g. ``"posts"``.
        root: The level-0 node.
        get_args: Every query argument accepted by a GET endpoint anywhere
            under this resource, mapped to its (opaque) argument spec.
    """

    namespace: str
    name: str
    root: LevelNode
    get_args: dict[str, Any] = field(default_factory=dict, hash=False)


RouteTree = dict[str, dict[str, ResourceTree]]
"""Namespace -> resource name -> :class:`ResourceTree`."""


def build_route_tree(
    routes: Mapping[str, RouteDefinition | Mapping[str, Any]],
) -> RouteTree:
    """Build per-namespace, per-resource trees from a routes dictionary.

    Routes without a namespace, routes whose key does not start with
    ``/<namespace>/``, the namespace roots themselves, and routes with
    nothing after the namespace are skipped. Routes whose first
    component is a named group have no resource to hang off and are
    skipped as well.

    Args:
        routes: Route pattern strings mapped to definitions, either as
            :class:`~wprest.models.RouteDefinition` or raw dicts.

    Returns:
        A fresh :data:`RouteTree`; nothing is shared with previous builds.

    Raises:
        RouteParseError: If a definition is malformed or a named group's
            pattern is not a valid regular expression.
    """
    tree: RouteTree = {}
    for route, definition in parse_routes(dict(routes)).items():
        tree = _add_route(tree, route, definition)
    return tree


def iter_nodes(node: LevelNode) -> Iterator[tuple[Optional[LevelNode], LevelNode]]:
    """Walk *node* depth first, yielding ``(parent, node)`` pairs."""
    stack: list[tuple[Optional[LevelNode], LevelNode]] = [(None, node)]
    while stack:
        parent, current = stack.pop()
        yield parent, current
        children = list((current.children or {}).values())
        stack.extend((current, child) for child in reversed(children))


# ------------------------------------------------------------------ #
# Fold
# ------------------------------------------------------------------ #


def _add_route(tree: RouteTree, route: str, definition: RouteDefinition) -> RouteTree:
    namespace = definition.namespace
    if not namespace or route == f"/{namespace}":
        return tree
    if not route.startswith(f"/{namespace}/"):
        logger.debug("Skipping %s: route is not under /%s/", route, namespace)
        return tree

    route_string = route.removeprefix(f"/{namespace}/")
    route_string = _OPTIONAL_TRAILING_SLASH.sub("", route_string)
    components = split_path(route_string)
    if not components:
        return tree

    resource = components[0]
    group = extract_named_group(resource)
    if group is not None and group.whole_segment:
        logger.debug("Skipping %s: route has no resource segment", route)
        return tree

    resources = tree.get(namespace, {})
    existing = resources.get(resource)
    key = MergeKey.literal(resource)
    siblings = {key: existing.root} if existing else {}
    root = _fold(siblings, components, 0, definition.methods, route)[key]

    get_args = dict(existing.get_args) if existing else {}
    for name, spec in _collect_get_args(definition):
        get_args.setdefault(name, spec)

    updated = ResourceTree(namespace=namespace, name=resource, root=root, get_args=get_args)
    return {**tree, namespace: {**resources, resource: updated}}


def _fold(
    siblings: Mapping[MergeKey, LevelNode],
    components: list[str],
    level: int,
    methods: Iterable[str],
    route: str,
) -> dict[MergeKey, LevelNode]:
    """Merge *components* into *siblings*, returning the new sibling map."""
    component, rest = components[0], components[1:]
    key, name, dynamic, pattern = _describe(component, route)

    node = siblings.get(key) or LevelNode(
        component=component, dynamic=dynamic, level=level, pattern=pattern
    )
    if name not in node.names:
        node = replace(node, names=node.names + (name,))

    if rest:
        node = replace(
            node, children=_fold(node.children or {}, rest, level + 1, methods, route)
        )
    else:
        node = replace(node, methods=merge_methods(node.methods, methods))

    return {**siblings, key: node}


def _describe(component: str, route: str) -> tuple[MergeKey, str, bool, Optional[str]]:
    """Return ``(merge_key, alias, dynamic, pattern)`` for one component."""
    group = extract_named_group(component)
    if group is None or not group.whole_segment:
        return MergeKey.literal(component), component, False, None

    if group.pattern:
        try:
            re.compile(group.pattern)
        except re.error as exc:
            raise RouteParseError(
                f"Invalid pattern {group.pattern!r} for '{group.name}' in route {route}: {exc}"
            ) from exc

    # An empty pattern cannot tell groups apart, so fall back to the name.
    return MergeKey.group(group.pattern or group.name), group.name, True, group.pattern


def merge_methods(
    existing: Optional[Iterable[str]], methods: Iterable[str]
) -> tuple[str, ...]:
    """Union *methods* into *existing*, lower-cased, pairing ``get`` with ``head``."""
    merged: list[str] = list(existing or ())
    for method in methods:
        method = method.strip().lower()
        if method and method not in merged:
            merged.append(method)
    if "get" in merged and "head" not in merged:
        merged.append("head")
    elif "head" in merged and "get" not in merged:
        merged.append("get")
    return tuple(merged)


def _collect_get_args(definition: RouteDefinition) -> Iterator[tuple[str, Any]]:
    for endpoint in definition.endpoints:
        if any(method.lower() == "get" for method in endpoint.methods):
            yield from endpoint.args.items()
