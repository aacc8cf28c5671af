"""Path-part setters: the generated methods that fill a request's path slots.

Two kinds exist:

* :class:`DynamicPartSetter` for named-group nodes. ``.id(7)`` stores ``7`` in
  the node's slot and, when a route ends at the node, narrows the request's
  allowed methods to that route's.
* :class:`StaticPartSetter` for literal nodes. ``.revisions()`` stores the
  literal ``"revisions"``. When the node has exactly one dynamic child and a
  value is passed, ``.revisions(9)`` also stores ``9`` in the child's slot.
  This is *child promotion*; it can be switched off per build.

Setters never validate; validation happens when the path is rendered.
Setters are frozen dataclasses, so setters built from equal nodes compare
equal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Union

from wprest.request import UNSET

if TYPE_CHECKING:
    from wprest.generator.route_tree import LevelNode
    from wprest.request import WPRequest


@dataclass(frozen=True)
class DynamicPartSetter:
    """Set a named-group path part."""

    level: int
    methods: tuple[str, ...] = ()

    def __call__(self, request: WPRequest, value: Any) -> WPRequest:
        request.set_path_part(self.level, value)
        if self.methods:
            request.set_supported_methods(self.methods)
        return request


@dataclass(frozen=True)
class StaticPartSetter:
    """Set a literal path part, promoting a value to the single dynamic child."""

    level: int
    name: str
    child_level: Optional[int] = None

    def __call__(self, request: WPRequest, value: Any = UNSET) -> WPRequest:
        request.set_path_part(self.level, self.name)
        if value is not UNSET and self.child_level is not None:
            request.set_path_part(self.child_level, value)
        return request


PathPartSetter = Union[DynamicPartSetter, StaticPartSetter]


def create_path_part_setter(node: LevelNode, child_promotion: bool = True) -> PathPartSetter:
    """Return the setter for *node*.

    Args:
        node: A level node below the resource level.
        child_promotion: When ``False``, static setters ignore their value
            argument even if the node has a single dynamic child.

    Returns:
        A :class:`DynamicPartSetter` or :class:`StaticPartSetter`.
    """
    if node.dynamic:
        return DynamicPartSetter(level=node.level, methods=node.methods or ())

    child_level: Optional[int] = None
    if child_promotion:
        dynamic_children = node.dynamic_children()
        if len(dynamic_children) == 1:
            child_level = dynamic_children[0].level
    return StaticPartSetter(level=node.level, name=node.names[0], child_level=child_level)
