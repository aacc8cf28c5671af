"""Route-grammar compiler: routes dictionary -> trees -> specs -> factories.

Public API:

* :func:`build_route_tree` -- merge route strings into per-resource trees.
* :func:`build_handler_spec` -- flatten one tree into level and setter tables.
* :func:`create_path_part_setter` -- the setter for one level node.
* :func:`generate_endpoint_factories` -- one request factory per resource.
* :func:`compile_routes` -- all of the above in one call.
"""

from __future__ import annotations

from typing import Any, Mapping

from wprest.generator.endpoint_factory import (
    EndpointFactory,
    EndpointRequest,
    create_endpoint_factory,
    generate_endpoint_factories,
)
from wprest.generator.handler_spec import (
    ResourceHandlerSpec,
    SetterConflict,
    build_handler_spec,
    camel_case,
)
from wprest.generator.path_part_setter import (
    DynamicPartSetter,
    StaticPartSetter,
    create_path_part_setter,
)
from wprest.generator.route_tree import LevelNode, MergeKey, ResourceTree, build_route_tree


def compile_routes(
    routes: Mapping[str, Any],
    child_promotion: bool = True,
) -> dict[str, dict[str, EndpointFactory]]:
    """Build unbound endpoint factories straight from a routes dictionary."""
    return generate_endpoint_factories(
        build_route_tree(routes), child_promotion=child_promotion
    )


__all__ = [
    "DynamicPartSetter",
    "EndpointFactory",
    "EndpointRequest",
    "LevelNode",
    "MergeKey",
    "ResourceHandlerSpec",
    "ResourceTree",
    "SetterConflict",
    "StaticPartSetter",
    "build_handler_spec",
    "build_route_tree",
    "camel_case",
    "compile_routes",
    "create_endpoint_factory",
    "create_path_part_setter",
    "generate_endpoint_factories",
]
