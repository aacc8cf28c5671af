"""Turn handler specs into request-builder factories.

There is one builder type, :class:`EndpointRequest`, for every resource.
What differs per resource is its *capability table*: the path setters from
the resource's :class:`~wprest.generator.handler_spec.ResourceHandlerSpec`
plus the mixins selected by its GET arguments. Attribute lookups that miss
the builder's own methods are answered from that table.

Precedence when names collide:

1. Methods defined on :class:`~wprest.request.WPRequest` always win; a
   setter shadowed by one is skipped with a warning.
2. Path setters come next.
3. Mixins fill only names nobody has claimed.
"""

from __future__ import annotations

import logging
import types
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Union

from wprest.exceptions import InvalidUsageError
from wprest.generator.handler_spec import ResourceHandlerSpec, build_handler_spec
from wprest.generator.route_tree import RouteTree
from wprest.mixins import MIXINS
from wprest.models import ClientOptions
from wprest.request import WPRequest

if TYPE_CHECKING:
    from wprest.client.transport import Transport

logger = logging.getLogger(__name__)

Capability = Callable[..., Any]


class EndpointRequest(WPRequest):
    """A :class:`~wprest.request.WPRequest` bound to one resource.

    On construction the request occupies path slot 0 with the resource name,
    records the namespace and keeps the resource's level table for path
    validation.
    """

    def __init__(
        self,
        spec: ResourceHandlerSpec,
        capabilities: Mapping[str, Capability],
        options: Union[ClientOptions, Mapping[str, Any]],
        transport: Optional[Transport] = None,
    ) -> None:
        super().__init__(options, transport)
        self._spec = spec
        self._capabilities = capabilities
        self._namespace = spec.namespace
        self._levels = spec.levels
        self._path = {0: spec.resource}

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails.
        capabilities = self.__dict__.get("_capabilities", {})
        try:
            capability = capabilities[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} has no attribute or capability {name!r}"
            ) from None
        return types.MethodType(capability, self)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._capabilities))


class EndpointFactory:
    """Creates :class:`EndpointRequest` instances for one resource.

    Factories built by :func:`generate_endpoint_factories` are unbound; a
    client calls :meth:`bind` to attach its options and transport. Bound
    copies share the capability table with the factory they came from.

    Example::

        factory = generate_endpoint_factories(tree)["wp/v2"]["posts"]
        posts = factory.bind(ClientOptions(endpoint="https://example.com/wp-json/"))
        str(posts().id(7))   # 'https://example.com/wp-json/wp/v2/posts/7'
    """

    def __init__(
        self,
        spec: ResourceHandlerSpec,
        capabilities: dict[str, Capability],
        options: Optional[ClientOptions] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        self._spec = spec
        self._capabilities = capabilities
        self._options = options
        self._transport = transport

    @property
    def spec(self) -> ResourceHandlerSpec:
        return self._spec

    @property
    def namespace(self) -> str:
        return self._spec.namespace

    @property
    def resource(self) -> str:
        return self._spec.resource

    @property
    def capabilities(self) -> Mapping[str, Capability]:
        return MappingProxyType(self._capabilities)

    def apply_mixin(self, name: str, mixin: Capability) -> bool:
        """Add *mixin* as a method of every request this factory creates.

        Existing capabilities and builder methods are never overwritten.

        Returns:
            ``True`` if the mixin was added.
        """
        if name in self._capabilities or hasattr(EndpointRequest, name):
            return False
        self._capabilities[name] = mixin
        return True

    def bind(
        self,
        options: ClientOptions,
        transport: Optional[Transport] = None,
    ) -> EndpointFactory:
        return EndpointFactory(self._spec, self._capabilities, options, transport)

    def __call__(
        self,
        options: Optional[Union[ClientOptions, Mapping[str, Any]]] = None,
        transport: Optional[Transport] = None,
    ) -> EndpointRequest:
        options = options if options is not None else self._options
        if options is None:
            raise InvalidUsageError(
                f"Factory for {self.namespace}/{self.resource} has no client options; "
                "pass options or bind it to a client"
            )
        return EndpointRequest(
            self._spec, self._capabilities, options, transport or self._transport
        )

    def __repr__(self) -> str:
        return f"<EndpointFactory {self.namespace}/{self.resource}>"


def create_endpoint_factory(
    spec: ResourceHandlerSpec,
    mixins: Mapping[str, Mapping[str, Capability]] = MIXINS,
) -> EndpointFactory:
    """Build the capability table for one resource and wrap it in a factory.

    Args:
        spec: The resource's handler spec.
        mixins: Registry of mixins keyed by GET argument name.
    """
    capabilities: dict[str, Capability] = {}
    for name, setter in spec.setters.items():
        if hasattr(EndpointRequest, name):
            logger.warning(
                "%s/%s: path setter '%s' is shadowed by a builder method and was skipped",
                spec.namespace, spec.resource, name,
            )
            continue
        capabilities[name] = setter

    for arg in spec.get_args:
        for name, mixin in mixins.get(arg, {}).items():
            if name in capabilities or hasattr(EndpointRequest, name):
                continue
            capabilities[name] = mixin

    return EndpointFactory(spec, capabilities)


def generate_endpoint_factories(
    tree: RouteTree,
    mixins: Mapping[str, Mapping[str, Capability]] = MIXINS,
    child_promotion: bool = True,
) -> dict[str, dict[str, EndpointFactory]]:
    """Create one unbound factory per (namespace, resource) in *tree*.

    Args:
        tree: Output of :func:`~wprest.generator.build_route_tree`.
        mixins: Registry of mixins keyed by GET argument name.
        child_promotion: Whether static setters promote a value to their
            single dynamic child.

    Returns:
        Namespace -> resource name -> :class:`EndpointFactory`.
    """
    return {
        namespace: {
            name: create_endpoint_factory(
                build_handler_spec(resource_tree, child_promotion=child_promotion),
                mixins,
            )
            for name, resource_tree in resources.items()
        }
        for namespace, resources in tree.items()
    }
