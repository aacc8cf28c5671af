"""The site client: bootstraps endpoint factories and hands out requests.

A :class:`WPAPI` instance is bound to one API root URL. Bootstrapping
compiles a routes dictionary into endpoint factories grouped by namespace.
Resources of the default ``wp/v2`` namespace are also reachable as
attributes of the client itself::

    wp = WPAPI("https://example.com/wp-json")
    wp.posts().id(7).get()
    wp.namespace("wp/v2").posts().id(7).get()      # the same request
    wp.block_renderer().name("core/archives")     # "block-renderer"

Every factory is bound to the client's own :class:`~wprest.models.ClientOptions`
object, and requests copy it when created, so credentials set with
:meth:`WPAPI.auth` apply to every request created afterwards.
"""

from __future__ import annotations

import logging
import re
import string
from functools import lru_cache
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Union

from wprest.autodiscovery import (
    get_api_root_from_url,
    get_root_response_json,
    locate_api_root_header,
)
from wprest.client.transport import HttpTransport, Transport
from wprest.exceptions import DiscoveryError, InvalidUsageError, NamespaceError, WPRestError
from wprest.generator import EndpointFactory, build_route_tree, compile_routes
from wprest.generator.endpoint_factory import generate_endpoint_factories
from wprest.generator.route_tree import merge_methods
from wprest.mixins import MIXINS, param_setter
from wprest.models import ALL_METHODS, ClientOptions, RequestConfig
from wprest.request import WPRequest
from wprest.routes import DEFAULT_NAMESPACE, default_routes

logger = logging.getLogger(__name__)

_EDGE_CHARS = string.whitespace + "/"
_TRAILING_SLASH = re.compile(r"/?$")

Factories = dict[str, dict[str, EndpointFactory]]


@lru_cache(maxsize=None)
def default_endpoint_factories() -> Factories:
    """Unbound factories for the bundled default routes, compiled once."""
    return compile_routes(default_routes())


class Namespace:
    """The endpoint factories of one namespace, bound to a client.

    Resources are looked up by attribute or by key; attribute names may use
    ``_`` where the resource name has ``-``.
    """

    def __init__(self, name: str, client: WPAPI) -> None:
        self._name = name
        self._client = client
        self._factories: dict[str, EndpointFactory] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def resources(self) -> list[str]:
        return list(self._factories)

    def add(self, resource: str, factory: EndpointFactory) -> None:
        self._factories[resource] = factory

    def factory(self, resource: str) -> EndpointFactory:
        """Return the bound factory for *resource*.

        Raises:
            KeyError: If the namespace has no such resource.
        """
        if resource not in self._factories:
            resource = resource.replace("_", "-")
        factory = self._factories[resource]
        return factory.bind(self._client.options, self._client.transport)

    def __getitem__(self, resource: str) -> EndpointFactory:
        return self.factory(resource)

    def __getattr__(self, name: str) -> EndpointFactory:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self.factory(name)
        except KeyError:
            raise AttributeError(
                f"Namespace {self._name!r} has no resource {name!r}"
            ) from None

    def __contains__(self, resource: object) -> bool:
        return resource in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __dir__(self) -> list[str]:
        names = (resource.replace("-", "_") for resource in self._factories)
        return sorted(set(super().__dir__()) | set(names))

    def __repr__(self) -> str:
        return f"<Namespace {self._name} ({len(self._factories)} resources)>"


class WPAPI:
    """A WordPress REST API client bound to one API root URL.

    Args:
        endpoint: The API root, e.g. ``https://example.com/wp-json``. A
            trailing slash is added when missing.
        username: Basic auth user name.
        password: Basic auth (application) password.
        nonce: Cookie-auth nonce, sent as ``X-WP-Nonce``.
        routes: A routes dictionary (or whole API root document) to
            bootstrap from; the bundled default routes when omitted.
        transport: What sends the requests; an :class:`HttpTransport`
            configured from *request* when omitted.
        headers: Headers sent with every request.
        request: Timeout, SSL and retry settings for the default transport.

    Raises:
        InvalidUsageError: If *endpoint* is not a string.
    """

    def __init__(
        self,
        endpoint: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        nonce: Optional[str] = None,
        routes: Optional[Mapping[str, Any]] = None,
        transport: Optional[Transport] = None,
        headers: Optional[Mapping[str, str]] = None,
        request: Optional[RequestConfig] = None,
    ) -> None:
        if not isinstance(endpoint, str):
            raise InvalidUsageError("WPAPI requires an API endpoint URL string")

        self._ns: dict[str, Namespace] = {}
        self._options = ClientOptions(
            endpoint=_TRAILING_SLASH.sub("/", endpoint, count=1),
            headers=dict(headers or {}),
            request=request or RequestConfig(),
        )
        if username or password or nonce:
            self.auth(username, password, nonce)
        self._transport: Transport = transport or HttpTransport(self._options.request)
        self.bootstrap(routes)

    @classmethod
    def site(
        cls,
        endpoint: str,
        routes: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> WPAPI:
        """Shorthand for ``WPAPI(endpoint, routes=routes, ...)``."""
        return cls(endpoint, routes=routes, **kwargs)

    @classmethod
    def discover(cls, url: str, transport: Optional[HttpTransport] = None) -> WPAPI:
        """Build a client for the site that serves *url*.

        Reads the API root from the ``Link`` header of *url* and bootstraps
        from the routes the root publishes. If the root is found but cannot
        be read, the client is bound to it with the default routes.

        Raises:
            DiscoveryError: If no API root could be located.
        """
        transport = transport or HttpTransport()
        endpoint: Optional[str] = None
        try:
            endpoint = locate_api_root_header(get_api_root_from_url(url, transport))
            root = get_root_response_json(endpoint, transport)
            if not isinstance(root, dict):
                raise DiscoveryError(f"API root at {endpoint} did not return a JSON object")
            return cls(endpoint, routes=root.get("routes"), transport=transport)
        except WPRestError as exc:
            if endpoint is None:
                raise DiscoveryError(f"Autodiscovery failed for {url}: {exc}") from exc
            logger.warning(
                "Endpoint detected at %s, proceeding despite error: %s", endpoint, exc
            )
            logger.warning("Binding to %s and assuming default routes", endpoint)
            return cls(endpoint, transport=transport)

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def namespaces(self) -> list[str]:
        return list(self._ns)

    # ------------------------------------------------------------------ #
    # Bootstrapping
    # ------------------------------------------------------------------ #

    def bootstrap(self, routes: Optional[Mapping[str, Any]] = None) -> WPAPI:
        """Add endpoint factories compiled from *routes* to this client.

        Without *routes* the cached factories for the default routes are
        used. Namespaces already present are augmented, not replaced.
        """
        factories = default_endpoint_factories() if routes is None else compile_routes(routes)
        for namespace, resources in factories.items():
            target = self._ns.setdefault(namespace, Namespace(namespace, self))
            for resource, factory in resources.items():
                target.add(resource, factory)
        return self

    def namespace(self, namespace: str) -> Namespace:
        """Return the factories of *namespace*.

        Raises:
            NamespaceError: If the namespace was never bootstrapped.
        """
        if namespace not in self._ns:
            raise NamespaceError(f"Error: namespace {namespace} is not recognized")
        return self._ns[namespace]

    def register_route(
        self,
        namespace: str,
        rest_base: str,
        methods: Union[str, Iterable[str], None] = None,
        params: Optional[Iterable[Any]] = None,
        mixins: Optional[Mapping[str, Callable[..., Any]]] = None,
    ) -> EndpointFactory:
        """Create a factory for a custom route, e.g. one added by a plugin.

        The arguments mirror PHP's ``register_rest_route``::

            wp.register_route("myplugin/v1", "/author/(?P<id>\\d+)", params=["before"])
            wp.namespace("myplugin/v1").author().id(7).before("2020-01-01")

        Args:
            namespace: The route namespace, e.g. ``myplugin/v1``.
            rest_base: The route after the namespace; named groups allowed.
            methods: Allowed methods on the route's leaf (all when omitted).
                ``get`` and ``head`` always come as a pair.
            params: Query parameter names. Names with a registered mixin get
                that mixin, other strings get a plain parameter setter.
            mixins: Extra methods to add to the route's requests.

        Returns:
            The bound factory. It is also added to the client's namespace.

        Raises:
            InvalidUsageError: If *rest_base* does not name a resource.
        """
        if methods is None:
            methods = ALL_METHODS
        elif isinstance(methods, str):
            methods = [methods]
        supported = merge_methods(None, methods)

        ns = namespace.strip(_EDGE_CHARS)
        full_route = f"/{ns}/{rest_base.lstrip(_EDGE_CHARS)}"
        tree = build_route_tree({full_route: {"namespace": ns, "methods": list(supported)}})
        resources = generate_endpoint_factories(tree).get(ns)
        if not resources:
            raise InvalidUsageError(f"Route {full_route} does not define a resource")
        resource, factory = next(iter(resources.items()))

        for param in params or ():
            if not isinstance(param, str):
                continue
            if param in MIXINS:
                for name, mixin in MIXINS[param].items():
                    factory.apply_mixin(name, mixin)
            else:
                factory.apply_mixin(param, param_setter(param))

        for name, mixin in (mixins or {}).items():
            factory.apply_mixin(name, mixin)

        self._ns.setdefault(ns, Namespace(ns, self)).add(resource, factory)
        return factory.bind(self._options, self._transport)

    # ------------------------------------------------------------------ #
    # Ad hoc requests
    # ------------------------------------------------------------------ #

    def url(self, url: str) -> WPRequest:
        """A request for an arbitrary absolute URL, with this client's credentials."""
        return WPRequest(self._options.model_copy(update={"endpoint": url}), self._transport)

    def root(self, relative_path: str = "") -> WPRequest:
        """A request for *relative_path* under the API root, e.g. ``wc/v3/products``."""
        return WPRequest(self._options, self._transport).set_path_part(0, relative_path)

    # ------------------------------------------------------------------ #
    # Client-wide options
    # ------------------------------------------------------------------ #

    def auth(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        nonce: Optional[str] = None,
    ) -> WPAPI:
        """Send credentials with every request created from now on, reads included."""
        if username is not None:
            self._options.username = username
        if password is not None:
            self._options.password = password
        if nonce:
            self._options.nonce = nonce
        self._options.auth = True
        return self

    def set_headers(self, headers: Union[str, Mapping[str, str]], value: Optional[str] = None) -> WPAPI:
        """Add headers to every request created from now on."""
        if isinstance(headers, str):
            headers = {headers: value or ""}
        self._options.headers = {**self._options.headers, **headers}
        return self

    # ------------------------------------------------------------------ #
    # Default namespace shortcuts
    # ------------------------------------------------------------------ #

    def __getattr__(self, name: str) -> EndpointFactory:
        # Only reached when normal lookup fails.
        default = self.__dict__.get("_ns", {}).get(DEFAULT_NAMESPACE)
        if default is None or name.startswith("_"):
            raise AttributeError(name)
        try:
            return default.factory(name)
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} has no attribute or {DEFAULT_NAMESPACE} resource {name!r}"
            ) from None

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        if DEFAULT_NAMESPACE in self._ns:
            names |= set(dir(self._ns[DEFAULT_NAMESPACE])) - set(dir(Namespace))
        return sorted(names)

    def __repr__(self) -> str:
        return f"<WPAPI {self._options.endpoint}>"
