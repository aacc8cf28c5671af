"""The chainable request builder shared by every generated endpoint.

:class:`WPRequest` owns everything about a request except which path setters
and mixins it has:

* **Path slots** -- ``set_path_part(level, value)`` fills one level of the
  path; a slot can be set only once.
* **Path validation** -- before rendering, every slot up to the deepest one
  set must be present and accepted by at least one of the level's nodes.
* **Query parameters** -- ``param()`` plus shorthand helpers (``page``,
  ``per_page``, ``search``...), rendered with bracketed array keys and
  sorted pairs so that equal requests produce equal URLs.
* **Method whitelist** -- each HTTP verb is checked against the allowed
  methods before the transport is called.

Generated builders (:class:`~wprest.generator.endpoint_factory.EndpointRequest`)
add path setters and mixins on top of this class.

Example::

    request = WPRequest(ClientOptions(endpoint="https://example.com/wp-json/"))
    request.namespace("wp/v2").set_path_part(0, "posts").per_page(5)
    str(request)   # 'https://example.com/wp-json/wp/v2/posts?per_page=5'
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional, Union
from urllib.parse import quote

from wprest.exceptions import (
    IncompletePathError,
    InvalidPathError,
    InvalidUsageError,
    UnsupportedMethodError,
)
from wprest.models import ClientOptions

if TYPE_CHECKING:
    from wprest.client.transport import Transport
    from wprest.generator.route_tree import LevelNode

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()
"""Marker for "no value passed" so that ``None`` and ``0`` stay valid values."""

DEFAULT_SUPPORTED_METHODS: tuple[str, ...] = ("head", "get", "put", "post", "delete")


class WPRequest:
    """A chainable, validating builder for one WordPress REST API request.

    Args:
        options: Endpoint URL, credentials and headers. A copy is taken so
            that per-request changes (``auth()``, ``set_headers()``) stay local.
        transport: The object that actually sends requests; see
            :class:`~wprest.client.transport.Transport`.
    """

    def __init__(
        self,
        options: Union[ClientOptions, Mapping[str, Any]],
        transport: Optional[Transport] = None,
    ) -> None:
        if isinstance(options, ClientOptions):
            self._options = options.model_copy(deep=True)
        else:
            self._options = ClientOptions.model_validate(dict(options))
        self.transport = transport
        self._namespace: str = ""
        self._path: dict[int, Any] = {}
        self._levels: dict[int, list[LevelNode]] = {}
        self._params: dict[str, Any] = {}
        self._filters: dict[str, Any] = {}
        self._taxonomy_filters: dict[str, list[Any]] = {}
        self._supported_methods: tuple[str, ...] = DEFAULT_SUPPORTED_METHODS
        self._attachment: Any = None
        self._attachment_name: Optional[str] = None

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def supported_methods(self) -> tuple[str, ...]:
        return self._supported_methods

    @property
    def attachment(self) -> Optional[tuple[Any, Optional[str]]]:
        """The ``(file, name)`` pair set by :meth:`file`, or ``None``."""
        if self._attachment is None:
            return None
        return self._attachment, self._attachment_name

    # ------------------------------------------------------------------ #
    # Path
    # ------------------------------------------------------------------ #

    def set_path_part(self, level: int, value: Any) -> WPRequest:
        """Store *value* in the path slot at *level*.

        Raises:
            InvalidUsageError: If the slot already holds a value.
        """
        if level in self._path:
            raise InvalidUsageError(f"Cannot overwrite value {self._path[level]}")
        self._path[level] = value
        return self

    def set_supported_methods(self, methods: tuple[str, ...] | list[str]) -> WPRequest:
        self._supported_methods = tuple(methods)
        return self

    def validate_path(self) -> WPRequest:
        """Check every path slot against the level nodes of this endpoint.

        Levels without registered nodes (ad hoc requests from
        :meth:`~wprest.wpapi.WPAPI.root`) are not checked.

        Raises:
            InvalidPathError: If a slot's value matches none of its level's nodes.
            IncompletePathError: If a level below the deepest set slot is empty.
        """
        if not self._path:
            return self

        parts: list[str] = []
        complete = True
        for level in range(max(self._path) + 1):
            options = self._levels.get(level)
            if not options:
                continue
            if level in self._path:
                value = self._path[level]
                _validate_level(options, value)
                parts.append(str(value))
            else:
                parts.append(" ??? ")
                complete = False

        if not complete:
            raise IncompletePathError(
                f"Incomplete URL! Missing component: /{'/'.join(parts)}"
            )
        return self

    def namespace(self, namespace: str) -> WPRequest:
        """Set the namespace (``wp/v2``) rendered before the path."""
        self._namespace = namespace
        return self

    # ------------------------------------------------------------------ #
    # Query parameters
    # ------------------------------------------------------------------ #

    def param(self, props: Union[str, Mapping[str, Any], None], value: Any = UNSET) -> WPRequest:
        """Set one query parameter, or several from a mapping.

        List values are de-duplicated and sorted. Setting a parameter to
        ``None`` removes it from the rendered query.

        Example::

            request.param("tags", [3, 1, 3]).param({"context": "view"})
            # ...?context=view&tags[]=1&tags[]=3
        """
        if not props or (isinstance(props, str) and value is UNSET):
            return self
        if isinstance(props, str):
            props = {props: value}
        for key, item in props.items():
            if isinstance(item, (list, tuple, set)):
                item = sort_unique(item)
            self._params[key] = item
        return self

    def context(self, context: str) -> WPRequest:
        return self.param("context", context)

    def edit(self) -> WPRequest:
        """Request the ``edit`` context (raw field values, needs auth)."""
        return self.context("edit")

    def embed(self) -> WPRequest:
        """Ask the API to embed linked resources (``_embed``)."""
        return self.param("_embed", True)

    def page(self, page: int) -> WPRequest:
        return self.param("page", page)

    def per_page(self, per_page: int) -> WPRequest:
        return self.param("per_page", per_page)

    def offset(self, offset: int) -> WPRequest:
        return self.param("offset", offset)

    def order(self, order: str) -> WPRequest:
        return self.param("order", order)

    def orderby(self, orderby: str) -> WPRequest:
        return self.param("orderby", orderby)

    def search(self, term: str) -> WPRequest:
        return self.param("search", term)

    def include(self, ids: Any) -> WPRequest:
        return self.param("include", ids)

    def exclude(self, ids: Any) -> WPRequest:
        return self.param("exclude", ids)

    def slug(self, slug: str) -> WPRequest:
        return self.param("slug", slug)

    # ------------------------------------------------------------------ #
    # Credentials, headers and uploads
    # ------------------------------------------------------------------ #

    def auth(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        nonce: Optional[str] = None,
    ) -> WPRequest:
        """Send credentials with this request, including on reads."""
        if username is not None:
            self._options.username = username
        if password is not None:
            self._options.password = password
        if nonce:
            self._options.nonce = nonce
        self._options.auth = True
        return self

    def set_headers(self, headers: Union[str, Mapping[str, str]], value: Optional[str] = None) -> WPRequest:
        """Add headers to this request: ``set_headers("Accept-Language", "de")``."""
        if isinstance(headers, str):
            headers = {headers: value or ""}
        self._options.headers = {**self._options.headers, **headers}
        return self

    def file(self, file: Any, name: Optional[str] = None) -> WPRequest:
        """Attach a file (path, bytes or open binary file) for the next ``create()``."""
        self._attachment = file
        self._attachment_name = name
        return self

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    def to_url(self) -> str:
        """Validate the path and return the full request URL."""
        return self._options.endpoint + self._render_path() + self._render_query()

    def __str__(self) -> str:
        return self.to_url()

    def __repr__(self) -> str:
        path = "/".join(str(self._path[level]) for level in sorted(self._path))
        return f"<{type(self).__name__} {self._namespace}/{path}>"

    def _render_path(self) -> str:
        self.validate_path()
        parts = [self._namespace] + [self._path[level] for level in sorted(self._path)]
        return "/".join(str(part) for part in parts if part not in (None, ""))

    def _render_query(self) -> str:
        params = _populated(self._params)
        filters = {**_populated(self._filters), **_prepare_taxonomies(self._taxonomy_filters)}
        if filters:
            params["filter"] = filters

        pairs = sorted(
            f"{quote(key, safe='')}={quote(value, safe='')}"
            for key, value in _flatten(params)
        )
        if not pairs:
            return ""
        joiner = "&" if "?" in self._options.endpoint else "?"
        return joiner + "&".join(pairs)

    # ------------------------------------------------------------------ #
    # HTTP verbs
    # ------------------------------------------------------------------ #

    def get(self) -> Any:
        """GET this request and return the decoded body."""
        return self._require_transport("get").get(self)

    def headers(self) -> Any:
        """HEAD this request and return the response headers."""
        return self._require_transport("head").head(self)

    def create(self, data: Optional[Mapping[str, Any]] = None) -> Any:
        """POST *data* (and any attached file) to this request's URL."""
        return self._require_transport("post").post(self, data)

    def update(self, data: Optional[Mapping[str, Any]] = None) -> Any:
        """PUT *data* to this request's URL."""
        return self._require_transport("put").put(self, data)

    def delete(self, data: Optional[Mapping[str, Any]] = None) -> Any:
        """DELETE this request's URL, optionally with a body (``{"force": True}``)."""
        return self._require_transport("delete").delete(self, data)

    def check_method_support(self, method: str) -> None:
        """Raise :class:`UnsupportedMethodError` unless *method* is allowed."""
        if method.lower() not in self._supported_methods:
            raise UnsupportedMethodError(method.lower(), self._supported_methods)

    def _require_transport(self, method: str) -> Transport:
        self.check_method_support(method)
        if self.transport is None:
            raise InvalidUsageError("No transport configured for this request")
        logger.debug("%s %r", method.upper(), self)
        return self.transport


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def sort_unique(values: Any) -> list[Any]:
    """De-duplicate *values* keeping one of each, numbers sorted before strings."""
    unique = list(dict.fromkeys(values))
    return sorted(unique, key=lambda item: (isinstance(item, str), item))


def _validate_level(options: list[LevelNode], value: Any) -> None:
    if any(option.validate(value) for option in options):
        return
    accepted = ", ".join(option.component for option in options)
    any_of = " any of" if len(options) > 1 else ""
    raise InvalidPathError(
        f"Invalid path component: {value} does not match{any_of} {accepted}"
    )


def _populated(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None and value != ""}


def _prepare_taxonomies(taxonomy_filters: Mapping[str, list[Any]]) -> dict[str, str]:
    return {
        taxonomy: "+".join(str(term).strip().lower() for term in terms)
        for taxonomy, terms in taxonomy_filters.items()
    }


def _flatten(values: Mapping[str, Any], prefix: str = "") -> Iterator[tuple[str, str]]:
    """Yield ``(key, value)`` pairs using ``key[]`` for lists and ``key[sub]`` for maps."""
    for key, value in values.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, Mapping):
            yield from _flatten(value, name)
        elif isinstance(value, (list, tuple)):
            for item in value:
                yield f"{name}[]", _scalar(item)
        else:
            yield name, _scalar(value)


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
