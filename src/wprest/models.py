"""Canonical Pydantic models shared across all wprest modules.

The models fall into two groups:

**Route document models** -- the shape of one entry in the ``routes``
dictionary of a WordPress REST API root response:
    :class:`HTTPMethod`, :class:`RouteEndpoint` and :class:`RouteDefinition`.

**Client configuration models** -- what every request builder carries:
    :class:`RequestConfig` and :class:`ClientOptions`.

Route models use ``extra="allow"`` so that keys the generator does not read
(``_links``, ``schema``, ``allow_batch``) survive validation and stay
available through ``model_extra``.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HTTPMethod(str, enum.Enum):
    """HTTP methods a WordPress route can declare.

    Values are lower-case, matching how allowed-method sets are stored on
    level nodes and request builders.
    """

    HEAD = "head"
    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"


ALL_METHODS: tuple[str, ...] = tuple(m.value for m in HTTPMethod)


# --- Route documents ---


class RouteEndpoint(BaseModel):
    """One handler registered on a route.

    Only argument *names* matter to the generator; the argument specs are
    kept opaque.

    Example::

        RouteEndpoint(methods=["GET"], args={"context": {"required": False}})
    """

    model_config = ConfigDict(extra="allow")

    methods: list[str] = Field(default_factory=list)
    args: dict[str, Any] = Field(default_factory=dict)

    @field_validator("args", mode="before")
    @classmethod
    def _empty_list_is_empty_map(cls, value: Any) -> Any:
        # PHP serialises an empty associative array as ``[]``.
        if isinstance(value, list) and not value:
            return {}
        return value


class RouteDefinition(BaseModel):
    """A route pattern's definition as published by the API root.

    Example::

        RouteDefinition(
            namespace="wp/v2",
            methods=["GET", "POST"],
            endpoints=[RouteEndpoint(methods=["GET"], args={"page": {}})],
        )
    """

    model_config = ConfigDict(extra="allow")

    namespace: str = ""
    methods: list[str] = Field(default_factory=list)
    endpoints: list[RouteEndpoint] = Field(default_factory=list)


# --- Client configuration ---


class RequestConfig(BaseModel):
    """HTTP settings applied to every request a transport sends."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=3, description="Max retry attempts")


class ClientOptions(BaseModel):
    """Options shared between a client and every request builder it creates.

    ``endpoint`` is the API root URL (``https://example.com/wp-json/``).
    Request builders copy these options on construction, so calling
    :meth:`~wprest.request.WPRequest.auth` on one request never leaks
    credentials into its siblings.
    """

    endpoint: str
    username: Optional[str] = None
    password: Optional[str] = None
    nonce: Optional[str] = None
    auth: bool = Field(
        default=False,
        description="Send credentials with every request, not only with writes",
    )
    headers: dict[str, str] = Field(default_factory=dict)
    request: RequestConfig = Field(default_factory=RequestConfig)
