"""Tests for wprest.wpapi.WPAPI and Namespace."""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx
import pytest

from wprest.client import HttpTransport
from wprest.exceptions import (
    DiscoveryError,
    InvalidUsageError,
    NamespaceError,
    UnsupportedMethodError,
)
from wprest.generator import EndpointFactory
from wprest.models import RequestConfig
from wprest.wpapi import WPAPI, Namespace, default_endpoint_factories


ENDPOINT = "https://example.com/wp-json/"
API_LINK = '<https://example.com/wp-json/>; rel="https://api.w.org/"'


@pytest.fixture
def wp(recording_transport: Any) -> WPAPI:
    return WPAPI(ENDPOINT, transport=recording_transport)


# ---------------------------------------------------------------------------
# Construction and bootstrapping
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_trailing_slash_added(self, recording_transport: Any) -> None:
        wp = WPAPI("https://example.com/wp-json", transport=recording_transport)
        assert wp.options.endpoint == ENDPOINT

    def test_trailing_slash_not_doubled(self, wp: WPAPI) -> None:
        assert wp.options.endpoint == ENDPOINT

    def test_endpoint_must_be_string(self) -> None:
        with pytest.raises(InvalidUsageError, match="endpoint URL string"):
            WPAPI(None)  # type: ignore[arg-type]

    def test_credentials_enable_auth(self, recording_transport: Any) -> None:
        wp = WPAPI(ENDPOINT, username="admin", password="pw", transport=recording_transport)
        assert wp.options.auth is True
        assert wp.options.username == "admin"
        assert wp.posts().options.password == "pw"

    def test_no_credentials_no_auth(self, wp: WPAPI) -> None:
        assert wp.options.auth is False

    def test_default_transport(self) -> None:
        wp = WPAPI(ENDPOINT, request=RequestConfig(timeout=5))
        assert isinstance(wp.transport, HttpTransport)

    def test_headers(self, recording_transport: Any) -> None:
        wp = WPAPI(ENDPOINT, headers={"X-Site": "a"}, transport=recording_transport)
        assert wp.posts().options.headers == {"X-Site": "a"}

    def test_site(self, posts_routes: dict[str, Any], recording_transport: Any) -> None:
        wp = WPAPI.site(ENDPOINT, routes=posts_routes, transport=recording_transport)
        assert wp.namespaces == ["wp/v2"]

    def test_repr(self, wp: WPAPI) -> None:
        assert repr(wp) == f"<WPAPI {ENDPOINT}>"


class TestBootstrap:
    def test_default_routes(self, wp: WPAPI) -> None:
        assert {"wp/v2", "oembed/1.0"} <= set(wp.namespaces)
        assert str(wp.posts().id(7)) == ENDPOINT + "wp/v2/posts/7"

    def test_default_factories_compiled_once(self) -> None:
        assert default_endpoint_factories() is default_endpoint_factories()

    def test_custom_routes_replace_defaults(self, posts_routes: dict[str, Any], recording_transport: Any) -> None:
        wp = WPAPI(ENDPOINT, routes=posts_routes, transport=recording_transport)
        assert wp.namespace("wp/v2").resources == ["posts"]
        with pytest.raises(AttributeError):
            wp.users

    def test_api_root_document_accepted(self, posts_routes: dict[str, Any], recording_transport: Any) -> None:
        wp = WPAPI(ENDPOINT, routes={"routes": posts_routes}, transport=recording_transport)
        assert "posts" in wp.namespace("wp/v2")

    def test_bootstrap_augments_existing(self, make_route, wp: WPAPI) -> None:
        wp.bootstrap({"/myplugin/v1/books": make_route("myplugin/v1", ["GET"])})
        assert "myplugin/v1" in wp.namespaces
        assert "wp/v2" in wp.namespaces
        assert str(wp.namespace("myplugin/v1").books()) == ENDPOINT + "myplugin/v1/books"

    def test_bootstrap_adds_to_existing_namespace(self, make_route, wp: WPAPI) -> None:
        wp.bootstrap({"/wp/v2/books": make_route("wp/v2", ["GET"])})
        assert "books" in wp.namespace("wp/v2")
        assert "posts" in wp.namespace("wp/v2")


# ---------------------------------------------------------------------------
# Resource access
# ---------------------------------------------------------------------------


class TestResourceAccess:
    def test_namespace_lookup(self, wp: WPAPI) -> None:
        assert str(wp.namespace("wp/v2").posts().id(7)) == str(wp.posts().id(7))

    def test_unknown_namespace(self, wp: WPAPI) -> None:
        with pytest.raises(NamespaceError, match="namespace myplugin/v1 is not recognized"):
            wp.namespace("myplugin/v1")

    def test_dashed_resource_by_attribute(self, wp: WPAPI) -> None:
        request = wp.block_renderer().name("core/archives")
        assert str(request) == ENDPOINT + "wp/v2/block-renderer/core/archives"

    def test_unknown_resource(self, wp: WPAPI) -> None:
        with pytest.raises(AttributeError, match="wp/v2 resource 'nope'"):
            wp.nope

    def test_resource_named_like_builder_method(self, wp: WPAPI) -> None:
        assert str(wp.search().search("hello")) == ENDPOINT + "wp/v2/search?search=hello"

    def test_factories_bound_to_client(self, wp: WPAPI, recording_transport: Any) -> None:
        factory = wp.posts
        assert isinstance(factory, EndpointFactory)
        assert factory().transport is recording_transport

    def test_dir_lists_default_resources(self, wp: WPAPI) -> None:
        names = dir(wp)
        assert "posts" in names
        assert "block_renderer" in names
        assert "register_route" in names


class TestNamespace:
    def test_container_protocol(self, wp: WPAPI) -> None:
        namespace = wp.namespace("wp/v2")
        assert isinstance(namespace, Namespace)
        assert namespace.name == "wp/v2"
        assert "block-renderer" in namespace
        assert "posts" in list(namespace)
        assert repr(namespace).startswith("<Namespace wp/v2 (")

    def test_item_access(self, wp: WPAPI) -> None:
        namespace = wp.namespace("wp/v2")
        assert namespace["block_renderer"].resource == "block-renderer"
        with pytest.raises(KeyError):
            namespace["nope"]

    def test_missing_attribute(self, wp: WPAPI) -> None:
        with pytest.raises(AttributeError, match="has no resource 'nope'"):
            wp.namespace("wp/v2").nope

    def test_dir(self, wp: WPAPI) -> None:
        assert "block_renderer" in dir(wp.namespace("wp/v2"))


# ---------------------------------------------------------------------------
# Client-wide options
# ---------------------------------------------------------------------------


class TestClientOptions:
    def test_auth_applies_to_later_requests(self, wp: WPAPI) -> None:
        before = wp.posts()
        wp.auth("admin", "pw")
        after = wp.posts()
        assert after.options.auth is True
        assert after.options.username == "admin"
        assert before.options.auth is False

    def test_nonce(self, wp: WPAPI) -> None:
        wp.auth(nonce="abc")
        assert wp.namespace("wp/v2").pages().options.nonce == "abc"

    def test_request_auth_does_not_leak(self, wp: WPAPI) -> None:
        wp.posts().auth("admin", "pw")
        assert wp.options.username is None
        assert wp.posts().options.auth is False

    def test_set_headers(self, wp: WPAPI) -> None:
        wp.set_headers("Accept-Language", "de").set_headers({"X-Test": "1"})
        assert wp.posts().options.headers == {"Accept-Language": "de", "X-Test": "1"}


class TestAdHocRequests:
    def test_url(self, wp: WPAPI, recording_transport: Any) -> None:
        wp.auth("admin", "pw")
        request = wp.url("https://other.example/wp-json/wp/v2/posts?slug=x")
        assert request.options.username == "admin"
        request.get()
        assert recording_transport.calls == [
            ("get", "https://other.example/wp-json/wp/v2/posts?slug=x", None)
        ]

    def test_url_leaves_client_endpoint(self, wp: WPAPI) -> None:
        wp.url("https://other.example/")
        assert wp.options.endpoint == ENDPOINT

    def test_root(self, wp: WPAPI) -> None:
        assert str(wp.root("wc/v3/products").per_page(2)) == ENDPOINT + "wc/v3/products?per_page=2"

    def test_root_without_path(self, wp: WPAPI) -> None:
        assert str(wp.root()) == ENDPOINT


# ---------------------------------------------------------------------------
# register_route
# ---------------------------------------------------------------------------


class TestRegisterRoute:
    def test_registers_into_namespace(self, wp: WPAPI) -> None:
        factory = wp.register_route("myplugin/v1", "/author/(?P<id>\\d+)")
        assert str(factory().id(7)) == ENDPOINT + "myplugin/v1/author/7"
        assert "author" in wp.namespace("myplugin/v1")
        assert str(wp.namespace("myplugin/v1").author().id(7)) == ENDPOINT + "myplugin/v1/author/7"

    def test_params_use_mixins_or_plain_setters(self, wp: WPAPI) -> None:
        factory = wp.register_route(
            "myplugin/v1", "/author/(?P<id>\\d+)", params=["before", "genre", {"ignored": True}]
        )
        request = factory().id(7).before("2020-01-01").genre("sci-fi")
        assert str(request) == (
            ENDPOINT + "myplugin/v1/author/7?before=2020-01-01T00%3A00%3A00&genre=sci-fi"
        )

    def test_multi_method_mixins_applied(self, wp: WPAPI) -> None:
        factory = wp.register_route("myplugin/v1", "books", params=["categories"])
        assert {"categories", "category"} <= set(factory.capabilities)

    def test_methods_restrict_leaf(self, wp: WPAPI) -> None:
        factory = wp.register_route("myplugin/v1", "/author/(?P<id>\\d+)", methods="GET")
        request = factory().id(7)
        assert set(request.supported_methods) == {"get", "head"}
        with pytest.raises(UnsupportedMethodError):
            request.create({"name": "x"})

    def test_default_methods_allow_everything(self, wp: WPAPI) -> None:
        factory = wp.register_route("myplugin/v1", "/author/(?P<id>\\d+)")
        assert set(factory().id(7).supported_methods) == {
            "head", "get", "post", "put", "patch", "delete",
        }

    def test_custom_mixins(self, wp: WPAPI) -> None:
        shout: Callable[..., Any] = lambda request: request.param("shout", 1)
        factory = wp.register_route("myplugin/v1", "books", mixins={"shout": shout})
        assert str(factory().shout()) == ENDPOINT + "myplugin/v1/books?shout=1"

    def test_namespace_and_base_normalised(self, wp: WPAPI) -> None:
        factory = wp.register_route(" /myplugin/v1/ ", " /books")
        assert factory.namespace == "myplugin/v1"
        assert str(factory()) == ENDPOINT + "myplugin/v1/books"

    def test_route_without_resource(self, wp: WPAPI) -> None:
        with pytest.raises(InvalidUsageError, match="does not define a resource"):
            wp.register_route("myplugin/v1", "")


# ---------------------------------------------------------------------------
# discover
# ---------------------------------------------------------------------------


def _site(handler: Callable[[httpx.Request], httpx.Response]) -> HttpTransport:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpTransport(RequestConfig(max_retries=0), client=client)


class TestDiscover:
    def test_bootstraps_from_api_root(self, posts_routes: dict[str, Any]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == "https://example.com/":
                return httpx.Response(200, headers={"Link": API_LINK})
            return httpx.Response(200, json={"name": "Site", "routes": posts_routes})

        wp = WPAPI.discover("https://example.com/", transport=_site(handler))
        assert wp.options.endpoint == ENDPOINT
        assert wp.namespaces == ["wp/v2"]

    def test_head_rejected_falls_back_to_get(self, posts_routes: dict[str, Any]) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(f"{request.method} {request.url}")
            if request.method == "HEAD":
                return httpx.Response(405)
            if str(request.url) == "https://example.com/":
                return httpx.Response(200, headers={"Link": API_LINK}, text="<html>")
            return httpx.Response(200, json={"routes": posts_routes})

        WPAPI.discover("https://example.com/", transport=_site(handler))
        assert seen == [
            "HEAD https://example.com/",
            "GET https://example.com/",
            f"GET {ENDPOINT}",
        ]

    def test_no_link_header(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200)

        with pytest.raises(DiscoveryError, match="Autodiscovery failed for https://example.com/"):
            WPAPI.discover("https://example.com/", transport=_site(handler))

    def test_unreachable_site(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(DiscoveryError):
            WPAPI.discover("https://example.com/", transport=_site(handler))

    def test_root_failure_falls_back_to_default_routes(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == "https://example.com/":
                return httpx.Response(200, headers={"Link": API_LINK})
            return httpx.Response(500, json={"message": "database error"})

        with caplog.at_level(logging.WARNING, logger="wprest.wpapi"):
            wp = WPAPI.discover("https://example.com/", transport=_site(handler))
        assert wp.options.endpoint == ENDPOINT
        assert "oembed/1.0" in wp.namespaces
        assert "assuming default routes" in caplog.text

    def test_non_object_root_falls_back(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == "https://example.com/":
                return httpx.Response(200, headers={"Link": API_LINK})
            return httpx.Response(200, json=["not", "a", "root"])

        wp = WPAPI.discover("https://example.com/", transport=_site(handler))
        assert "wp/v2" in wp.namespaces
