"""Locate a site's REST API root from any URL on the site.

WordPress advertises its API root on every page with a ``Link`` header::

    Link: <https://example.com/wp-json/>; rel="https://api.w.org/"

:func:`get_api_root_from_url` fetches just the headers (HEAD, retrying with
GET for servers that reject HEAD), :func:`locate_api_root_header` picks the
API link out of them and :func:`get_root_response_json` reads the root
document whose ``routes`` key bootstraps a client.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from wprest.client.transport import HttpTransport
from wprest.exceptions import DiscoveryError, WPRestError
from wprest.models import ClientOptions
from wprest.request import WPRequest

logger = logging.getLogger(__name__)

API_ROOT_REL = "https://api.w.org/"


def get_api_root_from_url(url: str, transport: HttpTransport) -> httpx.Response:
    """Fetch *url* for its headers, falling back to GET if HEAD fails."""
    request = WPRequest(ClientOptions(endpoint=url), transport)
    try:
        return transport.send("HEAD", request)
    except WPRestError as exc:
        logger.debug("HEAD %s failed (%s), retrying with GET", url, exc)
        return transport.send("GET", request)


def locate_api_root_header(response: httpx.Response) -> str:
    """Return the URL of the ``rel="https://api.w.org/"`` link.

    Raises:
        DiscoveryError: If the response has no such link.
    """
    link = response.links.get(API_ROOT_REL)
    if link and link.get("url"):
        return link["url"]
    raise DiscoveryError(f'No header link found with rel="{API_ROOT_REL}"')


def get_root_response_json(api_root: str, transport: HttpTransport) -> Any:
    """GET the API root document."""
    return WPRequest(ClientOptions(endpoint=api_root), transport).get()
