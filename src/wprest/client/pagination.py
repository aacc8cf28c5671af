"""Collection responses with paging metadata.

WordPress reports collection sizes in ``X-WP-Total`` / ``X-WP-TotalPages``
and links neighbouring pages through the ``Link`` header. Collection bodies
are returned as a :class:`PagedList`, a plain ``list`` that also carries a
:class:`Paging` whose ``next`` / ``prev`` are ready-made requests.

Example::

    page = wp.posts().per_page(10).get()
    page.paging.total_pages      # 7
    second = page.paging.next.get()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

import httpx

from wprest.request import WPRequest

if TYPE_CHECKING:
    from wprest.client.transport import Transport


@dataclass
class Paging:
    """Paging metadata of one collection response."""

    total: int
    total_pages: int
    links: dict[str, str] = field(default_factory=dict)
    next: Optional[WPRequest] = None
    prev: Optional[WPRequest] = None


class PagedList(list):
    """A collection body with a :attr:`paging` attribute."""

    def __init__(self, items: list[Any], paging: Paging) -> None:
        super().__init__(items)
        self.paging = paging


def extract_response_data(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text; ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def paginate(
    body: Any,
    response: httpx.Response,
    request: WPRequest,
    transport: Transport,
) -> Any:
    """Wrap *body* in a :class:`PagedList` when *response* carries paging headers.

    ``next`` and ``prev`` requests reuse the original request's options
    (credentials, headers) and *transport*. Their URLs keep the original
    endpoint's scheme and host, taking only path and query from the link.
    """
    total_pages = response.headers.get("x-wp-totalpages")
    if not total_pages or total_pages == "0" or not isinstance(body, list):
        return body

    links = {
        rel: link["url"]
        for rel, link in response.links.items()
        if "url" in link
    }
    paging = Paging(
        total=int(response.headers.get("x-wp-total", "0") or 0),
        total_pages=int(total_pages),
        links=links,
    )
    endpoint = request.options.endpoint
    if "next" in links:
        paging.next = _linked_request(request, endpoint, links["next"], transport)
    if "prev" in links:
        paging.prev = _linked_request(request, endpoint, links["prev"], transport)
    return PagedList(body, paging)


def _linked_request(
    request: WPRequest, endpoint: str, link: str, transport: Transport
) -> WPRequest:
    merged = httpx.URL(endpoint).copy_with(raw_path=httpx.URL(link).raw_path)
    options = request.options.model_copy(update={"endpoint": str(merged)})
    return WPRequest(options, transport=transport)
