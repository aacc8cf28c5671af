"""HTTP transport for wprest request builders.

Classes:
    :class:`HttpTransport` -- blocking transport backed by :class:`httpx.Client`.
    :class:`PagedList` / :class:`Paging` -- collection bodies with paging links.

Example::

    from wprest.client import HttpTransport

    with HttpTransport() as transport:
        wp = WPAPI("https://example.com/wp-json", transport=transport)
"""

from wprest.client.pagination import PagedList, Paging
from wprest.client.transport import HttpTransport, Transport

__all__ = ["HttpTransport", "PagedList", "Paging", "Transport"]
