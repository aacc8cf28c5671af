"""wprest -- chainable, validating request builders for the WordPress REST API.

The API root of a WordPress site publishes every route it serves as a
regular-expression pattern. This package compiles those patterns into one
request factory per resource, with a method per path segment::

    from wprest import WPAPI

    wp = WPAPI("https://example.com/wp-json")
    wp.posts().id(7).revisions(3).get()
    wp.posts().categories([1, 2]).per_page(5).get()

    wp = WPAPI.discover("https://example.com")   # routes from the live site

Modules:
    wpapi: The site client.
    request: The request builder every generated endpoint extends.
    generator: Routes dictionary -> trees -> handler specs -> factories.
    routes: Named-group parsing, path splitting and route loading.
    mixins: Query-parameter methods offered by GET argument name.
    client: The httpx-based transport.
    app: The ``wprest`` inspection CLI.
"""

__version__ = "0.1.0"

from wprest.request import WPRequest  # noqa: E402
from wprest.wpapi import WPAPI  # noqa: E402

__all__ = ["WPAPI", "WPRequest", "__version__"]
