"""Shared test fixtures for wprest.

Provides route dictionaries, client options, a recording transport,
isolated config environments, output state management and a CLI runner.
These fixtures are discovered by pytest and available to every test module.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pytest

from wprest.models import ClientOptions
from wprest.output import reset_output


ENDPOINT = "https://example.com/wp-json/"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager keeps references to sys.stdout/sys.stderr. CliRunner
    swaps those streams during a test, so a manager created inside one test
    must not leak into the next.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Route dictionaries
# ---------------------------------------------------------------------------


def route(namespace: str, methods: list[str], get_args: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Build one route definition; *get_args* become a GET endpoint's args."""
    endpoints: list[dict[str, Any]] = [{"methods": list(methods), "args": {}}]
    if get_args is not None:
        endpoints = [{"methods": ["GET"], "args": get_args}]
    return {"namespace": namespace, "methods": list(methods), "endpoints": endpoints}


@pytest.fixture
def make_route():
    """The :func:`route` helper, for tests that build their own dictionaries."""
    return route


@pytest.fixture
def posts_routes() -> dict[str, Any]:
    """Collection, item, and revision routes of ``wp/v2/posts``."""
    return {
        "/wp/v2": route("wp/v2", ["GET"]),
        "/wp/v2/posts": route(
            "wp/v2",
            ["GET", "POST"],
            get_args={"page": {}, "categories": {}, "tags": {}, "author": {}, "before": {}},
        ),
        "/wp/v2/posts/(?P<id>[\\d]+)": route("wp/v2", ["GET", "POST", "PUT", "PATCH", "DELETE"]),
        "/wp/v2/posts/(?P<parent>[\\d]+)/revisions": route("wp/v2", ["GET"]),
        "/wp/v2/posts/(?P<parent>[\\d]+)/revisions/(?P<id>[\\d]+)": route("wp/v2", ["GET", "DELETE"]),
    }


@pytest.fixture
def options() -> ClientOptions:
    return ClientOptions(endpoint=ENDPOINT)


# ---------------------------------------------------------------------------
# Recording transport
# ---------------------------------------------------------------------------


class RecordingTransport:
    """A transport that records calls instead of sending them."""

    def __init__(self, response: Any = None) -> None:
        self.response = response
        self.calls: list[tuple[str, str, Any]] = []

    def _record(self, method: str, request: Any, data: Any = None) -> Any:
        self.calls.append((method, str(request), data))
        return self.response

    def get(self, request: Any) -> Any:
        return self._record("get", request)

    def head(self, request: Any) -> Any:
        return self._record("head", request)

    def post(self, request: Any, data: Any = None) -> Any:
        return self._record("post", request, data)

    def put(self, request: Any, data: Any = None) -> Any:
        return self._record("put", request, data)

    def delete(self, request: Any, data: Any = None) -> Any:
        return self._record("delete", request, data)


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport(response={"ok": True})


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME into tmp_path, clears every WPREST_* environment
    variable and changes the working directory to tmp_path.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["WPREST_ENDPOINT", "WPREST_USERNAME", "WPREST_PASSWORD", "WPREST_NONCE"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
