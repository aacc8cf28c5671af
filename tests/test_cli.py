"""Tests for the wprest command line (wprest.app and wprest.commands)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from wprest import __version__
from wprest.app import app, main
from wprest.exceptions import DiscoveryError, RouteParseError
from wprest.wpapi import WPAPI


ENDPOINT = "https://example.com/wp-json/"


@pytest.fixture
def routes_file(tmp_path: Path, posts_routes: dict[str, Any]) -> str:
    path = tmp_path / "routes.json"
    path.write_text(json.dumps(posts_routes), encoding="utf-8")
    return str(path)


class TestRoot:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"wprest {__version__}" in result.output

    def test_help_lists_commands(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "inspect" in result.output
        assert "discover" in result.output


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


class TestInspectNamespaces:
    def test_default_routes(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--plain", "--no-color", "inspect", "namespaces"])
        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0] == "Namespace\tResources"
        assert any(line.startswith("wp/v2\t") for line in lines)
        assert any(line.startswith("oembed/1.0\t") for line in lines)

    def test_routes_file(self, cli_runner, routes_file: str) -> None:
        result = cli_runner.invoke(
            app, ["--plain", "--no-color", "inspect", "namespaces", "--routes", routes_file]
        )
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["Namespace\tResources", "wp/v2\t1"]

    def test_bad_routes_file(self, cli_runner, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("[1, 2]", encoding="utf-8")
        result = cli_runner.invoke(
            app, ["--plain", "--no-color", "inspect", "namespaces", "-r", str(bad)]
        )
        assert result.exit_code == RouteParseError.exit_code
        assert "Failed to load routes" in result.output


class TestInspectResources:
    def test_json_records(self, cli_runner, routes_file: str) -> None:
        result = cli_runner.invoke(
            app, ["--json", "inspect", "resources", "wp/v2", "--routes", routes_file]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout) == [
            {
                "Namespace": "wp/v2",
                "Resource": "posts",
                "Levels": "4",
                "Path setters": "3",
                "Mixins": "6",
            }
        ]

    def test_unknown_namespace(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--plain", "--no-color", "inspect", "resources", "nope/v1"])
        assert result.exit_code == 2
        assert "not recognized" in result.output


class TestInspectSetters:
    def test_lists_path_setters_and_mixins(self, cli_runner, routes_file: str) -> None:
        result = cli_runner.invoke(
            app, ["--plain", "--no-color", "inspect", "setters", "posts", "-r", routes_file]
        )
        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0] == "Method\tKind\tLevel\tDetail"
        assert "id\tpath\t1\tget, head, post, put, patch, delete" in lines
        assert "revisions\tpath\t2\trevisions (value sets level 3)" in lines
        assert "author\tmixin\t-\t-" in lines

    def test_other_namespace(self, cli_runner, tmp_path: Path, make_route) -> None:
        path = tmp_path / "plugin.json"
        path.write_text(
            json.dumps({"/myplugin/v1/books/(?P<id>\\d+)": make_route("myplugin/v1", ["GET"])}),
            encoding="utf-8",
        )
        result = cli_runner.invoke(
            app,
            ["--plain", "--no-color", "inspect", "setters", "books", "-n", "myplugin/v1", "-r", str(path)],
        )
        assert result.exit_code == 0
        assert "id\tpath\t1\tget, head" in result.stdout.splitlines()

    def test_unknown_resource(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--plain", "--no-color", "inspect", "setters", "nope"])
        assert result.exit_code == 2
        assert "No resource 'nope'" in result.output


class TestInspectConflicts:
    def test_lists_conflicts(self, cli_runner, routes_file: str) -> None:
        result = cli_runner.invoke(
            app, ["--plain", "--no-color", "inspect", "conflicts", "-r", routes_file]
        )
        assert result.exit_code == 0
        assert (
            "wp/v2\tposts\tid\t(?P<id>[\\d]+) (level 1)\t(?P<id>[\\d]+) (level 3)\tyes"
            in result.stdout.splitlines()
        )

    def test_no_conflicts(self, cli_runner, tmp_path: Path, make_route) -> None:
        path = tmp_path / "routes.json"
        path.write_text(json.dumps({"/wp/v2/posts": make_route("wp/v2", ["GET"])}), encoding="utf-8")
        result = cli_runner.invoke(
            app, ["--plain", "--no-color", "inspect", "conflicts", "-r", str(path)]
        )
        assert result.exit_code == 0
        assert "No setter conflicts." in result.output

    def test_verbose_shows_library_debug_logs(self, cli_runner, routes_file: str) -> None:
        result = cli_runner.invoke(
            app, ["--plain", "--no-color", "-v", "inspect", "conflicts", "-r", routes_file]
        )
        assert result.exit_code == 0
        assert "[debug] wprest.generator.handler_spec:" in result.output


# ---------------------------------------------------------------------------
# discover
# ---------------------------------------------------------------------------


class TestDiscover:
    def test_prints_api_root_and_namespaces(self, cli_runner, posts_routes: dict[str, Any]) -> None:
        client = WPAPI(ENDPOINT, routes=posts_routes, transport=MagicMock())
        with patch("wprest.wpapi.WPAPI.discover", return_value=client) as mock_discover:
            result = cli_runner.invoke(
                app, ["--plain", "--no-color", "discover", "https://example.com/"]
            )
        assert result.exit_code == 0
        assert mock_discover.call_args.args[0] == "https://example.com/"
        assert f"API root: {ENDPOINT}" in result.output
        assert "wp/v2\t1" in result.stdout.splitlines()

    def test_failure_exit_code(self, cli_runner) -> None:
        with patch(
            "wprest.wpapi.WPAPI.discover",
            side_effect=DiscoveryError("Autodiscovery failed for https://example.com/"),
        ):
            result = cli_runner.invoke(
                app, ["--plain", "--no-color", "discover", "https://example.com/"]
            )
        assert result.exit_code == DiscoveryError.exit_code
        assert "Error: Autodiscovery failed" in result.output


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


class TestMain:
    def test_wprest_error_exit_code(self, capsys) -> None:
        with patch("wprest.app._setup_signal_handlers"), patch(
            "wprest.app.app", side_effect=RouteParseError("bad routes")
        ):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == RouteParseError.exit_code
        assert "bad routes" in capsys.readouterr().err

    def test_unexpected_error_writes_crash_log(self, isolated_config: Path, capsys) -> None:
        with patch("wprest.app._setup_signal_handlers"), patch(
            "wprest.app.app", side_effect=RuntimeError("boom")
        ), patch("wprest.config.get_data_dir", return_value=isolated_config):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1
        logs = list((isolated_config / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: boom" in logs[0].read_text()
        assert "Debug log" in capsys.readouterr().err
