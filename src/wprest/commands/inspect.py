"""Inspect commands -- examine what a routes dictionary compiles to.

Provides the ``wprest inspect`` sub-command group. Every command compiles
either the bundled default routes or the document given with ``--routes``
(a file, a URL or ``-`` for stdin) and prints a table of the result:
namespaces, resources, the methods a resource's requests offer, and the
setter-name collisions that were resolved while compiling.
"""

from __future__ import annotations

from typing import Optional

import typer

from wprest.exceptions import WPRestError
from wprest.generator import DynamicPartSetter, EndpointFactory, StaticPartSetter
from wprest.output import error, get_output, info
from wprest.routes import DEFAULT_NAMESPACE


inspect_app = typer.Typer(no_args_is_help=True)

_ROUTES_HELP = "Routes document (file, URL or '-'); the bundled default routes when omitted."


def _load_factories(source: Optional[str]) -> dict[str, dict[str, EndpointFactory]]:
    """Compile the routes from *source*, or return the default factories.

    Raises:
        typer.Exit: With the error's exit code when the routes cannot be
            loaded or compiled.
    """
    from wprest.generator import compile_routes
    from wprest.routes import load_routes
    from wprest.wpapi import default_endpoint_factories

    if source is None:
        return default_endpoint_factories()
    try:
        return compile_routes(load_routes(source))
    except WPRestError as exc:
        error(f"Failed to load routes: {exc}")
        raise typer.Exit(code=exc.exit_code) from None


def _resource_factory(
    factories: dict[str, dict[str, EndpointFactory]],
    namespace: str,
    resource: str,
) -> EndpointFactory:
    try:
        return factories[namespace][resource]
    except KeyError:
        error(f"No resource '{resource}' in namespace '{namespace}'")
        raise typer.Exit(code=2) from None


@inspect_app.command("namespaces")
def inspect_namespaces(
    routes: Optional[str] = typer.Option(None, "--routes", "-r", help=_ROUTES_HELP),
) -> None:
    """List namespaces and how many resources each one has.

    Example::

        wprest inspect namespaces
        wprest inspect namespaces --routes https://example.com/wp-json/
    """
    factories = _load_factories(routes)
    rows = [
        [namespace, str(len(resources))]
        for namespace, resources in sorted(factories.items())
    ]
    get_output().print_table(
        ["Namespace", "Resources"], rows, title=f"Namespaces ({len(rows)})"
    )


@inspect_app.command("resources")
def inspect_resources(
    namespace: Optional[str] = typer.Argument(None, help="Only list this namespace."),
    routes: Optional[str] = typer.Option(None, "--routes", "-r", help=_ROUTES_HELP),
) -> None:
    """List resources with their path depth and methods.

    Example::

        wprest inspect resources wp/v2
    """
    factories = _load_factories(routes)
    if namespace is not None and namespace not in factories:
        error(f"Namespace '{namespace}' is not recognized")
        raise typer.Exit(code=2)

    rows: list[list[str]] = []
    for ns, resources in sorted(factories.items()):
        if namespace is not None and ns != namespace:
            continue
        for name, factory in sorted(resources.items()):
            spec = factory.spec
            path_methods = sum(
                isinstance(cap, (DynamicPartSetter, StaticPartSetter))
                for cap in factory.capabilities.values()
            )
            rows.append([
                ns,
                name,
                str(max(spec.levels) + 1 if spec.levels else 0),
                str(path_methods),
                str(len(factory.capabilities) - path_methods),
            ])

    get_output().print_table(
        ["Namespace", "Resource", "Levels", "Path setters", "Mixins"],
        rows,
        title=f"Resources ({len(rows)})",
    )


@inspect_app.command("setters")
def inspect_setters(
    resource: str = typer.Argument(..., help="Resource name, e.g. posts."),
    namespace: str = typer.Option(DEFAULT_NAMESPACE, "--namespace", "-n", help="Namespace."),
    routes: Optional[str] = typer.Option(None, "--routes", "-r", help=_ROUTES_HELP),
) -> None:
    """List the generated methods of one resource's requests.

    Example::

        wprest inspect setters posts
        wprest inspect setters author --namespace myplugin/v1 --routes routes.json
    """
    factory = _resource_factory(_load_factories(routes), namespace, resource)

    rows: list[list[str]] = []
    for name, capability in sorted(factory.capabilities.items()):
        if isinstance(capability, DynamicPartSetter):
            detail = ", ".join(capability.methods) or "-"
            rows.append([name, "path", str(capability.level), detail])
        elif isinstance(capability, StaticPartSetter):
            detail = capability.name
            if capability.child_level is not None:
                detail += f" (value sets level {capability.child_level})"
            rows.append([name, "path", str(capability.level), detail])
        else:
            rows.append([name, "mixin", "-", "-"])

    get_output().print_table(
        ["Method", "Kind", "Level", "Detail"],
        rows,
        title=f"{namespace}/{resource} ({len(rows)})",
    )


@inspect_app.command("conflicts")
def inspect_conflicts(
    routes: Optional[str] = typer.Option(None, "--routes", "-r", help=_ROUTES_HELP),
) -> None:
    """List setter names claimed by more than one path segment.

    The first segment to claim a name keeps it. ``Reachable`` says whether
    the losing segment can still be set through its parent's setter.

    Example::

        wprest inspect conflicts
    """
    factories = _load_factories(routes)
    rows: list[list[str]] = []
    for _, resources in sorted(factories.items()):
        for _, factory in sorted(resources.items()):
            for conflict in factory.spec.conflicts:
                rows.append([
                    conflict.namespace,
                    conflict.resource,
                    conflict.name,
                    f"{conflict.kept.component} (level {conflict.kept.level})",
                    f"{conflict.dropped.component} (level {conflict.dropped.level})",
                    "yes" if conflict.reachable else "no",
                ])

    if not rows:
        info("No setter conflicts.")
        return

    get_output().print_table(
        ["Namespace", "Resource", "Setter", "Kept", "Dropped", "Reachable"],
        rows,
        title=f"Setter conflicts ({len(rows)})",
    )
