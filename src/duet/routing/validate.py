"""Startup validation for route descriptors and instantiated trees.

Route problems are invariant over the lifetime of a build, so they are
reported once at startup instead of surfacing per request:

- every request path must reach a node: the root sibling list must end in a
  catch-all, or in a layout matching every path (pathless, or a non-exact
  ``/``) whose own children do;
- pathless records come last among their siblings, anything after them is
  unreachable;
- at most one catch-all per tree, and it names no unit;
- the eager and lazy trees must have identical shapes and unit names.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from duet.errors import ConfigurationError, ShapeMismatchError
from duet.routing.descriptor import RouteDescriptor, RouteNode, parse_path
from duet.units.registry import Flavor


def _walk(
    descriptors: Sequence[RouteDescriptor],
    prefix: str = "routes",
) -> Iterator[tuple[str, int, Sequence[RouteDescriptor], RouteDescriptor]]:
    for index, descriptor in enumerate(descriptors):
        where = f"{prefix}[{index}]"
        yield where, index, descriptors, descriptor
        yield from _walk(descriptor.children, f"{where}.children")


def _matches_every_path(descriptor: RouteDescriptor) -> bool:
    if descriptor.path is None:
        return True
    return not descriptor.exact and not descriptor.path.strip("/")


def _is_total(siblings: Sequence[RouteDescriptor]) -> bool:
    if not siblings:
        return False
    last = siblings[-1]
    if not _matches_every_path(last):
        return False
    return not last.children or _is_total(last.children)


def describe_problems(descriptors: Sequence[RouteDescriptor]) -> list[str]:
    """Return human-readable problems with *descriptors* (empty when valid)."""
    if not descriptors:
        return ["routes: the route tree is empty"]

    problems: list[str] = []
    catch_alls: list[str] = []

    for where, index, siblings, descriptor in _walk(descriptors):
        if descriptor.path is not None:
            try:
                parse_path(descriptor.path)
            except ConfigurationError as exc:
                problems.append(f"{where}: {exc}")
        elif index != len(siblings) - 1:
            problems.append(f"{where}: pathless route must be last among its siblings")

        if descriptor.is_catch_all:
            catch_alls.append(where)
            if descriptor.unit is not None:
                problems.append(f"{where}: the catch-all redirects and cannot render {descriptor.unit!r}")
        elif descriptor.unit is None:
            problems.append(f"{where}: route {descriptor.path!r} names no view unit")

    if len(catch_alls) > 1:
        problems.append(f"routes: only one catch-all is allowed, found {', '.join(catch_alls)}")

    if not _is_total(descriptors):
        problems.append(
            "routes: some paths match no route; end the root list with catch_all() "
            "or a layout matching every path whose children end with catch_all()"
        )
    return problems


def check_descriptors(descriptors: Sequence[RouteDescriptor]) -> None:
    """Raise ``ConfigurationError`` listing every problem with *descriptors*."""
    problems = describe_problems(descriptors)
    if problems:
        raise ConfigurationError("Invalid route tree:\n  " + "\n  ".join(problems))


def _flavor_of(node: RouteNode) -> Flavor | None:
    return node.binding.flavor if node.binding is not None else None


def check_shape(eager: Sequence[RouteNode], lazy: Sequence[RouteNode]) -> None:
    """Raise ``ShapeMismatchError`` unless the two trees are structurally identical.

    Compares, position by position, patterns, exact flags, unit names,
    redirect targets and child counts, and checks each tree binds only its
    own flavor.
    """
    problems: list[str] = []

    def compare(left: Sequence[RouteNode], right: Sequence[RouteNode], prefix: str) -> None:
        if len(left) != len(right):
            problems.append(f"{prefix}: {len(left)} eager routes vs {len(right)} lazy routes")
            return
        for index, (a, b) in enumerate(zip(left, right, strict=True)):
            where = f"{prefix}[{index}]"
            if (a.path, a.exact, a.unit, a.redirect) != (b.path, b.exact, b.unit, b.redirect):
                problems.append(
                    f"{where}: eager ({a.path!r}, exact={a.exact}, {a.unit!r}) "
                    f"!= lazy ({b.path!r}, exact={b.exact}, {b.unit!r})"
                )
            if _flavor_of(a) not in (None, Flavor.EAGER):
                problems.append(f"{where}: eager tree binds a lazy unit {a.unit!r}")
            if _flavor_of(b) not in (None, Flavor.LAZY):
                problems.append(f"{where}: lazy tree binds an eager unit {b.unit!r}")
            compare(a.children, b.children, f"{where}.children")

    compare(eager, lazy, "routes")
    if problems:
        raise ShapeMismatchError("Eager and lazy route trees differ:\n  " + "\n  ".join(problems))
