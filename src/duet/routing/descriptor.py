"""Route descriptors and their instantiated trees.

A ``RouteDescriptor`` is the authoring format: a path pattern, an exact
flag, the name of the view unit it renders, and ordered children. A
descriptor with no pattern and no children is the catch-all; it renders
nothing and redirects instead.

``instantiate()`` turns descriptors into ``RouteNode`` trees bound to one
flavor of the registry. Both trees come from the same descriptors, so they
can only differ if the registry is missing a binding, which
``instantiate()`` reports as a ``ShapeMismatchError``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from duet.errors import ConfigurationError, ShapeMismatchError, UnknownUnitError
from duet.routing.params import converter_regex
from duet.routing.route import PathSegment
from duet.units.registry import Binding, BoundUnits, ViewUnit


def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Parse a route pattern into segments.

    Examples::

        "/"               -> ()
        "/users"          -> (PathSegment("users"),)
        "/users/{id:int}" -> (PathSegment("users"), PathSegment("{id:int}", is_param=True, ...))
        "/files/{rest:path}" -> (..., PathSegment("{rest:path}", is_param=True, param_type="path"))

    Raises ``ConfigurationError`` for ``<param>``-style segments, unknown
    converters, or a ``path`` converter that is not the last segment.
    """
    segments: list[PathSegment] = []
    parts = [p for p in path.strip("/").split("/") if p]
    for index, part in enumerate(parts):
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route pattern {path!r} uses <param> syntax; "
                f"duet expects {{param}} (e.g. /users/{{id}})."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            if ":" in inner:
                param_name, param_type = inner.split(":", 1)
            else:
                param_name = inner
                param_type = "str"
            if param_type == "path" and index != len(parts) - 1:
                msg = f"Route pattern {path!r}: a {{name:path}} segment must come last."
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                    regex=converter_regex(param_type),
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return tuple(segments)


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
    """One authored route record.

    Attributes:
        path: Pattern such as ``/users/{id:int}``. ``None`` makes the record
            pathless: a catch-all when it has no children, otherwise a layout
            that always matches.
        unit: Name of the view unit rendered for this record.
        exact: Require the whole path to match instead of a segment prefix.
        children: Nested records, matched against the same full path.
        redirect: Catch-all target. ``None`` uses the configured root.
        declared: The ``ViewUnit`` this record was authored with, if any.
    """

    path: str | None
    unit: str | None
    exact: bool = False
    children: tuple[RouteDescriptor, ...] = ()
    redirect: str | None = None
    declared: ViewUnit | None = field(default=None, compare=False, repr=False)

    @property
    def is_catch_all(self) -> bool:
        return self.path is None and not self.children


def route(
    path: str | None,
    unit: str | ViewUnit,
    *,
    exact: bool = False,
    children: Sequence[RouteDescriptor] = (),
) -> RouteDescriptor:
    """Author a route record.

    *unit* may be a unit name or a ``ViewUnit`` declaring both bindings, in
    which case the app registers it while freezing.
    """
    if isinstance(unit, ViewUnit):
        return RouteDescriptor(path, unit.name, exact, tuple(children), declared=unit)
    return RouteDescriptor(path, unit, exact, tuple(children))


def catch_all(redirect: str | None = None) -> RouteDescriptor:
    """Author the pathless fallback leaf. Must be last among its siblings."""
    return RouteDescriptor(None, None, redirect=redirect)


_RECORD_KEYS: dict[str, str] = {
    "path": "path",
    "pathPattern": "path",
    "exact": "exact",
    "exactMatch": "exact",
    "unit": "unit",
    "viewUnitName": "unit",
    "children": "children",
    "redirect": "redirect",
}


def from_records(records: Sequence[Mapping[str, Any]]) -> tuple[RouteDescriptor, ...]:
    """Build descriptors from plain records (e.g. loaded from JSON).

    Accepts ``path``/``pathPattern``, ``exact``/``exactMatch``,
    ``unit``/``viewUnitName``, ``children`` and ``redirect`` keys.
    """
    result: list[RouteDescriptor] = []
    for record in records:
        fields: dict[str, Any] = {}
        for key, value in record.items():
            try:
                fields[_RECORD_KEYS[key]] = value
            except KeyError:
                msg = f"Unknown route record key {key!r} in {dict(record)!r}"
                raise ConfigurationError(msg) from None
        result.append(
            RouteDescriptor(
                path=fields.get("path"),
                unit=fields.get("unit"),
                exact=bool(fields.get("exact", False)),
                children=from_records(fields.get("children", ())),
                redirect=fields.get("redirect"),
            )
        )
    return tuple(result)


def collect_units(descriptors: Sequence[RouteDescriptor]) -> Iterator[ViewUnit]:
    """Yield every ``ViewUnit`` declared inline, depth first, once per name."""
    seen: set[str] = set()
    stack = list(reversed(descriptors))
    while stack:
        descriptor = stack.pop()
        unit = descriptor.declared
        if unit is not None and unit.name not in seen:
            seen.add(unit.name)
            yield unit
        stack.extend(reversed(descriptor.children))


@dataclass(frozen=True, slots=True)
class RouteNode:
    """A route record bound to one flavor of view units."""

    path: str | None
    segments: tuple[PathSegment, ...]
    exact: bool
    binding: Binding | None
    children: tuple[RouteNode, ...] = ()
    redirect: str | None = None

    @property
    def unit(self) -> str | None:
        return self.binding.name if self.binding is not None else None

    @property
    def is_catch_all(self) -> bool:
        return self.path is None and not self.children


def instantiate(
    descriptors: Sequence[RouteDescriptor],
    units: BoundUnits,
    *,
    redirect_root: str = "/",
) -> tuple[RouteNode, ...]:
    """Bind descriptors to one flavor of view units.

    Raises ``ShapeMismatchError`` when a referenced unit has no binding of
    ``units.flavor``.
    """
    nodes: list[RouteNode] = []
    for descriptor in descriptors:
        binding: Binding | None = None
        if descriptor.unit is not None:
            try:
                binding = units.get(descriptor.unit)
            except UnknownUnitError as exc:
                msg = (
                    f"Route {descriptor.path or '<pathless>'!r} renders {descriptor.unit!r}, "
                    f"which has no {units.flavor.value} binding."
                )
                raise ShapeMismatchError(msg) from exc
        nodes.append(
            RouteNode(
                path=descriptor.path,
                segments=parse_path(descriptor.path) if descriptor.path is not None else (),
                exact=descriptor.exact,
                binding=binding,
                children=instantiate(descriptor.children, units, redirect_root=redirect_root),
                redirect=(descriptor.redirect or redirect_root) if descriptor.is_catch_all else None,
            )
        )
    return tuple(nodes)
