"""Route tree matching.

Siblings are tried in list order and the first match wins. A matched node
with children tries its children against the same full path; when none of
them match, the node is rendered with an empty outlet. Pathless nodes
always match.

Exact nodes must consume every path segment. Non-exact nodes match any
path that starts with their segments, so ``/`` matches everything and
``/users`` matches ``/users/42`` but not ``/usersettings``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from duet.routing.descriptor import RouteNode
from duet.routing.params import convert_param
from duet.routing.route import PathSegment


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of matching a path against a route tree.

    Attributes:
        chain: Matched nodes from the outermost to the innermost. When the
            catch-all was reached it is the last element.
        params: Path parameters captured along the chain (inner wins).
    """

    chain: tuple[RouteNode, ...]
    params: dict[str, str] = field(default_factory=dict)

    @property
    def redirect(self) -> str | None:
        if self.chain and self.chain[-1].is_catch_all:
            return self.chain[-1].redirect
        return None

    @property
    def units(self) -> tuple[str, ...]:
        return tuple(node.unit for node in self.chain if node.unit is not None)

    def typed_params(self) -> dict[str, str | int | float]:
        """Path parameters converted with their segment converters, as views receive them."""
        types: dict[str, str] = {}
        for node in self.chain:
            for seg in node.segments:
                if seg.is_param and seg.param_name:
                    types[seg.param_name] = seg.param_type
        return {name: convert_param(value, types.get(name, "str")) for name, value in self.params.items()}


def split_path(path: str) -> list[str]:
    """Split a location into segments, ignoring query, fragment and slashes."""
    path = path.split("#", 1)[0].split("?", 1)[0]
    return [p for p in path.strip("/").split("/") if p]


def match_segments(
    segments: Sequence[PathSegment],
    parts: Sequence[str],
    *,
    exact: bool,
) -> dict[str, str] | None:
    """Match pattern *segments* against path *parts*.

    Returns captured parameters, or ``None`` when the pattern does not match.
    """
    params: dict[str, str] = {}
    for index, seg in enumerate(segments):
        if seg.consumes_rest:
            remaining = parts[index:]
            if not remaining:
                return None
            params[seg.param_name or "path"] = "/".join(remaining)
            return params
        if index >= len(parts):
            return None
        part = parts[index]
        if seg.is_param:
            if seg.regex is None or not seg.regex.match(part):
                return None
            params[seg.param_name or ""] = part
        elif seg.value != part:
            return None
    if exact and len(parts) != len(segments):
        return None
    return params


def _match_level(
    nodes: Sequence[RouteNode],
    parts: list[str],
) -> tuple[tuple[RouteNode, ...], dict[str, str]] | None:
    for node in nodes:
        if node.path is None:
            params: dict[str, str] | None = {}
        else:
            params = match_segments(node.segments, parts, exact=node.exact)
        if params is None:
            continue
        if node.children:
            inner = _match_level(node.children, parts)
            if inner is not None:
                chain, inner_params = inner
                return (node, *chain), {**params, **inner_params}
        return (node,), params
    return None


def match_routes(nodes: Sequence[RouteNode], path: str) -> RouteMatch | None:
    """Match *path* against a route tree.

    Returns ``None`` only for trees without a total root, which
    ``check_descriptors()`` rejects at startup.
    """
    result = _match_level(nodes, split_path(path))
    if result is None:
        return None
    chain, params = result
    return RouteMatch(chain=chain, params=params)
