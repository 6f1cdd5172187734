"""Render a matched route chain with either binding flavor.

The chain renders top-down: each binding records or requests itself, then
renders the rest of the chain into its outlet. Reaching the catch-all asks
the sink for a redirect and renders nothing.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from duet.routing.descriptor import RouteNode
from duet.routing.match import RouteMatch
from duet.views import RenderProps


def render_chain(chain: Sequence[RouteNode], props: RenderProps, sink: Any) -> str:
    """Render *chain* (outermost first) and return the markup.

    *sink* is a ``RenderContext`` on the server and a mount's load scope on
    the client; both accept ``redirect_to()``.
    """
    if not chain:
        return ""
    node = chain[0]
    if node.is_catch_all:
        sink.redirect_to(node.redirect)
        return ""
    binding = node.binding
    if binding is None:
        msg = f"Route {node.path!r} has no view unit bound"
        raise RuntimeError(msg)
    rest = chain[1:]
    if not rest:
        return binding.render(props, sink)
    return binding.render(props, sink, lambda: render_chain(rest, props, sink))


def render_match(
    match: RouteMatch,
    path: str,
    headers: Mapping[str, str],
    sink: Any,
) -> str:
    props = RenderProps(path=path, params=match.typed_params(), headers=headers)
    return render_chain(match.chain, props, sink)
