"""Server render orchestration.

One call to ``render_for_request()`` is one complete, synchronous render of
the eager route tree:

    1. Allocate a fresh ``RenderContext``
    2. Match the request path (first match wins, catch-all last)
    3. Render the matched chain top-down; each eager unit records itself
    4. Catch-all reached or ``Redirect`` raised -> redirect, no markup
    5. Otherwise drain the context into ``split_points``

There are no suspension points between 1 and 5, so the drained split
points are complete and deterministic when the call returns. The
orchestrator keeps no per-request state; any number of threads may call
``render_for_request()`` at once.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from duet.config import DuetConfig
from duet.errors import ConfigurationError, Redirect
from duet.render.context import RenderContext
from duet.render.tree import render_match
from duet.routing.descriptor import RouteDescriptor, RouteNode, instantiate
from duet.routing.match import match_routes
from duet.routing.validate import check_descriptors
from duet.units.registry import BoundUnits, Flavor
from duet.views import HeaderInput, normalize_headers

logger = logging.getLogger("duet.render")


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Outcome of one server render.

    Exactly one of ``markup`` and ``redirect`` is set. When ``redirect`` is
    set the caller must issue an HTTP redirect and must not use ``markup``.
    """

    markup: str | None
    split_points: tuple[str, ...] = ()
    redirect: str | None = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect is not None

    @property
    def units(self) -> tuple[str, ...]:
        """Split points without duplicates, in first-encounter order."""
        return tuple(dict.fromkeys(self.split_points))


class RenderOrchestrator:
    """Drives eager server renders over one route tree.

    Usage::

        orchestrator = RenderOrchestrator(registry.bindings(Flavor.EAGER), routes)
        result = orchestrator.render_for_request("/users/42", request.headers)
        if result.redirect:
            ...  # 302 to result.redirect
    """

    __slots__ = ("_config", "_routes", "units")

    def __init__(
        self,
        units: BoundUnits,
        routes: Sequence[RouteDescriptor],
        config: DuetConfig | None = None,
    ) -> None:
        if units.flavor is not Flavor.EAGER:
            msg = f"RenderOrchestrator needs eager bindings, got {units.flavor.value}"
            raise ConfigurationError(msg)
        self._config = config or DuetConfig()
        check_descriptors(routes)
        self.units = units
        self._routes = instantiate(routes, units, redirect_root=self._config.redirect_root)

    @property
    def routes(self) -> tuple[RouteNode, ...]:
        return self._routes

    def render_for_request(self, path: str, headers: HeaderInput = None) -> RenderResult:
        """Render *path* once and package markup, split points and redirect."""
        ctx = RenderContext()
        normalized = normalize_headers(headers)

        match = match_routes(self._routes, path)
        if match is None:
            # Unreachable for validated trees.
            msg = f"No route matches {path!r} and no catch-all is configured"
            raise ConfigurationError(msg)

        markup = ""
        try:
            markup = render_match(match, path, normalized, ctx)
        except Redirect as directive:
            ctx.redirect_to(directive.target)

        if ctx.redirect is not None:
            logger.debug("Render %s -> redirect %s", path, ctx.redirect)
            return RenderResult(markup=None, redirect=ctx.redirect)

        split_points = ctx.drain()
        logger.debug("Render %s touched %s", path, ", ".join(split_points) or "no units")
        return RenderResult(markup=markup, split_points=split_points)
