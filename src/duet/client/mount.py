"""Client-side mount of the lazy route tree.

A mount renders frames: one on hydration and one per navigation, plus one
each time a background load finishes. Lazy units that are not ready render
as placeholders and are loaded in the background under a ``CancelToken``.
When the load completes the mount re-renders, unless the token was
cancelled in the meantime by a newer navigation or by ``unmount()``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

import anyio
from anyio.abc import TaskGroup

from duet.client.cancel import CancelToken
from duet.config import DuetConfig
from duet.errors import ConfigurationError, UnitLoadError
from duet.render.tree import render_match
from duet.routing.descriptor import RouteNode
from duet.routing.match import match_routes
from duet.units.registry import BoundUnits

logger = logging.getLogger("duet.client")


class _LoadScope:
    """Sink collecting lazy-unit requests and redirects for one frame."""

    __slots__ = ("redirect", "requested")

    def __init__(self) -> None:
        self.requested: dict[str, None] = {}
        self.redirect: str | None = None

    def request(self, name: str) -> None:
        self.requested[name] = None

    def redirect_to(self, target: str) -> None:
        if self.redirect is None:
            self.redirect = target


class ClientMount:
    """The mounted client view over the lazy route tree.

    Created by ``Preloader.hydrate()``; ``frames[0]`` is the hydration frame.
    """

    __slots__ = ("_config", "_headers", "_inflight", "_routes", "_units", "frames", "location", "mounted")

    def __init__(
        self,
        units: BoundUnits,
        routes: Sequence[RouteNode],
        headers: Mapping[str, str],
        config: DuetConfig | None = None,
    ) -> None:
        self._units = units
        self._routes = tuple(routes)
        self._headers = headers
        self._config = config or DuetConfig()
        self._inflight: dict[str, CancelToken] = {}
        self.frames: list[str] = []
        self.location = ""
        self.mounted = True

    @property
    def markup(self) -> str:
        """The most recent frame."""
        return self.frames[-1] if self.frames else ""

    @property
    def pending(self) -> frozenset[str]:
        """Units with a live background load."""
        return frozenset(name for name, token in self._inflight.items() if not token.cancelled)

    async def navigate(self, location: str) -> str:
        """Render *location* and wait for every unit it needs.

        Loads left over from an earlier navigation are cancelled first.
        Returns the final frame.
        """
        if not self.mounted:
            msg = "Cannot navigate an unmounted client"
            raise RuntimeError(msg)
        self._cancel_all(f"navigated to {location}")
        self.location = location
        requested = self._commit()
        if requested:
            async with anyio.create_task_group() as tg:
                self._spawn(tg, requested)
        return self.markup

    def unmount(self) -> None:
        """Tear the mount down. Outstanding loads are cancelled and dropped."""
        self.mounted = False
        self._cancel_all("unmounted")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cancel_all(self, reason: str) -> None:
        for token in self._inflight.values():
            token.cancel(reason)
        self._inflight.clear()

    def _spawn(self, tg: TaskGroup, names: Sequence[str]) -> None:
        for name in names:
            current = self._inflight.get(name)
            if current is not None and not current.cancelled:
                continue
            token = CancelToken(name)
            self._inflight[name] = token
            tg.start_soon(self._load, tg, name, token)

    async def _load(self, tg: TaskGroup, name: str, token: CancelToken) -> None:
        with anyio.CancelScope() as scope:
            token.bind(scope)
            try:
                await self._units.load_component(name)
            except UnitLoadError as exc:
                logger.warning("Rendering error boundary for %r: %s", name, exc.reason)

        if self._inflight.get(name) is token:
            del self._inflight[name]
        if token.cancelled or not self.mounted:
            logger.debug("Dropping load of %r (%s)", name, token.reason or "unmounted")
            return

        requested = self._commit()
        if requested:
            self._spawn(tg, requested)

    def _commit(self) -> list[str]:
        """Render the current location as a new frame; return requested units."""
        location = self.location
        for _ in range(self._config.max_client_redirects + 1):
            scope = _LoadScope()
            match = match_routes(self._routes, location)
            if match is None:
                msg = f"No route matches {location!r} and no catch-all is configured"
                raise ConfigurationError(msg)
            markup = render_match(match, location, self._headers, scope)
            if scope.redirect is None:
                break
            logger.info("Client redirect %s -> %s", location, scope.redirect)
            location = scope.redirect
        else:
            msg = f"Too many client redirects starting at {self.location!r}"
            raise ConfigurationError(msg)

        self.location = location
        self.frames.append(markup)
        return list(scope.requested)

    def __repr__(self) -> str:
        state = "mounted" if self.mounted else "unmounted"
        return f"<ClientMount {self.location!r} {state} frames={len(self.frames)}>"
