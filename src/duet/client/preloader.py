"""Client preloading and hydration.

``hydrate()`` takes the split points recorded by the server render, loads
every unit they name in parallel, and only then mounts the lazy route tree.
Because every unit the server touched is realized before the first client
frame renders, that frame matches the server markup.

Pipeline::

    split_points = ["MainLayout", "Home", "Home"]

    1. Dedup, keep first-encounter order    -> MainLayout, Home
    2. Resolve each name to its lazy unit   (UnknownUnitError if missing)
    3. load_component() all of them at once (anyio task group, join)
    4. Mount the lazy tree at the location  (first frame == server markup)

Loads are bounded by the registry's ``LoadPolicy``. A unit that still fails
renders as an error boundary; hydration never blocks indefinitely.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import anyio

from duet.client.bootstrap import Bootstrap
from duet.client.mount import ClientMount
from duet.config import DuetConfig
from duet.errors import ConfigurationError, UnitLoadError, UnknownUnitError
from duet.routing.descriptor import RouteDescriptor, RouteNode, instantiate
from duet.routing.validate import check_descriptors
from duet.units.registry import BoundUnits, Flavor
from duet.views import HeaderInput, normalize_headers

logger = logging.getLogger("duet.client")


class Preloader:
    """Gates client mounting on full readiness of the server's units.

    Usage::

        preloader = Preloader(registry.bindings(Flavor.LAZY), routes)
        mount = await preloader.hydrate(split_points, "/users/42", headers)
        mount.markup  # same as the server markup for /users/42
    """

    __slots__ = ("_config", "_routes", "units")

    def __init__(
        self,
        units: BoundUnits,
        routes: Sequence[RouteDescriptor],
        config: DuetConfig | None = None,
    ) -> None:
        if units.flavor is not Flavor.LAZY:
            msg = f"Preloader needs lazy bindings, got {units.flavor.value}"
            raise ConfigurationError(msg)
        self._config = config or DuetConfig()
        check_descriptors(routes)
        self.units = units
        self._routes = instantiate(routes, units, redirect_root=self._config.redirect_root)

    @property
    def routes(self) -> tuple[RouteNode, ...]:
        return self._routes

    async def preload(self, split_points: Iterable[str]) -> dict[str, UnitLoadError]:
        """Load every unit in *split_points* concurrently.

        Returns the units that failed, keyed by name. Raises
        ``UnknownUnitError`` before loading anything if a name has no lazy
        binding, which means the server and client registries disagree.
        """
        names = list(dict.fromkeys(split_points))
        for name in names:
            if name not in self.units:
                raise UnknownUnitError(name, Flavor.LAZY.value)

        failures: dict[str, UnitLoadError] = {}

        async def load_one(name: str) -> None:
            try:
                await self.units.load_component(name)
            except UnitLoadError as exc:
                failures[name] = exc

        async with anyio.create_task_group() as tg:
            for name in names:
                tg.start_soon(load_one, name)

        return failures

    async def hydrate(
        self,
        split_points: Iterable[str],
        location: str,
        headers: HeaderInput = None,
    ) -> ClientMount:
        """Preload *split_points*, then mount the lazy tree at *location*."""
        failures = await self.preload(split_points)
        if failures:
            logger.error(
                "Hydrating %s with %d failed unit(s): %s",
                location, len(failures), ", ".join(sorted(failures)),
            )
        mount = ClientMount(self.units, self._routes, normalize_headers(headers), self._config)
        await mount.navigate(location)
        return mount

    async def hydrate_from(self, bootstrap: Bootstrap, location: str) -> ClientMount:
        """Hydrate from the state a shell-builder embedded in the document."""
        return await self.hydrate(bootstrap.split_points, location, bootstrap.headers)
