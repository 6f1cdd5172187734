"""Duet application class.

Mutable during setup (unit and route registration).
Frozen on first render, hydrate or ``check()``: routes are validated, both
route trees are instantiated and compared, and manifests are loaded.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from kida import Environment

from duet.assets.resolver import AssetResolver
from duet.client.bootstrap import read_bootstrap
from duet.client.mount import ClientMount
from duet.client.preloader import Preloader
from duet.config import DuetConfig
from duet.document import build_document
from duet.errors import ConfigurationError
from duet.render.orchestrator import RenderOrchestrator, RenderResult
from duet.routing.descriptor import RouteDescriptor, collect_units
from duet.routing.validate import check_shape, describe_problems
from duet.templating import create_environment
from duet.units.cell import Loader
from duet.units.loaders import ready
from duet.units.registry import Flavor, ViewRegistry, ViewUnit
from duet.views import HeaderInput, Renderable, TemplateView, normalize_headers


@dataclass(frozen=True, slots=True)
class Page:
    """What the request layer sends back for one request."""

    status: int
    body: str = ""
    location: str | None = None

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        if self.location is not None:
            return (("Location", self.location),)
        return (("Content-Type", "text/html; charset=utf-8"),)


class App:
    """The duet application.

    Usage::

        app = App(DuetConfig(client_manifest="build/client.json"))

        @app.view("MainLayout")
        def main_layout(props):
            return f"<main>{props.outlet}</main>"

        app.unit("Home", eager=home, lazy=import_loader("myapp.views:home"))
        app.routes(
            route(None, "MainLayout", children=[
                route("/", "Home", exact=True),
                catch_all(),
            ]),
        )

        page = app.respond("/", request_headers)

    Thread safety:
        Setup is single-threaded (import time). The freeze transition uses a
        Lock + double-check so exactly one thread builds the runtime state
        even when several request threads render the first page at once.
    """

    __slots__ = (
        "_assets",
        "_env",
        "_freeze_lock",
        "_frozen",
        "_orchestrator",
        "_pending_routes",
        "_preloader",
        "config",
        "registry",
    )

    def __init__(self, config: DuetConfig | None = None, *, registry: ViewRegistry | None = None) -> None:
        self.config: DuetConfig = config or DuetConfig()
        self.registry = registry or ViewRegistry(self.config)
        self._env: Environment = create_environment(self.config)
        self._pending_routes: list[RouteDescriptor] = []
        self._freeze_lock = threading.Lock()
        self._frozen = False
        self._orchestrator: RenderOrchestrator | None = None
        self._preloader: Preloader | None = None
        self._assets: AssetResolver | None = None

    # -- Setup --

    def unit(self, name: str, *, eager: Renderable, lazy: Loader | None = None) -> ViewUnit:
        """Register both bindings of a view unit.

        Without *lazy*, the client binding hands back *eager* on first load.
        """
        self._check_not_frozen()
        declared = ViewUnit(name, eager, lazy or ready(eager))
        self.registry.register(declared)
        return declared

    def view(self, name: str, *, lazy: Loader | None = None) -> Callable[[Renderable], Renderable]:
        """Decorator form of ``unit()``."""

        def decorator(func: Renderable) -> Renderable:
            self.unit(name, eager=func, lazy=lazy)
            return func

        return decorator

    def template(self, name: str, source: str, *, lazy: Loader | None = None) -> TemplateView:
        """Register a kida-template view unit using the app's environment."""
        view = TemplateView(source, env=self._env)
        self.unit(name, eager=view, lazy=lazy)
        return view

    def routes(self, *descriptors: RouteDescriptor) -> None:
        """Append route descriptors. Inline ``ViewUnit`` declarations are registered on freeze."""
        self._check_not_frozen()
        self._pending_routes.extend(descriptors)

    # -- Runtime --

    @property
    def orchestrator(self) -> RenderOrchestrator:
        self._ensure_frozen()
        assert self._orchestrator is not None
        return self._orchestrator

    @property
    def preloader(self) -> Preloader:
        self._ensure_frozen()
        assert self._preloader is not None
        return self._preloader

    @property
    def assets(self) -> AssetResolver:
        self._ensure_frozen()
        assert self._assets is not None
        return self._assets

    def render(self, path: str, headers: HeaderInput = None) -> RenderResult:
        return self.orchestrator.render_for_request(path, headers)

    def respond(self, path: str, headers: HeaderInput = None) -> Page:
        """Render *path* into a full document, or a 302 when it redirects."""
        normalized = normalize_headers(headers)
        result = self.render(path, normalized)
        if result.redirect is not None:
            return Page(status=302, location=result.redirect)
        body = build_document(result, normalized, self.assets, self.config, env=self._env)
        return Page(status=200, body=body)

    async def hydrate(self, document: str, location: str) -> ClientMount:
        """Client bootstrap: read the embedded state and hydrate *location*."""
        bootstrap = read_bootstrap(document, self.config.state_id)
        return await self.preloader.hydrate_from(bootstrap, location)

    # -- Validation --

    def problems(self) -> list[str]:
        """Startup problems that ``check()`` reports (empty when healthy)."""
        self._register_declared()
        problems = describe_problems(self._pending_routes)
        for name in sorted(self.registry.unpaired()):
            flavor = "an eager" if name in self.registry.names(Flavor.EAGER) else "a lazy"
            problems.append(f"units: {name!r} has only {flavor} binding")
        if not problems:
            try:
                self._ensure_frozen()
            except ConfigurationError as exc:
                problems.append(str(exc))
        return problems

    def check(self) -> None:
        """Validate units and routes and print results.

        Raises ``SystemExit(1)`` if problems are found.
        """
        problems = self.problems()
        if problems:
            print(f"{len(problems)} problem(s) found:")
            for problem in problems:
                print(f"  ✗ {problem}")
            raise SystemExit(1)
        units = len(self.registry.names(Flavor.EAGER))
        print(f"✓ {units} view units, route trees match")

    # -- Freeze --

    def _register_declared(self) -> None:
        known = self.registry.names(Flavor.EAGER) | self.registry.names(Flavor.LAZY)
        for declared in collect_units(self._pending_routes):
            if declared.name not in known:
                self.registry.register(declared)

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Build the runtime state. MUST only be called while holding _freeze_lock."""
        self._register_declared()
        routes: Sequence[RouteDescriptor] = tuple(self._pending_routes)

        orchestrator = RenderOrchestrator(self.registry.bindings(Flavor.EAGER), routes, self.config)
        preloader = Preloader(self.registry.bindings(Flavor.LAZY), routes, self.config)
        check_shape(orchestrator.routes, preloader.routes)

        self._orchestrator = orchestrator
        self._preloader = preloader
        self._assets = AssetResolver.from_config(self.config)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started rendering. "
                "Register units and routes before the first render."
            )
            raise RuntimeError(msg)

