"""View-unit registry with eager and lazy bindings.

Every logical view is registered under one name with two interchangeable
bindings:

- **eager**: the view itself, already imported. Used by the server render.
  Rendering records the unit's name into the active render context.
- **lazy**: a loader plus a memoized ``UnitCell``. Used by the client.
  Rendering before the cell is ready yields a placeholder and asks the
  mount to load the unit in the background.

The registry owns the realized-state cache. It is created once per process
(or per test) and never shared through module globals.

Consumers never see both flavors: the orchestrator and the preloader each
receive a ``BoundUnits`` view from ``registry.bindings(flavor)``.
"""

from __future__ import annotations

import html
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from duet.config import DuetConfig
from duet.errors import ConfigurationError, UnknownUnitError
from duet.units.cell import Loader, LoadPolicy, UnitCell, UnitState
from duet.views import Renderable, RenderProps, is_renderable, render_value


class Flavor(Enum):
    EAGER = "eager"
    LAZY = "lazy"


class RecordingSink(Protocol):
    """What an eager binding needs from its render context."""

    def record(self, name: str) -> None: ...


class LoadingSink(Protocol):
    """What a lazy binding needs from its mount."""

    def request(self, name: str) -> None: ...


def error_boundary(name: str, reason: str = "") -> str:
    """Markup rendered in place of a lazy unit whose loader failed."""
    escaped = html.escape(name, quote=True)
    detail = html.escape(reason) if reason else "This section could not be loaded."
    return f'<div class="duet-error" data-unit="{escaped}">{detail}</div>'


@dataclass(frozen=True, slots=True)
class ViewUnit:
    """One logical view declared with both bindings at once.

    Usage::

        Home = ViewUnit("Home", eager=home, loader=import_loader("app.views:home"))
        registry.register(Home)
    """

    name: str
    eager: Renderable
    loader: Loader


class EagerBinding:
    """Server-side binding: render immediately, record the split point."""

    __slots__ = ("name", "value")

    flavor = Flavor.EAGER

    def __init__(self, name: str, value: Renderable) -> None:
        self.name = name
        self.value = value

    def render(
        self,
        props: RenderProps,
        sink: RecordingSink | None = None,
        children: Callable[[], str] | None = None,
    ) -> str:
        """Record this unit, then render its children into the outlet and itself.

        Recording happens before the children render, so a parent always
        precedes its descendants in the split-point log.
        """
        if sink is not None:
            sink.record(self.name)
        if children is not None:
            props = props.with_outlet(children())
        return render_value(self.value, props)

    def __repr__(self) -> str:
        return f"EagerBinding({self.name!r})"


class LazyBinding:
    """Client-side binding: render when realized, otherwise request a load."""

    __slots__ = ("cell", "name", "placeholder")

    flavor = Flavor.LAZY

    def __init__(self, name: str, cell: UnitCell, placeholder: str = "") -> None:
        self.name = name
        self.cell = cell
        self.placeholder = placeholder

    @property
    def ready(self) -> bool:
        return self.cell.state is UnitState.READY

    def render(
        self,
        props: RenderProps,
        sink: LoadingSink | None = None,
        children: Callable[[], str] | None = None,
    ) -> str:
        """Render the realized view, an error boundary, or a placeholder.

        Children only render below a realized unit.
        """
        state = self.cell.state
        if state is UnitState.READY:
            if children is not None:
                props = props.with_outlet(children())
            return render_value(self.cell.value, props)
        if state is UnitState.FAILED:
            error = self.cell.error
            return error_boundary(self.name, error.reason if error else "")
        if sink is not None:
            sink.request(self.name)
        return self.placeholder

    def __repr__(self) -> str:
        return f"LazyBinding({self.name!r}, {self.cell.state.value})"


type Binding = EagerBinding | LazyBinding


class ViewRegistry:
    """Holds both bindings of every view unit.

    Usage::

        registry = ViewRegistry()
        registry.register_eager("Home", home)
        registry.register_lazy("Home", import_loader("app.views:home"))

        await registry.load_component("Home")   # prefetch
    """

    __slots__ = ("_eager", "_lazy", "placeholder", "policy")

    def __init__(self, config: DuetConfig | None = None, *, policy: LoadPolicy | None = None) -> None:
        config = config or DuetConfig()
        self.policy = policy or LoadPolicy.from_config(config)
        self.placeholder = config.placeholder
        self._eager: dict[str, EagerBinding] = {}
        self._lazy: dict[str, LazyBinding] = {}

    # -- Registration --

    def register_eager(self, name: str, value: Renderable) -> EagerBinding:
        """Bind an already-imported view to *name* for server rendering."""
        if name in self._eager:
            msg = f"View unit {name!r} already has an eager binding."
            raise ConfigurationError(msg)
        if not is_renderable(value):
            msg = f"Eager binding for {name!r} must be markup or a callable, got {type(value).__name__}"
            raise TypeError(msg)
        binding = EagerBinding(name, value)
        self._eager[name] = binding
        return binding

    def register_lazy(self, name: str, loader: Loader) -> LazyBinding:
        """Bind a loader to *name* for client rendering."""
        if name in self._lazy:
            msg = f"View unit {name!r} already has a lazy binding."
            raise ConfigurationError(msg)
        if not callable(loader):
            msg = f"Lazy binding for {name!r} needs a callable loader, got {type(loader).__name__}"
            raise TypeError(msg)
        binding = LazyBinding(name, UnitCell(name, loader), self.placeholder)
        self._lazy[name] = binding
        return binding

    def register(self, unit: ViewUnit) -> None:
        """Register both bindings of *unit* under one name."""
        self.register_eager(unit.name, unit.eager)
        self.register_lazy(unit.name, unit.loader)

    # -- Lookup --

    def get(self, name: str, flavor: Flavor) -> Binding:
        table = self._eager if flavor is Flavor.EAGER else self._lazy
        try:
            return table[name]
        except KeyError:
            raise UnknownUnitError(name, flavor.value) from None

    def names(self, flavor: Flavor) -> frozenset[str]:
        table = self._eager if flavor is Flavor.EAGER else self._lazy
        return frozenset(table)

    def unpaired(self) -> frozenset[str]:
        """Names registered in exactly one flavor."""
        return frozenset(self._eager.keys() ^ self._lazy.keys())

    def bindings(self, flavor: Flavor) -> BoundUnits:
        """Expose only *flavor* to a consumer."""
        return BoundUnits(self, flavor)

    # -- Loading --

    async def load_component(self, name: str) -> Renderable:
        """Load a lazy unit and memoize it.

        Idempotent and single-flight: concurrent calls for the same unit share
        one loader invocation; calls after the unit is ready return the cached
        view without touching the loader.

        Raises ``UnknownUnitError`` for unregistered names and
        ``UnitLoadError`` when the loader keeps failing.
        """
        binding = self._lazy.get(name)
        if binding is None:
            raise UnknownUnitError(name, Flavor.LAZY.value)
        return await binding.cell.load(self.policy)


class BoundUnits:
    """A single-flavor view of a ``ViewRegistry``."""

    __slots__ = ("flavor", "registry")

    def __init__(self, registry: ViewRegistry, flavor: Flavor) -> None:
        self.registry = registry
        self.flavor = flavor

    def get(self, name: str) -> Binding:
        return self.registry.get(name, self.flavor)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self.registry.names(self.flavor)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.registry.names(self.flavor)))

    async def load_component(self, name: str) -> Renderable:
        if self.flavor is not Flavor.LAZY:
            msg = "load_component() is only available on lazy bindings"
            raise TypeError(msg)
        return await self.registry.load_component(name)

    def __repr__(self) -> str:
        return f"BoundUnits({self.flavor.value}, {len(self.registry.names(self.flavor))} units)"
