"""Tests for duet.units.registry — dual bindings and the unit registry."""

import pytest

from duet.config import DuetConfig
from duet.errors import ConfigurationError, UnitLoadError, UnknownUnitError
from duet.render.context import RenderContext
from duet.units.cell import LoadPolicy, UnitState
from duet.units.loaders import ready
from duet.units.registry import Flavor, LazyBinding, ViewRegistry, ViewUnit, error_boundary
from duet.views import RenderProps

POLICY = LoadPolicy(timeout=1.0, retries=0, retry_delay=0)


def layout(props: RenderProps) -> str:
    return f"<main>{props.outlet}</main>"


def home(props: RenderProps) -> str:
    return "<h1>Home</h1>"


class _Requests:
    def __init__(self) -> None:
        self.names: list[str] = []

    def request(self, name: str) -> None:
        self.names.append(name)


def _registry(**config: object) -> ViewRegistry:
    registry = ViewRegistry(DuetConfig(**config), policy=POLICY)  # type: ignore[arg-type]
    registry.register(ViewUnit("MainLayout", layout, ready(layout)))
    registry.register(ViewUnit("Home", home, ready(home)))
    return registry


class TestRegistration:
    def test_register_both_flavors(self) -> None:
        registry = _registry()

        assert registry.names(Flavor.EAGER) == {"MainLayout", "Home"}
        assert registry.names(Flavor.LAZY) == {"MainLayout", "Home"}
        assert registry.unpaired() == frozenset()

    def test_duplicate_eager(self) -> None:
        registry = _registry()
        with pytest.raises(ConfigurationError, match="already has an eager binding"):
            registry.register_eager("Home", home)

    def test_duplicate_lazy(self) -> None:
        registry = _registry()
        with pytest.raises(ConfigurationError, match="already has a lazy binding"):
            registry.register_lazy("Home", ready(home))

    def test_eager_must_be_renderable(self) -> None:
        with pytest.raises(TypeError, match="markup or a callable"):
            ViewRegistry().register_eager("Home", 42)  # type: ignore[arg-type]

    def test_lazy_needs_callable_loader(self) -> None:
        with pytest.raises(TypeError, match="callable loader"):
            ViewRegistry().register_lazy("Home", "app.views:home")  # type: ignore[arg-type]

    def test_unpaired(self) -> None:
        registry = ViewRegistry()
        registry.register_eager("OnlyServer", home)
        registry.register_lazy("OnlyClient", ready(home))

        assert registry.unpaired() == {"OnlyServer", "OnlyClient"}

    def test_placeholder_from_config(self) -> None:
        registry = _registry(placeholder="<i>…</i>")
        binding = registry.get("Home", Flavor.LAZY)

        assert isinstance(binding, LazyBinding)
        assert binding.placeholder == "<i>…</i>"


class TestLookup:
    def test_get_unknown(self) -> None:
        with pytest.raises(UnknownUnitError) as exc_info:
            _registry().get("Missing", Flavor.EAGER)
        assert exc_info.value.flavor == "eager"

    def test_bound_units_single_flavor(self) -> None:
        registry = _registry()
        registry.register_eager("ServerOnly", home)
        lazy = registry.bindings(Flavor.LAZY)

        assert "Home" in lazy
        assert "ServerOnly" not in lazy
        assert list(lazy) == ["Home", "MainLayout"]
        assert lazy.get("Home").flavor is Flavor.LAZY

    async def test_eager_bound_units_cannot_load(self) -> None:
        with pytest.raises(TypeError, match="only available on lazy"):
            await _registry().bindings(Flavor.EAGER).load_component("Home")


class TestEagerBinding:
    def test_records_parent_before_children(self) -> None:
        registry = _registry()
        ctx = RenderContext()
        parent = registry.get("MainLayout", Flavor.EAGER)
        child = registry.get("Home", Flavor.EAGER)
        props = RenderProps("/")

        markup = parent.render(props, ctx, lambda: child.render(props, ctx))

        assert markup == "<main><h1>Home</h1></main>"
        assert ctx.drain() == ("MainLayout", "Home")

    def test_render_without_sink(self) -> None:
        binding = _registry().get("Home", Flavor.EAGER)
        assert binding.render(RenderProps("/")) == "<h1>Home</h1>"


class TestLazyBinding:
    def test_unresolved_renders_placeholder_and_requests(self) -> None:
        registry = _registry(placeholder="<i>loading</i>")
        sink = _Requests()

        markup = registry.get("Home", Flavor.LAZY).render(RenderProps("/"), sink)

        assert markup == "<i>loading</i>"
        assert sink.names == ["Home"]

    async def test_ready_renders_view(self) -> None:
        registry = _registry()
        await registry.load_component("Home")
        binding = registry.get("Home", Flavor.LAZY)
        sink = _Requests()

        assert binding.ready
        assert binding.render(RenderProps("/"), sink) == "<h1>Home</h1>"
        assert sink.names == []

    async def test_children_only_render_below_ready_unit(self) -> None:
        registry = _registry()
        rendered: list[str] = []

        def children() -> str:
            rendered.append("child")
            return "<p>child</p>"

        layout_binding = registry.get("MainLayout", Flavor.LAZY)
        assert layout_binding.render(RenderProps("/"), _Requests(), children) == ""
        assert rendered == []

        await registry.load_component("MainLayout")
        assert layout_binding.render(RenderProps("/"), _Requests(), children) == "<main><p>child</p></main>"
        assert rendered == ["child"]

    async def test_failed_renders_error_boundary(self) -> None:
        def broken() -> object:
            raise RuntimeError("boom")

        registry = ViewRegistry(policy=POLICY)
        registry.register_lazy("Broken", broken)
        with pytest.raises(UnitLoadError):
            await registry.load_component("Broken")

        binding = registry.get("Broken", Flavor.LAZY)
        assert binding.cell.state is UnitState.FAILED
        assert binding.render(RenderProps("/"), _Requests()) == error_boundary("Broken", "RuntimeError: boom")


class TestLoadComponent:
    async def test_idempotent(self) -> None:
        calls = 0

        def load() -> object:
            nonlocal calls
            calls += 1
            return home

        registry = ViewRegistry(policy=POLICY)
        registry.register_lazy("Home", load)

        first = await registry.load_component("Home")
        second = await registry.load_component("Home")

        assert first is second is home
        assert calls == 1

    async def test_unknown(self) -> None:
        with pytest.raises(UnknownUnitError):
            await ViewRegistry().load_component("Missing")


class TestErrorBoundary:
    def test_escapes(self) -> None:
        markup = error_boundary('A"B', "<script>")
        assert 'data-unit="A&quot;B"' in markup
        assert "&lt;script&gt;" in markup

    def test_default_message(self) -> None:
        assert "could not be loaded" in error_boundary("Home")
