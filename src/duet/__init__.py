"""Duet — server rendering with code-split client hydration.

Every view unit has two bindings: an eager one the server renders
synchronously, and a lazy one the client loads on demand. The server
records which units it rendered (the split points) so the client can
preload exactly those before it mounts, and the first client paint
matches the server markup.

Basic usage::

    from duet import App, catch_all, import_loader, route

    app = App()

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
"""

from importlib import import_module

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "App",
    "AssetDomain",
    "AssetResolver",
    "BootstrapError",
    "CancelToken",
    "ClientMount",
    "ConfigurationError",
    "DuetConfig",
    "DuetError",
    "Flavor",
    "Manifest",
    "ManifestDomainError",
    "Preloader",
    "Redirect",
    "RenderContext",
    "RenderOrchestrator",
    "RenderProps",
    "RenderResult",
    "ShapeMismatchError",
    "TemplateView",
    "UnitLoadError",
    "UnitLoadTimeout",
    "UnknownUnitError",
    "ViewRegistry",
    "ViewUnit",
    "catch_all",
    "from_records",
    "import_loader",
    "resolve",
    "route",
]

# Public name -> defining module. Resolved on first attribute access.
_LAZY_IMPORTS: dict[str, str] = {
    "App": "duet.app",
    "DuetConfig": "duet.config",
    "RenderProps": "duet.views",
    "TemplateView": "duet.views",
    # Units
    "Flavor": "duet.units.registry",
    "ViewRegistry": "duet.units.registry",
    "ViewUnit": "duet.units.registry",
    "import_loader": "duet.units.loaders",
    # Routing
    "catch_all": "duet.routing.descriptor",
    "from_records": "duet.routing.descriptor",
    "route": "duet.routing.descriptor",
    # Server render
    "RenderContext": "duet.render.context",
    "RenderOrchestrator": "duet.render.orchestrator",
    "RenderResult": "duet.render.orchestrator",
    # Client
    "CancelToken": "duet.client.cancel",
    "ClientMount": "duet.client.mount",
    "Preloader": "duet.client.preloader",
    # Assets
    "AssetDomain": "duet.assets.manifest",
    "AssetResolver": "duet.assets.resolver",
    "Manifest": "duet.assets.manifest",
    "resolve": "duet.assets.manifest",
    # Errors
    "BootstrapError": "duet.errors",
    "ConfigurationError": "duet.errors",
    "DuetError": "duet.errors",
    "ManifestDomainError": "duet.errors",
    "Redirect": "duet.errors",
    "ShapeMismatchError": "duet.errors",
    "UnitLoadError": "duet.errors",
    "UnitLoadTimeout": "duet.errors",
    "UnknownUnitError": "duet.errors",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import duet`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(import_module(module_name), name)
