"""Loader helpers for lazy view units."""

from __future__ import annotations

import importlib
from collections.abc import Awaitable, Callable
from functools import partial

import anyio

from duet.views import Renderable


def split_import_string(import_string: str, default_attr: str) -> tuple[str, str]:
    """Split ``"module:attribute"``, filling in *default_attr* when it is omitted.

    Raises ``ValueError`` when the module path is empty.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not module_path:
        msg = f"Invalid import string {import_string!r}: missing module path"
        raise ValueError(msg)
    return module_path, attr_name or default_attr


def import_loader(import_string: str) -> Callable[[], Awaitable[Renderable]]:
    """Build a loader that imports a view on first use.

    Accepts ``"module:attribute"``. When the attribute portion is omitted the
    module's ``view`` attribute is used. The import runs in a worker thread so
    a slow module import never blocks the event loop::

        registry.register_lazy("Home", import_loader("myapp.views.home:Home"))
    """
    module_path, attr_name = split_import_string(import_string, "view")

    async def load() -> Renderable:
        module = await anyio.to_thread.run_sync(partial(importlib.import_module, module_path))
        return getattr(module, attr_name)

    load.__qualname__ = f"import_loader({import_string!r})"
    return load


def ready(value: Renderable) -> Callable[[], Renderable]:
    """Loader that hands back an already-imported view.

    Useful when both bindings share one module and only the memoization
    behavior of the lazy flavor is wanted.
    """

    def load() -> Renderable:
        return value

    return load
