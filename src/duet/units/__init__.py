"""View units — named views with eager and lazy bindings."""

from duet.units.cell import LoadPolicy, UnitCell, UnitState
from duet.units.loaders import import_loader, ready
from duet.units.registry import (
    BoundUnits,
    EagerBinding,
    Flavor,
    LazyBinding,
    ViewRegistry,
    ViewUnit,
    error_boundary,
)

__all__ = [
    "BoundUnits",
    "EagerBinding",
    "Flavor",
    "LazyBinding",
    "LoadPolicy",
    "UnitCell",
    "UnitState",
    "ViewRegistry",
    "ViewUnit",
    "error_boundary",
    "import_loader",
    "ready",
]
