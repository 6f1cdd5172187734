"""Routing — one declarative route source, two instantiated trees.

Route descriptors are authored once. ``instantiate()`` binds them to either
the eager or the lazy flavor of the view-unit registry, and the two results
are checked for shape equality at startup.
"""

from duet.routing.descriptor import (
    RouteDescriptor,
    RouteNode,
    catch_all,
    collect_units,
    from_records,
    instantiate,
    route,
)
from duet.routing.match import RouteMatch, match_routes
from duet.routing.validate import check_descriptors, check_shape, describe_problems

__all__ = [
    "RouteDescriptor",
    "RouteMatch",
    "RouteNode",
    "catch_all",
    "check_descriptors",
    "check_shape",
    "collect_units",
    "describe_problems",
    "from_records",
    "instantiate",
    "match_routes",
    "route",
]
