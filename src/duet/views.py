"""Renderable values and the props they receive.

A view is whatever a view unit binds to: a string of static markup, a
callable ``view(props) -> str``, or a ``TemplateView`` backed by kida.
The same view object must be reachable from both bindings of a unit so the
server and client renders agree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from kida import Environment
from kida.template import Markup

type Renderable = str | Callable[[RenderProps], Any]
type HeaderInput = Mapping[str, str] | Iterable[tuple[str, str]] | None


def normalize_headers(headers: HeaderInput) -> Mapping[str, str]:
    """Return an immutable, lower-cased copy of request headers.

    Accepts a mapping or an iterable of ``(name, value)`` pairs. The first
    value wins for repeated names, matching ``Headers.__getitem__`` in most
    HTTP layers.
    """
    if headers is None:
        return MappingProxyType({})
    pairs = headers.items() if isinstance(headers, Mapping) else headers
    normalized: dict[str, str] = {}
    for name, value in pairs:
        normalized.setdefault(str(name).lower(), str(value))
    return MappingProxyType(normalized)


@dataclass(frozen=True, slots=True)
class RenderProps:
    """Everything a view sees while rendering.

    Attributes:
        path: The location being rendered (request path or client location).
        params: Path parameters captured by the matched route chain,
            converted by their segment converters (``{id:int}`` gives an int).
        headers: Lower-cased request headers (server) or the headers
            embedded by the shell-builder (client).
        outlet: Markup of the matched child chain, empty for leaves.
    """

    path: str
    params: Mapping[str, str | int | float] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    outlet: Markup = field(default_factory=lambda: Markup(""))

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def with_outlet(self, outlet: str) -> RenderProps:
        return RenderProps(self.path, self.params, self.headers, Markup(outlet))


class TemplateView:
    """A view rendered from a kida template source.

    The template sees ``path``, ``params``, ``headers`` and ``outlet`` plus
    any extra context given at construction::

        Layout = TemplateView("<main>{{ outlet }}</main>")
        Greeting = TemplateView("<p>Hi {{ params.name }}</p>")
    """

    __slots__ = ("_template", "context", "source")

    def __init__(self, source: str, /, *, env: Environment | None = None, **context: Any) -> None:
        self.source = source
        self.context = context
        self._template = (env or Environment(autoescape=True)).from_string(source)

    def __call__(self, props: RenderProps) -> str:
        return self._template.render(
            {
                **self.context,
                "path": props.path,
                "params": dict(props.params),
                "headers": dict(props.headers),
                "outlet": props.outlet,
            }
        )

    def __repr__(self) -> str:
        return f"TemplateView({self.source[:40]!r})"


def is_renderable(value: object) -> bool:
    return isinstance(value, str) or callable(value)


def render_value(value: Renderable, props: RenderProps) -> str:
    """Render a view to a markup string."""
    if isinstance(value, str):
        return value
    return str(value(props))
