"""Duet exception hierarchy.

Shared across the registry, routing, orchestrator, preloader and asset
resolver so every module raises and catches the same types.
"""


class DuetError(Exception):
    """Base for all duet-specific errors."""


class ConfigurationError(DuetError):
    """Raised when the unit registry, route tree or manifests are invalid.

    Typically raised during ``App._freeze()`` at startup, never per request.
    """


class ShapeMismatchError(ConfigurationError):
    """The eager and lazy route trees differ, or a unit lacks one binding.

    The two trees are derived from one descriptor source; a mismatch means
    the unit registry is missing a flavor for some name.
    """


class UnknownUnitError(DuetError, LookupError):
    """A view unit name was looked up that no binding is registered for."""

    def __init__(self, name: str, flavor: str = "") -> None:
        self.name = name
        self.flavor = flavor
        where = f" {flavor}" if flavor else ""
        super().__init__(f"No{where} view unit registered under {name!r}")


class UnitLoadError(DuetError):
    """A lazy unit's loader failed after exhausting its retries."""

    def __init__(self, name: str, reason: str = "") -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Loading view unit {name!r} failed: {reason}" if reason else name)


class UnitLoadTimeout(UnitLoadError):
    """A lazy unit's loader did not finish within the load timeout."""

    def __init__(self, name: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(name, f"timed out after {timeout:g}s")


class ManifestDomainError(DuetError):
    """A manifest was consulted for the wrong asset domain.

    Server-domain keys are never looked up in the client manifest and
    vice versa.
    """


class BootstrapError(DuetError):
    """The serialized state embedded in a document could not be read."""


class Redirect(DuetError):  # noqa: N818
    """Raised by a view to redirect the current render.

    The orchestrator recovers it into ``RenderResult.redirect``; it never
    reaches the caller of ``render_for_request()``.
    """

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(target)
