"""Per-request render context: the split-point log and the redirect target.

A ``RenderContext`` is created by the orchestrator for exactly one render
pass and dropped when that pass returns. It is passed explicitly to every
binding render; nothing stores it in a global or a ContextVar, so two
requests rendering in parallel can never see each other's split points.

Thread safety:
    None needed. One context is only ever touched by the single
    synchronous pass that created it.
"""


class RenderContext:
    """Mutable holder for one server render pass.

    Usage::

        ctx = RenderContext()
        ctx.record("MainLayout")
        ctx.record("Home")
        ctx.drain()  # ("MainLayout", "Home")
    """

    __slots__ = ("_redirect", "_split_points")

    def __init__(self) -> None:
        self._split_points: list[str] = []
        self._redirect: str | None = None

    def record(self, name: str) -> None:
        """Append a split point. Duplicates are kept; consumers dedup."""
        self._split_points.append(name)

    def drain(self) -> tuple[str, ...]:
        """Return the recorded split points in order and clear the log."""
        drained = tuple(self._split_points)
        self._split_points.clear()
        return drained

    def redirect_to(self, target: str) -> None:
        """Request a redirect. The first request in a pass wins."""
        if self._redirect is None:
            self._redirect = target

    @property
    def redirect(self) -> str | None:
        return self._redirect

    def __len__(self) -> int:
        return len(self._split_points)

    def __repr__(self) -> str:
        return f"<RenderContext {self._split_points!r} redirect={self._redirect!r}>"
