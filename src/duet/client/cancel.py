"""Cancellation tokens for background unit loads."""

from __future__ import annotations

import anyio


class CancelToken:
    """Issued when a background load starts, checked when it completes.

    Cancelling the token cancels the bound anyio scope, so the loader is
    interrupted instead of finishing unobserved, and marks the token so a
    load that already finished does not re-render a stale mount.

    Usage::

        token = CancelToken("Home")
        with anyio.CancelScope() as scope:
            token.bind(scope)
            await registry.load_component("Home")
        if not token.cancelled:
            mount.refresh()
    """

    __slots__ = ("_cancelled", "_scope", "name", "reason")

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.reason = ""
        self._cancelled = False
        self._scope: anyio.CancelScope | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def bind(self, scope: anyio.CancelScope) -> None:
        """Attach the scope running the load. Cancels it at once if already cancelled."""
        self._scope = scope
        if self._cancelled:
            scope.cancel()

    def cancel(self, reason: str = "") -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self.reason = reason
        if self._scope is not None:
            self._scope.cancel()

    def __repr__(self) -> str:
        state = f"cancelled: {self.reason}" if self._cancelled else "live"
        return f"<CancelToken {self.name!r} {state}>"
