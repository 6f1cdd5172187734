"""Realized-state cell for a lazily loaded view unit.

Each lazy unit owns one cell. The cell moves through::

    UNRESOLVED -> LOADING -> READY(value)
                          -> FAILED(error) -> LOADING ...

``READY`` is terminal: the value is memoized for the lifetime of the
owning registry. A load that is cancelled mid-flight returns the cell to
``UNRESOLVED`` so the next caller starts over.

Single flight:
    Concurrent ``load()`` calls share one loader invocation. The first
    caller runs the loader; the others wait on an ``anyio.Event`` and read
    the outcome the first caller stored.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from types import ModuleType
from typing import Any

import anyio

from duet.config import DuetConfig
from duet.errors import UnitLoadError, UnitLoadTimeout
from duet.views import Renderable, is_renderable

logger = logging.getLogger("duet.units")

type Loader = Callable[[], Renderable | ModuleType | Awaitable[Renderable | ModuleType]]


class UnitState(Enum):
    UNRESOLVED = "unresolved"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LoadPolicy:
    """Timeout and retry policy applied to every loader invocation.

    Attributes:
        timeout: Seconds allowed per attempt. ``None`` waits forever.
        retries: Extra attempts after the first failure.
        retry_delay: Seconds to sleep between attempts.
    """

    timeout: float | None = 10.0
    retries: int = 1
    retry_delay: float = 0.05

    @classmethod
    def from_config(cls, config: DuetConfig) -> LoadPolicy:
        return cls(
            timeout=config.load_timeout,
            retries=config.load_retries,
            retry_delay=config.load_retry_delay,
        )


def _realize(name: str, result: Any) -> Renderable:
    """Normalize a loader result to a renderable view.

    A loader may hand back a whole module (the Python analogue of a dynamic
    ``import()``); the module's ``view`` attribute is used.
    """
    if isinstance(result, ModuleType):
        result = getattr(result, "view", None)
        if result is None:
            raise UnitLoadError(name, "loaded module has no 'view' attribute")
    if not is_renderable(result):
        raise UnitLoadError(name, f"loader returned {type(result).__name__}, not a view")
    return result


class UnitCell:
    """Memoized load state for one lazy view unit."""

    __slots__ = ("_done", "_error", "_loader", "_state", "_value", "loads", "name")

    def __init__(self, name: str, loader: Loader) -> None:
        self.name = name
        self._loader = loader
        self._state = UnitState.UNRESOLVED
        self._value: Renderable | None = None
        self._error: UnitLoadError | None = None
        self._done: anyio.Event | None = None
        # Number of times the load sequence was started (not attempts).
        self.loads = 0

    @property
    def state(self) -> UnitState:
        return self._state

    @property
    def value(self) -> Renderable:
        """The realized view. Only valid in the ``READY`` state."""
        if self._state is not UnitState.READY:
            msg = f"View unit {self.name!r} is {self._state.value}, not ready"
            raise RuntimeError(msg)
        return self._value  # type: ignore[return-value]

    @property
    def error(self) -> UnitLoadError | None:
        return self._error

    async def load(self, policy: LoadPolicy) -> Renderable:
        """Load the unit once and return its view.

        Raises ``UnitLoadError`` when the loader fails on every attempt.
        """
        while True:
            if self._state is UnitState.READY:
                return self._value  # type: ignore[return-value]

            if self._state is UnitState.LOADING:
                done = self._done
                assert done is not None
                await done.wait()
                if self._state is UnitState.FAILED:
                    error = self._error
                    raise UnitLoadError(self.name, error.reason if error else "") from error
                # READY, or UNRESOLVED after the leader was cancelled
                continue

            return await self._lead(policy)

    async def _lead(self, policy: LoadPolicy) -> Renderable:
        done = anyio.Event()
        self._done = done
        self._state = UnitState.LOADING
        self._error = None
        self.loads += 1
        logger.debug("Loading view unit %r", self.name)
        try:
            value = await self._attempt_all(policy)
        except UnitLoadError as exc:
            self._state = UnitState.FAILED
            self._error = exc
            logger.error("View unit %r failed to load: %s", self.name, exc.reason)
            raise
        else:
            self._value = value
            self._state = UnitState.READY
            return value
        finally:
            if self._state is UnitState.LOADING:
                self._state = UnitState.UNRESOLVED
            done.set()

    async def _attempt_all(self, policy: LoadPolicy) -> Renderable:
        last: UnitLoadError | None = None
        for attempt in range(policy.retries + 1):
            if attempt:
                logger.warning(
                    "Retrying view unit %r (attempt %d of %d)",
                    self.name, attempt + 1, policy.retries + 1,
                )
                await anyio.sleep(policy.retry_delay)
            result = None
            try:
                with anyio.move_on_after(policy.timeout) as scope:
                    result = self._loader()
                    if inspect.isawaitable(result):
                        result = await result
            except Exception as exc:
                # Includes TimeoutError raised by the loader itself
                last = UnitLoadError(self.name, f"{type(exc).__name__}: {exc}")
                last.__cause__ = exc
                continue
            if scope.cancelled_caught:
                last = UnitLoadTimeout(self.name, policy.timeout or 0.0)
                continue
            return _realize(self.name, result)
        assert last is not None
        raise last
