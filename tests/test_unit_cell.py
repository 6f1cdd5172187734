"""Tests for duet.units.cell — memoized, single-flight lazy loading."""

import types

import anyio
import pytest

from duet.errors import UnitLoadError, UnitLoadTimeout
from duet.units.cell import LoadPolicy, UnitCell, UnitState

POLICY = LoadPolicy(timeout=1.0, retries=0, retry_delay=0)


def _home(props: object) -> str:
    return "<h1>Home</h1>"


class _Counter:
    """Loader that counts calls and fails the first *failures* of them."""

    def __init__(self, value: object = _home, failures: int = 0) -> None:
        self.value = value
        self.failures = failures
        self.calls = 0

    def __call__(self) -> object:
        self.calls += 1
        if self.calls <= self.failures:
            msg = f"boom {self.calls}"
            raise RuntimeError(msg)
        return self.value


class TestLoad:
    async def test_loads_once(self) -> None:
        loader = _Counter()
        cell = UnitCell("Home", loader)

        assert await cell.load(POLICY) is _home
        assert await cell.load(POLICY) is _home
        assert loader.calls == 1
        assert cell.loads == 1
        assert cell.state is UnitState.READY

    async def test_async_loader(self) -> None:
        async def load() -> object:
            await anyio.sleep(0)
            return _home

        cell = UnitCell("Home", load)
        assert await cell.load(POLICY) is _home

    async def test_module_result_uses_view_attribute(self) -> None:
        module = types.ModuleType("home_module")
        module.view = _home  # type: ignore[attr-defined]

        cell = UnitCell("Home", lambda: module)
        assert await cell.load(POLICY) is _home

    async def test_module_without_view_fails(self) -> None:
        cell = UnitCell("Home", lambda: types.ModuleType("empty"))

        with pytest.raises(UnitLoadError, match="no 'view' attribute"):
            await cell.load(POLICY)

    async def test_non_renderable_result_fails(self) -> None:
        cell = UnitCell("Home", lambda: 42)

        with pytest.raises(UnitLoadError, match="returned int"):
            await cell.load(POLICY)

    def test_value_before_ready_raises(self) -> None:
        cell = UnitCell("Home", _Counter())

        assert cell.state is UnitState.UNRESOLVED
        with pytest.raises(RuntimeError, match="not ready"):
            _ = cell.value


class TestSingleFlight:
    async def test_concurrent_loads_share_one_call(self) -> None:
        gate = anyio.Event()
        calls = 0
        results: list[object] = []

        async def load() -> object:
            nonlocal calls
            calls += 1
            await gate.wait()
            return _home

        cell = UnitCell("Home", load)

        async def consume() -> None:
            results.append(await cell.load(POLICY))

        async with anyio.create_task_group() as tg:
            for _ in range(3):
                tg.start_soon(consume)
            await anyio.sleep(0.01)
            assert cell.state is UnitState.LOADING
            gate.set()

        assert calls == 1
        assert results == [_home, _home, _home]

    async def test_waiters_see_failure(self) -> None:
        gate = anyio.Event()
        errors: list[BaseException] = []

        async def load() -> object:
            await gate.wait()
            raise RuntimeError("boom")

        cell = UnitCell("Home", load)

        async def consume() -> None:
            try:
                await cell.load(POLICY)
            except UnitLoadError as exc:
                errors.append(exc)

        async with anyio.create_task_group() as tg:
            tg.start_soon(consume)
            tg.start_soon(consume)
            await anyio.sleep(0.01)
            gate.set()

        assert len(errors) == 2
        assert all(isinstance(exc, UnitLoadError) for exc in errors)
        assert cell.loads == 1


class TestFailure:
    async def test_failure_sets_failed_state(self) -> None:
        cell = UnitCell("Home", _Counter(failures=5))

        with pytest.raises(UnitLoadError) as exc_info:
            await cell.load(POLICY)

        assert cell.state is UnitState.FAILED
        assert cell.error is exc_info.value
        assert exc_info.value.reason == "RuntimeError: boom 1"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_retry_recovers(self) -> None:
        loader = _Counter(failures=1)
        cell = UnitCell("Home", loader)

        value = await cell.load(LoadPolicy(timeout=1.0, retries=1, retry_delay=0))

        assert value is _home
        assert loader.calls == 2
        assert cell.loads == 1

    async def test_retries_exhausted(self) -> None:
        loader = _Counter(failures=5)
        cell = UnitCell("Home", loader)

        with pytest.raises(UnitLoadError, match="boom 3"):
            await cell.load(LoadPolicy(timeout=1.0, retries=2, retry_delay=0))
        assert loader.calls == 3

    async def test_failed_cell_loads_again(self) -> None:
        loader = _Counter(failures=1)
        cell = UnitCell("Home", loader)

        with pytest.raises(UnitLoadError):
            await cell.load(POLICY)
        assert await cell.load(POLICY) is _home
        assert cell.state is UnitState.READY
        assert cell.error is None
        assert cell.loads == 2

    async def test_timeout(self) -> None:
        async def load() -> object:
            await anyio.sleep(5)
            return _home

        cell = UnitCell("Home", load)

        with pytest.raises(UnitLoadTimeout) as exc_info:
            await cell.load(LoadPolicy(timeout=0.01, retries=0, retry_delay=0))
        assert exc_info.value.timeout == 0.01
        assert cell.state is UnitState.FAILED

    async def test_loader_timeout_error_is_plain_failure(self) -> None:
        def load() -> object:
            raise TimeoutError("socket read timed out")

        cell = UnitCell("Home", load)

        with pytest.raises(UnitLoadError) as exc_info:
            await cell.load(POLICY)

        assert not isinstance(exc_info.value, UnitLoadTimeout)
        assert exc_info.value.reason == "TimeoutError: socket read timed out"
        assert isinstance(exc_info.value.__cause__, TimeoutError)


class TestCancellation:
    async def test_cancelled_load_resets_cell(self) -> None:
        started = anyio.Event()
        first = True

        async def load() -> object:
            nonlocal first
            if first:
                first = False
                started.set()
                await anyio.sleep_forever()
            return _home

        cell = UnitCell("Home", load)

        async with anyio.create_task_group() as tg:
            tg.start_soon(cell.load, POLICY)
            await started.wait()
            tg.cancel_scope.cancel()

        assert cell.state is UnitState.UNRESOLVED
        assert await cell.load(POLICY) is _home
        assert cell.loads == 2
