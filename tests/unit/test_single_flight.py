"""Testes da guarda single-flight por processo."""

from __future__ import annotations

import asyncio

import pytest

from hr_bot.application.single_flight import SingleFlightGuard


class TestSingleFlightGuard:
    @pytest.mark.asyncio
    async def test_second_holder_is_refused_while_busy(self) -> None:
        guard = SingleFlightGuard()

        async with guard.try_hold() as first:
            assert first is True
            assert guard.busy is True
            async with guard.try_hold() as second:
                assert second is False

        assert guard.busy is False

    @pytest.mark.asyncio
    async def test_guard_is_released_after_exception(self) -> None:
        guard = SingleFlightGuard()

        with pytest.raises(RuntimeError):
            async with guard.try_hold():
                raise RuntimeError("boom")

        async with guard.try_hold() as held:
            assert held is True

    @pytest.mark.asyncio
    async def test_concurrent_holders_only_one_enters(self) -> None:
        guard = SingleFlightGuard()
        entered: list[int] = []

        async def worker(n: int) -> None:
            async with guard.try_hold() as held:
                if held:
                    entered.append(n)
                    await asyncio.sleep(0.01)

        await asyncio.gather(*(worker(n) for n in range(5)))
        assert len(entered) == 1

    @pytest.mark.asyncio
    async def test_disabled_guard_always_admits(self) -> None:
        guard = SingleFlightGuard(enabled=False)
        async with guard.try_hold() as first, guard.try_hold() as second:
            assert (first, second) == (True, True)
