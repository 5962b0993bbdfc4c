import asyncio

from stockwatch.market.throttle import RequestThrottle


async def test_first_call_does_not_wait(throttle, clock):
    await throttle.acquire()

    assert clock.sleeps == []
    assert throttle.last_call == 1_000.0


async def test_second_call_waits_out_the_interval(throttle, clock):
    await throttle.acquire()
    clock.advance(5)

    await throttle.acquire()

    assert clock.sleeps == [7.0]
    assert throttle.last_call == 1_012.0


async def test_no_wait_once_interval_elapsed(throttle, clock):
    await throttle.acquire()
    clock.advance(20)

    await throttle.acquire()

    assert clock.sleeps == []


async def test_concurrent_callers_are_spaced_apart(throttle, clock):
    starts: list[float] = []

    async def call() -> None:
        await throttle.acquire()
        starts.append(clock())

    await asyncio.gather(call(), call(), call())

    assert starts == [1_000.0, 1_012.0, 1_024.0]
    assert all(b - a >= throttle.min_interval for a, b in zip(starts, starts[1:]))


async def test_zero_interval_never_sleeps(clock):
    throttle = RequestThrottle(min_interval=0, clock=clock, sleep=clock.sleep)

    for _ in range(3):
        await throttle.acquire()

    assert clock.sleeps == []
