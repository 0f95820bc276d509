import asyncio
import concurrent.futures
import threading

import pytest

import flatback
from flatback import MalformedRequestError


def test_wrap_passes_arguments_and_returns_none():
    seen = []

    @flatback.wrap
    def routine(a, b):
        seen.append((a, b))
        err, result = yield lambda callback: callback("err1", "success1")
        seen.append((err, result))

    assert routine("foo", "bar") is None
    assert seen == [("foo", "bar"), ("err1", "success1")]
    assert routine.__name__ == "routine"


def test_wrap_exposes_arity():
    def two(a, b):
        yield

    def none():
        yield

    assert flatback.wrap(two).arity == 2
    assert flatback.wrap(none).arity == 0
    assert flatback.wrap(two, arity=1).arity == 1
    assert flatback.wrap_async(two).arity == 2
    assert flatback.wrap_async(none).arity == 0


def test_wrap_raises_before_first_yield():
    @flatback.wrap
    def routine():
        raise ValueError("early")
        yield

    with pytest.raises(ValueError):
        routine()


def test_wrapped_routine_composes_as_a_task():
    @flatback.wrap
    def inner(callback):
        (value,) = yield lambda cb: cb(21)
        callback(value * 2)

    results = []

    def outer():
        (value,) = yield inner
        results.append(value)

    flatback.run(outer)
    assert results == [42]


@pytest.mark.asyncio
async def test_run():
    loop = asyncio.get_running_loop()
    events = []

    def routine():
        events.append("start")
        err, result = yield lambda cb: loop.call_soon(cb, "err2", "success2")
        events.append((err, result))

    assert flatback.run(routine) is None
    assert events == ["start"]
    await asyncio.sleep(0.01)
    assert events == ["start", ("err2", "success2")]


@pytest.mark.asyncio
async def test_run_async_resolves_with_return_value():
    def routine(a, b):
        yield
        return a + b

    assert await flatback.run_async(routine, "suc", "cess") == "success"


@pytest.mark.asyncio
async def test_run_async_rejects_with_uncaught_failure():
    def routine():
        yield lambda cb: cb()
        raise ValueError("err")

    with pytest.raises(ValueError, match="err"):
        await flatback.run_async(routine)


@pytest.mark.asyncio
async def test_run_async_rejects_with_failure_before_first_yield():
    def broken_constructor(x):
        raise KeyError(x)

    with pytest.raises(KeyError):
        await flatback.run_async(broken_constructor, "construct")

    def routine():
        raise LookupError("first step")
        yield

    with pytest.raises(LookupError):
        await flatback.run_async(routine)


@pytest.mark.asyncio
async def test_run_async_rejects_non_generator_routine():
    future = flatback.run_async(lambda: 1)
    assert isinstance(future, asyncio.Future)
    with pytest.raises(TypeError, match="must be a generator"):
        await future


@pytest.mark.asyncio
async def test_wrap_async():
    @flatback.wrap_async
    def routine(a, b):
        (value,) = yield lambda cb: cb(a * b)
        return value

    future = routine(6, 7)
    assert isinstance(future, asyncio.Future)
    assert await future == 42


def test_once_spreads_callback_arguments():
    received = []
    flatback.once(lambda callback: callback("err", "success"), lambda *args: received.append(args))
    assert received == [("err", "success")]


def test_once_ignores_all_but_first_call_to_each_callback():
    received = []

    def body(callback1, callback2):
        callback1("err1", "success1")
        callback1("ignored err", "ignored success")
        callback2("err2", "success2")

    flatback.once(body, lambda r1, r2: received.append((r1, r2)))
    assert received == [(["err1", "success1"], ["err2", "success2"])]


@pytest.mark.asyncio
async def test_once_with_rejected_future():
    loop = asyncio.get_running_loop()
    future = loop.create_future()
    future.set_exception(ValueError("err"))
    done = loop.create_future()
    flatback.once(future, lambda result: None, done.set_result)

    err = await done
    assert isinstance(err, ValueError)
    assert str(err) == "err"


@pytest.mark.asyncio
async def test_once_with_resolved_future_passes_value_as_is():
    loop = asyncio.get_running_loop()
    future = loop.create_future()
    future.set_result(["a", "b"])
    done = loop.create_future()
    flatback.once(future, done.set_result)

    assert await done == ["a", "b"]


def test_once_without_failure_handler_raises():
    with pytest.raises(MalformedRequestError):
        flatback.once(42, lambda *args: None)

    with pytest.raises(ZeroDivisionError):
        flatback.once([lambda cb: cb(), lambda cb: 1 / 0], lambda *args: None)


@pytest.mark.asyncio
async def test_concurrent_future_from_another_thread():
    cf_future = concurrent.futures.Future()

    def routine():
        value = yield cf_future
        return (value, threading.current_thread() is threading.main_thread())

    future = flatback.run_async(routine)
    threading.Timer(0.01, cf_future.set_result, args=("threaded",)).start()
    assert await future == ("threaded", True)


@pytest.mark.asyncio
async def test_errors_can_be_caught():
    caught = []

    @flatback.wrap
    def nested(callback):
        yield lambda s: s()
        raise AssertionError("oops3")

    def routine():
        bad_yields = [
            180,
            "360",
            routine,
            lambda callback: _fail("oops1"),
            lambda callback: (callback(), _fail("oops2")),
            nested,
            [lambda callback: _fail("oops4")],
            [[], lambda callback: _fail("oops5"), lambda callback: _fail("not oops5")],
        ]
        for bad in bad_yields:
            try:
                yield bad
            except Exception as e:
                caught.append(e)

    await flatback.run_async(routine)

    assert [type(e).__name__ for e in caught] == [
        "MalformedRequestError",
        "MalformedRequestError",
        "MalformedRequestError",
        "AssertionError",
        "AssertionError",
        "AssertionError",
        "AssertionError",
        "AssertionError",
    ]
    assert "int: 180" in str(caught[0])
    assert "str: '360'" in str(caught[1])
    assert "generator function:" in str(caught[2])
    for e, msg in zip(caught[3:], ["oops1", "oops2", "oops3", "oops4", "oops5"]):
        assert str(e) == msg


def _fail(msg):
    raise AssertionError(msg)


@pytest.mark.asyncio
async def test_parallel_usage_order():
    loop = asyncio.get_running_loop()
    events = []

    def make_routine(name, delay):
        @flatback.wrap
        def routine(outer_callback):
            events.append(f"{name} start")

            def timed(inner_callback):
                def fire():
                    events.append(f"{name} timeout callback sending")
                    inner_callback("result1")
                    events.append(f"{name} timeout callback sent")

                loop.call_later(delay, fire)

            result1 = yield timed

            def immediate(inner_callback):
                events.append(f"{name} sync callback sending")
                inner_callback("result2")
                events.append(f"{name} sync callback sent")

            result2 = yield immediate

            events.append(f"{name} outer callback sending")
            outer_callback(result1, result2)
            events.append(f"{name} outer callback sent")

        return routine

    def main_routine():
        def both(callback1, callback2):
            make_routine("first", 0.05)(callback1)
            make_routine("second", 0.1)(callback2)

        yield both
        events.append("empty yield sending")
        yield
        events.append("empty yield sent")

    await flatback.run_async(main_routine)

    assert events == [
        "first start",
        "second start",
        "first timeout callback sending",
        "first sync callback sending",
        "first sync callback sent",
        "first outer callback sending",
        "first outer callback sent",
        "first timeout callback sent",
        "second timeout callback sending",
        "second sync callback sending",
        "second sync callback sent",
        "second outer callback sending",
        "empty yield sending",
        "second outer callback sent",
        "second timeout callback sent",
        "empty yield sent",
    ]
