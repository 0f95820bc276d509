"""Scheduling and future helpers on top of asyncio.

The engine never blocks. Whenever it needs to wait for "the next turn" or for a future, it relies
on the subroutines here, which in turn rely on the asyncio event loop. Unless the user passes an
explicit event loop, the running event loop is used, and it is looked up lazily: a routine that
only yields synchronous tasks can run without any event loop at all.
"""

import asyncio
import concurrent.futures as _cf
import inspect
import typing as tp


__all__ = ["get_loop", "call_soon", "is_future_like", "as_future", "on_done"]


def get_loop(loop: tp.Optional[asyncio.AbstractEventLoop] = None) -> asyncio.AbstractEventLoop:
    """Returns the given event loop, or the running one if None is given.

    Raises
    ------
    RuntimeError
        if no event loop is given and none is running
    """
    return asyncio.get_running_loop() if loop is None else loop


def call_soon(
    callback, *args, loop: tp.Optional[asyncio.AbstractEventLoop] = None
) -> asyncio.Handle:
    """Schedules a callback to be invoked on the next turn of the event loop.

    This is the 'schedule for next turn' primitive of flatback. It plays the role of a zero-delay
    timer. The callback is never invoked within the current synchronous turn.
    """
    return get_loop(loop).call_soon(callback, *args)


def is_future_like(value) -> bool:
    """Checks whether a value is something flatback can await on.

    That includes asyncio futures and tasks, :class:`concurrent.futures.Future` instances and
    awaitables such as coroutine objects.
    """
    if asyncio.isfuture(value) or isinstance(value, _cf.Future):
        return True
    return inspect.isawaitable(value)


def as_future(value, loop: tp.Optional[asyncio.AbstractEventLoop] = None) -> asyncio.Future:
    """Turns a future-like value into an asyncio future bound to the given loop."""
    if asyncio.isfuture(value):
        return value
    loop = get_loop(loop)
    if isinstance(value, _cf.Future):
        return asyncio.wrap_future(value, loop=loop)
    return asyncio.ensure_future(value, loop=loop)


def on_done(
    value,
    callback: tp.Callable[[tp.Optional[BaseException], object], None],
    loop: tp.Optional[asyncio.AbstractEventLoop] = None,
):
    """Invokes `callback(error, result)` once a future-like value completes.

    The callback is invoked on the turn after the one in which the future's own completion
    notification runs, never inside it. A cancelled future is reported with a fresh
    :class:`asyncio.CancelledError`.

    Parameters
    ----------
    value : object
        a future-like value, see :func:`is_future_like`
    callback : function
        function taking `(error, result)`. Exactly one of them is meaningful: `error` is None on
        success.
    loop : asyncio.AbstractEventLoop, optional
        the event loop to use. Default is the running event loop.
    """
    loop = get_loop(loop)
    future = as_future(value, loop=loop)

    def _done(fut):
        if fut.cancelled():
            loop.call_soon(callback, asyncio.CancelledError(), None)
            return
        e = fut.exception()
        if e is not None:
            loop.call_soon(callback, e, None)
        else:
            loop.call_soon(callback, None, fut.result())

    future.add_done_callback(_done)
