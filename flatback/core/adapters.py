"""Entry points turning routines into things the rest of the program can invoke."""

import asyncio
import functools
import typing as tp

from flatback import aio
from flatback.logg import logger
from .engine import Engine
from .request import RequestKind, classify, declared_arity, resolve


__all__ = ["wrap", "run", "run_async", "wrap_async", "once"]


def wrap(
    routine_func,
    arity: tp.Optional[int] = None,
    loop: tp.Optional[asyncio.AbstractEventLoop] = None,
):
    """Turns a generator function into a plain function that runs it and forgets about it.

    Invoking the returned function constructs the routine with the given arguments and runs it
    until its first yield. The function always returns None. An exception escaping from the
    routine is raised to the caller if it happens before the first yield, and to the event loop
    otherwise.

    Parameters
    ----------
    routine_func : function
        a generator function describing the control flow
    arity : int, optional
        the number of positional parameters the returned function declares. Default is the number
        of positional parameters without a default value of `routine_func`. This matters when the
        returned function is yielded as a task from another routine.
    loop : asyncio.AbstractEventLoop, optional
        the event loop to defer to. Default is the running event loop.

    Returns
    -------
    function
        a function returning None, with attribute `arity`

    Examples
    --------
    >>> @wrap
    ... def copy(src, dst, done):
    ...     err, data = yield lambda cb: src.read(cb)
    ...     yield lambda cb: dst.write(data, cb)
    ...     done()
    """

    @functools.wraps(routine_func)
    def invoke(*args, **kwargs):
        Engine(routine_func(*args, **kwargs), loop=loop).start()

    invoke.arity = declared_arity(routine_func) if arity is None else arity
    return invoke


def run(routine_func, loop: tp.Optional[asyncio.AbstractEventLoop] = None):
    """Constructs a routine without any argument and runs it immediately.

    Parameters
    ----------
    routine_func : function
        a generator function taking no argument
    loop : asyncio.AbstractEventLoop, optional
        the event loop to defer to. Default is the running event loop.
    """
    Engine(routine_func(), loop=loop).start()


def run_async(
    routine_func, *args, loop: tp.Optional[asyncio.AbstractEventLoop] = None, **kwargs
) -> asyncio.Future:
    """Runs a routine and returns a future holding its outcome.

    Parameters
    ----------
    routine_func : function
        a generator function describing the control flow
    args : list
        positional arguments to construct the routine with
    loop : asyncio.AbstractEventLoop, optional
        the event loop owning the future. Default is the running event loop.
    kwargs : dict
        keyword arguments to construct the routine with

    Returns
    -------
    asyncio.Future
        a future resolved with the return value of the routine, or with the exception escaping
        from it, including one raised while constructing the routine or running it to its first
        yield. Cancelling the future does not stop the routine.
    """
    loop = aio.get_loop(loop)
    future = loop.create_future()

    def on_return(value):
        if not future.done():
            future.set_result(value)

    def on_raise(e):
        if future.done():
            logger.debug("Routine raised after its future was cancelled: {!r}.".format(e))
            return
        future.set_exception(e)

    try:
        engine = Engine(
            routine_func(*args, **kwargs), on_return=on_return, on_raise=on_raise, loop=loop
        )
    except Exception as e:  # constructing the routine failed or it is not a generator
        on_raise(e)
        return future

    engine.start()
    return future


def wrap_async(
    routine_func,
    arity: tp.Optional[int] = None,
    loop: tp.Optional[asyncio.AbstractEventLoop] = None,
):
    """Turns a generator function into a function returning a future.

    Like :func:`wrap`, except that the returned function runs the routine via :func:`run_async`
    and returns the resulting future.

    Returns
    -------
    function
        a function returning an :class:`asyncio.Future`, with attribute `arity`
    """

    @functools.wraps(routine_func)
    def invoke(*args, **kwargs):
        return run_async(routine_func, *args, loop=loop, **kwargs)

    invoke.arity = declared_arity(routine_func) if arity is None else arity
    return invoke


def once(
    request,
    on_success: tp.Callable,
    on_failure: tp.Optional[tp.Callable[[BaseException], object]] = None,
    loop: tp.Optional[asyncio.AbstractEventLoop] = None,
):
    """Resolves a single request without any routine, as if it were yielded by one.

    Parameters
    ----------
    request : object
        anything a routine may yield
    on_success : function
        invoked upon success. For a future, it is invoked with the future's result. Otherwise, it
        is invoked with the elements of the result list as positional arguments, i.e. with what
        the routine would have unpacked.
    on_failure : function, optional
        invoked with the exception upon failure. If not provided, the exception is raised instead,
        to the caller if the failure is synchronous, to the event loop otherwise.
    loop : asyncio.AbstractEventLoop, optional
        the event loop to defer to. Default is the running event loop.
    """
    try:
        spread = classify(request) is not RequestKind.FUTURE
    except TypeError:  # let resolve() report it
        spread = True

    def report(error, result):
        if error is not None:
            if on_failure is None:
                raise error
            on_failure(error)
        elif spread:
            on_success(*result)
        else:
            on_success(result)

    resolve(request, report, loop=loop)
