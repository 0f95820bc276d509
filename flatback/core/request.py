"""Requests that a routine may yield, and how each of them gets resolved.

A routine suspends itself by yielding a request. There are four shapes of request:

- None : nothing to do. The routine is resumed with `[]` on the next turn of the event loop.
- a task : a callable expecting a fixed number of completion callbacks, see :class:`Task`. The
  routine is resumed with the arguments passed to the callbacks, once all of them have been
  invoked and the callable itself has returned.
- a collection : a list or tuple of requests, each resolved concurrently. The routine is resumed
  with the list of their results, in the same order.
- a future : an asyncio future, a :class:`concurrent.futures.Future` or any awaitable. The routine
  is resumed with its result, or the exception it finished with is raised at the yield, on the
  turn after the future completes.

Anything else makes the yield raise :class:`flatback.traceback.MalformedRequestError`.
"""

import enum
import inspect
import asyncio
import typing as tp

from flatback import aio
from flatback.traceback import MalformedRequestError
from flatback.logg import logger


__all__ = [
    "RequestKind",
    "Task",
    "task",
    "declared_arity",
    "classify",
    "resolve",
    "Report",
]


Report = tp.Callable[[tp.Optional[BaseException], object], None]
"""A function receiving the outcome of a request as `(error, result)`.

`error` is None on success, in which case `result` holds the result.
"""


class RequestKind(enum.Enum):
    NONE = "none"
    TASK = "task"
    COLLECTION = "collection"
    FUTURE = "future"


_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def declared_arity(func) -> int:
    """Returns the number of completion callbacks a callable declares.

    An explicit integer attribute `arity`, which the invocables returned by :func:`flatback.wrap`
    and :func:`task` carry, takes precedence. Otherwise the positional parameters without a
    default value are counted, stopping at the first one with a default. Callables without an
    inspectable signature declare no callback.
    """
    arity = getattr(func, "arity", None)
    if isinstance(arity, int) and not isinstance(arity, bool):
        return arity

    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return 0

    n = 0
    for param in sig.parameters.values():
        if param.kind not in _POSITIONAL_KINDS or param.default is not param.empty:
            break
        n += 1
    return n


class Task:
    """A callable together with the number of completion callbacks it expects.

    When yielded, the callable is invoked synchronously with `arity` callbacks. Each callback
    only honours its first invocation. The routine is resumed once every callback has been
    invoked and the callable has returned, in whichever order these happen.

    Parameters
    ----------
    func : callable
        the function to invoke. Its return value is discarded.
    arity : int, optional
        number of callbacks to pass to the function. If not provided, it is determined by
        :func:`declared_arity`.

    Examples
    --------
    >>> def read_both(cb_a, cb_b):
    ...     stream_a.read(cb_a)
    ...     stream_b.read(cb_b)
    >>> (err_a, data_a), (err_b, data_b) = yield Task(read_both, 2)
    """

    __slots__ = ("func", "arity")

    def __init__(self, func: tp.Callable, arity: tp.Optional[int] = None):
        if not callable(func):
            raise TypeError("Argument 'func' must be callable. Got: {!r}.".format(func))
        if arity is None:
            arity = declared_arity(func)
        elif arity < 0:
            raise ValueError("Argument 'arity' must be non-negative. Got: {}.".format(arity))
        self.func = func
        self.arity = arity

    def __call__(self, *callbacks):
        return self.func(*callbacks)

    def __repr__(self):
        return "Task({!r}, arity={})".format(self.func, self.arity)


def task(arity: int):
    """Decorator declaring how many completion callbacks a function expects.

    >>> @task(1)
    ... def fetch(callback, url=DEFAULT_URL):
    ...     http_get(url, callback)
    """

    def decorator(func):
        return Task(func, arity)

    return decorator


def _category(value) -> str:
    if inspect.isgeneratorfunction(value):
        return "generator function"
    if inspect.isgenerator(value):
        return "generator"
    return type(value).__name__


def classify(request) -> RequestKind:
    """Determines the shape of a request.

    Raises
    ------
    flatback.traceback.MalformedRequestError
        if the request is not of any known shape
    """
    if request is None:
        return RequestKind.NONE
    if isinstance(request, (list, tuple)):
        return RequestKind.COLLECTION
    if isinstance(request, Task):
        return RequestKind.TASK
    # generators are routines, and generator functions are routine constructors, not tasks
    if inspect.isgenerator(request) or inspect.isgeneratorfunction(request):
        raise MalformedRequestError(_category(request), request)
    if aio.is_future_like(request):
        return RequestKind.FUTURE
    if callable(request):
        return RequestKind.TASK
    raise MalformedRequestError(_category(request), request)


def _resolve_later(report: Report, loop: tp.Optional[asyncio.AbstractEventLoop]):
    try:
        aio.call_soon(report, None, [], loop=loop)
    except RuntimeError as e:  # no event loop to defer to
        report(e, None)


def resolve(request, report: Report, loop: tp.Optional[asyncio.AbstractEventLoop] = None):
    """Drives a request and reports its outcome.

    `report(error, result)` is invoked exactly once. It is invoked synchronously if the request
    is malformed, if a task raises while being invoked, or if a task invokes all of its callbacks
    before returning. Requests None, empty collections and futures are always reported on a
    later turn of the event loop.

    Parameters
    ----------
    request : object
        the request, as yielded by a routine
    report : function
        function taking `(error, result)`
    loop : asyncio.AbstractEventLoop, optional
        the event loop to defer to. Default is the running event loop.
    """
    from .fanin import drive_task
    from .fanout import drive_collection

    try:
        kind = classify(request)
    except MalformedRequestError as e:
        logger.debug("Malformed request: {!r}.".format(request))
        report(e, None)
        return

    logger.debug("Request classified as {}: {!r}.".format(kind.value, request))
    if kind is RequestKind.NONE:
        _resolve_later(report, loop)
    elif kind is RequestKind.TASK:
        if not isinstance(request, Task):
            request = Task(request)
        drive_task(request, report)
    elif kind is RequestKind.COLLECTION:
        if len(request) == 0:
            _resolve_later(report, loop)
        else:
            drive_collection(request, report, loop=loop)
    else:
        try:
            aio.on_done(request, report, loop=loop)
        except RuntimeError as e:  # no event loop to wait on
            report(e, None)
