"""Flat control flow over callbacks and futures, driven by generators.

A routine is a generator function. Wherever it would normally nest a callback, it yields instead,
and gets resumed with whatever the callbacks received:

.. code-block:: python

   import flatback

   @flatback.wrap
   def greet(path, done):
       err, data = yield lambda callback: read_file(path, callback)
       if err is not None:
           return done(err)
       yield None  # give the event loop a turn
       (e1, r1), (e2, r2) = yield [
           lambda callback: send(data, "alice", callback),
           lambda callback: send(data, "bob", callback),
       ]
       done(e1 or e2)

A routine may yield:

- None, to give the event loop a turn. The yield evaluates to `[]`.
- a callable expecting N callbacks, possibly wrapped in a :class:`Task` with an explicit N. The
  yield evaluates to the arguments of the first invocation of each callback, once all callbacks
  have been invoked and the callable has returned: `[]` for N = 0, the argument list for N = 1,
  and the list of argument lists for N >= 2. An exception raised by the callable is raised at the
  yield instead.
- a future or an awaitable. The yield evaluates to its result, or raises its exception.
- a list or tuple of these, resolved concurrently. The yield evaluates to the list of results in
  the same order. The first failure is raised at the yield.

Anything else raises :class:`MalformedRequestError` at the yield.

Deferring to the next turn and waiting on futures use the asyncio event loop, by default the
running one.
"""

from .traceback import LogicError, MalformedRequestError
from .core import *


__api__ = [
    "wrap",
    "run",
    "run_async",
    "wrap_async",
    "once",
    "Task",
    "task",
    "RequestKind",
    "classify",
    "resolve",
    "Engine",
    "LogicError",
    "MalformedRequestError",
]
