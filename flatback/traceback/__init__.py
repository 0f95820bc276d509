"""Additional utitlities dealing with traceback and errors.

Instead of:

.. code-block:: python

   import traceback

You do:

.. code-block:: python

   from flatback import traceback

It will import the traceback package plus the additional stuff implemented here, notably
:class:`MalformedRequestError` which is raised inside a routine that yields something the engine
does not know how to drive.

Please see Python package `traceback`_ for more details.

.. _traceback:
   https://docs.python.org/3/library/traceback.html
"""

import traceback as _tb
from traceback import *


__all__ = [
    "format_exc_info",
    "LogicError",
    "MalformedRequestError",
]


def format_exc_info(exc_type, exc_value, exc_traceback):
    """Formats (exception type, exception value, traceback) into multiple lines."""
    statements = _tb.format_exception(exc_type, exc_value, exc_traceback)
    statements = "".join(statements)
    return statements.split("\n")


class LogicError(RuntimeError):
    """An error in the logic, defined by a message and a debugging dictionary.

    The user can optionally provide the error that caused this error.
    """

    def __init__(self, msg, debug=None, causing_error=None):
        super().__init__(msg, {} if debug is None else debug, causing_error)

    @property
    def msg(self):
        return self.args[0]

    @property
    def debug(self):
        return self.args[1]

    def __str__(self):
        l_lines = []

        causing_error = self.args[2]
        if causing_error:
            l_lines.append(f"With {type(causing_error).__name__}" + " {")
            for line in str(causing_error).split("\n"):
                l_lines.append("  " + line)
            l_lines.append("} " + f"{type(causing_error).__name__}")

        l_lines.append(f"{self.args[0]}")

        debug = self.args[1]
        if debug:
            l_lines.append("Where:")
            for k, v in debug.items():
                l_lines.append(f"  {k}: {v!r}")

        return "\n".join(l_lines)


class MalformedRequestError(LogicError, TypeError):
    """Raised when a routine yields a value that is not a valid request.

    A valid request is None, a callable (or :class:`flatback.Task`), a future or awaitable, or a
    list/tuple of these. The error is thrown into the routine at the offending yield, so the
    routine can catch it like any other failure. Being a :class:`TypeError`, it is told apart from
    the failures raised by the tasks themselves.

    Parameters
    ----------
    category : str
        the runtime category of the offending value, e.g. 'int' or 'generator function'
    value : object
        the offending value
    """

    def __init__(self, category: str, value):
        msg = (
            "You may only yield a callable, a future, None or a list of these to flatback. "
            "Received {}: {!r}".format(category, value)
        )
        super().__init__(msg, debug={"category": category, "value": value})

    @property
    def category(self):
        return self.debug["category"]

    @property
    def value(self):
        return self.debug["value"]
