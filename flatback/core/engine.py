"""The engine stepping a routine from one yield to the next.

A routine is a generator. Each value it yields is a request, resolved by
:func:`flatback.core.request.resolve`. The outcome of the request is sent back into the routine
as the value of the yield expression, or raised at the yield if the request failed. This goes on
until the routine returns or lets an exception escape.
"""

import asyncio
import inspect
import typing as tp

from flatback.logg import logger
from .request import resolve


__all__ = ["Engine"]


_NOTHING = object()


class Engine:
    """Drives one routine until it finishes.

    Outcomes reported while the engine is still inside :func:`resolve`, i.e. synchronously, are
    picked up by the stepping loop instead of recursing, so the stack does not grow with the
    number of consecutive synchronous yields. Outcomes reported later resume the routine right
    away, within the turn that reported them.

    Parameters
    ----------
    routine : generator
        the routine to drive, freshly constructed
    on_return : function, optional
        invoked with the return value of the routine once it returns
    on_raise : function, optional
        invoked with the exception escaping from the routine. If not provided, the exception is
        re-raised to whoever caused the routine to step: the caller of :meth:`start`, or the event
        loop if the step was caused by a callback of the event loop.
    loop : asyncio.AbstractEventLoop, optional
        the event loop to defer to. Default is the running event loop, looked up when needed.
    """

    def __init__(
        self,
        routine: tp.Generator,
        on_return: tp.Optional[tp.Callable[[object], None]] = None,
        on_raise: tp.Optional[tp.Callable[[BaseException], None]] = None,
        loop: tp.Optional[asyncio.AbstractEventLoop] = None,
    ):
        if not inspect.isgenerator(routine):
            raise TypeError(
                "A routine must be a generator, as returned by invoking a generator function. "
                "Got: {!r}.".format(routine)
            )
        self.routine = routine
        self.on_return = on_return
        self.on_raise = on_raise
        self.loop = loop
        self.finished = False
        self._stepping = False
        self._pending = _NOTHING

    def __repr__(self):
        return "Engine({})".format(getattr(self.routine, "__qualname__", self.routine))

    def start(self):
        """Runs the routine until its first yield."""
        logger.debug("{}: started.".format(self))
        self.resume(None, None)

    def resume(self, error: tp.Optional[BaseException] = None, value=_NOTHING):
        """Resumes the routine with an outcome.

        Parameters
        ----------
        error : BaseException, optional
            if provided, the exception is raised inside the routine at its current yield
        value : object
            otherwise, the value the current yield evaluates to. Default is `[]`.
        """
        if value is _NOTHING:
            value = []

        if self._stepping:  # reported synchronously from within resolve()
            self._pending = (error, value)
            return

        self._stepping = True
        try:
            while True:
                request = self._step(error, value)
                if request is _NOTHING:
                    return

                self._pending = _NOTHING
                resolve(request, self._make_report(), loop=self.loop)
                if self._pending is _NOTHING:  # to be reported on a later turn
                    return
                error, value = self._pending
        finally:
            self._stepping = False

    def _step(self, error, value):
        try:
            if error is not None:
                return self.routine.throw(error)
            return self.routine.send(value)
        except StopIteration as e:
            self._finish()
            logger.debug("{}: returned.".format(self))
            if self.on_return is not None:
                self.on_return(e.value)
        except Exception as e:
            self._finish()
            logger.debug("{}: raised {}.".format(self, type(e).__name__))
            logger.debug_exception(e)
            if self.on_raise is None:
                raise
            self.on_raise(e)
        return _NOTHING

    def _finish(self):
        self.finished = True
        self._pending = _NOTHING

    def _make_report(self):
        """Makes the single-use function receiving the outcome of the current request."""
        reported = False

        def report(error, result):
            nonlocal reported
            if reported:
                logger.debug("{}: outcome reported twice, ignored.".format(self))
                return
            reported = True
            self.resume(error, result)

        return report
