"""Customised logging.

This module extends Python's package `logging`_ with some customisation made specifically for
flatback. Instead of:

.. code-block:: python

   import logging

You do:

.. code-block:: python

   from flatback import logg

It will import the logging package plus the additional stuff implemented here.

We use acronym `logg` instead of `log` to avoid naming conflict with the mathematical `log`
function. The default logger of flatback, :data:`logger`, only lets warnings and above through to
the terminal. Invoke :func:`set_level` to watch the engine at work:

.. code-block:: python

   from flatback import logg
   logg.set_level(logg.DEBUG)

Records also propagate to the root logger, so applications can capture them with their own
handlers.

Please see Python package `logging`_ for more details.

.. _logging:
   https://docs.python.org/3/library/logging.html
"""

from logging import *
import shutil as _sh
import typing as tp
from colorama import Fore
from colorama import init as _colorama_init

_colorama_init()

from flatback import traceback


__all__ = [
    "ColouredLoggerAdapter",
    "make_logger",
    "set_level",
    "logger",
]


class ColouredLoggerAdapter(LoggerAdapter):
    """Logger breaking multi-line messages into one record per line, coloured by level."""

    def __init__(self, logger, extra=None):
        super().__init__(logger, extra)

    def process(self, msg: tp.Union[str, bytes], kwargs):
        if isinstance(msg, bytes):
            msg = msg.decode()
        return (msg, kwargs)

    # ----- break mutli-line messages -----

    def _log_lines(self, level: int, colour: str, msg, *args, **kwargs):
        if not self.isEnabledFor(level):
            return
        if isinstance(msg, bytes):
            msg = msg.decode()
        elif not isinstance(msg, str):
            msg = str(msg)
        if args:  # format once so that each line is logged verbatim
            msg = msg % args
        for m in msg.split("\n"):
            self.log(level, colour + m, **kwargs)

    def critical(self, msg: tp.Union[str, bytes], *args, **kwargs):
        self._log_lines(CRITICAL, Fore.LIGHTRED_EX, msg, *args, **kwargs)

    def error(self, msg: tp.Union[str, bytes], *args, **kwargs):
        self._log_lines(ERROR, Fore.LIGHTMAGENTA_EX, msg, *args, **kwargs)

    def warning(self, msg: tp.Union[str, bytes], *args, **kwargs):
        self._log_lines(WARNING, Fore.LIGHTYELLOW_EX, msg, *args, **kwargs)

    warn = warning

    def info(self, msg: tp.Union[str, bytes], *args, **kwargs):
        self._log_lines(INFO, Fore.LIGHTWHITE_EX, msg, *args, **kwargs)

    def debug(self, msg: tp.Union[str, bytes], *args, **kwargs):
        self._log_lines(DEBUG, Fore.LIGHTBLUE_EX, msg, *args, **kwargs)

    def debug_exception(self, exc: BaseException):
        """Logs an exception together with its traceback at debug level."""
        if not self.isEnabledFor(DEBUG):
            return
        for x in traceback.format_exc_info(type(exc), exc, exc.__traceback__):
            self.debug(x)


def make_logger(logger_name: str, level: int = WARNING):
    """Make a singleton logger.

    Parameters
    ----------
    logger_name : str
        name of the logger
    level : int
        threshold of the standard handler. Default to WARNING, which keeps the engine silent
        unless something goes wrong.

    Returns
    -------
    ColouredLoggerAdapter
        the adapter wrapping the logger. The logger itself captures everything and lets its
        standard-error handler decide.
    """

    logger = getLogger(logger_name)
    logger.setLevel(1)  # capture everything but let the handlers decide
    adapter = ColouredLoggerAdapter(logger)

    std_handler = StreamHandler()
    std_handler.setLevel(level)

    # determine some max string lengths
    column_length = _sh.get_terminal_size().columns - 13
    log_lvl_length = min(max(int(column_length * 0.03), 1), 8)
    s1 = "{}.{}s ".format(log_lvl_length, log_lvl_length)

    fmt_str = (
        Fore.CYAN
        + "%(asctime)s "
        + Fore.LIGHTGREEN_EX
        + "%(levelname)"
        + s1
        + Fore.WHITE
        + "["
        + Fore.LIGHTMAGENTA_EX
        + "%(name)s"
        + Fore.WHITE
        + "] "
        + Fore.LIGHTWHITE_EX
        + "%(message)s"
        + Fore.RESET
    )
    formatter = Formatter(fmt_str)
    formatter.default_time_format = "%a %H:%M:%S"
    std_handler.setFormatter(formatter)

    logger.handlers = [std_handler]

    return adapter


logger = make_logger("flatback")


def set_level(level: int, logger: ColouredLoggerAdapter = logger):
    """Sets the threshold of the standard handler of a logger made by :func:`make_logger`."""
    for handler in logger.logger.handlers:
        handler.setLevel(level)
