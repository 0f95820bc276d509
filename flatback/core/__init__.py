"""The core of flatback: requests, their aggregators, the engine and the entry points."""

from .request import *
from .fanin import *
from .fanout import *
from .engine import *
from .adapters import *


__api__ = [
    "RequestKind",
    "Task",
    "task",
    "declared_arity",
    "classify",
    "resolve",
    "BODY_SLOT",
    "CompletionSlots",
    "drive_task",
    "drive_collection",
    "Engine",
    "wrap",
    "run",
    "run_async",
    "wrap_async",
    "once",
]
