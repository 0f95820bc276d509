"""Fan-in of the completion callbacks of a task."""

from .request import Task, Report


__all__ = ["BODY_SLOT", "CompletionSlots", "drive_task"]


BODY_SLOT = 0
"""Index of the slot fired when the task's own synchronous call returns."""


class CompletionSlots:
    """The `arity + 1` single-use receivers of one task invocation.

    Slot :data:`BODY_SLOT` is fired by the aggregator itself when the task returns. Slots 1 to
    `arity` are the callbacks handed to the task. Each slot captures the positional arguments of
    its first invocation and ignores the following ones. When the last slot fires, the aggregate
    result is emitted through `report`:

    - `[]` if the task expects no callback,
    - the argument list of the only callback if it expects one,
    - the list of argument lists, one per callback, if it expects more.

    Parameters
    ----------
    arity : int
        number of callbacks expected by the task
    report : function
        function taking `(error, result)`, invoked at most once
    """

    def __init__(self, arity: int, report: Report):
        self.arity = arity
        self.report = report
        self.l_fired = [False] * (arity + 1)
        self.ll_args = [None] * (arity + 1)
        self.n_waiting = arity + 1
        self.abandoned = False

    def slot(self, index: int):
        """Returns the receiver function of a given slot."""

        def receive(*args):
            self.fire(index, args)

        return receive

    def callbacks(self) -> list:
        """Returns the receivers to pass to the task, i.e. all but the body slot."""
        return [self.slot(i) for i in range(1, self.arity + 1)]

    def fire(self, index: int, args: tuple):
        if self.l_fired[index]:
            return
        self.l_fired[index] = True
        self.ll_args[index] = list(args)
        self.n_waiting -= 1
        if self.n_waiting == 0 and not self.abandoned:
            self.report(None, self.aggregate())

    def aggregate(self) -> list:
        if self.arity == 0:
            return []
        if self.arity == 1:
            return self.ll_args[1]
        return self.ll_args[1:]

    def abandon(self, error: BaseException):
        """Gives up on the aggregate result, reporting an error instead."""
        self.abandoned = True
        self.report(error, None)


def drive_task(task: Task, report: Report):
    """Invokes a task synchronously and reports the aggregate of its callbacks.

    If invoking the task raises an exception, the exception is reported right away. The body slot
    is then never fired, so arguments already captured from callbacks are discarded and no
    aggregate result is ever emitted. Otherwise the body slot is fired with the task's return
    value, which is discarded.
    """
    slots = CompletionSlots(task.arity, report)
    try:
        returned = task.func(*slots.callbacks())
    except Exception as e:
        slots.abandon(e)
        return
    slots.fire(BODY_SLOT, (returned,))
