"""Fan-out of a collection of requests, resolved concurrently."""

import asyncio
import typing as tp

from .request import Report, resolve


__all__ = ["drive_collection"]


def drive_collection(
    requests: tp.Sequence,
    report: Report,
    loop: tp.Optional[asyncio.AbstractEventLoop] = None,
):
    """Resolves every request of a non-empty collection and reports their results in order.

    The requests are initiated one after another, without waiting for any of them to complete.
    The result of the i-th request lands at position i of the reported list, regardless of the
    order of completion.

    The first failure, synchronous or not, is reported immediately and ends the collection:
    requests not yet initiated at that moment are never initiated, and the outcomes of those
    already initiated are ignored when they arrive.

    Parameters
    ----------
    requests : list or tuple
        non-empty collection of requests
    report : function
        function taking `(error, result)`, invoked exactly once
    loop : asyncio.AbstractEventLoop, optional
        the event loop passed on to :func:`flatback.core.request.resolve`
    """
    n_waiting = len(requests)
    l_results = [None] * n_waiting
    done = False

    def make_report(index: int):
        def report_one(error, result):
            nonlocal n_waiting, done
            if done:
                return
            if error is not None:
                done = True
                report(error, None)
                return
            l_results[index] = result
            n_waiting -= 1
            if n_waiting == 0:
                done = True
                report(None, l_results)

        return report_one

    for index, request in enumerate(requests):
        if done:  # a synchronous failure has ended the collection
            break
        resolve(request, make_report(index), loop=loop)
