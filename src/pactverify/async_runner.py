"""Helpers to run provider-state hooks that are coroutines from sync code."""

from __future__ import annotations

import asyncio
import inspect
import threading
from queue import Queue
from typing import TYPE_CHECKING, Any

from pactverify.exceptions import AsyncExecutionError

if TYPE_CHECKING:
    from collections.abc import Coroutine


def _run_in_background_thread[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine in a dedicated thread with its own event loop.

    Args:
        coro: The coroutine to run.

    Raises:
        AsyncExecutionError: If the coroutine raises an exception.

    Returns:
        The result of the coroutine.
    """
    output: Queue[T | BaseException] = Queue(maxsize=1)

    def _runner() -> None:
        try:
            output.put(asyncio.run(coro))
        except BaseException as exc:
            output.put(exc)

    thread = threading.Thread(target=_runner, daemon=True)
    thread.start()
    thread.join()

    result = output.get()
    if isinstance(result, BaseException):
        raise AsyncExecutionError(result=result) from result
    return result


def run_async[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion from sync code.

    Without a running loop the coroutine runs through `asyncio.run`. Under a running
    loop (a hook registered from an async test, for instance) it runs on a dedicated
    thread so the verifier can stay blocking.

    Args:
        coro: The coroutine to run.

    Returns:
        The result of the coroutine.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    return _run_in_background_thread(coro)


def resolve_hook_result(result: object) -> object:
    """Await a hook's return value when the hook is a coroutine function.

    Args:
        result: Value returned by a provider-state hook.

    Returns:
        object: The plain result, or the awaited coroutine result.
    """
    if inspect.iscoroutine(result):
        return run_async(result)
    return result
