"""Asyncio helpers."""

from __future__ import annotations

import asyncio
import inspect
import sys
from collections.abc import AsyncIterator, Coroutine
from typing import TextIO, TypeVar

_T = TypeVar("_T")

# eager_start is only available on Python 3.12+
_SUPPORTS_EAGER_START = sys.version_info >= (3, 12) and "eager_start" in inspect.signature(
    asyncio.create_task
).parameters


def create_task(
    coro: Coroutine[None, None, _T],
    *,
    name: str | None = None,
    eager_start: bool = True,
) -> asyncio.Task[_T]:
    """Create a task on the running loop, starting it eagerly where supported.

    An eagerly started task runs up to its first suspension point before this
    function returns, so a hook command is already spawned by the time the
    caller moves on to the next event.
    """
    kwargs = {"name": name} if name is not None else {}
    if _SUPPORTS_EAGER_START:
        kwargs["eager_start"] = eager_start
    return asyncio.create_task(coro, **kwargs)


async def read_lines(stream: TextIO) -> AsyncIterator[str]:
    """Yield lines from a blocking text stream without blocking the loop."""
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, stream.readline)
        if not line:
            return
        yield line
