"""Await-if-needed calls into user code.

Components, ``load`` and ``metadata`` functions, ``on_error`` callbacks
and cache stores may be plain functions or coroutines; callers never
have to know which.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* with the given arguments, awaiting an awaitable result.

    ``async def`` functions, sync functions returning a coroutine or
    future, and plain values all resolve to the final value::

        data = await invoke(Page.load, context)
        await invoke(store.set, key, value, ttl)
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result
