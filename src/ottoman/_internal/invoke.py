"""Invoke helpers — call sync or async callables uniformly.

Context factories, executors, and error handlers supplied by the user can
be ``def`` or ``async def``. This module keeps the sync/async check in
exactly one place.

Usage::

    from ottoman._internal.invoke import invoke

    result = await invoke(func, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync — returns immediately
        def context(request):
            return {"user": request.headers.get("x-user")}

        # async — awaited automatically
        async def context(request):
            return {"user": await load_user(request)}
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
