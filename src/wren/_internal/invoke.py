"""Invoke helpers — call sync or async handlers uniformly.

Route actions can be ``def`` or ``async def``. Any code that calls a
user-provided action goes through :func:`invoke` so the sync/async check
lives in exactly one place::

    result = await invoke(descriptor.action, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
