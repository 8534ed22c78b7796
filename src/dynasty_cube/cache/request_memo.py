"""Request-scoped memo — share one in-flight computation per key.

Learn: Several code paths in one request may ask for the same derived
data at the same time (e.g. the pick handler and the queue cleanup both
want the duplicate card ids). RequestMemo hands all of them the same
asyncio.Task, so the work runs once per request no matter how many
callers race for it. It lives on request.state and dies with the request.
"""

import asyncio
from typing import Any, Awaitable, Callable, Hashable, TypeVar

T = TypeVar("T")


class RequestMemo:
    """Per-request map of key → shared task."""

    def __init__(self):
        self._tasks: dict[Hashable, asyncio.Task] = {}

    async def get_or_create(
        self, key: Hashable, factory: Callable[[], Awaitable[T]]
    ) -> T:
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
        # shield: one caller being cancelled must not cancel the others
        return await asyncio.shield(task)

    def forget(self, key: Hashable) -> None:
        self._tasks.pop(key, None)

    def __contains__(self, key: Any) -> bool:
        return key in self._tasks
