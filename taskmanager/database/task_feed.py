"""Live task query support for taskmanager.

Repositories publish the owner id after every successful write; watchers
receive a fresh snapshot of that owner's tasks each time. Watchers live on
an asyncio event loop, publishers may run on any thread.
"""

import asyncio
import logging
import threading
from typing import AsyncIterator, Callable, Dict, List, Set, Tuple, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")

_Subscriber = Tuple[asyncio.AbstractEventLoop, "asyncio.Queue[None]"]


class TaskFeed:
    """Per-owner change notifications."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: Dict[str, List[_Subscriber]] = {}

    def subscribe(self, user_id: str) -> "asyncio.Queue[None]":
        """Register a watcher on the running event loop."""
        loop = asyncio.get_running_loop()
        queue: "asyncio.Queue[None]" = asyncio.Queue()
        with self._lock:
            self._subscribers.setdefault(user_id, []).append((loop, queue))
        return queue

    def unsubscribe(self, user_id: str, queue: "asyncio.Queue[None]") -> None:
        with self._lock:
            subscribers = self._subscribers.get(user_id, [])
            self._subscribers[user_id] = [s for s in subscribers if s[1] is not queue]
            if not self._subscribers[user_id]:
                del self._subscribers[user_id]

    def subscriber_count(self, user_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(user_id, []))

    def publish(self, user_id: str) -> None:
        """Signal that the owner's tasks changed. Safe from any thread."""
        with self._lock:
            subscribers = list(self._subscribers.get(user_id, []))
        closed: Set[int] = set()
        for loop, queue in subscribers:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, None)
            except RuntimeError:
                # Watcher's event loop is gone.
                closed.add(id(queue))
        if closed:
            with self._lock:
                remaining = [s for s in self._subscribers.get(user_id, []) if id(s[1]) not in closed]
                if remaining:
                    self._subscribers[user_id] = remaining
                else:
                    self._subscribers.pop(user_id, None)
            logger.debug(f"Dropped {len(closed)} closed watcher(s) for user {user_id}")

    async def watch(self, user_id: str, load: Callable[[], S]) -> AsyncIterator[S]:
        """Yield `load()` now and again after every change for `user_id`.

        Changes that arrive while a snapshot is being consumed are coalesced
        into a single follow-up snapshot. `load` runs in a worker thread so
        blocking database reads stay off the event loop.
        """
        queue = self.subscribe(user_id)
        try:
            yield await asyncio.to_thread(load)
            while True:
                await queue.get()
                while not queue.empty():
                    queue.get_nowait()
                yield await asyncio.to_thread(load)
        finally:
            self.unsubscribe(user_id, queue)


# Process-wide feed shared by repositories and stream endpoints
task_feed = TaskFeed()


def get_task_feed() -> TaskFeed:
    """Get the process-wide task feed (dependency for FastAPI)."""
    return task_feed
