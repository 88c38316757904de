"""
In-process store for the public review feed.

The feed is loaded once and kept until a review mutation (or an explicit cache
invalidation request) clears it. Listeners are notified on every change so
other parts of the process can react to a refreshed feed.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger("service_desk.reviews")

Feed = list[dict[str, Any]]
Listener = Callable[[Optional[Feed]], None]
Loader = Callable[[], Awaitable[Feed]]


class ReviewFeedStore:
    def __init__(self):
        self._data: Optional[Feed] = None
        self._listeners: list[Listener] = []
        self._lock = asyncio.Lock()

    @property
    def data(self) -> Optional[Feed]:
        return self._data

    @property
    def is_loaded(self) -> bool:
        return self._data is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._data)
            except Exception:
                logger.exception("Review feed listener failed")

    async def get(self, loader: Loader) -> Feed:
        if self._data is not None:
            return self._data
        async with self._lock:
            if self._data is None:
                self._data = await loader()
                self.notify()
        return self._data

    async def refresh(self, loader: Loader) -> Feed:
        async with self._lock:
            self._data = await loader()
        self.notify()
        return self._data

    def invalidate(self) -> None:
        if self._data is None:
            return
        self._data = None
        logger.info("Review feed invalidated")
        self.notify()


review_feed = ReviewFeedStore()


def get_review_feed() -> ReviewFeedStore:
    return review_feed
