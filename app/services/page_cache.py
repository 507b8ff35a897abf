import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from app.schemas.blog import PostView
from app.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    view: PostView
    generated_at: float


class PageCache:
    """
    Process-wide store of generated post pages.

    Entries older than ``ttl_seconds`` are still served, but flag themselves as
    stale so the caller can regenerate them in the background. At most one
    regeneration per key is in flight at a time.
    """

    def __init__(
        self, ttl_seconds: int = settings.REVALIDATE_SECONDS, clock=time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._refreshing: Dict[str, asyncio.Task] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def put(self, key: str, view: PostView) -> None:
        self._entries[key] = CacheEntry(view=view, generated_at=self._clock())

    def invalidate(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def is_stale(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.generated_at >= self.ttl_seconds

    def is_refreshing(self, key: str) -> bool:
        return key in self._refreshing

    def schedule_refresh(
        self, key: str, regenerate: Callable[[str], Awaitable[None]]
    ) -> asyncio.Task:
        task = self._refreshing.get(key)
        if task is not None:
            return task

        task = asyncio.create_task(regenerate(key), name=f"revalidate:{key}")
        self._refreshing[key] = task
        task.add_done_callback(lambda _: self._refreshing.pop(key, None))
        logger.debug(f"Scheduled regeneration for {key}")
        return task

    async def drain(self) -> None:
        """Wait for every in-flight regeneration to settle."""
        if self._refreshing:
            await asyncio.gather(*self._refreshing.values(), return_exceptions=True)

    async def shutdown(self) -> None:
        for task in list(self._refreshing.values()):
            task.cancel()
        await self.drain()


# Shared across requests, like the framework's static page store
page_cache = PageCache()
