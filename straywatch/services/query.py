"""
Stale-time cache for report queries.

Reports are always fetched in full. A query keeps the last result and
refetches only once it is older than its stale window, or on demand.
"""

import time
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from straywatch.config import get_logger
from straywatch.services.exceptions import StrayWatchError, TransportError

logger = get_logger(__name__)

T = TypeVar("T")


class Query(Generic[T]):
    """
    A cached asynchronous fetch.

    Attributes:
        data: Last successful result (``default`` until the first fetch)
        error: Error from the last failed fetch, cleared on success
        is_loading: True while a fetch is in flight
        updated_at: Clock reading of the last successful fetch
    """

    def __init__(
        self,
        name: str,
        fetcher: Callable[[], Awaitable[T]],
        *,
        default: T,
        stale_seconds: float = 30.0,
        retry: int = 1,
        enabled: Callable[[], bool] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self._fetcher = fetcher
        self._default = default
        self._stale_seconds = stale_seconds
        self._retry = retry
        self._enabled = enabled or (lambda: True)
        self._clock = clock

        self.data: T = default
        self.error: StrayWatchError | None = None
        self.is_loading = False
        self.updated_at: float | None = None

    @property
    def is_enabled(self) -> bool:
        return self._enabled()

    @property
    def is_stale(self) -> bool:
        if self.updated_at is None:
            return True
        return self._clock() - self.updated_at >= self._stale_seconds

    async def get(self) -> T:
        """Return cached data, refetching first if it is stale."""
        if self.is_stale:
            return await self.refetch()
        return self.data

    async def refetch(self) -> T:
        """
        Fetch now, retrying transport failures.

        Errors are recorded on ``error`` and the previous data is kept.
        A disabled query resets to its default without fetching.
        """
        if not self.is_enabled:
            self.data = self._default
            self.updated_at = None
            return self.data

        self.is_loading = True
        try:
            attempt = 0
            while True:
                try:
                    result = await self._fetcher()
                    break
                except TransportError as e:
                    if attempt >= self._retry:
                        raise
                    attempt += 1
                    logger.warning(
                        "Retrying query", query=self.name, attempt=attempt, error=e.message
                    )
        except StrayWatchError as e:
            self.error = e
            logger.error("Query failed", query=self.name, error=e.message)
            return self.data
        finally:
            self.is_loading = False

        self.data = result
        self.error = None
        self.updated_at = self._clock()
        return result

    def invalidate(self) -> None:
        """Mark the cached data stale so the next get() refetches."""
        self.updated_at = None
