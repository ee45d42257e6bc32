"""Batched loading of per-day logs."""

import asyncio
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Protocol, TypeVar
from uuid import UUID

from nutrition_analytics.domain.analytics import DailyLog

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DailyLogRepository(Protocol):
    """Read interface for aggregated daily logs."""

    def get_daily_log(self, user_id: UUID, day: date) -> DailyLog:
        """Return the aggregated log for a user and date."""


def batched(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield contiguous chunks of ``items`` in order."""
    if size < 1:
        raise ValueError("Batch size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


@dataclass
class BatchedDailyLogFetcher:
    """Fetch daily logs batch by batch, concurrently within a batch."""

    repository: DailyLogRepository

    async def fetch(
        self, user_id: UUID, days: Sequence[date], batch_size: int
    ) -> list[DailyLog]:
        """Return logs for ``days`` in the same order.

        The first failing lookup aborts the whole fetch.
        """
        logs: list[DailyLog] = []
        for index, batch in enumerate(batched(days, batch_size)):
            logger.debug(
                "Fetching batch %s (%s days) for user %s", index, len(batch), user_id
            )
            batch_logs = await asyncio.gather(
                *(
                    asyncio.to_thread(self.repository.get_daily_log, user_id, day)
                    for day in batch
                )
            )
            logs.extend(batch_logs)
        return logs
