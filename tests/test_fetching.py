"""Tests for batched daily log loading."""

import asyncio
from datetime import date, timedelta
from uuid import UUID

import pytest

from nutrition_analytics.services.fetching import BatchedDailyLogFetcher, batched
from tests.conftest import InMemoryDailyLogRepository, make_log


def _days(count: int) -> list[date]:
    start = date(2026, 10, 1)
    return [start + timedelta(days=offset) for offset in range(count)]


def test_batched_preserves_order() -> None:
    assert list(batched([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]


def test_batched_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        list(batched([1], 0))


def test_fetch_returns_logs_in_input_order(
    user_id: UUID, daily_log_repository: InMemoryDailyLogRepository
) -> None:
    days = _days(7)
    for offset, day in enumerate(days):
        daily_log_repository.add(user_id, make_log(day, calories=1000 + offset))
    fetcher = BatchedDailyLogFetcher(daily_log_repository)

    logs = asyncio.run(fetcher.fetch(user_id, days, batch_size=3))

    assert [log.day for log in logs] == days
    assert [log.calories_consumed for log in logs] == [1000 + n for n in range(7)]


def test_fetch_runs_batches_sequentially(
    user_id: UUID, daily_log_repository: InMemoryDailyLogRepository
) -> None:
    days = _days(5)
    fetcher = BatchedDailyLogFetcher(daily_log_repository)

    asyncio.run(fetcher.fetch(user_id, days, batch_size=2))

    calls = daily_log_repository.calls
    assert sorted(calls[:2]) == days[:2]
    assert sorted(calls[2:4]) == days[2:4]
    assert calls[4] == days[4]


def test_fetch_failure_aborts_the_query(
    user_id: UUID, daily_log_repository: InMemoryDailyLogRepository
) -> None:
    days = _days(6)
    daily_log_repository.failures[days[1]] = ConnectionError("boom")
    fetcher = BatchedDailyLogFetcher(daily_log_repository)

    with pytest.raises(ConnectionError):
        asyncio.run(fetcher.fetch(user_id, days, batch_size=2))

    assert days[4] not in daily_log_repository.calls


def test_fetch_empty_days(
    user_id: UUID, daily_log_repository: InMemoryDailyLogRepository
) -> None:
    fetcher = BatchedDailyLogFetcher(daily_log_repository)

    assert asyncio.run(fetcher.fetch(user_id, [], batch_size=50)) == []
