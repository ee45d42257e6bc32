"""Tests for the analytics service."""

import asyncio
from datetime import timedelta
from uuid import UUID

import pytest

from nutrition_analytics.domain.analytics import UserTargets
from nutrition_analytics.domain.errors import DataFetchError, InvalidDateRangeError
from nutrition_analytics.services.analytics import (
    ANALYTICS,
    CORRELATIONS,
    WEIGHT_LOGS,
    AnalyticsService,
    cache_key,
)
from nutrition_analytics.services.date_ranges import TimeRange
from tests.conftest import (
    TODAY,
    InMemoryDailyLogRepository,
    InMemoryProfileRepository,
    InMemoryWeightRepository,
    make_log,
)


def _log_week(repository: InMemoryDailyLogRepository, user_id: UUID) -> None:
    for offset in range(7):
        day = TODAY - timedelta(days=offset)
        repository.add(
            user_id,
            make_log(day, calories=1800 + offset * 10, protein=120, water=2000),
        )


def test_report_for_week(
    analytics_service: AnalyticsService,
    daily_log_repository: InMemoryDailyLogRepository,
    user_id: UUID,
) -> None:
    _log_week(daily_log_repository, user_id)

    report = asyncio.run(analytics_service.get_report(user_id, TimeRange.WEEK))

    assert report.time_range == "7d"
    assert len(report.points) == 7
    assert report.points[-1].full_date == TODAY.isoformat()
    assert report.has_enough_data
    assert report.stats is not None
    assert report.stats.days_with_data == 7
    assert report.goal_achievement is not None
    assert report.goal_achievement.water.rate_percent == 100
    assert report.weekly_pattern is not None


def test_report_for_year_is_monthly(
    analytics_service: AnalyticsService,
    daily_log_repository: InMemoryDailyLogRepository,
    user_id: UUID,
) -> None:
    _log_week(daily_log_repository, user_id)

    report = asyncio.run(analytics_service.get_report(user_id, TimeRange.YEAR))

    assert len(report.points) == 12
    assert report.points[-1].label == "Oct 2026"
    assert report.points[-1].meals == 7
    assert report.points[0].label == "Nov 2025"


def test_report_with_one_logged_day_is_not_enough(
    analytics_service: AnalyticsService,
    daily_log_repository: InMemoryDailyLogRepository,
    user_id: UUID,
) -> None:
    daily_log_repository.add(user_id, make_log(TODAY, calories=2000))

    report = asyncio.run(analytics_service.get_report(user_id, TimeRange.WEEK))

    assert not report.has_enough_data
    assert report.stats is not None
    assert report.goal_achievement is None
    assert report.weekly_pattern is None


def test_report_for_reversed_custom_range_is_empty(
    analytics_service: AnalyticsService,
    daily_log_repository: InMemoryDailyLogRepository,
    user_id: UUID,
) -> None:
    report = asyncio.run(
        analytics_service.get_report(
            user_id, TimeRange.CUSTOM, "2026-10-10", "2026-10-01"
        )
    )

    assert report.points == []
    assert report.stats is None
    assert daily_log_repository.calls == []


def test_report_is_cached_until_invalidated(
    analytics_service: AnalyticsService,
    daily_log_repository: InMemoryDailyLogRepository,
    user_id: UUID,
) -> None:
    _log_week(daily_log_repository, user_id)

    first = asyncio.run(analytics_service.get_report(user_id, TimeRange.WEEK))
    calls_after_first = len(daily_log_repository.calls)
    second = asyncio.run(analytics_service.get_report(user_id, TimeRange.WEEK))

    assert second is first
    assert len(daily_log_repository.calls) == calls_after_first

    removed = analytics_service.invalidate(user_id, (ANALYTICS,))
    asyncio.run(analytics_service.get_report(user_id, TimeRange.WEEK))

    assert removed == 1
    assert len(daily_log_repository.calls) == calls_after_first * 2


def test_invalidate_only_touches_the_given_user(
    analytics_service: AnalyticsService, user_id: UUID
) -> None:
    other = UUID(int=1)
    analytics_service.cache.set(cache_key(ANALYTICS, user_id, "7d"), "a", 60)
    analytics_service.cache.set(cache_key(ANALYTICS, other, "7d"), "b", 60)
    analytics_service.cache.set(cache_key(CORRELATIONS, user_id, "x"), "c", 60)

    removed = analytics_service.invalidate(user_id, (ANALYTICS,))

    assert removed == 1
    assert analytics_service.cache.get(cache_key(ANALYTICS, other, "7d")) == "b"
    assert analytics_service.cache.get(cache_key(CORRELATIONS, user_id, "x")) == "c"


def test_failed_fetch_is_retried_once(
    analytics_service: AnalyticsService,
    weight_repository: InMemoryWeightRepository,
    user_id: UUID,
) -> None:
    weight_repository.failures_remaining = 1
    weight_repository.add(user_id, TODAY, 80.0)

    prediction = asyncio.run(analytics_service.get_weight_prediction(user_id))

    assert weight_repository.calls == 2
    assert prediction.current_value == 80.0


def test_persistent_failure_raises_data_fetch_error(
    analytics_service: AnalyticsService,
    daily_log_repository: InMemoryDailyLogRepository,
    user_id: UUID,
) -> None:
    daily_log_repository.failures[TODAY] = ConnectionError("down")

    with pytest.raises(DataFetchError):
        asyncio.run(analytics_service.get_report(user_id, TimeRange.WEEK))

    assert daily_log_repository.calls.count(TODAY) == 2


def test_weight_calories_correlation_uses_cached_weights(
    analytics_service: AnalyticsService,
    daily_log_repository: InMemoryDailyLogRepository,
    weight_repository: InMemoryWeightRepository,
    user_id: UUID,
) -> None:
    _log_week(daily_log_repository, user_id)
    for offset in range(7):
        weight_repository.add(user_id, TODAY - timedelta(days=offset), 80 + offset)

    result = asyncio.run(
        analytics_service.get_weight_calories_correlation(user_id, TimeRange.WEEK)
    )
    asyncio.run(analytics_service.get_alcohol_impact(user_id, TimeRange.WEEK))

    assert result.sufficient_data
    assert result.coefficient == pytest.approx(1.0)
    assert weight_repository.calls == 1
    start = TODAY - timedelta(days=6)
    key = cache_key(WEIGHT_LOGS, user_id, start.isoformat(), TODAY.isoformat())
    assert analytics_service.cache.get(key) is not None


def test_protein_workouts_and_sleep_queries(
    analytics_service: AnalyticsService,
    daily_log_repository: InMemoryDailyLogRepository,
    user_id: UUID,
) -> None:
    _log_week(daily_log_repository, user_id)

    protein = asyncio.run(
        analytics_service.get_protein_workouts_correlation(user_id, TimeRange.MONTH)
    )
    sleep = asyncio.run(analytics_service.get_sleep_impact(user_id, TimeRange.MONTH))

    assert len(daily_log_repository.calls) == 60
    assert len(protein.points) == 7
    assert not sleep.correlation.sufficient_data


def test_weight_prediction_uses_profile_target(
    analytics_service: AnalyticsService,
    weight_repository: InMemoryWeightRepository,
    profile_repository: InMemoryProfileRepository,
    user_id: UUID,
) -> None:
    profile_repository.targets[user_id] = UserTargets(target_weight=75.0)
    for offset, weight in enumerate([78.5, 79.0, 79.5, 80.0]):
        weight_repository.add(user_id, TODAY - timedelta(days=offset), weight)

    prediction = asyncio.run(analytics_service.get_weight_prediction(user_id))

    assert prediction.trend == "decreasing"
    assert prediction.predicted_value == 75.0
    assert prediction.days_to_goal == 7


def test_compare_periods(
    analytics_service: AnalyticsService,
    daily_log_repository: InMemoryDailyLogRepository,
    user_id: UUID,
) -> None:
    _log_week(daily_log_repository, user_id)

    comparison = asyncio.run(
        analytics_service.compare_periods(
            user_id, "2026-10-12", "2026-10-14", "2026-10-16", "2026-10-18"
        )
    )

    assert comparison.first.avg_calories == 1850
    assert comparison.second.avg_calories == 1810
    assert comparison.changes["calories"] == -40


def test_compare_periods_rejects_reversed_period(
    analytics_service: AnalyticsService, user_id: UUID
) -> None:
    with pytest.raises(InvalidDateRangeError):
        asyncio.run(
            analytics_service.compare_periods(
                user_id, "2026-10-14", "2026-10-12", "2026-10-16", "2026-10-18"
            )
        )
