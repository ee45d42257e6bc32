"""Analytics dashboard service."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol, TypeVar
from uuid import UUID

from nutrition_analytics.domain.analytics import (
    AnalyticsReport,
    CorrelationResult,
    DailyLog,
    ImpactSummary,
    PeriodComparison,
    UserTargets,
    WeightLog,
    WeightPrediction,
)
from nutrition_analytics.domain.errors import DataFetchError, InvalidDateRangeError
from nutrition_analytics.services import insights
from nutrition_analytics.services.aggregation import (
    MIN_DAYS_FOR_ANALYTICS,
    aggregate_by_month,
    days_with_data,
    summarize,
    to_day_points,
)
from nutrition_analytics.services.cache import Cache
from nutrition_analytics.services.date_ranges import (
    TimeRange,
    batch_size_for,
    correlation_window_days,
    fetch_dates_for,
    resolve_date_range,
    trailing_days,
)
from nutrition_analytics.services.fetching import BatchedDailyLogFetcher

logger = logging.getLogger(__name__)

T = TypeVar("T")

ANALYTICS = "analytics"
WEIGHT_LOGS = "weightLogs"
CORRELATIONS = "correlations"
PREDICTIONS = "predictions"
PREDICTION_WINDOW_DAYS = 30


class WeightRepository(Protocol):
    """Read interface for weigh-ins."""

    def list_weight_logs(
        self, user_id: UUID, start: date, end: date
    ) -> list[WeightLog]:
        """Return weigh-ins between two dates, inclusive."""


class ProfileRepository(Protocol):
    """Read interface for profile targets."""

    def get_targets(self, user_id: UUID) -> UserTargets:
        """Return the user's daily targets and goal."""


def cache_key(namespace: str, user_id: UUID, *parts: object) -> str:
    """Build a cache key scoped to a namespace and user."""
    return ":".join([namespace, str(user_id), *(str(part) for part in parts)])


@dataclass
class AnalyticsService:
    """Service computing dashboard analytics from daily logs."""

    fetcher: BatchedDailyLogFetcher
    weight_repository: WeightRepository
    profile_repository: ProfileRepository
    cache: Cache
    cache_ttl_seconds: int = 300
    query_retries: int = 1
    clock: Callable[[], date] = field(default=date.today)

    async def get_report(
        self,
        user_id: UUID,
        time_range: TimeRange,
        custom_start: str | None = None,
        custom_end: str | None = None,
    ) -> AnalyticsReport:
        """Return dashboard buckets, stats and goal summaries for a range."""
        today = self.clock()
        anchors = resolve_date_range(time_range, today, custom_start, custom_end)
        if not anchors:
            return AnalyticsReport(
                time_range=time_range.value,
                points=[],
                stats=None,
                goal_achievement=None,
                weekly_pattern=None,
                has_enough_data=False,
            )
        key = cache_key(
            ANALYTICS,
            user_id,
            time_range.value,
            custom_start or "",
            custom_end or "",
            ",".join(day.isoformat() for day in anchors),
        )
        cached = self.cache.get(key)
        if isinstance(cached, AnalyticsReport):
            return cached

        days = fetch_dates_for(time_range, anchors, today)
        logs = await self._daily_logs(user_id, days, batch_size_for(time_range))
        targets = await self._targets(user_id)
        day_points = to_day_points(days, logs)
        points = (
            aggregate_by_month(days, logs)
            if time_range == TimeRange.YEAR
            else day_points
        )
        enough = len(days_with_data(points)) >= MIN_DAYS_FOR_ANALYTICS
        report = AnalyticsReport(
            time_range=time_range.value,
            points=points,
            stats=summarize(points, targets),
            goal_achievement=insights.goal_achievement(day_points, targets)
            if enough
            else None,
            weekly_pattern=insights.weekly_pattern(day_points, targets)
            if enough
            else None,
            has_enough_data=enough,
        )
        self.cache.set(key, report, self.cache_ttl_seconds)
        return report

    async def get_weight_calories_correlation(
        self, user_id: UUID, time_range: TimeRange
    ) -> CorrelationResult:
        """Correlate daily calories with weigh-ins over the range window."""
        key = self._correlation_key(user_id, "weight-calories", time_range)
        cached = self.cache.get(key)
        if isinstance(cached, CorrelationResult):
            return cached
        days = trailing_days(self.clock(), correlation_window_days(time_range))
        logs = await self._daily_logs(user_id, days, batch_size_for(time_range))
        weights = await self._weights(user_id, days[0], days[-1])
        result = insights.weight_calories_correlation(logs, weights)
        self.cache.set(key, result, self.cache_ttl_seconds)
        return result

    async def get_protein_workouts_correlation(
        self, user_id: UUID, time_range: TimeRange
    ) -> CorrelationResult:
        """Correlate daily protein with workouts over the range window."""
        key = self._correlation_key(user_id, "protein-workouts", time_range)
        cached = self.cache.get(key)
        if isinstance(cached, CorrelationResult):
            return cached
        days = trailing_days(self.clock(), correlation_window_days(time_range))
        logs = await self._daily_logs(user_id, days, batch_size_for(time_range))
        result = insights.protein_workouts_correlation(logs)
        self.cache.set(key, result, self.cache_ttl_seconds)
        return result

    async def get_alcohol_impact(
        self, user_id: UUID, time_range: TimeRange
    ) -> ImpactSummary:
        """Relate drinking to weight, framed by the user's goal."""
        key = self._correlation_key(user_id, "alcohol-weight", time_range)
        cached = self.cache.get(key)
        if isinstance(cached, ImpactSummary):
            return cached
        days = trailing_days(self.clock(), correlation_window_days(time_range))
        logs = await self._daily_logs(user_id, days, batch_size_for(time_range))
        weights = await self._weights(user_id, days[0], days[-1])
        targets = await self._targets(user_id)
        result = insights.alcohol_impact(logs, weights, targets)
        self.cache.set(key, result, self.cache_ttl_seconds)
        return result

    async def get_sleep_impact(
        self, user_id: UUID, time_range: TimeRange
    ) -> ImpactSummary:
        """Relate sleep to calorie intake, framed by the user's goal."""
        key = self._correlation_key(user_id, "sleep-calories", time_range)
        cached = self.cache.get(key)
        if isinstance(cached, ImpactSummary):
            return cached
        days = trailing_days(self.clock(), correlation_window_days(time_range))
        logs = await self._daily_logs(user_id, days, batch_size_for(time_range))
        targets = await self._targets(user_id)
        result = insights.sleep_impact(logs, targets)
        self.cache.set(key, result, self.cache_ttl_seconds)
        return result

    async def get_weight_prediction(self, user_id: UUID) -> WeightPrediction:
        """Project weight a week ahead from the last 30 days of weigh-ins."""
        today = self.clock()
        key = cache_key(PREDICTIONS, user_id, "weight", today.isoformat())
        cached = self.cache.get(key)
        if isinstance(cached, WeightPrediction):
            return cached
        days = trailing_days(today, PREDICTION_WINDOW_DAYS)
        weights = await self._weights(user_id, days[0], today)
        targets = await self._targets(user_id)
        result = insights.predict_weight(weights, targets.target_weight)
        self.cache.set(key, result, self.cache_ttl_seconds)
        return result

    async def compare_periods(  # noqa: PLR0913
        self,
        user_id: UUID,
        first_start: str,
        first_end: str,
        second_start: str,
        second_end: str,
    ) -> PeriodComparison:
        """Compare averages of two custom periods."""
        today = self.clock()
        first_days = resolve_date_range(TimeRange.CUSTOM, today, first_start, first_end)
        second_days = resolve_date_range(
            TimeRange.CUSTOM, today, second_start, second_end
        )
        if not first_days or not second_days:
            raise InvalidDateRangeError(
                "Each period needs a start on or before its end"
            )
        first_logs = await self._daily_logs(
            user_id, first_days, batch_size_for(TimeRange.CUSTOM)
        )
        second_logs = await self._daily_logs(
            user_id, second_days, batch_size_for(TimeRange.CUSTOM)
        )
        first_weights = await self._weights(user_id, first_days[0], first_days[-1])
        second_weights = await self._weights(user_id, second_days[0], second_days[-1])
        return insights.compare_periods(
            first_logs, second_logs, first_weights, second_weights
        )

    def invalidate(self, user_id: UUID, namespaces: Iterable[str]) -> int:
        """Drop cached results for a user in the given namespaces."""
        removed = 0
        for namespace in namespaces:
            removed += self.cache.invalidate_prefix(cache_key(namespace, user_id, ""))
        logger.info("Invalidated %s cached entries for user %s", removed, user_id)
        return removed

    def _correlation_key(self, user_id: UUID, name: str, time_range: TimeRange) -> str:
        return cache_key(
            CORRELATIONS, user_id, name, time_range.value, self.clock().isoformat()
        )

    async def _daily_logs(
        self, user_id: UUID, days: Sequence[date], batch_size: int
    ) -> list[DailyLog]:
        return await self._run_query(
            "daily logs", lambda: self.fetcher.fetch(user_id, days, batch_size)
        )

    async def _weights(self, user_id: UUID, start: date, end: date) -> list[WeightLog]:
        key = cache_key(WEIGHT_LOGS, user_id, start.isoformat(), end.isoformat())
        cached = self.cache.get(key)
        if isinstance(cached, list):
            return cached
        weights = await self._run_query(
            "weight logs",
            lambda: asyncio.to_thread(
                self.weight_repository.list_weight_logs, user_id, start, end
            ),
        )
        self.cache.set(key, weights, self.cache_ttl_seconds)
        return weights

    async def _targets(self, user_id: UUID) -> UserTargets:
        return await self._run_query(
            "profile targets",
            lambda: asyncio.to_thread(self.profile_repository.get_targets, user_id),
        )

    async def _run_query(self, name: str, query: Callable[[], Awaitable[T]]) -> T:
        attempts = self.query_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await query()
            except Exception as exc:
                if attempt == attempts:
                    logger.exception("Failed to load %s", name)
                    raise DataFetchError(f"Failed to load {name}") from exc
                logger.warning(
                    "Loading %s failed (attempt %s of %s), retrying",
                    name,
                    attempt,
                    attempts,
                )
        raise DataFetchError(f"Failed to load {name}")
