"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID, uuid4

import pytest

from nutrition_analytics.config import Settings
from nutrition_analytics.containers import AppContainer
from nutrition_analytics.domain.analytics import (
    DailyLog,
    ExerciseEntry,
    MealEntry,
    UserTargets,
    WeightLog,
)
from nutrition_analytics.services.analytics import (
    AnalyticsService,
    ProfileRepository,
    WeightRepository,
)
from nutrition_analytics.services.cache import InMemoryCache
from nutrition_analytics.services.fetching import (
    BatchedDailyLogFetcher,
    DailyLogRepository,
)
from nutrition_analytics.services.realtime import RealtimeService

TODAY = date(2026, 10, 18)


def make_log(  # noqa: PLR0913
    day: date,
    calories: float = 0,
    protein: float = 0,
    water: float = 0,
    workouts: int = 0,
    meals: int | None = None,
    alcohol: float | None = None,
    alcohol_calories: float = 0,
    sleep: float | None = None,
    burned: float = 0,
) -> DailyLog:
    """Build a daily log with the given totals."""
    meal_count = meals if meals is not None else (1 if calories else 0)
    meal_entries = [
        MealEntry(
            name=f"meal {index}",
            calories=calories / meal_count,
            protein=protein / meal_count,
            carbs=0,
            fats=0,
        )
        for index in range(meal_count)
    ]
    exercise_entries = [
        ExerciseEntry(
            name="run", calories_burned=burned / workouts, duration_minutes=30
        )
        for _ in range(workouts)
    ]
    return DailyLog(
        day=day,
        calories_consumed=calories,
        calories_burned=burned,
        net_calories=calories - burned,
        protein=protein,
        carbs=0,
        fats=0,
        water_intake=water,
        alcohol_drinks=alcohol,
        alcohol_calories=alcohol_calories,
        sleep_hours=sleep,
        meals=meal_entries,
        exercises=exercise_entries,
    )


@dataclass
class InMemoryDailyLogRepository(DailyLogRepository):
    logs: dict[tuple[UUID, date], DailyLog] = field(default_factory=dict)
    calls: list[date] = field(default_factory=list)
    failures: dict[date, Exception] = field(default_factory=dict)

    def add(self, user_id: UUID, log: DailyLog) -> None:
        self.logs[(user_id, log.day)] = log

    def get_daily_log(self, user_id: UUID, day: date) -> DailyLog:
        self.calls.append(day)
        if day in self.failures:
            raise self.failures[day]
        return self.logs.get((user_id, day), make_log(day))


@dataclass
class InMemoryWeightRepository(WeightRepository):
    weights: dict[UUID, list[WeightLog]] = field(default_factory=dict)
    calls: int = 0
    failures_remaining: int = 0

    def add(self, user_id: UUID, day: date, weight: float) -> None:
        self.weights.setdefault(user_id, []).append(WeightLog(day=day, weight=weight))

    def list_weight_logs(
        self, user_id: UUID, start: date, end: date
    ) -> list[WeightLog]:
        self.calls += 1
        if self.failures_remaining:
            self.failures_remaining -= 1
            raise ConnectionError("weight_logs unavailable")
        return sorted(
            (
                log
                for log in self.weights.get(user_id, [])
                if start <= log.day <= end
            ),
            key=lambda log: log.day,
        )


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    targets: dict[UUID, UserTargets] = field(default_factory=dict)

    def get_targets(self, user_id: UUID) -> UserTargets:
        return self.targets.get(user_id, UserTargets())


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
        realtime_webhook_secret="webhook-secret",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def daily_log_repository() -> InMemoryDailyLogRepository:
    return InMemoryDailyLogRepository()


@pytest.fixture
def weight_repository() -> InMemoryWeightRepository:
    return InMemoryWeightRepository()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def analytics_service(
    daily_log_repository: InMemoryDailyLogRepository,
    weight_repository: InMemoryWeightRepository,
    profile_repository: InMemoryProfileRepository,
) -> AnalyticsService:
    return AnalyticsService(
        fetcher=BatchedDailyLogFetcher(daily_log_repository),
        weight_repository=weight_repository,
        profile_repository=profile_repository,
        cache=InMemoryCache(),
        clock=lambda: TODAY,
    )


@pytest.fixture
def container(settings: Settings, analytics_service: AnalyticsService) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        analytics_service=analytics_service,
        realtime_service=RealtimeService(analytics_service),
        close_resources=close_resources,
    )
