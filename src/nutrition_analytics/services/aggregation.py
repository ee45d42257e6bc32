"""Fold daily logs into dashboard buckets and summary stats."""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from nutrition_analytics.domain.analytics import (
    AnalyticsDataPoint,
    DailyLog,
    StatsSummary,
    Trend,
    UserTargets,
)
from nutrition_analytics.services.date_ranges import bucket_label

MIN_DAYS_FOR_ANALYTICS = 2


def round_half_up(value: float) -> int:
    """Round to the nearest integer, rounding halves up."""
    return math.floor(value + 0.5)


def round_2dp(value: float) -> float:
    """Round to two decimal places with the same tie rule."""
    return round_half_up(value * 100) / 100


def to_day_points(
    days: Sequence[date], logs: Sequence[DailyLog]
) -> list[AnalyticsDataPoint]:
    """Build one bucket per day."""
    return [
        AnalyticsDataPoint(
            label=bucket_label(day, monthly=False),
            full_date=day.isoformat(),
            calories=log.calories_consumed,
            calories_burned=log.calories_burned,
            net_calories=log.net_calories,
            protein=log.protein,
            carbs=log.carbs or 0,
            fats=log.fats or 0,
            water=log.water_intake,
            alcohol=log.alcohol_drinks or 0,
            sleep=log.sleep_hours,
            workouts=len(log.exercises),
            meals=len(log.meals),
        )
        for day, log in zip(days, logs, strict=True)
    ]


@dataclass
class _MonthAccumulator:
    label: str
    count: int = 0
    calories: float = 0
    calories_burned: float = 0
    net_calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0
    water: float = 0
    alcohol: float = 0
    sleep_values: list[float] = field(default_factory=list)
    workouts: int = 0
    meals: int = 0

    def add(self, log: DailyLog) -> None:
        self.count += 1
        self.calories += log.calories_consumed
        self.calories_burned += log.calories_burned
        self.net_calories += log.net_calories
        self.protein += log.protein
        self.carbs += log.carbs or 0
        self.fats += log.fats or 0
        self.water += log.water_intake
        self.alcohol += log.alcohol_drinks or 0
        if log.sleep_hours is not None:
            self.sleep_values.append(log.sleep_hours)
        self.workouts += len(log.exercises)
        self.meals += len(log.meals)

    def to_point(self) -> AnalyticsDataPoint:
        count = self.count
        sleep = (
            round_2dp(sum(self.sleep_values) / len(self.sleep_values))
            if self.sleep_values
            else None
        )
        return AnalyticsDataPoint(
            label=self.label,
            full_date="",
            calories=round_half_up(self.calories / count),
            calories_burned=round_half_up(self.calories_burned / count),
            net_calories=round_half_up(self.net_calories / count),
            protein=round_half_up(self.protein / count),
            carbs=round_half_up(self.carbs / count),
            fats=round_half_up(self.fats / count),
            water=round_half_up(self.water / count),
            alcohol=round_2dp(self.alcohol / count),
            sleep=sleep,
            workouts=self.workouts,
            meals=self.meals,
        )


def aggregate_by_month(
    days: Sequence[date], logs: Sequence[DailyLog]
) -> list[AnalyticsDataPoint]:
    """Fold daily logs into month buckets in first-seen order.

    Density metrics are per-day means; workouts and meals are totals.
    Sleep is averaged over the days that have a sleep entry only.
    """
    months: dict[str, _MonthAccumulator] = {}
    for day, log in zip(days, logs, strict=True):
        label = bucket_label(day, monthly=True)
        if label not in months:
            months[label] = _MonthAccumulator(label=label)
        months[label].add(log)
    return [month.to_point() for month in months.values()]


def has_data(point: AnalyticsDataPoint) -> bool:
    """Return True when any tracked metric was logged for the bucket."""
    return (
        point.meals > 0
        or point.workouts > 0
        or point.water > 0
        or point.calories > 0
        or point.alcohol > 0
        or (point.sleep or 0) > 0
    )


def days_with_data(points: Sequence[AnalyticsDataPoint]) -> list[AnalyticsDataPoint]:
    """Return the buckets that contain logged data."""
    return [point for point in points if has_data(point)]


def calculate_trend(points: Sequence[AnalyticsDataPoint], field_name: str) -> Trend:
    """Return the change of ``field_name`` between the last two buckets."""
    if len(points) < MIN_DAYS_FOR_ANALYTICS:
        return Trend(delta=None, label="No change")
    delta = round_2dp(
        getattr(points[-1], field_name) - getattr(points[-2], field_name)
    )
    if delta == 0:
        return Trend(delta=None, label="No change")
    return Trend(delta=delta, label=f"{delta:+.2f}".rstrip("0").rstrip("."))


def summarize(
    points: Sequence[AnalyticsDataPoint], targets: UserTargets
) -> StatsSummary | None:
    """Compute summary stats over buckets with data."""
    qualifying = days_with_data(points)
    if not qualifying:
        return None
    count = len(qualifying)
    avg_water = round_half_up(sum(point.water for point in qualifying) / count)
    sleep_values = [point.sleep for point in qualifying if point.sleep is not None]
    return StatsSummary(
        avg_calories=round_half_up(sum(point.calories for point in qualifying) / count),
        avg_protein=round_half_up(sum(point.protein for point in qualifying) / count),
        avg_water=avg_water,
        avg_net_calories=round_half_up(
            sum(point.net_calories for point in qualifying) / count
        ),
        total_workouts=sum(point.workouts for point in qualifying),
        total_calories_burned=sum(point.calories_burned for point in qualifying),
        avg_alcohol=round_2dp(sum(point.alcohol for point in qualifying) / count),
        avg_sleep=round_2dp(sum(sleep_values) / len(sleep_values))
        if sleep_values
        else None,
        water_goal_percent=round_half_up(avg_water / targets.water_goal * 100)
        if targets.water_goal
        else 0,
        calories_trend=calculate_trend(qualifying, "calories"),
        protein_trend=calculate_trend(qualifying, "protein"),
        days_with_data=count,
    )
