"""Domain models for the analytics dashboard."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum


class UserGoal(StrEnum):
    """Fitness goal stored on the user profile."""

    LOSE_WEIGHT = "lose_weight"
    GAIN_MUSCLE = "gain_muscle"
    MAINTAIN = "maintain"
    IMPROVE_FITNESS = "improve_fitness"


@dataclass(frozen=True)
class MealEntry:
    """Logged meal macros."""

    name: str
    calories: float
    protein: float
    carbs: float
    fats: float


@dataclass(frozen=True)
class ExerciseEntry:
    """Logged exercise."""

    name: str
    calories_burned: float
    duration_minutes: float


@dataclass(frozen=True)
class DailyLog:
    """Aggregated log for one user on one calendar date."""

    day: date
    calories_consumed: float
    calories_burned: float
    net_calories: float
    protein: float
    carbs: float | None = None
    fats: float | None = None
    water_intake: float = 0
    alcohol_drinks: float | None = None
    alcohol_calories: float = 0
    sleep_hours: float | None = None
    meals: list[MealEntry] = field(default_factory=list)
    exercises: list[ExerciseEntry] = field(default_factory=list)


@dataclass(frozen=True)
class WeightLog:
    """Weigh-in for a date."""

    day: date
    weight: float


@dataclass(frozen=True)
class UserTargets:
    """Daily targets and goal from the user profile."""

    calorie_target: float = 2000
    protein_target: float = 150
    water_goal: float = 2000
    goal: UserGoal = UserGoal.MAINTAIN
    target_weight: float | None = None


@dataclass(frozen=True)
class AnalyticsDataPoint:
    """A single day or month bucket of dashboard data."""

    label: str
    full_date: str
    calories: float
    calories_burned: float
    net_calories: float
    protein: float
    carbs: float
    fats: float
    water: float
    alcohol: float
    sleep: float | None
    workouts: int
    meals: int


@dataclass(frozen=True)
class Trend:
    """Change between the last two buckets."""

    delta: float | None
    label: str


@dataclass(frozen=True)
class StatsSummary:
    """Summary statistics over the days with data."""

    avg_calories: int
    avg_protein: int
    avg_water: int
    avg_net_calories: int
    total_workouts: int
    total_calories_burned: float
    avg_alcohol: float
    avg_sleep: float | None
    water_goal_percent: int
    calories_trend: Trend
    protein_trend: Trend
    days_with_data: int


@dataclass(frozen=True)
class CorrelationPoint:
    """Paired observation for a correlation."""

    x: float
    y: float
    day: date


@dataclass(frozen=True)
class TrendLinePoint:
    """Endpoint of a fitted trend line."""

    x: float
    y: float


@dataclass(frozen=True)
class CorrelationResult:
    """Correlation between two paired series."""

    coefficient: float
    points: list[CorrelationPoint]
    trend_line: list[TrendLinePoint]
    insight: str
    sufficient_data: bool


@dataclass(frozen=True)
class TargetAchievement:
    """How often a single daily target was met."""

    days_met: int
    total_days: int
    rate_percent: int


@dataclass(frozen=True)
class GoalAchievement:
    """Target achievement over a window."""

    calories: TargetAchievement
    protein: TargetAchievement
    water: TargetAchievement
    best_day: date | None


@dataclass(frozen=True)
class WeekdayAverage:
    """Averages for one day of the week."""

    weekday: str
    days: int
    avg_calories: int
    avg_protein: int
    avg_water: int
    workouts: int
    avg_targets_met: float


@dataclass(frozen=True)
class WeeklyPattern:
    """Day-of-week summary over a window."""

    weekdays: list[WeekdayAverage]
    best_weekday: str | None
    workout_days: int
    workouts_per_week: float


@dataclass(frozen=True)
class ImpactSummary:
    """Goal-aware estimate of how one habit relates to an outcome."""

    metric: str
    correlation: CorrelationResult
    slope: float
    average: float
    insight: str


@dataclass(frozen=True)
class WeightPrediction:
    """Projected weight a week ahead."""

    current_value: float
    predicted_value: float
    days_to_goal: int | None
    trend: str


@dataclass(frozen=True)
class PeriodStats:
    """Averages for a comparison period."""

    avg_calories: float
    avg_protein: float
    total_workouts: int
    avg_weight: float | None = None


@dataclass(frozen=True)
class PeriodComparison:
    """Second period minus first period."""

    first: PeriodStats
    second: PeriodStats
    changes: dict[str, float]


@dataclass(frozen=True)
class AnalyticsReport:
    """Dashboard payload for a time range."""

    time_range: str
    points: list[AnalyticsDataPoint]
    stats: StatsSummary | None
    goal_achievement: GoalAchievement | None
    weekly_pattern: WeeklyPattern | None
    has_enough_data: bool
