"""Statistics and insight calculators for the analytics dashboard."""

import math
from collections.abc import Callable, Sequence
from datetime import date

from nutrition_analytics.domain.analytics import (
    AnalyticsDataPoint,
    CorrelationPoint,
    CorrelationResult,
    DailyLog,
    GoalAchievement,
    ImpactSummary,
    PeriodComparison,
    PeriodStats,
    TargetAchievement,
    TrendLinePoint,
    UserGoal,
    UserTargets,
    WeekdayAverage,
    WeeklyPattern,
    WeightLog,
    WeightPrediction,
)
from nutrition_analytics.services.aggregation import (
    days_with_data,
    round_2dp,
    round_half_up,
)

MIN_CORRELATION_POINTS = 5
STRONG_CORRELATION = 0.5
MODERATE_CORRELATION = 0.2
SHORT_SLEEP_HOURS = 7
PREDICTION_HORIZON_DAYS = 7
STABLE_SLOPE_KG = 0.01
WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def pearson_correlation(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Return the Pearson coefficient, or 0.0 when it is undefined."""
    if len(xs) != len(ys) or not xs:
        return 0.0
    n = len(xs)
    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_x_sq = sum(x * x for x in xs)
    sum_y_sq = sum(y * y for y in ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys, strict=True))
    numerator = sum_xy - sum_x * sum_y / n
    variance_product = (sum_x_sq - sum_x * sum_x / n) * (sum_y_sq - sum_y * sum_y / n)
    if variance_product <= 0:
        return 0.0
    return max(-1.0, min(1.0, numerator / math.sqrt(variance_product)))


def linear_regression(
    xs: Sequence[float], ys: Sequence[float]
) -> tuple[float, float]:
    """Return ``(slope, intercept)`` of the least-squares line."""
    n = len(xs)
    if n == 0:
        return 0.0, 0.0
    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys, strict=True))
    sum_xx = sum(x * x for x in xs)
    denominator = n * sum_xx - sum_x * sum_x
    if abs(denominator) < 1e-9:
        return 0.0, sum_y / n
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    return slope, (sum_y - slope * sum_x) / n


def trend_line(points: Sequence[CorrelationPoint]) -> list[TrendLinePoint]:
    """Return the endpoints of the fitted line across the x range."""
    if len(points) < 2:  # noqa: PLR2004
        return []
    xs = [point.x for point in points]
    ys = [point.y for point in points]
    if max(xs) == min(xs):
        mean_y = sum(ys) / len(ys)
        return [
            TrendLinePoint(x=points[0].x, y=mean_y),
            TrendLinePoint(x=points[-1].x, y=mean_y),
        ]
    slope, intercept = linear_regression(xs, ys)
    min_x, max_x = min(xs), max(xs)
    return [
        TrendLinePoint(x=min_x, y=slope * min_x + intercept),
        TrendLinePoint(x=max_x, y=slope * max_x + intercept),
    ]


def build_correlation(
    points: Sequence[CorrelationPoint], describe: Callable[[float], str]
) -> CorrelationResult:
    """Wrap paired points into a correlation result with an insight."""
    coefficient = pearson_correlation(
        [point.x for point in points], [point.y for point in points]
    )
    sufficient = len(points) >= MIN_CORRELATION_POINTS
    if sufficient:
        insight = describe(coefficient)
    else:
        insight = (
            f"Insufficient data: {len(points)} of {MIN_CORRELATION_POINTS} "
            "paired days logged, keep tracking to see this insight."
        )
    return CorrelationResult(
        coefficient=coefficient,
        points=list(points),
        trend_line=trend_line(points),
        insight=insight,
        sufficient_data=sufficient,
    )


def weight_calories_correlation(
    logs: Sequence[DailyLog], weights: Sequence[WeightLog]
) -> CorrelationResult:
    """Correlate calories eaten with body weight on days with both."""
    weight_by_day = {weight.day: weight.weight for weight in weights}
    points = [
        CorrelationPoint(
            x=log.calories_consumed, y=weight_by_day[log.day], day=log.day
        )
        for log in logs
        if log.day in weight_by_day and log.calories_consumed > 0
    ]
    return build_correlation(points, _describe_weight_calories)


def protein_workouts_correlation(logs: Sequence[DailyLog]) -> CorrelationResult:
    """Correlate protein intake with the number of workouts per day."""
    points = [
        CorrelationPoint(x=log.protein, y=len(log.exercises), day=log.day)
        for log in logs
        if log.protein > 0
    ]
    return build_correlation(points, _describe_protein_workouts)


def _describe_weight_calories(coefficient: float) -> str:
    if coefficient > STRONG_CORRELATION:
        return (
            "Strong positive correlation: Higher calorie intake is associated "
            "with weight gain."
        )
    if coefficient < -STRONG_CORRELATION:
        return (
            "Strong negative correlation: Higher calorie intake is associated "
            "with weight loss (deficit)."
        )
    if coefficient > MODERATE_CORRELATION:
        return "Moderate positive correlation: Calorie intake may influence weight."
    if coefficient < -MODERATE_CORRELATION:
        return (
            "Moderate negative correlation: Calorie intake may influence weight loss."
        )
    return (
        "Weak correlation: Calorie intake and weight show little direct relationship."
    )


def _describe_protein_workouts(coefficient: float) -> str:
    if coefficient > STRONG_CORRELATION:
        return "Strong correlation: Higher protein days correlate with more workouts."
    if coefficient > MODERATE_CORRELATION:
        return "Moderate correlation: Protein intake may influence workout frequency."
    return "Weak correlation: Protein and workouts show little direct relationship."


def targets_met(point: AnalyticsDataPoint, targets: UserTargets) -> int:
    """Count the daily targets a bucket meets or exceeds."""
    return sum(
        (
            point.calories >= targets.calorie_target,
            point.protein >= targets.protein_target,
            point.water >= targets.water_goal,
        )
    )


def goal_achievement(
    points: Sequence[AnalyticsDataPoint], targets: UserTargets
) -> GoalAchievement:
    """Summarize how often each daily target was met on days with data."""
    qualifying = days_with_data(points)
    total = len(qualifying)

    def achievement(days_met: int) -> TargetAchievement:
        rate = round_half_up(days_met / total * 100) if total else 0
        return TargetAchievement(days_met=days_met, total_days=total, rate_percent=rate)

    best = max(qualifying, key=lambda point: targets_met(point, targets), default=None)
    return GoalAchievement(
        calories=achievement(
            sum(1 for point in qualifying if point.calories >= targets.calorie_target)
        ),
        protein=achievement(
            sum(1 for point in qualifying if point.protein >= targets.protein_target)
        ),
        water=achievement(
            sum(1 for point in qualifying if point.water >= targets.water_goal)
        ),
        best_day=date.fromisoformat(best.full_date) if best else None,
    )


def weekly_pattern(
    points: Sequence[AnalyticsDataPoint], targets: UserTargets
) -> WeeklyPattern:
    """Group days with data by weekday."""
    by_weekday: dict[int, list[AnalyticsDataPoint]] = {}
    for point in days_with_data(points):
        weekday = date.fromisoformat(point.full_date).weekday()
        by_weekday.setdefault(weekday, []).append(point)

    weekdays = []
    for weekday in sorted(by_weekday):
        group = by_weekday[weekday]
        count = len(group)
        weekdays.append(
            WeekdayAverage(
                weekday=WEEKDAYS[weekday],
                days=count,
                avg_calories=round_half_up(sum(p.calories for p in group) / count),
                avg_protein=round_half_up(sum(p.protein for p in group) / count),
                avg_water=round_half_up(sum(p.water for p in group) / count),
                workouts=sum(p.workouts for p in group),
                avg_targets_met=round_2dp(
                    sum(targets_met(p, targets) for p in group) / count
                ),
            )
        )
    best = max(weekdays, key=lambda entry: entry.avg_targets_met, default=None)
    total_workouts = sum(point.workouts for point in points)
    weeks = len(points) / 7
    return WeeklyPattern(
        weekdays=weekdays,
        best_weekday=best.weekday if best else None,
        workout_days=sum(1 for point in points if point.workouts > 0),
        workouts_per_week=round_2dp(total_workouts / weeks) if weeks else 0.0,
    )


def _is_deficit(goal: UserGoal) -> bool:
    return goal == UserGoal.LOSE_WEIGHT


def _is_surplus(goal: UserGoal) -> bool:
    return goal == UserGoal.GAIN_MUSCLE


def alcohol_impact(
    logs: Sequence[DailyLog], weights: Sequence[WeightLog], targets: UserTargets
) -> ImpactSummary:
    """Estimate how drinking relates to body weight, framed by the user goal."""
    weight_by_day = {weight.day: weight.weight for weight in weights}
    points = [
        CorrelationPoint(
            x=log.alcohol_drinks or 0, y=weight_by_day[log.day], day=log.day
        )
        for log in logs
        if log.day in weight_by_day
    ]
    correlation = build_correlation(points, _describe_alcohol_weight)
    slope, _ = linear_regression([p.x for p in points], [p.y for p in points])
    drinking_days = [log for log in logs if (log.alcohol_drinks or 0) > 0]
    average = (
        round_2dp(sum(log.alcohol_drinks or 0 for log in logs) / len(logs))
        if logs
        else 0.0
    )
    if not correlation.sufficient_data:
        insight = correlation.insight
    elif not drinking_days:
        insight = "No alcohol logged in this period."
    else:
        calories = round_half_up(
            sum(log.alcohol_calories for log in drinking_days) / len(drinking_days)
        )
        insight = _frame_alcohol(calories, slope, targets.goal)
    return ImpactSummary(
        metric="alcohol",
        correlation=correlation,
        slope=round_2dp(slope),
        average=average,
        insight=insight,
    )


def _describe_alcohol_weight(coefficient: float) -> str:
    if abs(coefficient) > STRONG_CORRELATION:
        return "Strong link between drinking days and your weight."
    if abs(coefficient) > MODERATE_CORRELATION:
        return "Moderate link between drinking days and your weight."
    return "Weak link: drinking and weight show little direct relationship."


def _frame_alcohol(calories: int, slope: float, goal: UserGoal) -> str:
    base = f"Alcohol added about {calories} kcal on drinking days"
    if _is_deficit(goal):
        text = f"{base}, which works against your calorie deficit."
    elif _is_surplus(goal):
        text = (
            f"{base}, which counts toward your surplus but adds little protein "
            "and can slow muscle recovery."
        )
    else:
        text = f"{base}; keep it inside your daily budget to stay on target."
    if slope:
        text += f" Each extra drink is associated with {slope:+.2f} kg."
    return text


def sleep_impact(logs: Sequence[DailyLog], targets: UserTargets) -> ImpactSummary:
    """Estimate how sleep relates to calorie intake, framed by the user goal."""
    slept = [
        log for log in logs if log.sleep_hours is not None and log.calories_consumed > 0
    ]
    points = [
        CorrelationPoint(x=log.sleep_hours or 0, y=log.calories_consumed, day=log.day)
        for log in slept
    ]
    correlation = build_correlation(points, _describe_sleep_calories)
    slope, _ = linear_regression([p.x for p in points], [p.y for p in points])
    average = round_2dp(sum(p.x for p in points) / len(points)) if points else 0.0
    if correlation.sufficient_data:
        insight = _frame_sleep(slept, targets.goal)
    else:
        insight = correlation.insight
    return ImpactSummary(
        metric="sleep",
        correlation=correlation,
        slope=round_2dp(slope),
        average=average,
        insight=insight,
    )


def _describe_sleep_calories(coefficient: float) -> str:
    if abs(coefficient) > STRONG_CORRELATION:
        return "Strong link between your sleep and how much you eat."
    if abs(coefficient) > MODERATE_CORRELATION:
        return "Moderate link between your sleep and how much you eat."
    return "Weak link: sleep and calorie intake show little direct relationship."


def _frame_sleep(slept: Sequence[DailyLog], goal: UserGoal) -> str:
    short = [
        log.calories_consumed
        for log in slept
        if (log.sleep_hours or 0) < SHORT_SLEEP_HOURS
    ]
    rested = [
        log.calories_consumed
        for log in slept
        if (log.sleep_hours or 0) >= SHORT_SLEEP_HOURS
    ]
    if not short:
        return f"You slept at least {SHORT_SLEEP_HOURS}h every logged night."
    if not rested:
        return f"Every logged night was under {SHORT_SLEEP_HOURS}h of sleep."
    difference = round_half_up(sum(short) / len(short) - sum(rested) / len(rested))
    if _is_deficit(goal):
        if difference > 0:
            return (
                f"After nights under {SHORT_SLEEP_HOURS}h you ate about {difference} "
                "kcal more, which works against your deficit."
            )
        return "Short nights have not pushed your intake up so far."
    if _is_surplus(goal):
        if difference < 0:
            return (
                f"After nights under {SHORT_SLEEP_HOURS}h you ate about "
                f"{abs(difference)} kcal less, making your surplus harder to reach."
            )
        return (
            "Short nights have not cut into your intake; aim for "
            f"{SHORT_SLEEP_HOURS}h+ to support recovery."
        )
    return (
        f"After nights under {SHORT_SLEEP_HOURS}h your intake changed by "
        f"{difference:+d} kcal."
    )


def predict_weight(
    weights: Sequence[WeightLog], target_weight: float | None
) -> WeightPrediction:
    """Project weight one week past the last weigh-in."""
    ordered = sorted(weights, key=lambda log: log.day)
    if len(ordered) < 2:  # noqa: PLR2004
        current = ordered[0].weight if ordered else 0.0
        return WeightPrediction(
            current_value=current,
            predicted_value=current,
            days_to_goal=None,
            trend="stable",
        )
    first_day = ordered[0].day
    offsets = [(log.day - first_day).days for log in ordered]
    slope, intercept = linear_regression(offsets, [log.weight for log in ordered])
    current = ordered[-1].weight
    predicted = slope * (offsets[-1] + PREDICTION_HORIZON_DAYS) + intercept

    trend = "stable"
    if slope > STABLE_SLOPE_KG:
        trend = "increasing"
    elif slope < -STABLE_SLOPE_KG:
        trend = "decreasing"

    days_to_goal = None
    if target_weight and slope:
        moving_down = trend == "decreasing" and target_weight < current
        moving_up = trend == "increasing" and target_weight > current
        if moving_down or moving_up:
            days_to_goal = math.ceil(abs(current - target_weight) / abs(slope))

    return WeightPrediction(
        current_value=current,
        predicted_value=round_2dp(predicted),
        days_to_goal=days_to_goal,
        trend=trend,
    )


def period_stats(
    logs: Sequence[DailyLog], weights: Sequence[WeightLog]
) -> PeriodStats:
    """Average a period of daily logs."""
    count = len(logs)
    return PeriodStats(
        avg_calories=sum(log.calories_consumed for log in logs) / count if count else 0,
        avg_protein=sum(log.protein for log in logs) / count if count else 0,
        total_workouts=sum(len(log.exercises) for log in logs),
        avg_weight=sum(w.weight for w in weights) / len(weights) if weights else None,
    )


def compare_periods(
    first_logs: Sequence[DailyLog],
    second_logs: Sequence[DailyLog],
    first_weights: Sequence[WeightLog] = (),
    second_weights: Sequence[WeightLog] = (),
) -> PeriodComparison:
    """Compare two periods; changes are second minus first."""
    first = period_stats(first_logs, first_weights)
    second = period_stats(second_logs, second_weights)
    changes = {
        "calories": second.avg_calories - first.avg_calories,
        "protein": second.avg_protein - first.avg_protein,
        "workouts": second.total_workouts - first.total_workouts,
    }
    if first.avg_weight is not None and second.avg_weight is not None:
        changes["weight"] = second.avg_weight - first.avg_weight
    return PeriodComparison(first=first, second=second, changes=changes)
