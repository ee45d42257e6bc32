"""Supabase repository for aggregated daily logs."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from nutrition_analytics.domain.analytics import DailyLog, ExerciseEntry, MealEntry
from nutrition_analytics.services.fetching import DailyLogRepository


@dataclass
class SupabaseDailyLogRepository(DailyLogRepository):
    """Supabase implementation assembling one day of logs."""

    client: Client

    def get_daily_log(self, user_id: UUID, day: date) -> DailyLog:
        """Return meals, exercises, water, alcohol and sleep for a date."""
        meals = [_parse_meal(row) for row in self._rows("meals", user_id, day)]
        exercises = [
            _parse_exercise(row) for row in self._rows("exercises", user_id, day)
        ]
        summary_rows = (
            self.client.table("daily_logs")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("date", day.isoformat())
            .limit(1)
            .execute()
        ).data or []
        summary = summary_rows[0] if summary_rows else {}
        alcohol_rows = (
            self.client.table("alcohol_logs")
            .select("amount, calories")
            .eq("user_id", str(user_id))
            .eq("date", day.isoformat())
            .execute()
        ).data or []

        alcohol_drinks = sum(_number(row.get("amount")) for row in alcohol_rows)
        alcohol_calories = sum(_number(row.get("calories")) for row in alcohol_rows)
        calories_consumed = sum(meal.calories for meal in meals) + alcohol_calories
        calories_burned = sum(exercise.calories_burned for exercise in exercises)
        sleep_raw = summary.get("sleep_hours")
        return DailyLog(
            day=day,
            calories_consumed=calories_consumed,
            calories_burned=calories_burned,
            net_calories=calories_consumed - calories_burned,
            protein=sum(meal.protein for meal in meals),
            carbs=sum(meal.carbs for meal in meals),
            fats=sum(meal.fats for meal in meals),
            water_intake=_number(summary.get("water_intake_ml")),
            alcohol_drinks=alcohol_drinks,
            alcohol_calories=alcohol_calories,
            sleep_hours=float(sleep_raw) if sleep_raw is not None else None,
            meals=meals,
            exercises=exercises,
        )

    def _rows(self, table: str, user_id: UUID, day: date) -> list[dict[str, object]]:
        response = (
            self.client.table(table)
            .select("*")
            .eq("user_id", str(user_id))
            .eq("date", day.isoformat())
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []


def _number(value: object) -> float:
    if value is None:
        return 0.0
    return float(value)


def _parse_meal(row: dict[str, object]) -> MealEntry:
    return MealEntry(
        name=str(row.get("name") or row.get("meal_type") or ""),
        calories=_number(row.get("calories")),
        protein=_number(row.get("protein")),
        carbs=_number(row.get("carbs")),
        fats=_number(row.get("fats")),
    )


def _parse_exercise(row: dict[str, object]) -> ExerciseEntry:
    details = row.get("exercises")
    names = (
        [str(item.get("name", "")) for item in details if isinstance(item, dict)]
        if isinstance(details, list)
        else []
    )
    return ExerciseEntry(
        name=", ".join(name for name in names if name),
        calories_burned=_number(row.get("calories_burned")),
        duration_minutes=_number(row.get("duration")),
    )
