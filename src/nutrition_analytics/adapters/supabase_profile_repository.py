"""Supabase repository for profile targets."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_analytics.domain.analytics import UserGoal, UserTargets
from nutrition_analytics.services.analytics import ProfileRepository

_DEFAULTS = UserTargets()


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation reading targets from user profiles."""

    client: Client

    def get_targets(self, user_id: UUID) -> UserTargets:
        """Return the stored targets, falling back to defaults."""
        response = (
            self.client.table("user_profiles")
            .select("*")
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return _DEFAULTS
        row = response.data[0]
        return UserTargets(
            calorie_target=_first_number(
                row,
                "calorie_target",
                "target_calories",
                default=_DEFAULTS.calorie_target,
            ),
            protein_target=_first_number(
                row,
                "protein_target",
                "target_protein",
                default=_DEFAULTS.protein_target,
            ),
            water_goal=_first_number(row, "water_goal", default=_DEFAULTS.water_goal),
            goal=_parse_goal(row.get("goal")),
            target_weight=float(row["target_weight"])
            if row.get("target_weight") is not None
            else None,
        )


def _first_number(row: dict[str, object], *columns: str, default: float) -> float:
    for column in columns:
        value = row.get(column)
        if value:
            return float(value)
    return default


def _parse_goal(raw: object) -> UserGoal:
    try:
        return UserGoal(str(raw))
    except ValueError:
        return UserGoal.MAINTAIN
