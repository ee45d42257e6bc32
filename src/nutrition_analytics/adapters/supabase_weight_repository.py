"""Supabase repository for weigh-ins."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from nutrition_analytics.domain.analytics import WeightLog
from nutrition_analytics.services.analytics import WeightRepository


@dataclass
class SupabaseWeightRepository(WeightRepository):
    """Supabase implementation for weight log queries."""

    client: Client

    def list_weight_logs(
        self, user_id: UUID, start: date, end: date
    ) -> list[WeightLog]:
        """Return weigh-ins in the date range, oldest first."""
        response = (
            self.client.table("weight_logs")
            .select("date, weight")
            .eq("user_id", str(user_id))
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        return [
            WeightLog(
                day=date.fromisoformat(str(row["date"])), weight=float(row["weight"])
            )
            for row in response.data or []
            if row.get("date") and row.get("weight") is not None
        ]
