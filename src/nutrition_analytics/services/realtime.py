"""Cache invalidation driven by backend change notifications."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_analytics.services.analytics import (
    ANALYTICS,
    CORRELATIONS,
    PREDICTIONS,
    WEIGHT_LOGS,
)

logger = logging.getLogger(__name__)

_DAILY_DATA = (ANALYTICS, CORRELATIONS)

TABLE_INVALIDATIONS: dict[str, tuple[str, ...]] = {
    "meals": _DAILY_DATA,
    "exercises": _DAILY_DATA,
    "daily_logs": _DAILY_DATA,
    "alcohol_logs": _DAILY_DATA,
    "sleep_logs": _DAILY_DATA,
    "weight_logs": (WEIGHT_LOGS, CORRELATIONS, PREDICTIONS),
    "user_profiles": (ANALYTICS, CORRELATIONS, PREDICTIONS),
}


class Invalidator(Protocol):
    """Anything that can drop cached results for a user."""

    def invalidate(self, user_id: UUID, namespaces: tuple[str, ...]) -> int:
        """Drop cached entries and return how many were removed."""


@dataclass
class RealtimeService:
    """Translate table change notifications into cache invalidations."""

    invalidator: Invalidator

    def handle_change(self, table: str, user_id: UUID) -> int:
        """Invalidate cached queries affected by a change to ``table``."""
        namespaces = TABLE_INVALIDATIONS.get(table)
        if namespaces is None:
            logger.debug("Ignoring change notification for table %s", table)
            return 0
        return self.invalidator.invalidate(user_id, namespaces)
