"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_analytics.adapters.supabase_daily_log_repository import (
    SupabaseDailyLogRepository,
)
from nutrition_analytics.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from nutrition_analytics.adapters.supabase_weight_repository import (
    SupabaseWeightRepository,
)
from nutrition_analytics.config import Settings
from nutrition_analytics.services.analytics import AnalyticsService
from nutrition_analytics.services.cache import InMemoryCache
from nutrition_analytics.services.fetching import BatchedDailyLogFetcher
from nutrition_analytics.services.realtime import RealtimeService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    analytics_service: AnalyticsService
    realtime_service: RealtimeService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    cache = InMemoryCache()
    analytics_service = AnalyticsService(
        fetcher=BatchedDailyLogFetcher(SupabaseDailyLogRepository(supabase_client)),
        weight_repository=SupabaseWeightRepository(supabase_client),
        profile_repository=SupabaseProfileRepository(supabase_client),
        cache=cache,
        cache_ttl_seconds=resolved_settings.analytics_cache_ttl_seconds,
        query_retries=resolved_settings.analytics_query_retries,
    )
    realtime_service = RealtimeService(analytics_service)

    async def close_resources() -> None:
        cache.clear()

    return AppContainer(
        settings=resolved_settings,
        analytics_service=analytics_service,
        realtime_service=realtime_service,
        close_resources=close_resources,
    )
