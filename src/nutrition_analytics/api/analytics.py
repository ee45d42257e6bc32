"""Analytics API endpoints with token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder

from nutrition_analytics.domain.errors import InvalidDateRangeError
from nutrition_analytics.services.date_ranges import TimeRange

if TYPE_CHECKING:
    from nutrition_analytics.containers import AppContainer
    from nutrition_analytics.services.analytics import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def _service(request: Request) -> AnalyticsService:
    container: AppContainer = request.app.state.container
    return container.analytics_service


def _parse_range(raw: str) -> TimeRange:
    try:
        return TimeRange(raw)
    except ValueError as exc:
        raise InvalidDateRangeError(f"Unknown time range: {raw}") from exc


@router.get("/users/{user_id}/report", dependencies=[Depends(require_token)])
async def report(
    user_id: UUID,
    request: Request,
    time_range: str = Query(default=TimeRange.MONTH.value, alias="range"),
    start: str | None = None,
    end: str | None = None,
) -> dict[str, object]:
    """Return chart points, stats and goal summaries for a range."""
    result = await _service(request).get_report(
        user_id, _parse_range(time_range), start, end
    )
    return jsonable_encoder(result)


@router.get(
    "/users/{user_id}/correlations/weight-calories",
    dependencies=[Depends(require_token)],
)
async def weight_calories(
    user_id: UUID,
    request: Request,
    time_range: str = Query(default=TimeRange.MONTH.value, alias="range"),
) -> dict[str, object]:
    """Return the calories versus weight correlation."""
    result = await _service(request).get_weight_calories_correlation(
        user_id, _parse_range(time_range)
    )
    return jsonable_encoder(result)


@router.get(
    "/users/{user_id}/correlations/protein-workouts",
    dependencies=[Depends(require_token)],
)
async def protein_workouts(
    user_id: UUID,
    request: Request,
    time_range: str = Query(default=TimeRange.MONTH.value, alias="range"),
) -> dict[str, object]:
    """Return the protein versus workouts correlation."""
    result = await _service(request).get_protein_workouts_correlation(
        user_id, _parse_range(time_range)
    )
    return jsonable_encoder(result)


@router.get("/users/{user_id}/impact/alcohol", dependencies=[Depends(require_token)])
async def alcohol_impact(
    user_id: UUID,
    request: Request,
    time_range: str = Query(default=TimeRange.MONTH.value, alias="range"),
) -> dict[str, object]:
    """Return how drinking relates to weight for the user."""
    result = await _service(request).get_alcohol_impact(
        user_id, _parse_range(time_range)
    )
    return jsonable_encoder(result)


@router.get("/users/{user_id}/impact/sleep", dependencies=[Depends(require_token)])
async def sleep_impact(
    user_id: UUID,
    request: Request,
    time_range: str = Query(default=TimeRange.MONTH.value, alias="range"),
) -> dict[str, object]:
    """Return how sleep relates to calorie intake for the user."""
    result = await _service(request).get_sleep_impact(
        user_id, _parse_range(time_range)
    )
    return jsonable_encoder(result)


@router.get(
    "/users/{user_id}/predictions/weight", dependencies=[Depends(require_token)]
)
async def weight_prediction(user_id: UUID, request: Request) -> dict[str, object]:
    """Return the one-week weight projection."""
    result = await _service(request).get_weight_prediction(user_id)
    return jsonable_encoder(result)


@router.get("/users/{user_id}/compare", dependencies=[Depends(require_token)])
async def compare(  # noqa: PLR0913
    user_id: UUID,
    request: Request,
    first_start: str,
    first_end: str,
    second_start: str,
    second_end: str,
) -> dict[str, object]:
    """Compare averages between two custom periods."""
    result = await _service(request).compare_periods(
        user_id, first_start, first_end, second_start, second_end
    )
    return jsonable_encoder(result)
