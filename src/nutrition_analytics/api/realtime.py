"""Database change webhook endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from nutrition_analytics.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["realtime"])


class DatabaseChangeEvent(BaseModel):
    """Payload sent by a Supabase database webhook."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str
    table: str
    db_schema: str = Field(default="public", alias="schema")
    record: dict[str, Any] | None = None
    old_record: dict[str, Any] | None = None

    def user_id(self) -> UUID | None:
        """Return the owning user of the changed row, if any."""
        row = self.record if self.record is not None else self.old_record
        if not row:
            return None
        raw = row.get("user_id")
        if raw is None and self.table == "user_profiles":
            raw = row.get("id")
        if raw is None:
            return None
        try:
            return UUID(str(raw))
        except ValueError:
            return None


def _get_webhook_secret(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.realtime_webhook_secret


async def require_webhook_secret(
    x_webhook_secret: str | None = Header(default=None),
    webhook_secret: str = Depends(_get_webhook_secret),
) -> None:
    """Ensure webhook calls carry the shared secret."""
    if not x_webhook_secret or x_webhook_secret != webhook_secret:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.post("/webhook", dependencies=[Depends(require_webhook_secret)])
async def database_webhook(
    event: DatabaseChangeEvent, request: Request
) -> dict[str, object]:
    """Invalidate cached analytics affected by a row change."""
    container: AppContainer = request.app.state.container
    user_id = event.user_id()
    if user_id is None:
        logger.info("Ignoring %s on %s without a user id", event.type, event.table)
        return {"status": "ignored", "invalidated": 0}
    removed = container.realtime_service.handle_change(event.table, user_id)
    return {"status": "ok", "invalidated": removed}
