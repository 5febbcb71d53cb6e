"""Fortnite stats debug endpoint.

Unlike market reads, stats failures are surfaced here (502).
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.exceptions import BadRequestError
from app.domain.market import PLATFORMS
from app.schemas.fortnite import StatsDebugResponse
from app.services.fundamentals import FundamentalsService
from app.api.dependencies import get_fundamentals_service


router = APIRouter()


@router.get(
    "/stats",
    response_model=StatsDebugResponse,
    summary="Fetch one player's normalized stats",
)
async def get_stats(
    player: Optional[str] = Query(default=None),
    platform: Optional[str] = Query(default=None, description="pc or xbl"),
    scope: Optional[str] = Query(default="season", description="season or historical"),
    fundamentals: FundamentalsService = Depends(get_fundamentals_service),
) -> StatsDebugResponse:
    if not player or platform not in PLATFORMS:
        raise BadRequestError("player and platform(pc|xbl) are required")

    stats, status = await fundamentals.get(
        player, platform, "historical" if scope == "historical" else "season"
    )
    return StatsDebugResponse(ok=True, status=status, stats=stats.model_dump(by_alias=True))
