"""Fortnite stats debug schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.market import FundamentalStatus, Platform, Scope


class StatsPayload(BaseModel):
    player: str
    platform: Platform
    scope: Scope
    wins: float
    kd: float
    winRate: float
    matches: float
    kills: float
    score: float


class StatsDebugResponse(BaseModel):
    ok: bool = True
    status: FundamentalStatus
    stats: StatsPayload = Field(..., description="Normalized stats, raw payload omitted")
