"""Normalized Fortnite statistics."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.domain.market import Platform, Scope


class FortniteStats(BaseModel):
    """Overall stats block of one player, reduced to the fields we price on."""

    player: str
    platform: Platform
    scope: Scope
    wins: float = 0.0
    kd: float = 0.0
    win_rate: float = Field(default=0.0, serialization_alias="winRate")
    matches: float = 0.0
    kills: float = 0.0
    score: float = Field(default=0.0, description="Fundamental score in [0, 1]")
    raw: Any = Field(default=None, exclude=True, description="Upstream payload as received")

    model_config = {"from_attributes": True, "populate_by_name": True}
