"""Room Pydantic schemas for API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from app.domain.market import MarketType


class JoinRequest(BaseModel):
    """Join (or rejoin) a room. Empty fields are rejected by the service."""

    room_code: str = Field(default="", max_length=64)
    display_name: str = Field(default="", max_length=100)
    pin: str = Field(default="", max_length=64)

    @field_validator("room_code", "display_name", "pin", mode="before")
    @classmethod
    def coerce_to_str(cls, v):
        # Numeric PINs and codes arrive as JSON numbers from some clients
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class PlayerCodes(BaseModel):
    season: str
    historical: str


class JoinResponse(BaseModel):
    ok: bool = True
    room_code: str
    player_code: str = Field(..., description="Season market player code")
    display_name: str
    cash: float
    spread_bps: int
    player_codes: PlayerCodes


class HoldingResponse(BaseModel):
    coin_symbol: str
    qty: float


class CoinLabel(BaseModel):
    coin_symbol: str
    player_label: str


class RoomStateResponse(BaseModel):
    market_type: MarketType
    cash: float
    holdings: list[HoldingResponse]
    spread_bps: int
    coins: list[CoinLabel]
