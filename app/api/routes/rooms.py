"""Room API routes: join and player state."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_room_service
from app.domain.market import normalize_market_type
from app.schemas.rooms import JoinRequest, JoinResponse, RoomStateResponse
from app.services.rooms import RoomService


router = APIRouter()


@router.post("/join", response_model=JoinResponse, summary="Join or rejoin a room")
async def join_room(
    payload: JoinRequest,
    rooms: RoomService = Depends(get_room_service),
) -> JoinResponse:
    result = await rooms.join(payload.room_code, payload.display_name, payload.pin)
    return JoinResponse(**result)


@router.get("/state", response_model=RoomStateResponse, summary="Cash and holdings of a player")
async def room_state(
    room_code: Optional[str] = Query(default=None),
    player_code: Optional[str] = Query(default=None),
    market_type: Optional[str] = Query(default=None),
    rooms: RoomService = Depends(get_room_service),
) -> RoomStateResponse:
    state = await rooms.get_state(room_code or "", player_code or "", normalize_market_type(market_type))
    return RoomStateResponse(**state)
