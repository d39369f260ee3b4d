from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.answer import LeaderboardEntry, LeaderboardOut
from app.schemas.participant import AccessCodeRow, AccessCodesOut, IssuedAccessCodeOut, ParticipantOut
from app.schemas.room import (
    RoomCreate,
    RoomCreated,
    RoomDeactivated,
    RoomOut,
    RoomSummary,
    RoomUpdate,
    RoomValidateOut,
)
from app.services import rooms as rooms_service
from app.services.gameplay import leaderboard
from app.services import participants as participants_service
from app.services.room_access import get_owned_room, validate_room_by_code


router = APIRouter(prefix="/rooms", tags=["rooms"])


# объявлен до /{room_id}, иначе "validate" уйдёт в path-параметр
@router.get("/validate", response_model=RoomValidateOut)
async def validate_room(code: Optional[str] = None, session: AsyncSession = Depends(get_session)):
    room = await validate_room_by_code(session, code)
    return RoomValidateOut(room=RoomSummary.model_validate(room))


@router.post("", response_model=RoomCreated, status_code=status.HTTP_201_CREATED)
async def create_room(
    body: RoomCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    room = await rooms_service.create_room(session, current_user, body)
    return RoomCreated(room_id=room.id, access_code=room.access_code)


@router.get("", response_model=List[RoomOut])
async def list_rooms(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await rooms_service.list_rooms(session, current_user)


@router.get("/{room_id}", response_model=RoomOut)
async def get_room(
    room_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await get_owned_room(session, room_id, current_user.id)


@router.put("/{room_id}", response_model=RoomOut)
async def update_room(
    room_id: int,
    body: RoomUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await rooms_service.update_room(session, current_user, room_id, body)


@router.delete("/{room_id}", response_model=RoomDeactivated)
async def deactivate_room(
    room_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    room = await rooms_service.deactivate_room(session, current_user, room_id)
    return RoomDeactivated(room_id=room.id, is_active=room.is_active)


@router.get("/{room_id}/participants", response_model=List[ParticipantOut])
async def room_participants(
    room_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await participants_service.list_room_participants(session, current_user, room_id)


@router.get("/{room_id}/access-codes", response_model=AccessCodesOut)
async def room_access_codes(
    room_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    participants = await participants_service.list_room_access_codes(session, current_user, room_id)
    return AccessCodesOut(participants=[AccessCodeRow.model_validate(p) for p in participants])


@router.post("/{room_id}/access-codes", response_model=IssuedAccessCodeOut)
async def issue_access_code(
    room_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    code = await participants_service.issue_access_code(session, current_user, room_id)
    return IssuedAccessCodeOut(access_code=code)


@router.get("/{room_id}/leaderboard", response_model=LeaderboardOut)
async def room_leaderboard(room_id: int, session: AsyncSession = Depends(get_session)):
    rows = await leaderboard(session, room_id)
    return LeaderboardOut(participants=[LeaderboardEntry.model_validate(r) for r in rows])
