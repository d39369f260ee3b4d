from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import BadRequestError, NotFoundError
from app.models.participant import Participant
from app.models.room import Room
from app.services.access_codes import is_well_formed


logger = logging.getLogger(__name__)


async def find_room_by_code(session: AsyncSession, access_code: str) -> Optional[Room]:
    """Комната по коду. Активность проверяется только при REQUIRE_ACTIVE_ROOM_FOR_CODE."""
    stmt = select(Room).where(Room.access_code == access_code)
    if settings.REQUIRE_ACTIVE_ROOM_FOR_CODE:
        stmt = stmt.where(Room.is_active.is_(True))
    return await session.scalar(stmt)


async def validate_room_by_code(session: AsyncSession, access_code: Optional[str]) -> Room:
    code = (access_code or "").strip()
    if not code:
        raise BadRequestError("Access code is required")

    room = await find_room_by_code(session, code)
    if not room:
        raise NotFoundError("Invalid access code")
    return room


async def validate_room_access(
    session: AsyncSession,
    room_id: Optional[int],
    access_code: Optional[str],
) -> Optional[Participant]:
    """
    Проверка кода участника для входа в комнату.

    Возвращает участника, если код уже использован в этой комнате,
    и None, если код свободен и корректного формата.
    """
    code = (access_code or "").strip()
    if room_id is None or not code:
        raise BadRequestError("Room ID and access code are required")

    # здесь, в отличие от поиска по коду комнаты, активность обязательна
    room = await session.scalar(
        select(Room).where(Room.id == room_id, Room.is_active.is_(True))
    )
    if not room:
        raise NotFoundError("Room not found or inactive")

    participant = await session.scalar(
        select(Participant).where(Participant.access_code == code)
    )
    if participant:
        if participant.room_id != room.id:
            logger.warning(
                "Access code of participant %s (room %s) used for room %s",
                participant.id, participant.room_id, room.id,
            )
            raise BadRequestError("Access code is not valid for this room")
        return participant

    if is_well_formed(code):
        return None

    raise BadRequestError("Invalid access code")


async def get_owned_room(session: AsyncSession, room_id: int, user_id: int) -> Room:
    # чужая комната неотличима от несуществующей
    room = await session.scalar(
        select(Room).where(Room.id == room_id, Room.created_by == user_id)
    )
    if not room:
        raise NotFoundError("Room not found")
    return room
