from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.room import Room
from app.models.user import User
from app.schemas.room import RoomCreate, RoomUpdate
from app.services.access_codes import commit_with_unique_code
from app.services.room_access import get_owned_room


logger = logging.getLogger(__name__)


async def create_room(session: AsyncSession, user: User, payload: RoomCreate) -> Room:
    # rollback при коллизии кода истекает user, id берём заранее
    owner_id = user.id
    room = await commit_with_unique_code(
        session,
        Room.access_code,
        lambda code: Room(
            name=payload.name,
            description=payload.description,
            access_code=code,
            created_by=owner_id,
            is_active=True,
            start_time=payload.start_time,
            end_time=payload.end_time,
            time_per_question=payload.time_per_question,
            show_leaderboard=payload.show_leaderboard,
            allow_retries=payload.allow_retries,
            show_correct_answers=payload.show_correct_answers,
        ),
    )

    logger.info("Room %s (%s) created by user %s", room.id, room.access_code, owner_id)
    return room


async def list_rooms(session: AsyncSession, user: User) -> list[Room]:
    rows = await session.execute(
        select(Room)
        .where(Room.created_by == user.id)
        .order_by(Room.created_at.desc(), Room.id.desc())
    )
    return list(rows.scalars().all())


async def update_room(session: AsyncSession, user: User, room_id: int, payload: RoomUpdate) -> Room:
    room = await get_owned_room(session, room_id, user.id)

    for field, value in payload.model_dump().items():
        setattr(room, field, value)

    await session.commit()
    await session.refresh(room)
    return room


async def deactivate_room(session: AsyncSession, user: User, room_id: int) -> Room:
    """Комнаты не удаляем: только снимаем флаг активности."""
    room = await get_owned_room(session, room_id, user.id)
    room.is_active = False
    await session.commit()

    logger.info("Room %s deactivated by user %s", room.id, user.id)
    return room
