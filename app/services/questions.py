from __future__ import annotations

import logging

from sqlalchemy import case, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ForbiddenError, NotFoundError
from app.models.participant import Participant
from app.models.question import Question
from app.models.user import User
from app.schemas.question import QuestionIn
from app.services.room_access import get_owned_room
from app.services.scoring import DIFFICULTY_ORDER


logger = logging.getLogger(__name__)


async def list_questions(session: AsyncSession, user: User, room_id: int) -> list[Question]:
    await get_owned_room(session, room_id, user.id)
    rows = await session.execute(
        select(Question)
        .where(Question.room_id == room_id)
        .order_by(Question.created_at.desc(), Question.id.desc())
    )
    return list(rows.scalars().all())


async def create_question(session: AsyncSession, user: User, room_id: int, payload: QuestionIn) -> Question:
    await get_owned_room(session, room_id, user.id)

    question = Question(room_id=room_id, **payload.model_dump())
    session.add(question)
    await session.commit()
    await session.refresh(question)
    return question


async def _get_room_question(session: AsyncSession, room_id: int, question_id: int) -> Question:
    question = await session.scalar(
        select(Question).where(Question.id == question_id, Question.room_id == room_id)
    )
    if not question:
        raise NotFoundError("Question not found")
    return question


async def get_question(session: AsyncSession, user: User, room_id: int, question_id: int) -> Question:
    await get_owned_room(session, room_id, user.id)
    return await _get_room_question(session, room_id, question_id)


async def update_question(
    session: AsyncSession,
    user: User,
    room_id: int,
    question_id: int,
    payload: QuestionIn,
) -> Question:
    await get_owned_room(session, room_id, user.id)
    question = await _get_room_question(session, room_id, question_id)

    for field, value in payload.model_dump().items():
        setattr(question, field, value)

    await session.commit()
    await session.refresh(question)
    return question


async def delete_question(session: AsyncSession, user: User, room_id: int, question_id: int) -> None:
    await get_owned_room(session, room_id, user.id)
    question = await _get_room_question(session, room_id, question_id)

    await session.execute(delete(Question).where(Question.id == question.id))
    await session.commit()
    logger.info("Question %s deleted from room %s", question_id, room_id)


async def list_active_questions(session: AsyncSession, room_id: int, participant_id: int) -> list[Question]:
    """Доступные вопросы для игрока: bronze -> silver -> gold, внутри уровня новые первыми."""
    participant = await session.scalar(
        select(Participant).where(
            Participant.id == participant_id,
            Participant.room_id == room_id,
        )
    )
    if not participant:
        raise ForbiddenError("Invalid participant for this room")

    difficulty_rank = case(DIFFICULTY_ORDER, value=Question.difficulty, else_=len(DIFFICULTY_ORDER))
    rows = await session.execute(
        select(Question)
        .where(Question.room_id == room_id, Question.is_disabled.is_(False))
        .order_by(difficulty_rank, Question.created_at.desc(), Question.id.desc())
    )
    return list(rows.scalars().all())
