# app/services/gameplay.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, NotFoundError
from app.models.answer import Answer
from app.models.participant import Participant
from app.models.question import Question
from app.models.room import Room
from app.services.scoring import score_answer


logger = logging.getLogger(__name__)


@dataclass
class AnswerResult:
    answer: Answer
    question: Question
    participant: Participant
    room: Room


@dataclass
class LeaderboardRow:
    id: int
    name: str
    total_rupiah: int
    total_points: int
    correct_answers: int
    last_answered_at: Optional[datetime]


async def submit_answer(
    session: AsyncSession,
    *,
    question_id: int,
    participant_id: int,
    selected_option_index: int,
    time_to_answer: float,
) -> AnswerResult:
    """
    Обрабатывает ответ участника на вопрос.

    Правильный ответ начисляет очки и рупии и выключает вопрос для всей комнаты.
    """
    question = await session.get(Question, question_id)
    if not question:
        raise NotFoundError("Question not found")

    participant = await session.get(Participant, participant_id)
    if not participant:
        raise NotFoundError("Participant not found")

    if participant.room_id != question.room_id:
        raise BadRequestError("Participant does not belong to this room")

    room = await session.get(Room, question.room_id)
    if not room:
        raise NotFoundError("Room not found")

    if question.is_disabled:
        raise BadRequestError("Question is no longer available")

    previous = (
        await session.execute(
            select(Answer).where(
                Answer.question_id == question_id,
                Answer.participant_id == participant_id,
            )
        )
    ).scalars().all()

    if any(a.is_correct for a in previous):
        raise BadRequestError("Question already answered correctly")
    if previous and not room.allow_retries:
        raise BadRequestError("Question already answered")

    if selected_option_index >= len(question.options):
        raise BadRequestError("Invalid answer index")

    is_correct = selected_option_index == question.correct_option_index
    points = score_answer(
        is_correct=is_correct,
        difficulty=question.difficulty,
        points=question.points,
        time_to_answer=time_to_answer,
        time_limit=room.time_per_question,
    )
    rupiah = question.rupiah if is_correct else 0

    if is_correct:
        # первый правильный ответ забирает вопрос; второй получит rowcount 0
        claimed = await session.execute(
            update(Question)
            .where(Question.id == question_id, Question.is_disabled.is_(False))
            .values(is_disabled=True)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            await session.rollback()
            raise BadRequestError("Question is no longer available")

        await session.execute(
            update(Participant)
            .where(Participant.id == participant_id)
            .values(
                total_points=Participant.total_points + points,
                total_rupiah=Participant.total_rupiah + rupiah,
            )
            .execution_options(synchronize_session=False)
        )

    answer = Answer(
        question_id=question_id,
        participant_id=participant_id,
        room_id=question.room_id,
        selected_option_index=selected_option_index,
        is_correct=is_correct,
        time_to_answer=time_to_answer,
        points_awarded=points,
        rupiah_awarded=rupiah,
        answered_at=datetime.utcnow(),
    )
    session.add(answer)
    await session.commit()
    await session.refresh(participant)
    await session.refresh(question)

    logger.info(
        "Participant %s answered question %s: correct=%s points=%s rupiah=%s",
        participant.id, question.id, is_correct, points, rupiah,
    )
    return AnswerResult(answer=answer, question=question, participant=participant, room=room)


async def leaderboard(session: AsyncSession, room_id: int) -> List[LeaderboardRow]:
    """Рейтинг по заработанным рупиям; при равенстве выше тот, кто закончил раньше."""
    room = await session.get(Room, room_id)
    if not room:
        raise NotFoundError("Room not found")

    participants = (
        await session.execute(select(Participant).where(Participant.room_id == room_id))
    ).scalars().all()

    stats = await session.execute(
        select(
            Answer.participant_id,
            func.coalesce(func.sum(Answer.rupiah_awarded), 0),
            func.coalesce(func.sum(Answer.points_awarded), 0),
            func.count(Answer.id),
            func.max(Answer.answered_at),
        )
        .where(Answer.room_id == room_id, Answer.is_correct.is_(True))
        .group_by(Answer.participant_id)
    )
    by_participant = {row[0]: row[1:] for row in stats.all()}

    rows: List[LeaderboardRow] = []
    for p in participants:
        rupiah, points, correct, last_at = by_participant.get(p.id, (0, 0, 0, None))
        rows.append(
            LeaderboardRow(
                id=p.id,
                name=p.name,
                total_rupiah=int(rupiah),
                total_points=int(points),
                correct_answers=int(correct),
                last_answered_at=last_at,
            )
        )

    rows.sort(key=lambda r: (-r.total_rupiah, r.last_answered_at or datetime.max, r.id))
    return rows
