from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.schemas.answer import AnswerIn, AnswerOut
from app.services.gameplay import submit_answer


router = APIRouter(prefix="/answers", tags=["answers"])


@router.post("", response_model=AnswerOut, status_code=status.HTTP_201_CREATED)
async def answer_question(body: AnswerIn, session: AsyncSession = Depends(get_session)):
    result = await submit_answer(
        session,
        question_id=body.question_id,
        participant_id=body.participant_id,
        selected_option_index=body.selected_option_index,
        time_to_answer=body.time_to_answer,
    )

    # правильный ответ и объяснение показываем, только если так настроена комната
    reveal = result.room.show_correct_answers
    return AnswerOut(
        is_correct=result.answer.is_correct,
        correct_option_index=result.question.correct_option_index if reveal else None,
        points_awarded=result.answer.points_awarded,
        rupiah_awarded=result.answer.rupiah_awarded,
        explanation=result.question.explanation if reveal else None,
        new_total_points=result.participant.total_points,
        new_total_rupiah=result.participant.total_rupiah,
    )
