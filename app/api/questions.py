from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.question import ActiveQuestionsOut, PlayerQuestionOut, QuestionIn, QuestionOut
from app.services import questions as questions_service


router = APIRouter(prefix="/rooms/{room_id}/questions", tags=["questions"])


@router.get("/active", response_model=ActiveQuestionsOut)
async def active_questions(room_id: int, pid: int, session: AsyncSession = Depends(get_session)):
    questions = await questions_service.list_active_questions(session, room_id, pid)
    return ActiveQuestionsOut(questions=[PlayerQuestionOut.model_validate(q) for q in questions])


@router.get("", response_model=List[QuestionOut])
async def list_questions(
    room_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await questions_service.list_questions(session, current_user, room_id)


@router.post("", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
async def create_question(
    room_id: int,
    body: QuestionIn,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await questions_service.create_question(session, current_user, room_id, body)


@router.get("/{question_id}", response_model=QuestionOut)
async def get_question(
    room_id: int,
    question_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await questions_service.get_question(session, current_user, room_id, question_id)


@router.put("/{question_id}", response_model=QuestionOut)
async def update_question(
    room_id: int,
    question_id: int,
    body: QuestionIn,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await questions_service.update_question(session, current_user, room_id, question_id, body)


@router.delete("/{question_id}")
async def delete_question(
    room_id: int,
    question_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    await questions_service.delete_question(session, current_user, room_id, question_id)
    return {"success": True}
