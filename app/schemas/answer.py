from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.base import CamelModel


class AnswerIn(CamelModel):
    question_id: int
    participant_id: int
    selected_option_index: int = Field(..., ge=0)
    time_to_answer: float = Field(..., ge=0)


class AnswerOut(CamelModel):
    is_correct: bool
    correct_option_index: Optional[int] = None
    points_awarded: int
    rupiah_awarded: int
    explanation: Optional[str] = None
    new_total_points: int
    new_total_rupiah: int


class LeaderboardEntry(CamelModel):
    id: int
    name: str
    total_rupiah: int
    total_points: int
    correct_answers: int
    last_answered_at: Optional[datetime] = None


class LeaderboardOut(CamelModel):
    participants: list[LeaderboardEntry]
