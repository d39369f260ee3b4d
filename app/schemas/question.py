from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, model_validator

from app.schemas.base import CamelModel


Difficulty = Literal["bronze", "silver", "gold"]


class QuestionIn(CamelModel):
    text: str = Field(..., min_length=3)
    options: list[str] = Field(..., min_length=2, max_length=6)
    correct_option_index: int = Field(..., ge=0)
    points: int = Field(default=0, ge=0)
    rupiah: int = Field(default=0, ge=0)
    difficulty: Difficulty
    category: str = Field(..., min_length=1)
    explanation: str = Field(..., min_length=1)
    is_disabled: bool = False
    image_url: Optional[str] = None

    @model_validator(mode="after")
    def check_correct_index(self):
        if self.correct_option_index >= len(self.options):
            raise ValueError("Correct option index must be within the range of available options")
        return self


class QuestionOut(CamelModel):
    id: int
    room_id: int
    text: str
    options: list[str]
    correct_option_index: int
    points: int
    rupiah: int
    difficulty: str
    category: str
    explanation: str
    is_disabled: bool
    image_url: Optional[str]
    created_at: datetime
    updated_at: datetime


class PlayerQuestionOut(CamelModel):
    """Вопрос для игрока: без правильного ответа и объяснения."""

    id: int
    text: str
    options: list[str]
    points: int
    rupiah: int
    difficulty: str
    category: str
    image_url: Optional[str]


class ActiveQuestionsOut(CamelModel):
    message: str = "Active questions retrieved successfully"
    questions: list[PlayerQuestionOut]
