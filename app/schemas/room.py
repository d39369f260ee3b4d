from datetime import datetime

from pydantic import Field, model_validator

from app.schemas.base import CamelModel


class RoomCreate(CamelModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: str = Field(default="", max_length=500)
    start_time: datetime
    end_time: datetime
    time_per_question: int = Field(default=15, ge=5, le=60)
    show_leaderboard: bool = True
    allow_retries: bool = False
    show_correct_answers: bool = True

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class RoomUpdate(RoomCreate):
    description: str = Field(..., min_length=5, max_length=500)
    time_per_question: int = Field(..., ge=5, le=60)
    show_leaderboard: bool
    allow_retries: bool
    show_correct_answers: bool
    is_active: bool


class RoomCreated(CamelModel):
    room_id: int
    access_code: str


class RoomOut(CamelModel):
    id: int
    name: str
    description: str
    access_code: str
    is_active: bool
    start_time: datetime
    end_time: datetime
    time_per_question: int
    show_leaderboard: bool
    allow_retries: bool
    show_correct_answers: bool
    created_by: int
    created_at: datetime
    updated_at: datetime


class RoomSummary(CamelModel):
    id: int
    name: str
    access_code: str


class RoomValidateOut(CamelModel):
    message: str = "Room found"
    room: RoomSummary


class RoomDeactivated(CamelModel):
    success: bool = True
    room_id: int
    is_active: bool = False
