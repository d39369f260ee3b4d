from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class Answer(Base):
    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question_id: Mapped[int] = mapped_column(Integer, nullable=False)
    participant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    room_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    selected_option_index: Mapped[int] = mapped_column(Integer, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    time_to_answer: Mapped[float] = mapped_column(Float, nullable=False)  # секунды

    points_awarded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rupiah_awarded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    answered_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    # без unique: при allow_retries повторы допустимы, дубли ищет аудит
    __table_args__ = (
        Index("ix_answers_participant_question", "participant_id", "question_id"),
        Index("ix_answers_room_participant", "room_id", "participant_id"),
    )
