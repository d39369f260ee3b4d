from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class ParticipantStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"


class ClaimStatus:
    UNCLAIMED = "unclaimed"
    PROCESSING = "processing"
    CLAIMED = "claimed"


CLAIM_STATUSES = (ClaimStatus.UNCLAIMED, ClaimStatus.PROCESSING, ClaimStatus.CLAIMED)


class Participant(Base):
    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    room_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # личный код участника (не код комнаты), по нему возвращаются в игру
    access_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_rupiah: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=ParticipantStatus.ACTIVE
    )
    thr_claim_status: Mapped[str] = mapped_column(
        String(12), nullable=False, default=ClaimStatus.UNCLAIMED, server_default=ClaimStatus.UNCLAIMED
    )

    __table_args__ = (
        Index("ix_participants_room_status", "room_id", "current_status"),
    )


class ThrAdjustment(Base):
    """Ручная корректировка баланса THR админом (со знаком)."""

    __tablename__ = "thr_adjustments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    participant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False, default="Manual adjustment")
    admin_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class ClaimStatusChange(Base):
    """История смены thr_claim_status."""

    __tablename__ = "thr_claim_status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    participant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(12), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
