from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel


class JoinIn(CamelModel):
    # пустые строки ловит сервис, чтобы отдать понятное сообщение
    access_code: Optional[str] = None
    name: Optional[str] = None


class JoinOut(CamelModel):
    message: str = "Successfully joined the room"
    room_id: int
    participant_id: int
    room_name: str
    access_code: str


class LogoutIn(CamelModel):
    participant_id: int


class LogoutOut(CamelModel):
    message: str = "Logged out successfully"
    participant_id: int
    access_code: str


class ValidateAccessIn(CamelModel):
    room_id: Optional[int] = None
    access_code: Optional[str] = None


class ParticipantSummary(CamelModel):
    id: int
    name: str
    total_rupiah: int
    current_status: str


class ValidateAccessOut(CamelModel):
    message: str
    is_existing: bool
    participant: Optional[ParticipantSummary] = None


class ParticipantOut(CamelModel):
    id: int
    room_id: int
    name: str
    access_code: str
    joined_at: datetime
    total_points: int
    total_rupiah: int
    current_status: str
    thr_claim_status: str


class ParticipantPublicOut(CamelModel):
    id: int
    name: str
    room_id: int
    joined_at: datetime
    total_points: int
    total_rupiah: int
    earned_rupiah: int
    thr_claim_status: str


class ThrAdjustmentIn(CamelModel):
    participant_id: int
    adjustment: int
    reason: Optional[str] = Field(default=None, max_length=255)


class ThrAdjustmentOut(CamelModel):
    success: bool = True
    message: str
    previous_balance: int
    new_balance: int
    participant_id: int
    participant_name: str


ClaimStatusValue = Literal["unclaimed", "processing", "claimed"]


class ClaimStatusIn(CamelModel):
    participant_id: int
    claim_status: ClaimStatusValue
    notes: Optional[str] = None


class ClaimedParticipant(CamelModel):
    id: int
    name: str
    thr_claim_status: str


class ClaimStatusOut(CamelModel):
    success: bool = True
    message: str
    participant: ClaimedParticipant


class BatchClaimStatusIn(CamelModel):
    room_id: int
    # None: все участники комнаты, кроме уже имеющих new_status
    target_status: Optional[ClaimStatusValue] = None
    new_status: ClaimStatusValue
    notes: Optional[str] = None


class BatchClaimStatusOut(CamelModel):
    success: bool = True
    message: str
    updated_count: int
    redemptions_created: int


class AccessCodeRow(CamelModel):
    id: int
    name: str
    access_code: str
    total_rupiah: int


class AccessCodesOut(CamelModel):
    participants: List[AccessCodeRow]


class IssuedAccessCodeOut(CamelModel):
    access_code: str
