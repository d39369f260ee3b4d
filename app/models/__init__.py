from .base import Base
from .user import User, UserRole
from .room import Room
from .question import Question, DIFFICULTIES
from .participant import (
    CLAIM_STATUSES,
    ClaimStatus,
    ClaimStatusChange,
    Participant,
    ParticipantStatus,
    ThrAdjustment,
)
from .answer import Answer
from .reward import Reward, Redemption, RedemptionStatus

__all__ = [
    "Base", "User", "UserRole", "Room", "Question", "DIFFICULTIES",
    "Participant", "ParticipantStatus", "ThrAdjustment", "Answer",
    "ClaimStatus", "ClaimStatusChange", "CLAIM_STATUSES",
    "Reward", "Redemption", "RedemptionStatus",
]
