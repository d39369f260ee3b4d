from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel


class RewardIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    tier: Literal["bronze", "silver", "gold"]
    rupiah_required: int = Field(..., ge=0)
    image_url: str = ""
    quantity: int = Field(..., ge=0)
    is_active: bool = True


class RewardOut(CamelModel):
    id: int
    room_id: int
    name: str
    description: str
    tier: str
    rupiah_required: int
    image_url: str
    quantity: int
    remaining_quantity: int
    is_active: bool


class RedeemIn(CamelModel):
    reward_id: int
    participant_id: int


class RedeemOut(CamelModel):
    success: bool = True
    message: str = "Reward successfully redeemed"
    redemption_id: int
    new_rupiah_total: int


class RedemptionStatusIn(CamelModel):
    status: Literal["pending", "fulfilled", "cancelled"]
    notes: Optional[str] = None


class RedemptionStatusOut(CamelModel):
    success: bool = True
    message: str
    redemption_id: int
    status: str


class RedemptionOut(CamelModel):
    id: int
    participant_id: int
    participant_name: Optional[str]
    reward_id: Optional[int]
    reward_name: Optional[str]
    rupiah_spent: int
    status: str
    claimed_at: datetime
    notes: Optional[str]


class RedemptionListOut(CamelModel):
    success: bool = True
    count: int
    redemptions: list[RedemptionOut]
