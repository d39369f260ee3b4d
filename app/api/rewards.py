from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.reward import (
    RedeemIn,
    RedeemOut,
    RedemptionListOut,
    RedemptionOut,
    RedemptionStatusIn,
    RedemptionStatusOut,
    RewardIn,
    RewardOut,
)
from app.services import rewards as rewards_service


router = APIRouter(tags=["rewards"])


@router.get("/rooms/{room_id}/rewards", response_model=List[RewardOut])
async def list_rewards(
    room_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await rewards_service.list_rewards(session, current_user, room_id)


@router.post("/rooms/{room_id}/rewards", response_model=RewardOut, status_code=status.HTTP_201_CREATED)
async def create_reward(
    room_id: int,
    body: RewardIn,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await rewards_service.create_reward(session, current_user, room_id, body)


@router.get("/rooms/{room_id}/rewards/available", response_model=List[RewardOut])
async def available_rewards(room_id: int, session: AsyncSession = Depends(get_session)):
    return await rewards_service.list_available_rewards(session, room_id)


@router.post("/rewards/redeem", response_model=RedeemOut)
async def redeem(body: RedeemIn, session: AsyncSession = Depends(get_session)):
    redemption, participant = await rewards_service.redeem_reward(
        session,
        reward_id=body.reward_id,
        participant_id=body.participant_id,
    )
    return RedeemOut(redemption_id=redemption.id, new_rupiah_total=participant.total_rupiah)


@router.get("/rooms/{room_id}/redemptions", response_model=RedemptionListOut)
async def room_redemptions(
    room_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    items = await rewards_service.list_room_redemptions(session, current_user, room_id)
    return RedemptionListOut(
        count=len(items),
        redemptions=[RedemptionOut(**item) for item in items],
    )


@router.patch("/redemptions/{redemption_id}/status", response_model=RedemptionStatusOut)
async def update_redemption_status(
    redemption_id: int,
    body: RedemptionStatusIn,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    redemption = await rewards_service.update_redemption_status(
        session,
        current_user,
        redemption_id,
        status=body.status,
        notes=body.notes,
    )
    return RedemptionStatusOut(
        message=f"Redemption status updated to {redemption.status}",
        redemption_id=redemption.id,
        status=redemption.status,
    )
