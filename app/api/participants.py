from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.participant import (
    BatchClaimStatusIn,
    BatchClaimStatusOut,
    ClaimStatusIn,
    ClaimStatusOut,
    ClaimedParticipant,
    JoinIn,
    JoinOut,
    LogoutIn,
    LogoutOut,
    ParticipantPublicOut,
    ParticipantSummary,
    ThrAdjustmentIn,
    ThrAdjustmentOut,
    ValidateAccessIn,
    ValidateAccessOut,
)
from app.services import participants as participants_service
from app.services.room_access import validate_room_access


router = APIRouter(prefix="/participants", tags=["participants"])


@router.post("/join", response_model=JoinOut, status_code=status.HTTP_201_CREATED)
async def join(body: JoinIn, session: AsyncSession = Depends(get_session)):
    room, participant = await participants_service.join_room(
        session,
        access_code=body.access_code,
        name=body.name,
    )
    return JoinOut(
        room_id=room.id,
        participant_id=participant.id,
        room_name=room.name,
        access_code=participant.access_code,
    )


@router.post("/logout", response_model=LogoutOut)
async def logout(body: LogoutIn, session: AsyncSession = Depends(get_session)):
    participant = await participants_service.logout(session, body.participant_id)
    return LogoutOut(participant_id=participant.id, access_code=participant.access_code)


@router.post("/validate", response_model=ValidateAccessOut, response_model_exclude_none=True)
async def validate(body: ValidateAccessIn, session: AsyncSession = Depends(get_session)):
    participant = await validate_room_access(session, body.room_id, body.access_code)
    if participant is None:
        return ValidateAccessOut(message="Access code is valid but not used yet", is_existing=False)

    return ValidateAccessOut(
        message="Access code is valid",
        is_existing=True,
        participant=ParticipantSummary.model_validate(participant),
    )


@router.post("/adjust-thr", response_model=ThrAdjustmentOut)
async def adjust_thr(
    body: ThrAdjustmentIn,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    participant, previous = await participants_service.adjust_thr(
        session,
        current_user,
        participant_id=body.participant_id,
        adjustment=body.adjustment,
        reason=body.reason,
    )
    direction = "up" if body.adjustment > 0 else "down"
    return ThrAdjustmentOut(
        message=f"THR balance adjusted {direction} by {abs(body.adjustment)}",
        previous_balance=previous,
        new_balance=participant.total_rupiah,
        participant_id=participant.id,
        participant_name=participant.name,
    )


@router.post("/update-claim-status", response_model=ClaimStatusOut)
async def update_claim_status(
    body: ClaimStatusIn,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    participant = await participants_service.update_claim_status(
        session,
        current_user,
        participant_id=body.participant_id,
        claim_status=body.claim_status,
        notes=body.notes,
    )
    return ClaimStatusOut(
        message=f"THR claim status updated to {body.claim_status}",
        participant=ClaimedParticipant.model_validate(participant),
    )


@router.post("/batch-update-status", response_model=BatchClaimStatusOut)
async def batch_update_status(
    body: BatchClaimStatusIn,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    updated, created = await participants_service.batch_update_claim_status(
        session,
        current_user,
        room_id=body.room_id,
        target_status=body.target_status,
        new_status=body.new_status,
        notes=body.notes,
    )
    if updated == 0:
        message = "No participants found that need updating"
    else:
        message = f"Updated {updated} participants to {body.new_status} status"
    return BatchClaimStatusOut(message=message, updated_count=updated, redemptions_created=created)


@router.get("/{participant_id}", response_model=ParticipantPublicOut)
async def get_participant(participant_id: int, session: AsyncSession = Depends(get_session)):
    participant, earned = await participants_service.get_participant(session, participant_id)
    return ParticipantPublicOut(
        id=participant.id,
        name=participant.name,
        room_id=participant.room_id,
        joined_at=participant.joined_at,
        total_points=participant.total_points,
        total_rupiah=participant.total_rupiah,
        earned_rupiah=earned,
        thr_claim_status=participant.thr_claim_status,
    )
