from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, NotFoundError
from app.models.participant import Participant
from app.models.reward import Redemption, RedemptionStatus, Reward
from app.models.user import User
from app.schemas.reward import RewardIn
from app.services.room_access import get_owned_room


logger = logging.getLogger(__name__)


async def create_reward(session: AsyncSession, user: User, room_id: int, payload: RewardIn) -> Reward:
    await get_owned_room(session, room_id, user.id)

    reward = Reward(
        room_id=room_id,
        remaining_quantity=payload.quantity,
        **payload.model_dump(),
    )
    session.add(reward)
    await session.commit()
    await session.refresh(reward)
    return reward


async def list_rewards(session: AsyncSession, user: User, room_id: int) -> list[Reward]:
    await get_owned_room(session, room_id, user.id)
    rows = await session.execute(
        select(Reward).where(Reward.room_id == room_id).order_by(Reward.rupiah_required, Reward.id)
    )
    return list(rows.scalars().all())


async def list_available_rewards(session: AsyncSession, room_id: int) -> list[Reward]:
    rows = await session.execute(
        select(Reward)
        .where(
            Reward.room_id == room_id,
            Reward.is_active.is_(True),
            Reward.remaining_quantity > 0,
        )
        .order_by(Reward.rupiah_required, Reward.id)
    )
    return list(rows.scalars().all())


async def redeem_reward(
    session: AsyncSession,
    *,
    reward_id: int,
    participant_id: int,
) -> tuple[Redemption, Participant]:
    reward = await session.get(Reward, reward_id)
    if not reward or not reward.is_active:
        raise NotFoundError("Reward not found")

    if reward.remaining_quantity <= 0:
        raise BadRequestError("Reward is out of stock")

    participant = await session.get(Participant, participant_id)
    if not participant:
        raise NotFoundError("Participant not found")

    if participant.room_id != reward.room_id:
        raise BadRequestError("Reward is not available in this room")

    cost = reward.rupiah_required
    if participant.total_rupiah < cost:
        raise BadRequestError("Not enough Rupiah to claim this reward")

    # проверки выше читают возможно устаревшие строки;
    # списание делают условные UPDATE, решает rowcount
    taken = await session.execute(
        update(Reward)
        .where(Reward.id == reward.id, Reward.remaining_quantity > 0)
        .values(remaining_quantity=Reward.remaining_quantity - 1)
        .execution_options(synchronize_session=False)
    )
    if taken.rowcount != 1:
        await session.rollback()
        raise BadRequestError("Reward is out of stock")

    charged = await session.execute(
        update(Participant)
        .where(Participant.id == participant.id, Participant.total_rupiah >= cost)
        .values(total_rupiah=Participant.total_rupiah - cost)
        .execution_options(synchronize_session=False)
    )
    if charged.rowcount != 1:
        await session.rollback()
        raise BadRequestError("Not enough Rupiah to claim this reward")

    redemption = Redemption(
        participant_id=participant_id,
        room_id=reward.room_id,
        reward_id=reward_id,
        rupiah_spent=cost,
        claimed_at=datetime.utcnow(),
        status=RedemptionStatus.PENDING,
    )
    session.add(redemption)
    await session.commit()
    await session.refresh(redemption)
    await session.refresh(participant)

    logger.info(
        "Participant %s redeemed reward %s for %s rupiah",
        participant_id, reward_id, cost,
    )
    return redemption, participant


async def update_redemption_status(
    session: AsyncSession,
    user: User,
    redemption_id: int,
    *,
    status: str,
    notes: Optional[str] = None,
) -> Redemption:
    redemption = await session.get(Redemption, redemption_id)
    if not redemption:
        raise NotFoundError("Redemption not found")

    await get_owned_room(session, redemption.room_id, user.id)

    if redemption.status != RedemptionStatus.PENDING:
        raise BadRequestError(f"Cannot update redemption that is already {redemption.status}")

    values = {"status": status, "updated_by": user.id, "updated_at": datetime.utcnow()}
    if notes:
        values["notes"] = notes

    # из pending выходят ровно один раз
    moved = await session.execute(
        update(Redemption)
        .where(Redemption.id == redemption_id, Redemption.status == RedemptionStatus.PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if moved.rowcount != 1:
        await session.rollback()
        await session.refresh(redemption)
        raise BadRequestError(f"Cannot update redemption that is already {redemption.status}")

    if status == RedemptionStatus.CANCELLED:
        # возврат: отменённые списания не входят в баланс
        await session.execute(
            update(Participant)
            .where(Participant.id == redemption.participant_id)
            .values(total_rupiah=Participant.total_rupiah + redemption.rupiah_spent)
            .execution_options(synchronize_session=False)
        )
        if redemption.reward_id is not None:
            await session.execute(
                update(Reward)
                .where(Reward.id == redemption.reward_id)
                .values(remaining_quantity=Reward.remaining_quantity + 1)
                .execution_options(synchronize_session=False)
            )

    await session.commit()
    await session.refresh(redemption)

    logger.info("Redemption %s set to %s by user %s", redemption_id, status, user.id)
    return redemption


async def list_room_redemptions(session: AsyncSession, user: User, room_id: int) -> list[dict]:
    await get_owned_room(session, room_id, user.id)

    rows = await session.execute(
        select(Redemption, Participant.name, Reward.name)
        .outerjoin(Participant, Participant.id == Redemption.participant_id)
        .outerjoin(Reward, Reward.id == Redemption.reward_id)
        .where(Redemption.room_id == room_id)
        .order_by(Redemption.claimed_at.desc(), Redemption.id.desc())
    )
    return [
        {
            "id": r.id,
            "participant_id": r.participant_id,
            "participant_name": participant_name,
            "reward_id": r.reward_id,
            "reward_name": reward_name,
            "rupiah_spent": r.rupiah_spent,
            "status": r.status,
            "claimed_at": r.claimed_at,
            "notes": r.notes,
        }
        for r, participant_name, reward_name in rows.all()
    ]
