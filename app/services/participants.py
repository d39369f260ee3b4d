from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, NotFoundError
from app.models.answer import Answer
from app.models.participant import (
    ClaimStatus,
    ClaimStatusChange,
    Participant,
    ParticipantStatus,
    ThrAdjustment,
)
from app.models.reward import Redemption, RedemptionStatus
from app.models.room import Room
from app.models.user import User
from app.services.access_codes import commit_with_unique_code, generate_unique_code
from app.services.room_access import find_room_by_code, get_owned_room


logger = logging.getLogger(__name__)


async def join_room(
    session: AsyncSession,
    *,
    access_code: Optional[str],
    name: Optional[str],
) -> tuple[Room, Participant]:
    """
    Вход в комнату по коду комнаты.

    Каждый вызов создаёт нового участника с личным кодом;
    вернувшийся игрок входит через validate со своим личным кодом.
    """
    code = (access_code or "").strip()
    player_name = (name or "").strip()
    if not code or not player_name:
        raise BadRequestError("Access code and name are required")

    room = await find_room_by_code(session, code)
    if not room:
        raise NotFoundError("Invalid access code")

    room_id = room.id
    participant = await commit_with_unique_code(
        session,
        Participant.access_code,
        lambda personal_code: Participant(
            room_id=room_id,
            name=player_name,
            access_code=personal_code,
            joined_at=datetime.utcnow(),
            total_points=0,
            total_rupiah=0,
            current_status=ParticipantStatus.ACTIVE,
            thr_claim_status=ClaimStatus.UNCLAIMED,
        ),
    )
    # после неудачной попытки room истекает
    await session.refresh(room)

    logger.info("Participant %s joined room %s", participant.id, room_id)
    return room, participant


async def logout(session: AsyncSession, participant_id: int) -> Participant:
    participant = await session.get(Participant, participant_id)
    if not participant:
        raise NotFoundError("Participant not found")

    # повторный logout ничего не ломает: статус просто остаётся inactive
    participant.current_status = ParticipantStatus.INACTIVE
    await session.commit()

    logger.info("Participant %s logged out", participant.id)
    return participant


async def earned_rupiah(session: AsyncSession, participant_id: int) -> int:
    total = await session.scalar(
        select(func.coalesce(func.sum(Answer.rupiah_awarded), 0)).where(
            Answer.participant_id == participant_id
        )
    )
    return int(total or 0)


async def get_participant(session: AsyncSession, participant_id: int) -> tuple[Participant, int]:
    """Возвращает (participant, заработано рупий по ответам)."""
    participant = await session.get(Participant, participant_id)
    if not participant:
        raise NotFoundError("Participant not found")
    return participant, await earned_rupiah(session, participant_id)


async def list_room_participants(session: AsyncSession, user: User, room_id: int) -> list[Participant]:
    await get_owned_room(session, room_id, user.id)
    rows = await session.execute(
        select(Participant)
        .where(Participant.room_id == room_id)
        .order_by(Participant.total_rupiah.desc(), Participant.joined_at)
    )
    return list(rows.scalars().all())


async def adjust_thr(
    session: AsyncSession,
    user: User,
    *,
    participant_id: int,
    adjustment: int,
    reason: Optional[str] = None,
) -> tuple[Participant, int]:
    """Ручная корректировка THR владельцем комнаты. Возвращает (participant, прежний баланс)."""
    participant = await session.get(Participant, participant_id)
    if not participant:
        raise NotFoundError("Participant not found")

    await get_owned_room(session, participant.room_id, user.id)

    # баланс не уходит в минус даже при параллельных списаниях
    changed = await session.execute(
        update(Participant)
        .where(
            Participant.id == participant_id,
            Participant.total_rupiah + adjustment >= 0,
        )
        .values(total_rupiah=Participant.total_rupiah + adjustment)
        .execution_options(synchronize_session=False)
    )
    if changed.rowcount != 1:
        await session.rollback()
        raise BadRequestError("Cannot reduce THR below zero")

    session.add(
        ThrAdjustment(
            participant_id=participant_id,
            amount=adjustment,
            reason=reason or "Manual adjustment",
            admin_id=user.id,
            created_at=datetime.utcnow(),
        )
    )
    await session.commit()
    await session.refresh(participant)

    new_balance = participant.total_rupiah
    previous = new_balance - adjustment
    logger.info(
        "THR of participant %s adjusted by %s (%s -> %s) by user %s",
        participant_id, adjustment, previous, new_balance, user.id,
    )
    return participant, previous


async def _set_claim_status(
    session: AsyncSession,
    participant_id: int,
    new_status: str,
    notes: Optional[str],
    user_id: int,
) -> tuple[Participant, bool]:
    """
    Меняет thr_claim_status внутри текущей транзакции, без commit.

    Переход в claimed выплачивает THR: системное списание на весь баланс,
    баланс обнуляется. Повторно не выплачивается, пока есть неотменённое
    системное списание. Возвращает (participant, создано ли списание).
    """
    # строка участника заблокирована до commit, баланс не меняется под нами
    participant = await session.scalar(
        select(Participant)
        .where(Participant.id == participant_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    now = datetime.utcnow()

    participant.thr_claim_status = new_status
    session.add(
        ClaimStatusChange(
            participant_id=participant_id,
            status=new_status,
            notes=notes or f"Status updated to {new_status}",
            updated_by=user_id,
            updated_at=now,
        )
    )

    if new_status != ClaimStatus.CLAIMED:
        return participant, False

    paid = await session.scalar(
        select(Redemption.id)
        .where(
            Redemption.participant_id == participant_id,
            Redemption.system_created.is_(True),
            Redemption.status != RedemptionStatus.CANCELLED,
        )
        .limit(1)
    )
    if paid is not None:
        return participant, False

    session.add(
        Redemption(
            participant_id=participant_id,
            room_id=participant.room_id,
            reward_id=None,
            rupiah_spent=participant.total_rupiah,
            claimed_at=now,
            status=RedemptionStatus.FULFILLED,
            notes=notes or "THR claimed via admin status update",
            system_created=True,
            updated_by=user_id,
            updated_at=now,
        )
    )
    # системное списание входит в баланс, как и обычные
    participant.total_rupiah = 0
    return participant, True


async def update_claim_status(
    session: AsyncSession,
    user: User,
    *,
    participant_id: int,
    claim_status: str,
    notes: Optional[str] = None,
) -> Participant:
    participant = await session.get(Participant, participant_id)
    if not participant:
        raise NotFoundError("Participant not found")

    await get_owned_room(session, participant.room_id, user.id)

    user_id = user.id
    participant, paid_out = await _set_claim_status(session, participant_id, claim_status, notes, user_id)
    await session.commit()

    logger.info(
        "THR claim status of participant %s set to %s by user %s (payout=%s)",
        participant_id, claim_status, user_id, paid_out,
    )
    return participant


async def batch_update_claim_status(
    session: AsyncSession,
    user: User,
    *,
    room_id: int,
    target_status: Optional[str],
    new_status: str,
    notes: Optional[str] = None,
) -> tuple[int, int]:
    """Массовая смена статуса в комнате. Возвращает (обновлено участников, создано списаний)."""
    await get_owned_room(session, room_id, user.id)

    query = select(Participant.id).where(
        Participant.room_id == room_id,
        Participant.thr_claim_status != new_status,
    )
    if target_status:
        query = query.where(Participant.thr_claim_status == target_status)
    ids = list((await session.execute(query.order_by(Participant.id))).scalars().all())

    user_id = user.id
    created = 0
    for participant_id in ids:
        _, paid_out = await _set_claim_status(session, participant_id, new_status, notes, user_id)
        created += int(paid_out)
    await session.commit()

    logger.info(
        "Room %s: %s participants moved to %s by user %s, %s payouts",
        room_id, len(ids), new_status, user_id, created,
    )
    return len(ids), created


async def list_room_access_codes(session: AsyncSession, user: User, room_id: int) -> list[Participant]:
    await get_owned_room(session, room_id, user.id)
    rows = await session.execute(
        select(Participant).where(Participant.room_id == room_id).order_by(Participant.name, Participant.id)
    )
    return list(rows.scalars().all())


async def issue_access_code(session: AsyncSession, user: User, room_id: int) -> str:
    """Свободный личный код для раздачи; в базу не пишется."""
    await get_owned_room(session, room_id, user.id)
    return await generate_unique_code(session, Participant.access_code)
