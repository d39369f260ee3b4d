"""
Аудит согласованности данных.

Проверки - чистые функции над снимком (Snapshot), без доступа к базе.
run_database_validation грузит для каждой проверки только нужные
ей таблицы, каждую в своей сессии, и гоняет проверки параллельно.
"""
from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.answer import Answer
from app.models.participant import Participant, ThrAdjustment
from app.models.question import Question
from app.models.reward import Redemption, RedemptionStatus, Reward
from app.models.room import Room
from app.models.user import User


logger = logging.getLogger(__name__)


# ---------- снимок ----------

@dataclass(frozen=True)
class UserRef:
    id: int


@dataclass(frozen=True)
class RoomRef:
    id: int
    created_by: int


@dataclass(frozen=True)
class QuestionRef:
    id: int
    room_id: int
    text: str


@dataclass(frozen=True)
class ParticipantRef:
    id: int
    room_id: int
    total_rupiah: int


@dataclass(frozen=True)
class AnswerRef:
    id: int
    question_id: int
    participant_id: int
    rupiah_awarded: int


@dataclass(frozen=True)
class RewardRef:
    id: int
    room_id: int
    quantity: int
    remaining_quantity: int


@dataclass(frozen=True)
class RedemptionRef:
    id: int
    participant_id: int
    room_id: int
    reward_id: Optional[int]
    rupiah_spent: int
    status: str


@dataclass(frozen=True)
class AdjustmentRef:
    id: int
    participant_id: int
    amount: int


@dataclass(frozen=True)
class Snapshot:
    users: Tuple[UserRef, ...] = ()
    rooms: Tuple[RoomRef, ...] = ()
    questions: Tuple[QuestionRef, ...] = ()
    participants: Tuple[ParticipantRef, ...] = ()
    answers: Tuple[AnswerRef, ...] = ()
    rewards: Tuple[RewardRef, ...] = ()
    redemptions: Tuple[RedemptionRef, ...] = ()
    adjustments: Tuple[AdjustmentRef, ...] = ()


# имя поля снимка -> (модель, тип записи)
_SOURCES: Dict[str, Tuple[Any, type]] = {
    "users": (User, UserRef),
    "rooms": (Room, RoomRef),
    "questions": (Question, QuestionRef),
    "participants": (Participant, ParticipantRef),
    "answers": (Answer, AnswerRef),
    "rewards": (Reward, RewardRef),
    "redemptions": (Redemption, RedemptionRef),
    "adjustments": (ThrAdjustment, AdjustmentRef),
}


async def load_snapshot(session: AsyncSession, *kinds: str) -> Snapshot:
    """Грузит только перечисленные таблицы (все, если ничего не передано)."""
    data: Dict[str, tuple] = {}
    for kind in kinds or tuple(_SOURCES):
        model, ref = _SOURCES[kind]
        columns = [getattr(model, f.name) for f in fields(ref)]
        rows = await session.execute(select(*columns).order_by(model.id))
        data[kind] = tuple(ref(*row) for row in rows.all())
    return Snapshot(**data)


# ---------- проверки ----------

def _check_references(
    records: Iterable[Any],
    refs: Sequence[Tuple[str, str, set, bool]],
) -> Dict[str, Any]:
    result: Dict[str, Any] = {"valid": 0, "invalid": 0, "details": []}
    for rec in records:
        broken = None
        for label, attr, known_ids, nullable in refs:
            value = getattr(rec, attr)
            if value is None and nullable:
                continue
            if value not in known_ids:
                broken = {"field": label, "value": value}
                break
        if broken is None:
            result["valid"] += 1
        else:
            result["invalid"] += 1
            result["details"].append({"id": rec.id, **broken})
    return result


def validate_database_relationships(snapshot: Snapshot) -> Dict[str, Any]:
    user_ids = {u.id for u in snapshot.users}
    room_ids = {r.id for r in snapshot.rooms}
    question_ids = {q.id for q in snapshot.questions}
    participant_ids = {p.id for p in snapshot.participants}
    reward_ids = {r.id for r in snapshot.rewards}

    return {
        "rooms": _check_references(snapshot.rooms, [
            ("createdBy", "created_by", user_ids, False),
        ]),
        "questions": _check_references(snapshot.questions, [
            ("roomId", "room_id", room_ids, False),
        ]),
        "participants": _check_references(snapshot.participants, [
            ("roomId", "room_id", room_ids, False),
        ]),
        "answers": _check_references(snapshot.answers, [
            ("questionId", "question_id", question_ids, False),
            ("participantId", "participant_id", participant_ids, False),
        ]),
        "rewards": _check_references(snapshot.rewards, [
            ("roomId", "room_id", room_ids, False),
        ]),
        "redemptions": _check_references(snapshot.redemptions, [
            ("participantId", "participant_id", participant_ids, False),
            ("roomId", "room_id", room_ids, False),
            # системные списания без награды допустимы
            ("rewardId", "reward_id", reward_ids, True),
        ]),
    }


def find_duplicate_answers(snapshot: Snapshot) -> List[Dict[str, Any]]:
    groups: Dict[Tuple[int, int], List[int]] = defaultdict(list)
    for a in sorted(snapshot.answers, key=lambda a: a.id):
        groups[(a.participant_id, a.question_id)].append(a.id)

    return [
        {
            "participantId": participant_id,
            "questionId": question_id,
            "count": len(ids),
            "answerIds": ids,
        }
        for (participant_id, question_id), ids in groups.items()
        if len(ids) > 1
    ]


def _normalize_text(text: str) -> str:
    return " ".join(text.lower().split())


def find_duplicate_questions(snapshot: Snapshot) -> List[Dict[str, Any]]:
    groups: Dict[Tuple[int, str], List[QuestionRef]] = defaultdict(list)
    for q in sorted(snapshot.questions, key=lambda q: q.id):
        groups[(q.room_id, _normalize_text(q.text))].append(q)

    return [
        {
            "roomId": room_id,
            "text": items[0].text,
            "questionIds": [q.id for q in items],
        }
        for (room_id, _), items in groups.items()
        if len(items) > 1
    ]


def validate_reward_quantities(snapshot: Snapshot) -> List[Dict[str, Any]]:
    claimed: Dict[int, int] = defaultdict(int)
    for r in snapshot.redemptions:
        if r.reward_id is not None and r.status != RedemptionStatus.CANCELLED:
            claimed[r.reward_id] += 1

    inconsistent = []
    for reward in snapshot.rewards:
        count = claimed.get(reward.id, 0)
        expected = reward.quantity - count
        if reward.remaining_quantity != expected:
            inconsistent.append({
                "rewardId": reward.id,
                "reportedRemaining": reward.remaining_quantity,
                "calculatedRemaining": expected,
                "difference": reward.remaining_quantity - expected,
                "overAllocated": count > reward.quantity,
            })
    return inconsistent


def expected_balances(snapshot: Snapshot) -> Dict[int, int]:
    """Баланс по журналу: ответы + корректировки - неотменённые списания."""
    balance: Dict[int, int] = defaultdict(int)
    for a in snapshot.answers:
        balance[a.participant_id] += a.rupiah_awarded
    for adj in snapshot.adjustments:
        balance[adj.participant_id] += adj.amount
    for r in snapshot.redemptions:
        if r.status != RedemptionStatus.CANCELLED:
            balance[r.participant_id] -= r.rupiah_spent
    return balance


def validate_participant_rupiah(snapshot: Snapshot) -> List[Dict[str, Any]]:
    balances = expected_balances(snapshot)

    inconsistent = []
    for p in snapshot.participants:
        expected = balances.get(p.id, 0)
        if p.total_rupiah != expected:
            inconsistent.append({
                "participantId": p.id,
                "reportedBalance": p.total_rupiah,
                "calculatedBalance": expected,
                "difference": p.total_rupiah - expected,
            })
    return inconsistent


# ---------- отчёт ----------

Check = Callable[[Snapshot], Any]

# (ключ отчёта, проверка, нужные таблицы)
CHECKS: List[Tuple[str, Check, Tuple[str, ...]]] = [
    ("relationshipValidation", validate_database_relationships,
     ("users", "rooms", "questions", "participants", "answers", "rewards", "redemptions")),
    ("duplicateAnswers", find_duplicate_answers, ("answers",)),
    ("duplicateQuestions", find_duplicate_questions, ("questions",)),
    ("inconsistentRewards", validate_reward_quantities, ("rewards", "redemptions")),
    ("inconsistentRupiah", validate_participant_rupiah,
     ("participants", "answers", "redemptions", "adjustments")),
]


def build_report(results: Dict[str, Any]) -> Dict[str, Any]:
    report: Dict[str, Any] = {}
    for key, value in results.items():
        if isinstance(value, list):
            report[key] = {"count": len(value), "details": value}
        else:
            report[key] = value
    return report


def validate_snapshot(snapshot: Snapshot) -> Dict[str, Any]:
    return build_report({key: check(snapshot) for key, check, _ in CHECKS})


async def _run_check(
    session_factory: async_sessionmaker[AsyncSession],
    check: Check,
    kinds: Tuple[str, ...],
) -> Any:
    async with session_factory() as session:
        snapshot = await load_snapshot(session, *kinds)
    return check(snapshot)


async def run_database_validation(session_factory: async_sessionmaker[AsyncSession]) -> Dict[str, Any]:
    # проверки независимы; ошибка любой из них роняет весь отчёт
    values = await asyncio.gather(*(
        _run_check(session_factory, check, kinds) for _, check, kinds in CHECKS
    ))
    report = build_report({key: value for (key, _, _), value in zip(CHECKS, values)})
    logger.info(
        "DB validation: %s duplicate answers, %s inconsistent rewards, %s inconsistent balances",
        report["duplicateAnswers"]["count"],
        report["inconsistentRewards"]["count"],
        report["inconsistentRupiah"]["count"],
    )
    return report


# ---------- исправления ----------

async def fix_database(
    session: AsyncSession,
    *,
    fix_participant_rupiah: bool = False,
    fix_reward_quantities: bool = False,
    remove_duplicate_answers: bool = False,
) -> Dict[str, Any]:
    """Исправляет найденные расхождения в одной транзакции."""
    results: Dict[str, Any] = {
        "participantRupiah": {"fixed": 0, "details": []},
        "rewardQuantities": {"fixed": 0, "details": []},
        "duplicateAnswers": {"removed": 0, "details": []},
    }

    try:
        # сначала дубли: от них зависит пересчёт балансов
        if remove_duplicate_answers:
            snapshot = await load_snapshot(session, "answers")
            for dup in find_duplicate_answers(snapshot):
                keep, *remove = dup["answerIds"]
                await session.execute(delete(Answer).where(Answer.id.in_(remove)))
                results["duplicateAnswers"]["removed"] += len(remove)
                results["duplicateAnswers"]["details"].append({
                    "participantId": dup["participantId"],
                    "questionId": dup["questionId"],
                    "keptAnswerId": keep,
                    "removedAnswerIds": remove,
                })

        if fix_reward_quantities:
            snapshot = await load_snapshot(session, "rewards", "redemptions")
            for item in validate_reward_quantities(snapshot):
                await session.execute(
                    update(Reward)
                    .where(Reward.id == item["rewardId"])
                    .values(remaining_quantity=item["calculatedRemaining"])
                )
                results["rewardQuantities"]["fixed"] += 1
                results["rewardQuantities"]["details"].append({
                    "rewardId": item["rewardId"],
                    "oldRemaining": item["reportedRemaining"],
                    "newRemaining": item["calculatedRemaining"],
                    "difference": item["difference"],
                })

        if fix_participant_rupiah:
            snapshot = await load_snapshot(session, "participants", "answers", "redemptions", "adjustments")
            for item in validate_participant_rupiah(snapshot):
                await session.execute(
                    update(Participant)
                    .where(Participant.id == item["participantId"])
                    .values(total_rupiah=item["calculatedBalance"])
                )
                results["participantRupiah"]["fixed"] += 1
                results["participantRupiah"]["details"].append({
                    "participantId": item["participantId"],
                    "oldBalance": item["reportedBalance"],
                    "newBalance": item["calculatedBalance"],
                    "difference": item["difference"],
                })

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "DB fix: %s balances, %s rewards fixed, %s duplicate answers removed",
        results["participantRupiah"]["fixed"],
        results["rewardQuantities"]["fixed"],
        results["duplicateAnswers"]["removed"],
    )
    return results
