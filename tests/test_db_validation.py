from sqlalchemy import func, select

from app.models import Answer, Participant, Reward
from app.services.db_validation import (
    AdjustmentRef,
    AnswerRef,
    ParticipantRef,
    QuestionRef,
    RedemptionRef,
    RewardRef,
    RoomRef,
    Snapshot,
    UserRef,
    expected_balances,
    find_duplicate_answers,
    find_duplicate_questions,
    validate_database_relationships,
    validate_participant_rupiah,
    validate_reward_quantities,
    validate_snapshot,
)


# ---------- чистые проверки ----------

def test_empty_snapshot_is_clean():
    report = validate_snapshot(Snapshot())
    assert report["duplicateAnswers"] == {"count": 0, "details": []}
    assert report["inconsistentRewards"]["count"] == 0
    assert report["inconsistentRupiah"]["count"] == 0
    assert report["relationshipValidation"]["rooms"] == {"valid": 0, "invalid": 0, "details": []}


def test_dangling_references():
    snapshot = Snapshot(
        users=(UserRef(1),),
        rooms=(RoomRef(10, created_by=1), RoomRef(11, created_by=2)),
        questions=(QuestionRef(100, room_id=10, text="a"), QuestionRef(101, room_id=99, text="b")),
        participants=(ParticipantRef(200, room_id=10, total_rupiah=0),),
        answers=(AnswerRef(300, question_id=100, participant_id=201, rupiah_awarded=0),),
        redemptions=(
            RedemptionRef(400, participant_id=200, room_id=10, reward_id=None, rupiah_spent=0, status="pending"),
            RedemptionRef(401, participant_id=200, room_id=10, reward_id=77, rupiah_spent=0, status="pending"),
        ),
    )
    result = validate_database_relationships(snapshot)

    assert result["rooms"] == {
        "valid": 1,
        "invalid": 1,
        "details": [{"id": 11, "field": "createdBy", "value": 2}],
    }
    assert result["questions"]["details"] == [{"id": 101, "field": "roomId", "value": 99}]
    assert result["participants"]["invalid"] == 0
    assert result["answers"]["details"] == [{"id": 300, "field": "participantId", "value": 201}]
    # списание без награды допустимо
    assert result["redemptions"]["valid"] == 1
    assert result["redemptions"]["details"] == [{"id": 401, "field": "rewardId", "value": 77}]


def test_duplicate_answers_grouped_by_participant_and_question():
    snapshot = Snapshot(answers=(
        AnswerRef(3, question_id=1, participant_id=5, rupiah_awarded=0),
        AnswerRef(1, question_id=1, participant_id=5, rupiah_awarded=10),
        AnswerRef(2, question_id=2, participant_id=5, rupiah_awarded=0),
        AnswerRef(4, question_id=1, participant_id=6, rupiah_awarded=0),
    ))
    assert find_duplicate_answers(snapshot) == [
        {"participantId": 5, "questionId": 1, "count": 2, "answerIds": [1, 3]},
    ]


def test_duplicate_questions_ignore_case_and_spacing():
    snapshot = Snapshot(questions=(
        QuestionRef(1, room_id=1, text="Berapa rukun Islam?"),
        QuestionRef(2, room_id=1, text="  berapa   rukun islam? "),
        QuestionRef(3, room_id=2, text="Berapa rukun Islam?"),
    ))
    assert find_duplicate_questions(snapshot) == [
        {"roomId": 1, "text": "Berapa rukun Islam?", "questionIds": [1, 2]},
    ]


def test_reward_quantities_skip_cancelled_and_flag_overallocation():
    snapshot = Snapshot(
        rewards=(
            RewardRef(1, room_id=1, quantity=3, remaining_quantity=2),
            RewardRef(2, room_id=1, quantity=1, remaining_quantity=0),
            RewardRef(3, room_id=1, quantity=1, remaining_quantity=1),
        ),
        redemptions=(
            RedemptionRef(10, participant_id=1, room_id=1, reward_id=1, rupiah_spent=5, status="pending"),
            RedemptionRef(11, participant_id=1, room_id=1, reward_id=1, rupiah_spent=5, status="cancelled"),
            RedemptionRef(12, participant_id=1, room_id=1, reward_id=2, rupiah_spent=5, status="fulfilled"),
            RedemptionRef(13, participant_id=2, room_id=1, reward_id=2, rupiah_spent=5, status="pending"),
        ),
    )
    assert validate_reward_quantities(snapshot) == [
        {
            "rewardId": 2,
            "reportedRemaining": 0,
            "calculatedRemaining": -1,
            "difference": 1,
            "overAllocated": True,
        },
    ]


def test_rupiah_ledger():
    snapshot = Snapshot(
        participants=(
            ParticipantRef(1, room_id=1, total_rupiah=65),
            ParticipantRef(2, room_id=1, total_rupiah=0),
            ParticipantRef(3, room_id=1, total_rupiah=5),
        ),
        answers=(
            AnswerRef(1, question_id=1, participant_id=1, rupiah_awarded=50),
            AnswerRef(2, question_id=2, participant_id=1, rupiah_awarded=30),
        ),
        adjustments=(AdjustmentRef(1, participant_id=1, amount=15),),
        redemptions=(
            RedemptionRef(1, participant_id=1, room_id=1, reward_id=1, rupiah_spent=30, status="pending"),
            RedemptionRef(2, participant_id=1, room_id=1, reward_id=1, rupiah_spent=30, status="cancelled"),
        ),
    )
    assert expected_balances(snapshot)[1] == 65
    assert validate_participant_rupiah(snapshot) == [
        {"participantId": 3, "reportedBalance": 5, "calculatedBalance": 0, "difference": 5},
    ]


# ---------- эндпоинты ----------

async def test_validation_requires_admin(client, owner_headers):
    resp = await client.get("/admin/db-validation")
    assert resp.status_code == 401

    resp = await client.get("/admin/db-validation", headers=owner_headers)
    assert resp.status_code == 403
    assert resp.json() == {"message": "Unauthorized: Admin access required"}

    resp = await client.post("/admin/db-fix", json={}, headers=owner_headers)
    assert resp.status_code == 403


async def test_ledger_stays_consistent_through_gameplay(
    client, owner_headers, admin_headers, room, create_question, create_reward,
):
    question = await create_question(room, rupiah=50)
    reward = await create_reward(room, rupiah_required=20, quantity=3, remaining_quantity=3)

    joined = await client.post("/participants/join", json={"accessCode": room.access_code, "name": "Amir"})
    pid = joined.json()["participantId"]

    await client.post("/answers", json={
        "questionId": question.id, "participantId": pid, "selectedOptionIndex": 1, "timeToAnswer": 3,
    })
    await client.post(
        "/participants/adjust-thr",
        json={"participantId": pid, "adjustment": 10},
        headers=owner_headers,
    )
    first = await client.post("/rewards/redeem", json={"rewardId": reward.id, "participantId": pid})
    await client.post("/rewards/redeem", json={"rewardId": reward.id, "participantId": pid})
    await client.patch(
        f"/redemptions/{first.json()['redemptionId']}/status",
        json={"status": "cancelled"},
        headers=owner_headers,
    )

    resp = await client.get("/admin/db-validation", headers=admin_headers)
    assert resp.status_code == 200
    report = resp.json()
    assert report["inconsistentRupiah"]["count"] == 0
    assert report["inconsistentRewards"]["count"] == 0
    assert report["duplicateAnswers"]["count"] == 0
    assert report["duplicateQuestions"]["count"] == 0
    for kind in ("rooms", "questions", "participants", "answers", "rewards", "redemptions"):
        assert report["relationshipValidation"][kind]["invalid"] == 0

    resp = await client.get(f"/participants/{pid}")
    assert resp.json()["totalRupiah"] == 50 + 10 - 20


async def test_fix_restores_consistency(
    client, session, admin_headers, room, create_question, create_reward, create_participant,
):
    question = await create_question(room, rupiah=50)
    reward = await create_reward(room, quantity=5, remaining_quantity=5)
    participant = await create_participant(room)

    await client.post("/answers", json={
        "questionId": question.id, "participantId": participant.id, "selectedOptionIndex": 1, "timeToAnswer": 1,
    })

    # портим данные вручную
    session.add(Answer(
        question_id=question.id,
        participant_id=participant.id,
        room_id=room.id,
        selected_option_index=1,
        is_correct=True,
        time_to_answer=2,
        points_awarded=100,
        rupiah_awarded=50,
    ))
    await session.refresh(participant)
    participant.total_rupiah = 999
    await session.refresh(reward)
    reward.remaining_quantity = 1
    await session.commit()

    report = (await client.get("/admin/db-validation", headers=admin_headers)).json()
    assert report["duplicateAnswers"]["count"] == 1
    assert report["inconsistentRewards"]["count"] == 1
    assert report["inconsistentRupiah"]["details"] == [{
        "participantId": participant.id,
        "reportedBalance": 999,
        "calculatedBalance": 100,
        "difference": 899,
    }]

    resp = await client.post(
        "/admin/db-fix",
        json={"fixParticipantRupiah": True, "fixRewardQuantities": True, "removeDuplicateAnswers": True},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert results["duplicateAnswers"]["removed"] == 1
    assert results["rewardQuantities"]["details"][0]["newRemaining"] == 5
    # после удаления дубля баланс считается по одному ответу
    assert results["participantRupiah"]["details"][0]["newBalance"] == 50

    report = (await client.get("/admin/db-validation", headers=admin_headers)).json()
    assert report["duplicateAnswers"]["count"] == 0
    assert report["inconsistentRewards"]["count"] == 0
    assert report["inconsistentRupiah"]["count"] == 0

    count = await session.scalar(select(func.count(Answer.id)))
    assert count == 1
    session.expunge_all()
    assert (await session.get(Participant, participant.id)).total_rupiah == 50
    assert (await session.get(Reward, reward.id)).remaining_quantity == 5


async def test_fix_without_flags_changes_nothing(client, admin_headers):
    resp = await client.post("/admin/db-fix", json={}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "results": {
            "participantRupiah": {"fixed": 0, "details": []},
            "rewardQuantities": {"fixed": 0, "details": []},
            "duplicateAnswers": {"removed": 0, "details": []},
        },
    }
