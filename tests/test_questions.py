from app.models import Question


QUESTION_BODY = {
    "text": "Surat pertama dalam Al-Quran?",
    "options": ["Al-Fatihah", "Al-Baqarah", "An-Nas"],
    "correctOptionIndex": 0,
    "rupiah": 25,
    "difficulty": "bronze",
    "category": "Quran",
    "explanation": "Al-Fatihah adalah pembuka.",
}


async def test_create_question(client, owner_headers, room):
    resp = await client.post(f"/rooms/{room.id}/questions", json=QUESTION_BODY, headers=owner_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["roomId"] == room.id
    assert body["options"] == QUESTION_BODY["options"]
    assert body["isDisabled"] is False
    assert body["points"] == 0


async def test_create_question_validation(client, owner_headers, room):
    bad_index = dict(QUESTION_BODY, correctOptionIndex=3)
    resp = await client.post(f"/rooms/{room.id}/questions", json=bad_index, headers=owner_headers)
    assert resp.status_code == 400

    one_option = dict(QUESTION_BODY, options=["Al-Fatihah"])
    resp = await client.post(f"/rooms/{room.id}/questions", json=one_option, headers=owner_headers)
    assert resp.status_code == 400

    bad_difficulty = dict(QUESTION_BODY, difficulty="platinum")
    resp = await client.post(f"/rooms/{room.id}/questions", json=bad_difficulty, headers=owner_headers)
    assert resp.status_code == 400


async def test_questions_of_foreign_room(client, other_headers, room, create_question):
    question = await create_question(room)

    resp = await client.post(f"/rooms/{room.id}/questions", json=QUESTION_BODY, headers=other_headers)
    assert resp.status_code == 404
    resp = await client.get(f"/rooms/{room.id}/questions", headers=other_headers)
    assert resp.status_code == 404
    resp = await client.get(f"/rooms/{room.id}/questions/{question.id}", headers=other_headers)
    assert resp.status_code == 404


async def test_get_update_delete_question(client, session, owner_headers, room, create_question):
    question = await create_question(room)
    url = f"/rooms/{room.id}/questions/{question.id}"

    resp = await client.get(url, headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json()["correctOptionIndex"] == 1

    resp = await client.put(url, json=dict(QUESTION_BODY, difficulty="gold", points=500), headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json()["difficulty"] == "gold"
    assert resp.json()["points"] == 500

    resp = await client.delete(url, headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    session.expunge_all()
    assert await session.get(Question, question.id) is None

    resp = await client.get(url, headers=owner_headers)
    assert resp.status_code == 404
    assert resp.json() == {"message": "Question not found"}


async def test_question_must_belong_to_room(client, owner_headers, create_room, create_question):
    r1 = await create_room(access_code="ROOM01")
    r2 = await create_room(access_code="ROOM02")
    question = await create_question(r2)

    resp = await client.get(f"/rooms/{r1.id}/questions/{question.id}", headers=owner_headers)
    assert resp.status_code == 404


async def test_list_questions_for_owner(client, owner_headers, room, create_question):
    await create_question(room, text="Q1")
    await create_question(room, text="Q2", is_disabled=True)

    resp = await client.get(f"/rooms/{room.id}/questions", headers=owner_headers)
    assert resp.status_code == 200
    # владелец видит и выключенные вопросы
    assert {q["text"] for q in resp.json()} == {"Q1", "Q2"}


async def test_active_questions_for_player(client, room, create_question, create_participant):
    gold = await create_question(room, text="Gold", difficulty="gold")
    bronze = await create_question(room, text="Bronze", difficulty="bronze")
    silver = await create_question(room, text="Silver", difficulty="silver")
    await create_question(room, text="Taken", difficulty="bronze", is_disabled=True)
    participant = await create_participant(room)

    resp = await client.get(f"/rooms/{room.id}/questions/active", params={"pid": participant.id})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Active questions retrieved successfully"
    assert [q["id"] for q in body["questions"]] == [bronze.id, silver.id, gold.id]
    for q in body["questions"]:
        assert "correctOptionIndex" not in q
        assert "explanation" not in q


async def test_active_questions_reject_foreign_participant(client, create_room, create_participant):
    r1 = await create_room(access_code="ROOM01")
    r2 = await create_room(access_code="ROOM02")
    outsider = await create_participant(r2)

    resp = await client.get(f"/rooms/{r1.id}/questions/active", params={"pid": outsider.id})
    assert resp.status_code == 403
    assert resp.json() == {"message": "Invalid participant for this room"}

    resp = await client.get(f"/rooms/{r1.id}/questions/active")
    assert resp.status_code == 400
