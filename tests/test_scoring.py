import pytest

from app.services.scoring import base_points, score_answer, time_bonus


@pytest.mark.parametrize(
    "difficulty,expected",
    [("bronze", 100), ("silver", 200), ("gold", 300), ("unknown", 100)],
)
def test_base_points_defaults(difficulty, expected):
    assert base_points(difficulty) == expected


def test_base_points_prefers_question_points():
    assert base_points("bronze", 250) == 250
    assert base_points("gold", 0) == 300


def test_time_bonus_decays_linearly():
    assert time_bonus(200, 0, 20) == 100
    assert time_bonus(200, 10, 20) == 50
    assert time_bonus(200, 20, 20) == 0
    assert time_bonus(200, 35, 20) == 0
    assert time_bonus(100, 5, 15) == 33


def test_time_bonus_without_limit():
    assert time_bonus(200, 1, 0) == 0


def test_wrong_answer_scores_nothing():
    assert score_answer(is_correct=False, difficulty="gold", points=None, time_to_answer=0, time_limit=15) == 0


def test_correct_answer_score():
    assert score_answer(is_correct=True, difficulty="silver", points=0, time_to_answer=0, time_limit=15) == 300
    assert score_answer(is_correct=True, difficulty="bronze", points=400, time_to_answer=15, time_limit=15) == 400
