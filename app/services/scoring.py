from __future__ import annotations

import math
from typing import Dict


# базовые очки за уровень, если у вопроса не задано своё значение
DIFFICULTY_POINTS: Dict[str, int] = {
    "bronze": 100,
    "silver": 200,
    "gold": 300,
}

DIFFICULTY_ORDER: Dict[str, int] = {
    "bronze": 0,
    "silver": 1,
    "gold": 2,
}

# до +50% за быстрый ответ
MAX_TIME_BONUS = 0.5


def base_points(difficulty: str, points: int | None = None) -> int:
    if points:
        return points
    return DIFFICULTY_POINTS.get(difficulty, DIFFICULTY_POINTS["bronze"])


def time_bonus(base: int, time_to_answer: float, time_limit: int) -> int:
    """Бонус линейно падает от 50% (мгновенный ответ) до 0 (время вышло)."""
    if time_limit <= 0:
        return 0
    factor = max(0.0, 1 - (time_to_answer / time_limit))
    return math.floor(base * MAX_TIME_BONUS * factor)


def score_answer(
    *,
    is_correct: bool,
    difficulty: str,
    points: int | None,
    time_to_answer: float,
    time_limit: int,
) -> int:
    if not is_correct:
        return 0
    base = base_points(difficulty, points)
    return base + time_bonus(base, time_to_answer, time_limit)
