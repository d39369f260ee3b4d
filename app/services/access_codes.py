from __future__ import annotations

import logging
import secrets
from typing import Callable, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.core.config import settings


# без 0/O и 1/I, чтобы код можно было продиктовать
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
MAX_ATTEMPTS = 20

T = TypeVar("T")

logger = logging.getLogger(__name__)


def generate_code(length: int | None = None) -> str:
    n = length or settings.ACCESS_CODE_LENGTH
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(n))


def is_well_formed(code: str) -> bool:
    return len(code) == settings.ACCESS_CODE_LENGTH


async def generate_unique_code(
    session: AsyncSession,
    column: InstrumentedAttribute,
    length: int | None = None,
) -> str:
    """Генерирует код, которого ещё нет в колонке (Room.access_code / Participant.access_code)."""
    for _ in range(MAX_ATTEMPTS):
        code = generate_code(length)
        taken = await session.scalar(select(column).where(column == code).limit(1))
        if taken is None:
            return code
    raise RuntimeError(f"Could not generate a unique code for {column}")


async def commit_with_unique_code(
    session: AsyncSession,
    column: InstrumentedAttribute,
    build: Callable[[str], T],
) -> T:
    """
    Создаёт строку с новым кодом и коммитит её.

    Проверка в generate_unique_code не защищает от параллельной вставки
    того же кода: тогда коммит падает на unique-индексе, и код генерируется заново.
    """
    for attempt in range(1, MAX_ATTEMPTS + 1):
        code = await generate_unique_code(session, column)
        obj = build(code)
        session.add(obj)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            logger.warning("Access code %s collided on insert (attempt %s)", code, attempt)
            continue
        await session.refresh(obj)
        return obj
    raise RuntimeError(f"Could not store a unique code for {column}")
