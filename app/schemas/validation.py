from typing import Any

from app.schemas.base import CamelModel


class DbFixIn(CamelModel):
    fix_participant_rupiah: bool = False
    fix_reward_quantities: bool = False
    remove_duplicate_answers: bool = False


class DbFixOut(CamelModel):
    success: bool = True
    results: dict[str, Any]
