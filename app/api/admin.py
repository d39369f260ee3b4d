from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.db import get_session, get_sessionmaker
from app.core.security import require_admin
from app.models.user import User
from app.schemas.validation import DbFixIn, DbFixOut
from app.services.db_validation import fix_database, run_database_validation


router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/db-validation")
async def db_validation(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_sessionmaker),
    _admin: User = Depends(require_admin),
):
    return await run_database_validation(session_factory)


@router.post("/db-fix", response_model=DbFixOut)
async def db_fix(
    body: DbFixIn,
    session: AsyncSession = Depends(get_session),
    _admin: User = Depends(require_admin),
):
    results = await fix_database(
        session,
        fix_participant_rupiah=body.fix_participant_rupiah,
        fix_reward_quantities=body.fix_reward_quantities,
        remove_duplicate_answers=body.remove_duplicate_answers,
    )
    return DbFixOut(results=results)
