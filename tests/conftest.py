import os

# до импорта приложения: settings читаются при импорте
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.core.db import get_session, get_sessionmaker
from app.core.security import create_access_token, hash_password
from app.main import app as application
from app.models import Base, Participant, Question, Reward, Room, User, UserRole


PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_session] = override_get_session
    application.dependency_overrides[get_sessionmaker] = lambda: session_factory

    transport = httpx.ASGITransport(app=application)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    application.dependency_overrides.clear()


async def _make_user(session, email: str, name: str, role: str = UserRole.USER.value) -> User:
    user = User(email=email, name=name, hashed_password=PASSWORD_HASH, role=role)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
async def owner(session):
    return await _make_user(session, "owner@example.com", "Owner")


@pytest.fixture
async def other_user(session):
    return await _make_user(session, "other@example.com", "Other")


@pytest.fixture
async def admin(session):
    return await _make_user(session, "admin@example.com", "Admin", role=UserRole.ADMIN.value)


@pytest.fixture
def owner_headers(owner):
    return auth_headers(owner)


@pytest.fixture
def other_headers(other_user):
    return auth_headers(other_user)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def create_room(session, owner):
    async def _create(**kwargs) -> Room:
        now = datetime.utcnow()
        data = dict(
            name="Ramadan Quiz",
            description="Kuis THR keluarga",
            access_code="ABC123",
            is_active=True,
            start_time=now,
            end_time=now + timedelta(hours=2),
            created_by=owner.id,
        )
        data.update(kwargs)
        room = Room(**data)
        session.add(room)
        await session.commit()
        await session.refresh(room)
        return room

    return _create


@pytest.fixture
async def room(create_room):
    return await create_room()


@pytest.fixture
def create_question(session):
    async def _create(room: Room, **kwargs) -> Question:
        data = dict(
            room_id=room.id,
            text="Berapa rakaat sholat Subuh?",
            options=["1", "2", "3", "4"],
            correct_option_index=1,
            points=0,
            rupiah=50,
            difficulty="bronze",
            category="Fiqh",
            explanation="Sholat Subuh dua rakaat.",
        )
        data.update(kwargs)
        question = Question(**data)
        session.add(question)
        await session.commit()
        await session.refresh(question)
        return question

    return _create


@pytest.fixture
def create_participant(session):
    counter = iter(range(1, 1000))

    async def _create(room: Room, **kwargs) -> Participant:
        data = dict(
            room_id=room.id,
            name="Amir",
            access_code=f"PAR{next(counter):03d}",
            total_points=0,
            total_rupiah=0,
        )
        data.update(kwargs)
        participant = Participant(**data)
        session.add(participant)
        await session.commit()
        await session.refresh(participant)
        return participant

    return _create


@pytest.fixture
def create_reward(session):
    async def _create(room: Room, **kwargs) -> Reward:
        data = dict(
            room_id=room.id,
            name="Amplop Perak",
            tier="silver",
            rupiah_required=30,
            quantity=2,
            remaining_quantity=2,
        )
        data.update(kwargs)
        reward = Reward(**data)
        session.add(reward)
        await session.commit()
        await session.refresh(reward)
        return reward

    return _create
