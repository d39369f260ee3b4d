#!/usr/bin/env python3
"""Создать админа (или повысить существующего пользователя до админа).

    python scripts/create_admin.py admin@example.com "Admin" secret123
"""

import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from app.core.db import get_sessionmaker
from app.core.security import hash_password
from app.models.user import User, UserRole


async def create_admin(email: str, name: str, password: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        user = (await session.execute(
            select(User).where(User.email == email)
        )).scalar_one_or_none()

        if user is None:
            session.add(User(
                email=email,
                name=name,
                hashed_password=hash_password(password),
                role=UserRole.ADMIN.value,
            ))
            print(f"Admin created: {email}")
        elif user.role != UserRole.ADMIN:
            user.role = UserRole.ADMIN.value
            print(f"User promoted to admin: {email}")
        else:
            print(f"Admin already exists: {email}")
            return

        await session.commit()


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("usage: create_admin.py <email> <name> <password>")
        sys.exit(1)
    asyncio.run(create_admin(*sys.argv[1:]))
