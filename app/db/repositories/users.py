from typing import Optional, Iterable, List
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.user import User
from app.core.exceptions import ConflictError, ErrorCode


async def create_user(db: AsyncSession, email: str, hashed_password: str, full_name: Optional[str] = None) -> User:
    user = User(email=email, hashed_password=hashed_password, full_name=full_name)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already registered", ErrorCode.EMAIL_TAKEN)
    return user


async def get_user(db: AsyncSession, user_id: UUID) -> Optional[User]:
    res = await db.execute(select(User).where(User.id == user_id))
    return res.scalars().first()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    res = await db.execute(select(User).where(User.email == email))
    return res.scalars().first()


async def get_users_by_ids(db: AsyncSession, user_ids: Iterable[UUID]) -> List[User]:
    ids = list(user_ids)
    if not ids:
        return []
    res = await db.execute(select(User).where(User.id.in_(ids)))
    return list(res.scalars().all())


async def update_user(db: AsyncSession, user: User, changes: dict) -> User:
    for field, value in changes.items():
        setattr(user, field, value)
    await db.commit()
    return user
