from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import UserUpdate
from app.db.models.user import User
from app.db.repositories import users as users_repo
from app.core.exceptions import NotFoundError, ErrorCode
from app.services import guards


class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user(self, user_id: UUID) -> User:
        user = await users_repo.get_user(self.session, user_id)
        if not user:
            raise NotFoundError("User not found", ErrorCode.USER_NOT_FOUND)
        return user

    async def update_profile(self, caller_id: UUID, user_id: UUID, payload: UserUpdate) -> User:
        user = await self.get_user(user_id)
        guards.ensure_self(caller_id, user_id)
        return await users_repo.update_user(self.session, user, payload.model_dump(exclude_unset=True))
