from typing import Optional
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.db.session import get_session
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.user import User
from app.db.repositories import users as users_repo
from app.core.security import decode_access_token

# Shows a simple "Authorize" button in Swagger UI where a JWT can be pasted
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _resolve_user(token: str, session: AsyncSession) -> User:
    try:
        payload = await decode_access_token(token)
    except ValueError as e:
        raise _unauthorized(str(e))

    try:
        user_id = UUID(str(payload["sub"]))
    except ValueError:
        raise _unauthorized("Could not validate credentials")

    user = await users_repo.get_user(session, user_id)
    if not user:
        raise _unauthorized("Could not validate credentials")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> User:
    """
    Resolve the caller from the bearer token, rejecting revoked tokens.

    Raises:
        HTTPException: 401 if the token is invalid, revoked or names no user
    """
    return await _resolve_user(credentials.credentials, session)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    session: AsyncSession = Depends(get_session)
) -> Optional[User]:
    """Like ``get_current_user`` but anonymous requests resolve to None."""
    if credentials is None:
        return None
    return await _resolve_user(credentials.credentials, session)
