"""Authentication routes for user registration, login, logout, and token management."""
from fastapi import APIRouter, Depends, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from app.schemas import ApiResponse, UserCreate, UserOut, Token, TokenResponse, LoginRequest, RefreshTokenRequest
from app.services.auth_service import AuthService
from app.db.session import get_session
from app.db.models.user import User
from app.auth import get_current_user, security
from app.core.config import settings
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi import Limiter
from slowapi.util import get_remote_address

router = APIRouter(prefix="/auth", tags=["auth"])
limiter = Limiter(key_func=get_remote_address)


def get_auth_service(session: AsyncSession = Depends(get_session)) -> AuthService:
    return AuthService(session)


@router.post("/register", response_model=ApiResponse[UserOut], status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.REGISTER_RATE_LIMIT)
async def register(
    request: Request,
    payload: UserCreate,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user account.

    Rate limit: 3 requests per minute
    """
    user = await auth_service.register(payload)
    return ApiResponse(message="User registered", content=UserOut.model_validate(user))


@router.post("/login", response_model=ApiResponse[TokenResponse])
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    form_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Login endpoint returning access and refresh tokens.

    Rate limit: 5 requests per minute
    """
    tokens = await auth_service.login(form_data)
    return ApiResponse(message="Logged in", content=TokenResponse(**tokens))


@router.post("/refresh", response_model=ApiResponse[Token])
@limiter.limit(settings.REFRESH_RATE_LIMIT)
async def refresh_access_token(
    request: Request,
    payload: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    token = await auth_service.refresh_access_token(payload.refresh_token)
    return ApiResponse(message="Token refreshed", content=Token(**token))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Revoke the bearer token used for this request."""
    await auth_service.logout(credentials.credentials)
    return None


@router.get("/me", response_model=ApiResponse[UserOut])
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    return ApiResponse(content=UserOut.model_validate(current_user))
