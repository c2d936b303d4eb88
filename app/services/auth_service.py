"""Authentication service for user management and JWT token operations."""
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import UserCreate, LoginRequest
from app.db.models.user import User
from app.db.repositories import users as users_repo
from app.core.exceptions import ConflictError, UnauthorizedError, ValidationError, ErrorCode
from app.core.logging import logger
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    revoke_token,
    validate_password,
    verify_password,
)


class AuthService:
    """
    Service layer for authentication operations.
    
    Handles user registration, login, token refresh, and logout operations.
    """
    
    def __init__(self, session: AsyncSession):
        self.session = session

    async def register(self, payload: UserCreate) -> User:
        """
        Register a new user with password validation.
        
        Raises:
            ValidationError: If the password is weak
            ConflictError: If the email is already registered
        """
        try:
            validate_password(payload.password)
        except ValueError as e:
            raise ValidationError(str(e), ErrorCode.INVALID_PASSWORD)
        
        if await users_repo.get_user_by_email(self.session, payload.email):
            raise ConflictError("Email already registered", ErrorCode.EMAIL_TAKEN)
        
        user = await users_repo.create_user(
            self.session, payload.email, hash_password(payload.password), payload.full_name
        )
        logger.info(f"Registered user {user.id}")
        return user

    async def login(self, form_data: LoginRequest) -> dict:
        """
        Authenticate user and generate access and refresh tokens.
        
        Raises:
            UnauthorizedError: If credentials are invalid
        """
        user = await users_repo.get_user_by_email(self.session, form_data.email)
        if not user or not verify_password(form_data.password, user.hashed_password):
            raise UnauthorizedError("Incorrect credentials", ErrorCode.INVALID_CREDENTIALS)
        
        token_data = {"sub": str(user.id)}
        return {
            "access_token": create_access_token(token_data),
            "refresh_token": create_refresh_token(token_data),
            "token_type": "bearer",
        }

    async def refresh_access_token(self, refresh_token: str) -> dict:
        """
        Generate a new access token from a valid refresh token.
        
        Raises:
            UnauthorizedError: If the token is invalid or not a refresh token
        """
        try:
            token_data = decode_token(refresh_token)
        except ValueError:
            raise UnauthorizedError("Invalid refresh token", ErrorCode.INVALID_TOKEN)
        
        if token_data.get("type") != "refresh":
            raise UnauthorizedError("Invalid token type", ErrorCode.INVALID_TOKEN)
        
        return {
            "access_token": create_access_token({"sub": token_data["sub"]}),
            "token_type": "bearer",
        }

    async def logout(self, token: str):
        await revoke_token(token)
