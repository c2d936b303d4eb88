"""
Password hashing and JWT access/refresh tokens.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict
from jose import jwt, JWTError
from passlib.context import CryptContext
from app.core.config import settings
from app.cache.redis_client import cache

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

_PASSWORD_RULES = (
    (lambda p: len(p) >= 8, "Password must be at least 8 characters long"),
    (lambda p: any(c.isupper() for c in p), "Password must contain at least one uppercase letter"),
    (lambda p: any(c.islower() for c in p), "Password must contain at least one lowercase letter"),
    (lambda p: any(c.isdigit() for c in p), "Password must contain at least one digit"),
    (lambda p: any(c in SPECIAL_CHARACTERS for c in p), "Password must contain at least one special character"),
)


def validate_password(password: str) -> None:
    """
    Validate password strength.

    Raises:
        ValueError: with the first rule the password breaks
    """
    for check, message in _PASSWORD_RULES:
        if not check(password):
            raise ValueError(message)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def _encode(data: Dict, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta, "type": token_type})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode; ``sub`` should carry the user id
        expires_delta: Optional custom lifetime

    Returns:
        Encoded JWT token
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(data, "access", expires_delta)


def create_refresh_token(data: Dict) -> str:
    """Create a JWT refresh token with the longer refresh lifetime."""
    return _encode(data, "refresh", timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str) -> Dict:
    """
    Decode and validate a JWT token.

    Raises:
        ValueError: If token is invalid, expired or has no ``sub`` claim
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise ValueError("Token has expired")
    except JWTError as e:
        raise ValueError(f"Invalid token: {str(e)}")

    if "sub" not in payload:
        raise ValueError("Invalid token payload: missing 'sub' field")
    return payload


async def revoke_token(token: str, expiry: Optional[int] = None) -> bool:
    """
    Add token to the revocation list in Redis.

    The entry lives until the token would have expired anyway, so the list
    never grows past the set of still-valid tokens.
    """
    if expiry is None:
        try:
            payload = decode_token(token)
        except ValueError:
            return False
        exp = payload.get("exp")
        if not exp:
            return False
        expiry = int(exp - datetime.now(timezone.utc).timestamp())
        if expiry <= 0:
            return True
    return await cache.set(f"revoked_token:{token}", True, expire=expiry)


async def is_token_revoked(token: str) -> bool:
    return await cache.exists(f"revoked_token:{token}")


async def decode_access_token(token: str) -> Dict:
    """
    Claims of a live access token, for HTTP and websocket callers alike.

    Raises:
        ValueError: If the token is revoked, invalid, expired or not an access token
    """
    if await is_token_revoked(token):
        raise ValueError("Token has been revoked")
    payload = decode_token(token)
    if payload.get("type") != "access":
        raise ValueError("Invalid token type")
    return payload
