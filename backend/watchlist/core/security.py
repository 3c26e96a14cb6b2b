"""
Password hashing and session token helpers.
Never import DB models here — keep this layer pure.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from watchlist.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ── Passwords ─────────────────────────────────────────────────────────────────

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# ── Session tokens ────────────────────────────────────────────────────────────

def create_access_token(
    owner_id: Any,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign a session token for an owner.

    Args:
        owner_id: The user's UUID; stored as the *sub* claim.
        email: Optional e-mail copied into the token for display.
        expires_delta: Override the default expiry from settings.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta
        or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims: dict[str, Any] = {"sub": str(owner_id), "exp": expire}
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_owner_id(token: str) -> str | None:
    """Return the *sub* claim of a valid token, or None if it is expired or forged."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return claims.get("sub")
