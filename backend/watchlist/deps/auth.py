"""
Auth dependency — shared across all owner-scoped endpoints.

Usage in any route:
    from watchlist.deps.auth import get_current_user
    from watchlist.db.models import User

    @router.get("/movies")
    def list_movies(user: User = Depends(get_current_user)):
        ...
"""
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from watchlist.core.security import decode_owner_id
from watchlist.db.models import User
from watchlist.db.session import get_db
from watchlist.services.auth_service import get_user_by_id

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the bearer token to an active User.

    Raises 401 on a missing/invalid token, an unknown user or a deactivated account.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    sub = decode_owner_id(token)
    if sub is None:
        raise credentials_exception

    try:
        user_id = UUID(sub)
    except (ValueError, AttributeError):
        raise credentials_exception

    user = get_user_by_id(db, user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    return user
