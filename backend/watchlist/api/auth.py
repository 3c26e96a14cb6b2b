"""
Auth API — /auth
─────────────────
Endpoints:
  POST /auth/register — Create account, return a session (201)
  POST /auth/login    — Authenticate with e-mail + password, return a session
  POST /auth/logout   — End the session (tokens are stateless; 204)
  GET  /auth/me       — Return current user profile (requires bearer token)
"""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from watchlist.api.errors import error_envelope
from watchlist.db.models import User
from watchlist.db.session import get_db
from watchlist.deps.auth import get_current_user
from watchlist.schemas.auth import AuthErrorKind, CredentialsRequest, SessionResponse, UserResponse
from watchlist.services.auth_service import (
    AuthError,
    authenticate_user,
    issue_access_token,
    register_user,
)

router = APIRouter()

_STATUS_BY_KIND: dict[AuthErrorKind, int] = {
    AuthErrorKind.EMAIL_IN_USE: status.HTTP_409_CONFLICT,
    AuthErrorKind.INVALID_EMAIL: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.USER_NOT_FOUND: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.WRONG_PASSWORD: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
}


def _auth_http_error(exc: AuthError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error_envelope(exc.kind.value, str(exc)),
    )


def _session_for(user: User) -> SessionResponse:
    return SessionResponse(
        access_token=issue_access_token(user),
        user=UserResponse.model_validate(user),
    )


# ── Routes ────────────────────────────────────────────────────────────────────


@router.post(
    "/register",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(payload: CredentialsRequest, db: Session = Depends(get_db)) -> SessionResponse:
    """
    Create a new account and sign it in.

    Returns 409 if the e-mail is already registered, 400 for a malformed
    address or a weak password.
    """
    try:
        user = register_user(db, email=payload.email, password=payload.password)
    except AuthError as exc:
        raise _auth_http_error(exc) from exc
    return _session_for(user)


@router.post("/login", response_model=SessionResponse)
def login(payload: CredentialsRequest, db: Session = Depends(get_db)) -> SessionResponse:
    try:
        user = authenticate_user(db, email=payload.email, password=payload.password)
    except AuthError as exc:
        raise _auth_http_error(exc) from exc
    return _session_for(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(current_user: User = Depends(get_current_user)) -> Response:
    """Tokens are not stored server-side; the client discards its copy."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)
