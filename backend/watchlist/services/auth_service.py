"""
Auth business logic — registration, login, session issuance.

Failures are raised as AuthError carrying an AuthErrorKind; routes turn the
kind into the error envelope and the client turns it into a message.
"""
import time
from collections import deque
from collections.abc import Callable
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from watchlist.core.config import settings
from watchlist.core.security import create_access_token, hash_password, verify_password
from watchlist.db.models import User
from watchlist.schemas.auth import AUTH_ERROR_MESSAGES, AuthErrorKind

MIN_PASSWORD_LENGTH = 6


# ── Custom exceptions ────────────────────────────────────────────────────────


class AuthError(Exception):
    def __init__(self, kind: AuthErrorKind) -> None:
        self.kind = kind
        super().__init__(AUTH_ERROR_MESSAGES[kind])


# ── Login throttling ─────────────────────────────────────────────────────────


class LoginThrottle:
    """
    Counts failed logins per e-mail in a sliding window.

    Process-local; a multi-worker deployment gets one window per worker.
    """

    def __init__(
        self,
        max_attempts: int | None = None,
        window_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts or settings.LOGIN_MAX_ATTEMPTS
        self.window_seconds = window_seconds or settings.LOGIN_WINDOW_MINUTES * 60
        self._clock = clock
        self._failures: dict[str, deque[float]] = {}

    def _prune(self, key: str) -> int:
        """Drop expired failures for *key*; keys with none left are removed."""
        failures = self._failures.get(key)
        if failures is None:
            return 0
        cutoff = self._clock() - self.window_seconds
        while failures and failures[0] <= cutoff:
            failures.popleft()
        if not failures:
            del self._failures[key]
        return len(failures)

    def is_blocked(self, key: str) -> bool:
        return self._prune(key) >= self.max_attempts

    def record_failure(self, key: str) -> None:
        self._sweep()
        self._failures.setdefault(key, deque()).append(self._clock())

    def _sweep(self) -> None:
        """Forget every key whose newest failure has left the window."""
        cutoff = self._clock() - self.window_seconds
        stale = [key for key, failures in self._failures.items() if failures[-1] <= cutoff]
        for key in stale:
            del self._failures[key]

    def tracked_keys(self) -> int:
        """Number of keys with failures still inside the window."""
        self._sweep()
        return len(self._failures)

    def reset(self, key: str) -> None:
        self._failures.pop(key, None)


login_throttle = LoginThrottle()


# ── Service functions ────────────────────────────────────────────────────────


def normalize_email(email: str) -> str:
    """Validate the address syntax and return it lower-cased."""
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as exc:
        raise AuthError(AuthErrorKind.INVALID_EMAIL) from exc
    return result.normalized.lower()


def register_user(db: Session, email: str, password: str) -> User:
    """
    Create an account.

    - INVALID_EMAIL for malformed addresses
    - WEAK_PASSWORD below MIN_PASSWORD_LENGTH characters
    - EMAIL_IN_USE on the unique-constraint violation
    """
    normalised_email = normalize_email(email)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError(AuthErrorKind.WEAK_PASSWORD)

    user = User(email=normalised_email, password_hash=hash_password(password))
    db.add(user)

    try:
        db.flush()  # trigger INSERT; raises on duplicate
    except IntegrityError as exc:
        db.rollback()
        raise AuthError(AuthErrorKind.EMAIL_IN_USE) from exc

    db.commit()
    db.refresh(user)
    logger.info(f"[Auth] registered {user.id}")
    return user


def authenticate_user(
    db: Session,
    email: str,
    password: str,
    throttle: LoginThrottle | None = None,
) -> User:
    """
    Verify credentials and return the User.

    Raises RATE_LIMITED once the throttle trips, USER_NOT_FOUND for unknown
    addresses and WRONG_PASSWORD for a bad password.
    """
    throttle = throttle or login_throttle
    normalised_email = normalize_email(email)

    if throttle.is_blocked(normalised_email):
        logger.warning(f"[Auth] login throttled for {normalised_email}")
        raise AuthError(AuthErrorKind.RATE_LIMITED)

    user = db.query(User).filter(User.email == normalised_email).first()
    if user is None or not user.is_active:
        throttle.record_failure(normalised_email)
        raise AuthError(AuthErrorKind.USER_NOT_FOUND)

    if not verify_password(password, user.password_hash):
        throttle.record_failure(normalised_email)
        raise AuthError(AuthErrorKind.WRONG_PASSWORD)

    throttle.reset(normalised_email)
    return user


def issue_access_token(user: User) -> str:
    return create_access_token(owner_id=user.id, email=user.email)


def get_user_by_id(db: Session, user_id: UUID) -> User | None:
    return db.query(User).filter(User.id == user_id).first()
