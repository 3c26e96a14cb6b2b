"""
Auth request/response schemas and the auth error taxonomy.
"""
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthErrorKind(str, Enum):
    """Failure categories shared by the API and the client."""

    EMAIL_IN_USE = "EMAIL_IN_USE"
    INVALID_EMAIL = "INVALID_EMAIL"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    WRONG_PASSWORD = "WRONG_PASSWORD"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_FAILURE = "NETWORK_FAILURE"
    UNKNOWN = "UNKNOWN"


AUTH_ERROR_MESSAGES: dict[AuthErrorKind, str] = {
    AuthErrorKind.EMAIL_IN_USE: "This email is already registered. Try signing in.",
    AuthErrorKind.INVALID_EMAIL: "Please enter a valid email address.",
    AuthErrorKind.WEAK_PASSWORD: "Password should be at least 6 characters.",
    AuthErrorKind.USER_NOT_FOUND: "No account found with this email.",
    AuthErrorKind.WRONG_PASSWORD: "Incorrect password. Please try again.",
    AuthErrorKind.INVALID_CREDENTIAL: "Invalid email or password.",
    AuthErrorKind.RATE_LIMITED: "Too many failed attempts. Please try again later.",
    AuthErrorKind.NETWORK_FAILURE: "Network error. Check your connection.",
    AuthErrorKind.UNKNOWN: "An unexpected error occurred. Please try again.",
}


def auth_error_message(code: str | None) -> str:
    """Map an error code to its user-facing message, falling back to UNKNOWN."""
    try:
        kind = AuthErrorKind(code)
    except ValueError:
        kind = AuthErrorKind.UNKNOWN
    return AUTH_ERROR_MESSAGES[kind]


class CredentialsRequest(BaseModel):
    """Payload for POST /auth/register and POST /auth/login.

    E-mail format and password strength are checked by the service so the
    failures come back as auth error kinds instead of 422s.
    """

    email: str
    password: str


class UserResponse(BaseModel):
    """Public-facing user profile."""

    id: UUID
    email: str

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(BaseModel):
    """Returned after register or login."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
