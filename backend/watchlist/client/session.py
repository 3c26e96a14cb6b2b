"""
Authentication state threaded through the client composition root.

The root decides what to show from an AuthState value instead of reading a
global "current user".
"""
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from watchlist.client.api_client import WatchlistClient
from watchlist.client.result import Result
from watchlist.schemas.auth import SessionResponse, UserResponse


class AuthStatus(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AuthState:
    status: AuthStatus
    owner: UserResponse | None = None

    @classmethod
    def loading(cls) -> "AuthState":
        return cls(AuthStatus.LOADING)

    @classmethod
    def unauthenticated(cls) -> "AuthState":
        return cls(AuthStatus.UNAUTHENTICATED)

    @classmethod
    def authenticated(cls, owner: UserResponse) -> "AuthState":
        return cls(AuthStatus.AUTHENTICATED, owner)

    @property
    def owner_id(self) -> str | None:
        return str(self.owner.id) if self.owner is not None else None


class AuthSession:
    """Drives AuthState transitions over a WatchlistClient."""

    def __init__(
        self,
        client: WatchlistClient,
        on_change: Callable[[AuthState], None] | None = None,
    ) -> None:
        self.client = client
        self._on_change = on_change
        self.state = AuthState.loading()

    def _set(self, state: AuthState) -> None:
        self.state = state
        if self._on_change is not None:
            self._on_change(state)

    async def restore(self) -> AuthState:
        """Resolve a stored token (if any) into a session on app start."""
        if not self.client.token:
            self._set(AuthState.unauthenticated())
            return self.state
        result = await self.client.me()
        if result.ok:
            self._set(AuthState.authenticated(result.data))
        else:
            self.client.token = None
            self._set(AuthState.unauthenticated())
        return self.state

    async def sign_in(self, email: str, password: str) -> Result[SessionResponse]:
        result = await self.client.login(email, password)
        if result.ok:
            self._set(AuthState.authenticated(result.data.user))
        return result

    async def register(self, email: str, password: str) -> Result[SessionResponse]:
        result = await self.client.register(email, password)
        if result.ok:
            self._set(AuthState.authenticated(result.data.user))
        return result

    async def sign_out(self) -> Result[None]:
        result = await self.client.logout()
        self._set(AuthState.unauthenticated())
        return result
