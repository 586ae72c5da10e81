"""Authentication state handed to record stores.

The auth layer (login/register transport) lives outside this library; it
only has to produce an :class:`AuthState` whenever the user logs in, logs
out or starts a guest session.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from wanderlog._constants import GUEST_USER_ID


class StoreMode(StrEnum):
    REMOTE = "remote"
    LOCAL = "local"


class AuthState(BaseModel):
    """Snapshot of who is using the app.

    Parameters
    ----------
    user_id : str or None
        Authenticated user id, ``"guest"`` for guest sessions, ``None`` when
        logged out.
    token : str or None
        Bearer token for the remote API.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    user_id: str | None = None
    token: str | None = None

    @classmethod
    def guest(cls) -> AuthState:
        return cls(user_id=GUEST_USER_ID)

    @classmethod
    def anonymous(cls) -> AuthState:
        return cls()

    @property
    def is_guest(self) -> bool:
        return self.user_id == GUEST_USER_ID

    @property
    def is_authenticated(self) -> bool:
        return self.is_guest or bool(self.token)

    @property
    def mode(self) -> StoreMode:
        return StoreMode.LOCAL if self.is_guest else StoreMode.REMOTE

    @property
    def credential(self) -> str | None:
        """The bearer token, or ``None`` for guests (who never touch the network)."""
        if self.is_guest:
            return None
        return self.token or None
