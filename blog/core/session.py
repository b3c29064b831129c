"""Per-request session context."""

from dataclasses import dataclass
from typing import Any

from blog.schemas.auth import SessionDTO, SessionUser


@dataclass
class SessionContext:
    """Current session, passed explicitly to services that act for a user.

    Built when a request arrives (see ``AuthService.restore``) and emptied by
    ``clear`` on sign-out. An empty context is an anonymous visitor.
    """

    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
    user: SessionUser | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and bool(self.access_token)

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None

    @classmethod
    def from_claims(cls, token: str, claims: dict[str, Any]) -> "SessionContext":
        """Session for a verified JWT's claims."""
        user = SessionUser(
            id=claims["sub"],
            email=claims.get("email") or "",
            user_metadata=claims.get("user_metadata") or {},
        )
        return cls(access_token=token, user=user)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SessionContext":
        """Session for the auth service's token response."""
        return cls(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
            user=SessionUser.model_validate(payload["user"]),
        )

    def to_dto(self) -> SessionDTO:
        if not self.is_authenticated:
            raise ValueError("Session is not authenticated")
        return SessionDTO(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_in=self.expires_in,
            user=self.user,
        )

    def clear(self) -> None:
        """Forget the session (sign-out teardown)."""
        self.access_token = None
        self.refresh_token = None
        self.expires_in = None
        self.user = None
