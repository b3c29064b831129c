"""Auth service: sign-in, session restore and sign-out."""

from loguru import logger

from blog.backend.client import BackendClient
from blog.core.exceptions import AuthenticationError, BackendError, ValidationError
from blog.core.security import decode_access_token
from blog.core.session import SessionContext
from blog.schemas.auth import SessionUser


class AuthService:
    """Authentication against the backend auth service."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def login(self, email: str, password: str) -> SessionContext:
        """Sign in with email and password."""
        if not email.strip() or not password:
            raise ValidationError("Email and password are required")

        try:
            payload = await self.backend.sign_in_with_password(email.strip(), password)
        except BackendError as e:
            if e.backend_status in (400, 401, 422):
                raise AuthenticationError(e.message) from e
            raise e.with_context("Login failed") from e

        session = SessionContext.from_payload(payload)
        logger.info(f"User signed in: {session.user.email}")
        return session

    def restore(self, token: str | None) -> SessionContext:
        """Session for a bearer token; anonymous if missing or invalid."""
        if not token:
            return SessionContext()

        claims = decode_access_token(token)
        if not claims or not claims.get("sub"):
            return SessionContext()

        return SessionContext.from_claims(token, claims)

    async def current_user(self, session: SessionContext) -> SessionUser:
        """Fetch the live user record for a session."""
        if not session.is_authenticated:
            raise AuthenticationError("Not authenticated")

        try:
            payload = await self.backend.get_user(session.access_token)
        except BackendError as e:
            if e.backend_status in (401, 403):
                session.clear()
                raise AuthenticationError(e.message) from e
            raise e.with_context("Failed to fetch session") from e

        session.user = SessionUser.model_validate(payload)
        return session.user

    async def logout(self, session: SessionContext) -> None:
        """Revoke the session remotely, then clear it locally."""
        if session.access_token:
            try:
                await self.backend.sign_out(session.access_token)
            except BackendError as e:
                logger.warning(f"Logout error: {e.message}")
        session.clear()
