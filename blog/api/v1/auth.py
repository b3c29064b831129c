"""Authentication API endpoints."""

from fastapi import APIRouter

from blog.core.deps import Auth, Session, SessionRequired
from blog.schemas.auth import SessionDTO, SessionUser, UserLogin

router = APIRouter()


@router.post("/login", response_model=SessionDTO)
async def login(
    credentials: UserLogin,
    auth_service: Auth,
) -> SessionDTO:
    """
    Sign in with email and password.

    - **email**: Account email
    - **password**: Account password
    """
    session = await auth_service.login(credentials.email, credentials.password)
    return session.to_dto()


@router.get("/session", response_model=SessionUser)
async def get_session_user(
    session: SessionRequired,
    auth_service: Auth,
) -> SessionUser:
    """Current signed-in user, as known to the auth service."""
    return await auth_service.current_user(session)


@router.post("/logout")
async def logout(
    session: Session,
    auth_service: Auth,
) -> dict:
    """Sign out and revoke the current session."""
    await auth_service.logout(session)
    return {"status": "success"}
