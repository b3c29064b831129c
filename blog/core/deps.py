"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blog.backend.client import BackendClient
from blog.core.config import Settings, get_settings
from blog.core.session import SessionContext
from blog.services.auth_service import AuthService
from blog.services.image_service import ImageService
from blog.services.post_service import PostService

# Security scheme
security = HTTPBearer(auto_error=False)


def get_backend(request: Request) -> BackendClient:
    """Shared backend client created in the application lifespan."""
    return request.app.state.backend


def get_session(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    backend: Annotated[BackendClient, Depends(get_backend)],
) -> SessionContext:
    """Session for the request's bearer token (anonymous if none)."""
    token = credentials.credentials if credentials else None
    return AuthService(backend).restore(token)


def get_session_required(
    session: Annotated[SessionContext, Depends(get_session)],
) -> SessionContext:
    """Require an authenticated session, raise 401 if not authenticated."""
    if not session.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


# Type aliases for cleaner dependency injection
Backend = Annotated[BackendClient, Depends(get_backend)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Session = Annotated[SessionContext, Depends(get_session)]
SessionRequired = Annotated[SessionContext, Depends(get_session_required)]


def get_post_service(
    backend: Backend, settings: AppSettings, session: Session
) -> PostService:
    return PostService(backend, settings, session)


def get_image_service(
    backend: Backend, settings: AppSettings, session: Session
) -> ImageService:
    return ImageService(backend, settings, session)


def get_auth_service(backend: Backend) -> AuthService:
    return AuthService(backend)


Posts = Annotated[PostService, Depends(get_post_service)]
Images = Annotated[ImageService, Depends(get_image_service)]
Auth = Annotated[AuthService, Depends(get_auth_service)]
