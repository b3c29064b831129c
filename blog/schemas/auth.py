"""Authentication schemas."""

from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class UserLogin(BaseModel):
    """Login request schema."""

    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Account password")


class SessionUser(BaseModel):
    """Signed-in user as reported by the auth service."""

    id: str
    email: str = ""
    user_metadata: dict[str, Any] = Field(default_factory=dict, alias="userMetadata")
    created_at: str = Field("", alias="createdAt")

    model_config = {"populate_by_name": True}

    @field_validator("user_metadata", "created_at", "email", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any, info: ValidationInfo) -> Any:
        """The auth service sends null for unset fields."""
        if v is None:
            return {} if info.field_name == "user_metadata" else ""
        return v

    @property
    def display_name(self) -> str:
        """Full name, username or email, whichever is set first."""
        return (
            self.user_metadata.get("full_name")
            or self.user_metadata.get("username")
            or self.email
        )


class SessionDTO(BaseModel):
    """Session response schema."""

    access_token: str = Field(..., alias="accessToken")
    refresh_token: str | None = Field(None, alias="refreshToken")
    expires_in: int | None = Field(None, alias="expiresIn")
    user: SessionUser

    model_config = {"populate_by_name": True}
