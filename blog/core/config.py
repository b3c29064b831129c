"""Application configuration using pydantic-settings."""

from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # App Info
    app_name: str = "Continued Education Blog API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Managed backend (REST + storage + auth)
    backend_url: str = Field(
        default="http://localhost:54321",
        alias="BACKEND_URL",
    )
    backend_anon_key: str = Field(default="", alias="BACKEND_ANON_KEY")
    backend_timeout: float = Field(default=30.0, alias="BACKEND_TIMEOUT")

    # JWT verification (tokens are issued by the backend auth service)
    backend_jwt_secret: str = Field(
        default="super-secret-jwt-token-with-at-least-32-characters-long",
        alias="BACKEND_JWT_SECRET",
    )
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"

    # Tables
    posts_table: str = "blog_posts"
    images_table: str = "blog_images"

    # Storage
    storage_bucket: str = Field(default="blog-images", alias="STORAGE_BUCKET")
    storage_cache_control: str = "3600"
    max_upload_bytes: int = 50 * 1024 * 1024  # 50MB, matches bucket limit
    heic_jpeg_quality: int = 90

    # Posts
    max_post_images: int = 10
    categories: list[str] = [
        "hiking",
        "travel",
        "food",
        "mountaineering",
        "lifestyle",
    ]
    default_category: str = "lifestyle"

    # Attribution
    default_photographer: str = "Kate Goldenring"
    default_copyright: str = "© 2024 Continued Education Blog. All rights reserved."
    embed_fallback_photographer: str = "Flickr User"
    embed_card_label: str = "Flickr"

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    @field_validator("backend_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Remove trailing slash so paths can be appended directly."""
        return v.rstrip("/") if isinstance(v, str) else v

    @property
    def storage_host(self) -> str:
        """Hostname that serves uploaded images."""
        return (urlparse(self.backend_url).hostname or "").lower()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
