"""Pydantic schemas for API request/response validation."""

from blog.schemas.attribution import (
    Attribution,
    AttributionMap,
    EmbedAttribution,
    UploadAttribution,
)
from blog.schemas.auth import SessionDTO, SessionUser, UserLogin
from blog.schemas.embed import (
    EmbedAttributionRequest,
    EmbedAttributionResult,
    EmbedSnippet,
    ParsedEmbed,
)
from blog.schemas.image import (
    ImageDTO,
    ImageMetadataUpdate,
    ImageRecord,
    ImageUploadMetadata,
    ImageUploadResult,
)
from blog.schemas.post import (
    Category,
    ContentBlock,
    GalleryImage,
    PostCard,
    PostDetail,
    PostDTO,
    PostForm,
    StoredPost,
    StoredPostInput,
)

__all__ = [
    # Attribution
    "Attribution",
    "AttributionMap",
    "EmbedAttribution",
    "UploadAttribution",
    # Auth
    "SessionDTO",
    "SessionUser",
    "UserLogin",
    # Embed
    "EmbedAttributionRequest",
    "EmbedAttributionResult",
    "EmbedSnippet",
    "ParsedEmbed",
    # Image
    "ImageDTO",
    "ImageMetadataUpdate",
    "ImageRecord",
    "ImageUploadMetadata",
    "ImageUploadResult",
    # Post
    "Category",
    "ContentBlock",
    "GalleryImage",
    "PostCard",
    "PostDetail",
    "PostDTO",
    "PostForm",
    "StoredPost",
    "StoredPostInput",
]
