"""Blog post schemas for API request/response and storage rows."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from blog.schemas.attribution import (
    AttributionMap,
    coerce_attribution_map,
    dump_attribution_map,
)


class Category(str, Enum):
    """Known post categories. Posts may use other slugs too."""

    HIKING = "hiking"
    TRAVEL = "travel"
    FOOD = "food"
    MOUNTAINEERING = "mountaineering"
    LIFESTYLE = "lifestyle"


class PostForm(BaseModel):
    """Post create/update form (app-facing field names)."""

    title: str = ""
    category: str = Category.LIFESTYLE.value
    image_url: str = Field("", alias="imageUrl")
    images: list[str] = []
    excerpt: str = ""
    content: str = ""
    image_metadata: AttributionMap = Field(default_factory=dict, alias="imageMetadata")

    model_config = {"populate_by_name": True}

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: Any) -> Any:
        """Lowercase and trim the category slug."""
        if isinstance(v, str):
            return v.strip().lower() or Category.LIFESTYLE.value
        return v


class PostDTO(BaseModel):
    """Post response schema."""

    id: str
    title: str
    category: str
    image_url: str = Field(..., alias="imageUrl")
    images: list[str] = []
    excerpt: str
    content: str
    date: str
    read_time: str = Field(..., alias="readTime")
    image_metadata: AttributionMap = Field(default_factory=dict, alias="imageMetadata")

    model_config = {"populate_by_name": True}


class StoredPostInput(BaseModel):
    """Row payload written to the posts table on create/update.

    Server-assigned columns (id, read_time, timestamps) are never written.
    """

    title: str
    category: str
    image_url: str
    images: list[str] = []
    excerpt: str
    content: str
    image_metadata: AttributionMap = {}

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the REST insert/update call."""
        payload = self.model_dump(mode="json", exclude={"image_metadata"})
        payload["image_metadata"] = dump_attribution_map(self.image_metadata)
        return payload


class StoredPost(BaseModel):
    """Row as returned by the posts table."""

    id: str
    title: str
    category: str
    image_url: str
    images: list[str] | None = None
    excerpt: str
    content: str
    read_time: str = "1 min read"
    image_metadata: AttributionMap | None = None
    created_at: datetime
    updated_at: datetime | None = None
    created_by: str | None = None

    @field_validator("image_metadata", mode="before")
    @classmethod
    def drop_unknown_entries(cls, v: Any) -> Any:
        """Ignore attribution entries of unknown shape."""
        if v is None:
            return None
        return coerce_attribution_map(v)


class ContentBlock(BaseModel):
    """One rendered line of a post body."""

    type: Literal["h1", "h2", "paragraph", "break"]
    text: str = ""


class GalleryImage(BaseModel):
    """Gallery/lightbox entry with resolved attribution."""

    url: str
    photographer: str
    source: Literal["flickr", "upload", "external"]
    alt_text: str | None = Field(None, alias="altText")
    caption: str | None = None
    title: str | None = None
    page_url: str | None = Field(None, alias="pageUrl")
    sizes: dict[str, str] = {}

    model_config = {"populate_by_name": True}


class PostCard(PostDTO):
    """Post summary for the gallery grid."""

    photographer: str


class PostDetail(BaseModel):
    """Single post view: the post, its rendered body and gallery."""

    post: PostDTO
    photographer: str
    blocks: list[ContentBlock] = []
    gallery: list[GalleryImage] = []
