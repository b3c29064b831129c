"""Uploaded image schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class ImageRecord(BaseModel):
    """Row as returned by the images table."""

    id: str
    filename: str
    original_name: str
    storage_path: str
    public_url: str
    file_size: int
    mime_type: str
    width: int | None = None
    height: int | None = None
    alt_text: str | None = None
    caption: str | None = None
    photographer: str
    copyright: str
    uploaded_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ImageDTO(BaseModel):
    """Image metadata response schema."""

    id: str
    filename: str
    original_name: str = Field(..., alias="originalName")
    public_url: str = Field(..., alias="publicUrl")
    file_size: int = Field(..., alias="fileSize")
    mime_type: str = Field(..., alias="mimeType")
    width: int | None = None
    height: int | None = None
    alt_text: str | None = Field(None, alias="altText")
    caption: str | None = None
    photographer: str
    copyright: str
    created_at: str | None = Field(None, alias="createdAt")

    model_config = {"populate_by_name": True}


class ImageUploadMetadata(BaseModel):
    """Optional attribution supplied with an upload."""

    photographer: str | None = None
    copyright: str | None = None
    alt_text: str | None = Field(None, alias="altText")
    caption: str | None = None

    model_config = {"populate_by_name": True}


class ImageUploadResult(BaseModel):
    """Upload response schema."""

    id: str
    filename: str
    public_url: str = Field(..., alias="publicUrl")
    width: int | None = None
    height: int | None = None

    model_config = {"populate_by_name": True}


class ImageMetadataUpdate(BaseModel):
    """Editable metadata fields. Only fields that are sent are changed."""

    alt_text: str | None = Field(None, alias="altText")
    caption: str | None = None
    photographer: str | None = None
    copyright: str | None = None

    model_config = {"populate_by_name": True}
