"""Image attribution metadata stored alongside posts."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

UPLOAD_SOURCE = "upload"
EMBED_SOURCE = "flickr"


class UploadAttribution(BaseModel):
    """Attribution for an image uploaded to our own storage bucket."""

    type: Literal["upload"] = UPLOAD_SOURCE
    photographer: str
    copyright: str
    alt_text: str | None = Field(None, alias="altText")
    caption: str | None = None
    original_name: str | None = Field(None, alias="originalName")
    file_size: int | None = Field(None, alias="fileSize")
    mime_type: str | None = Field(None, alias="mimeType")
    width: int | None = None
    height: int | None = None

    model_config = {"populate_by_name": True}


class EmbedAttribution(BaseModel):
    """Attribution for a photo embedded from Flickr."""

    type: Literal["flickr"] = EMBED_SOURCE
    photographer: str = ""
    photo_id: str = Field(..., alias="photoId")
    user_id: str = Field(..., alias="userId")
    album_id: str | None = Field(None, alias="albumId")
    title: str = ""
    flickr_page_url: str = Field("", alias="flickrPageUrl")
    width: int = 0
    height: int = 0

    model_config = {"populate_by_name": True}


Attribution = Annotated[
    Union[UploadAttribution, EmbedAttribution],
    Field(discriminator="type"),
]

AttributionMap = dict[str, Attribution]

_attribution_adapter: TypeAdapter[Attribution] = TypeAdapter(Attribution)


def coerce_attribution_map(value: Any) -> dict[str, Any]:
    """Keep only entries that validate as a known attribution variant.

    Rows written before the metadata column had a fixed shape may carry
    free-form entries; those are dropped rather than failing the whole post.
    """
    if not isinstance(value, dict):
        return {}

    entries: dict[str, Any] = {}
    for url, entry in value.items():
        try:
            entries[url] = _attribution_adapter.validate_python(entry)
        except ValidationError:
            continue
    return entries


def dump_attribution_map(entries: dict[str, Any]) -> dict[str, Any]:
    """Serialize an attribution map to its stored JSON shape."""
    return {
        url: _attribution_adapter.dump_python(entry, by_alias=True, exclude_none=True)
        for url, entry in entries.items()
    }
