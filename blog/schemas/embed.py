"""Flickr embed schemas."""

from pydantic import BaseModel, Field

from blog.schemas.attribution import EmbedAttribution


class ParsedEmbed(BaseModel):
    """Photo metadata extracted from a Flickr embed snippet."""

    photo_id: str = Field(..., alias="photoId")
    user_id: str = Field(..., alias="userId")
    photographer: str = ""
    album_id: str | None = Field(None, alias="albumId")
    title: str = ""
    image_url: str = Field("", alias="imageUrl")
    width: int = 0
    height: int = 0
    alt: str = ""
    embed_url: str = Field("", alias="embedUrl")
    flickr_page_url: str = Field("", alias="flickrPageUrl")

    model_config = {"populate_by_name": True}


class EmbedSnippet(BaseModel):
    """Pasted embed HTML."""

    snippet: str = Field(..., description="Embed HTML copied from Flickr's share dialog")


class EmbedAttributionRequest(EmbedSnippet):
    """Embed HTML plus the separately collected photographer name."""

    photographer: str = ""


class EmbedAttributionResult(BaseModel):
    """Image URL and the attribution entry to attach to a post."""

    image_url: str = Field(..., alias="imageUrl")
    attribution: EmbedAttribution
    embed: ParsedEmbed
    profile_url: str = Field(..., alias="profileUrl")
    sizes: dict[str, str] = {}

    model_config = {"populate_by_name": True}
