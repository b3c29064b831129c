"""Flickr embed API endpoints."""

from fastapi import APIRouter, Query

from blog.core.deps import SessionRequired
from blog.core.exceptions import EmbedParseError
from blog.schemas.embed import (
    EmbedAttributionRequest,
    EmbedAttributionResult,
    EmbedSnippet,
    ParsedEmbed,
)
from blog.services.embed_parser import (
    build_embed_attribution,
    derive_size_variants,
    embed_user_url,
    parse_embed,
)

router = APIRouter()


@router.post("/parse", response_model=ParsedEmbed)
async def parse_snippet(
    data: EmbedSnippet,
    current_session: SessionRequired,
) -> ParsedEmbed:
    """Preview the photo described by a pasted embed snippet."""
    parsed = parse_embed(data.snippet)
    if parsed is None:
        raise EmbedParseError(data.snippet)
    return parsed


@router.post("/attribution", response_model=EmbedAttributionResult)
async def create_attribution(
    data: EmbedAttributionRequest,
    current_session: SessionRequired,
) -> EmbedAttributionResult:
    """
    Build the image URL and attribution entry for an embedded photo.

    - **snippet**: Embed HTML
    - **photographer**: Photographer name, required
    """
    parsed = parse_embed(data.snippet)
    if parsed is None:
        raise EmbedParseError(data.snippet)

    attribution = build_embed_attribution(parsed, data.photographer)
    return EmbedAttributionResult(
        image_url=parsed.image_url,
        attribution=attribution,
        embed=parsed,
        profile_url=embed_user_url(parsed),
        sizes=derive_size_variants(parsed.image_url),
    )


@router.get("/sizes", response_model=dict[str, str])
async def get_sizes(
    url: str = Query(..., description="Flickr static image URL"),
) -> dict[str, str]:
    """Named size variants of a Flickr image URL."""
    return derive_size_variants(url)
