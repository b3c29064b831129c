"""Photographer attribution for image URLs."""

from collections.abc import Iterable, Mapping
from typing import Any, Protocol
from urllib.parse import urlparse

from blog.core.config import Settings
from blog.schemas.attribution import EmbedAttribution
from blog.services.embed_parser import derive_size_variants, is_embed_host_url

DEFAULT_PHOTOGRAPHER = "Kate Goldenring"
EMBED_FALLBACK_PHOTOGRAPHER = "Flickr User"


class HasPhotographer(Protocol):
    photographer: str


def is_storage_url(url: str, storage_host: str) -> bool:
    """Check whether a URL points into our own object storage."""
    if not storage_host:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return (parsed.hostname or "").lower() == storage_host.lower() and "/storage/" in parsed.path


def local_image_urls(urls: Iterable[str], storage_host: str) -> list[str]:
    """Distinct URLs worth looking up in the images table, in order."""
    seen: list[str] = []
    for url in urls:
        if url and url not in seen and is_storage_url(url, storage_host):
            seen.append(url)
    return seen


def resolve_display_name(
    image_url: str,
    attribution_map: Mapping[str, Any],
    uploaded_index: Mapping[str, HasPhotographer],
    storage_host: str,
    *,
    default_photographer: str = DEFAULT_PHOTOGRAPHER,
    embed_fallback: str = EMBED_FALLBACK_PHOTOGRAPHER,
) -> str:
    """Photographer name to show for an image.

    Flickr images use the post's stored attribution; storage images use the
    uploaded image record. Any other host is not looked up at all and gets
    the default photographer.
    """
    if is_embed_host_url(image_url):
        entry = attribution_map.get(image_url)
        photographer = getattr(entry, "photographer", None)
        return photographer or embed_fallback

    if is_storage_url(image_url, storage_host):
        record = uploaded_index.get(image_url)
        if record is not None and record.photographer:
            return record.photographer

    return default_photographer


class AttributionResolver:
    """Resolver bound to the configured storage host and default names."""

    def __init__(self, settings: Settings):
        self.storage_host = settings.storage_host
        self.default_photographer = settings.default_photographer
        self.embed_fallback = settings.embed_fallback_photographer
        self.embed_card_label = settings.embed_card_label

    def lookup_urls(self, urls: Iterable[str]) -> list[str]:
        """URLs that need an uploaded-image record to resolve."""
        return local_image_urls(urls, self.storage_host)

    def display_name(
        self,
        image_url: str,
        attribution_map: Mapping[str, Any],
        uploaded_index: Mapping[str, HasPhotographer],
    ) -> str:
        """Photographer for an image in a post's gallery."""
        return resolve_display_name(
            image_url,
            attribution_map,
            uploaded_index,
            self.storage_host,
            default_photographer=self.default_photographer,
            embed_fallback=self.embed_fallback,
        )

    def card_label(
        self,
        image_url: str,
        uploaded_index: Mapping[str, HasPhotographer],
    ) -> str:
        """Photographer shown on a gallery card (Flickr images show the source)."""
        if is_embed_host_url(image_url):
            return self.embed_card_label
        return self.display_name(image_url, {}, uploaded_index)

    def source(self, image_url: str) -> str:
        """Where an image comes from: flickr, upload or external."""
        if is_embed_host_url(image_url):
            return "flickr"
        if is_storage_url(image_url, self.storage_host):
            return "upload"
        return "external"

    def sizes(self, image_url: str) -> dict[str, str]:
        """Named size variants for Flickr images, empty otherwise."""
        if is_embed_host_url(image_url):
            return derive_size_variants(image_url)
        return {}

    @staticmethod
    def embed_entry(
        image_url: str, attribution_map: Mapping[str, Any]
    ) -> EmbedAttribution | None:
        entry = attribution_map.get(image_url)
        return entry if isinstance(entry, EmbedAttribution) else None
