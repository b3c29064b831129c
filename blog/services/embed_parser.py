"""Flickr embed snippet parsing and URL helpers.

Pure functions: nothing here performs I/O.
"""

import html
import re
from html.parser import HTMLParser
from urllib.parse import urlparse

from blog.core.exceptions import AttributionRequiredError
from blog.schemas.attribution import EmbedAttribution
from blog.schemas.embed import ParsedEmbed

EMBED_HOST_DOMAINS = ("flickr.com", "staticflickr.com")
EMBED_MARKER_ATTR = "data-flickr-embed"
EMBED_SCRIPT = (
    '<script async src="//embedr.flickr.com/assets/client-code.js" '
    'charset="utf-8"></script>'
)

PHOTO_PATTERN = re.compile(r"/photos/([^/]+)/(\d+)")
ALBUM_PATTERN = re.compile(r"/album-(\d+)")
LEADING_INT_PATTERN = re.compile(r"\s*([+-]?\d+)")

# Flickr size suffixes: https://live.staticflickr.com/<server>/<id>_<secret>_<size>.<ext>
SIZE_SUFFIXES = {
    "thumbnail": "t",  # 100px on longest side
    "small": "m",  # 240px
    "medium": "z",  # 640px
    "large": "b",  # 1024px
    "original": "6k",
    "huge": "h",  # 1600px
}


class _EmbedScanner(HTMLParser):
    """Collects attributes of the first marked anchor and the first image."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.anchor: dict[str, str] | None = None
        self.image: dict[str, str] | None = None

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        attributes = {name: value or "" for name, value in attrs}
        if tag == "a" and self.anchor is None:
            if attributes.get(EMBED_MARKER_ATTR) == "true":
                self.anchor = attributes
        elif tag == "img" and self.image is None:
            self.image = attributes


def _parse_dimension(value: str | None) -> int:
    """Leading integer of an attribute value, 0 when there is none."""
    match = LEADING_INT_PATTERN.match(value or "")
    return int(match.group(1)) if match else 0


def parse_embed(snippet: str) -> ParsedEmbed | None:
    """Extract photo metadata from a Flickr embed snippet.

    Returns None when the snippet lacks the marked anchor, the image, or a
    photo id in the anchor's link. The photographer is never inferred and is
    always left blank.
    """
    if not snippet:
        return None

    scanner = _EmbedScanner()
    scanner.feed(snippet)
    scanner.close()

    anchor, image = scanner.anchor, scanner.image
    if anchor is None or image is None:
        return None

    href = anchor.get("href", "")
    photo_match = PHOTO_PATTERN.search(href)
    if not photo_match:
        return None
    album_match = ALBUM_PATTERN.search(href)

    title = anchor.get("title") or image.get("alt") or ""
    alt = image.get("alt") or title

    return ParsedEmbed(
        photo_id=photo_match.group(2),
        user_id=photo_match.group(1),
        photographer="",
        album_id=album_match.group(1) if album_match else None,
        title=title,
        image_url=image.get("src", ""),
        width=_parse_dimension(image.get("width")),
        height=_parse_dimension(image.get("height")),
        alt=alt,
        embed_url=href,
        flickr_page_url=href,
    )


def extract_embed_image_url(snippet: str) -> str | None:
    """Image URL of an embed snippet, or None if it does not parse."""
    parsed = parse_embed(snippet)
    return parsed.image_url if parsed else None


def is_embed_host_url(url: str) -> bool:
    """Check whether a URL is served by Flickr."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return False
    if not hostname:
        return False

    hostname = hostname.lower()
    return any(
        hostname == domain or hostname.endswith(f".{domain}")
        for domain in EMBED_HOST_DOMAINS
    )


def derive_size_variants(url: str) -> dict[str, str]:
    """Sibling URLs for Flickr's named sizes.

    Only the trailing ``_<size>.<ext>`` segment is rewritten. URLs that do
    not follow the sized naming convention yield only the original.
    """
    parts = url.split("_")
    if len(parts) < 2:
        return {"original": url}

    base = "_".join(parts[:-1])
    last = parts[-1].split(".")
    if len(last) < 2 or not last[1]:
        return {"original": url}
    extension = last[1]

    return {
        name: f"{base}_{suffix}.{extension}"
        for name, suffix in SIZE_SUFFIXES.items()
    }


def embed_user_url(parsed: ParsedEmbed) -> str:
    """Flickr profile page of the photo's owner."""
    return f"https://www.flickr.com/photos/{parsed.user_id}/"


def _attr(value: object) -> str:
    return html.escape(str(value), quote=True)


def build_embed_html(parsed: ParsedEmbed) -> str:
    """Regenerate the embed snippet for parsed data."""
    return (
        f'<a data-flickr-embed="true" href="{_attr(parsed.embed_url)}" '
        f'title="{_attr(parsed.title)}">'
        f'<img src="{_attr(parsed.image_url)}" width="{parsed.width}" '
        f'height="{parsed.height}" alt="{_attr(parsed.alt)}"/></a>'
        f"{EMBED_SCRIPT}"
    )


def build_embed_attribution(parsed: ParsedEmbed, photographer: str) -> EmbedAttribution:
    """Attribution entry for an embedded photo.

    The photographer is mandatory here; this is the only place embed
    attributions enter the system.
    """
    name = (photographer or "").strip()
    if not name:
        raise AttributionRequiredError(
            "Please enter the photographer's name to continue"
        )

    return EmbedAttribution(
        photographer=name,
        photo_id=parsed.photo_id,
        user_id=parsed.user_id,
        album_id=parsed.album_id,
        title=parsed.title,
        flickr_page_url=parsed.flickr_page_url,
        width=parsed.width,
        height=parsed.height,
    )
