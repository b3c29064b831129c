"""Conversion between stored post rows and app-facing post records."""

import math
from datetime import datetime, timezone

from blog.schemas.post import ContentBlock, PostDTO, PostForm, StoredPost, StoredPostInput

WORDS_PER_MINUTE = 200


def display_date(created_at: datetime) -> str:
    """UTC calendar date (YYYY-MM-DD) of a creation timestamp."""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.astimezone(timezone.utc).date().isoformat()


def calculate_read_time(content: str) -> str:
    """Reading-time label, same rule the posts table trigger applies."""
    word_count = len(content.split())
    minutes = max(1, math.ceil(word_count / WORDS_PER_MINUTE))
    return f"{minutes} min read"


def to_app(stored: StoredPost) -> PostDTO:
    """Convert a posts-table row to the app-facing record."""
    return PostDTO(
        id=stored.id,
        title=stored.title,
        category=stored.category,
        image_url=stored.image_url,
        images=list(stored.images or []),
        excerpt=stored.excerpt,
        content=stored.content,
        date=display_date(stored.created_at),
        read_time=stored.read_time,
        image_metadata=dict(stored.image_metadata or {}),
    )


def to_storage(form: PostForm) -> StoredPostInput:
    """Convert a post form to the row payload for create/update.

    id, read_time and timestamps are assigned by the backend and never sent.
    """
    return StoredPostInput(
        title=form.title,
        category=form.category,
        image_url=form.image_url,
        images=list(form.images),
        excerpt=form.excerpt,
        content=form.content,
        image_metadata=dict(form.image_metadata),
    )


def render_blocks(content: str) -> list[ContentBlock]:
    """Split a post body into heading/paragraph/break blocks."""
    blocks = []
    for line in content.split("\n"):
        if line.startswith("# "):
            blocks.append(ContentBlock(type="h1", text=line[2:]))
        elif line.startswith("## "):
            blocks.append(ContentBlock(type="h2", text=line[3:]))
        elif not line.strip():
            blocks.append(ContentBlock(type="break"))
        else:
            blocks.append(ContentBlock(type="paragraph", text=line))
    return blocks
