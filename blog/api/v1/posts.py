"""Blog post API endpoints."""

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from blog.core.deps import AppSettings, Posts, SessionRequired
from blog.schemas.post import ContentBlock, PostCard, PostDetail, PostDTO, PostForm
from blog.services.record_mapper import calculate_read_time, render_blocks

router = APIRouter()


class PostPreview(BaseModel):
    """Rendered body and reading time for an unsaved form."""

    read_time: str = Field(..., alias="readTime")
    blocks: list[ContentBlock]

    model_config = {"populate_by_name": True}


@router.get("", response_model=list[PostCard])
async def get_posts(
    post_service: Posts,
    category: str | None = Query(None, description="Category slug, or 'all'"),
    q: str | None = Query(None, description="Search title, excerpt and body"),
) -> list[PostCard]:
    """Get posts for the gallery grid, newest first."""
    return await post_service.list_cards(category=category, query=q)


@router.get("/categories", response_model=list[str])
async def get_categories(settings: AppSettings) -> list[str]:
    """Get the category filter options."""
    return ["all", *settings.categories]


@router.post("/preview", response_model=PostPreview)
async def preview_post(
    data: PostForm,
    current_session: SessionRequired,
) -> PostPreview:
    """Render an unsaved post body."""
    return PostPreview(
        read_time=calculate_read_time(data.content),
        blocks=render_blocks(data.content),
    )


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: str,
    post_service: Posts,
) -> PostDetail:
    """
    Get a single post with its rendered body and gallery.

    - **post_id**: Post ID
    """
    result = await post_service.get_detail(post_id)

    if not result:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )

    return result


@router.post("", response_model=PostDTO)
async def create_post(
    data: PostForm,
    post_service: Posts,
    current_session: SessionRequired,
) -> PostDTO:
    """
    Create a new post.

    - **title**, **excerpt**, **content**, **imageUrl**: required
    - **category**: Category slug (default lifestyle)
    - **images**: Up to 10 additional gallery image URLs
    - **imageMetadata**: Attribution entries keyed by image URL
    """
    return await post_service.create_post(data)


@router.put("/{post_id}", response_model=PostDTO)
async def update_post(
    post_id: str,
    data: PostForm,
    post_service: Posts,
    current_session: SessionRequired,
) -> PostDTO:
    """
    Update an existing post.

    - **post_id**: Post ID
    """
    result = await post_service.update_post(post_id, data)

    if not result:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )

    return result


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    post_service: Posts,
    current_session: SessionRequired,
) -> dict:
    """
    Delete a post.

    - **post_id**: Post ID to delete
    """
    success = await post_service.delete_post(post_id)

    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )

    return {"status": "success"}
