"""Uploaded image API endpoints."""

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status

from blog.core.deps import Images, SessionRequired
from blog.schemas.image import (
    ImageDTO,
    ImageMetadataUpdate,
    ImageUploadMetadata,
    ImageUploadResult,
)
from blog.services.image_service import UploadedFile

router = APIRouter()


@router.post("", response_model=ImageUploadResult)
async def upload_image(
    image_service: Images,
    current_session: SessionRequired,
    file: UploadFile = File(...),
    folder: str | None = Form(None),
    photographer: str | None = Form(None),
    copyright: str | None = Form(None),
    alt_text: str | None = Form(None, alias="altText"),
    caption: str | None = Form(None),
) -> ImageUploadResult:
    """
    Upload an image with optional attribution.

    HEIC/HEIF files are converted to JPEG before storage.
    """
    if file.size is not None:
        image_service.check_size(file.size)
    # One byte past the limit is enough for validation to reject the file.
    data = await file.read(image_service.settings.max_upload_bytes + 1)
    uploaded = UploadedFile(
        filename=file.filename or "upload",
        content_type=file.content_type or "",
        data=data,
    )
    metadata = ImageUploadMetadata(
        photographer=photographer,
        copyright=copyright,
        alt_text=alt_text,
        caption=caption,
    )
    return await image_service.upload_image(uploaded, folder=folder, metadata=metadata)


@router.get("", response_model=list[ImageDTO])
async def get_images(
    image_service: Images,
    current_session: SessionRequired,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> list[ImageDTO]:
    """List uploaded images, newest first."""
    return await image_service.list_images(limit=limit, offset=offset)


@router.get("/by-url", response_model=ImageDTO)
async def get_image_by_url(
    image_service: Images,
    url: str = Query(..., description="Public URL of the image"),
) -> ImageDTO:
    """Get attribution metadata for an uploaded image by its public URL."""
    result = await image_service.get_by_url(url)

    if not result:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )

    return result


@router.patch("/{image_id}", response_model=ImageDTO)
async def update_image_metadata(
    image_id: str,
    data: ImageMetadataUpdate,
    image_service: Images,
    current_session: SessionRequired,
) -> ImageDTO:
    """
    Update attribution metadata.

    - **image_id**: Image record ID
    """
    result = await image_service.update_metadata(image_id, data)

    if not result:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )

    return result


@router.delete("/{path_or_id:path}")
async def delete_image(
    path_or_id: str,
    image_service: Images,
    current_session: SessionRequired,
) -> dict:
    """
    Delete an image.

    - **path_or_id**: Image record ID, or a storage path for objects without a record
    """
    success = await image_service.delete_image(path_or_id)

    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )

    return {"status": "success"}
