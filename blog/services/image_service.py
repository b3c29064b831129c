"""Image service for uploads, attribution metadata and deletion."""

import io
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath

from loguru import logger
from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

from blog.backend.client import BackendClient
from blog.core.config import Settings
from blog.core.exceptions import BackendError, ImageValidationError, ValidationError
from blog.core.session import SessionContext
from blog.schemas.image import (
    ImageDTO,
    ImageMetadataUpdate,
    ImageRecord,
    ImageUploadMetadata,
    ImageUploadResult,
)

register_heif_opener()

ALLOWED_IMAGE_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/heic",
    "image/heif",
}

# Some browsers send HEIC files without a usable MIME type.
ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".heic", ".heif"}

HEIC_MIME_TYPES = {"image/heic", "image/heif"}
HEIC_EXTENSIONS = {".heic", ".heif"}

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass
class UploadedFile:
    """File received from the admin upload form."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return PurePosixPath(self.filename).suffix.lower()


def _extension_for_mimetype(mimetype: str) -> str:
    mapping = {
        "image/jpeg": "jpg",
        "image/png": "png",
        "image/webp": "webp",
        "image/gif": "gif",
    }
    return mapping.get(mimetype, mimetype.split("/")[-1] or "bin")


class ImageService:
    """Uploaded image management over object storage and the images table."""

    def __init__(
        self,
        backend: BackendClient,
        settings: Settings,
        session: SessionContext | None = None,
    ):
        self.backend = backend
        self.settings = settings
        self.session = session or SessionContext()
        self.table = settings.images_table

    @property
    def _token(self) -> str | None:
        return self.session.access_token

    # ------------------------------------------------------------------
    # Validation and preparation
    # ------------------------------------------------------------------

    def validate_image_file(self, file: UploadedFile) -> None:
        """Reject unsupported types and oversized files."""
        if (
            file.content_type not in ALLOWED_IMAGE_MIME_TYPES
            and file.extension not in ALLOWED_IMAGE_EXTENSIONS
        ):
            raise ImageValidationError(
                "Invalid file type. Please upload JPEG, PNG, WebP, GIF, or HEIC images."
            )

        self.check_size(file.size)

    def check_size(self, size: int) -> None:
        """Reject a file larger than the upload limit."""
        if size > self.settings.max_upload_bytes:
            limit_mb = self.settings.max_upload_bytes // (1024 * 1024)
            raise ImageValidationError(
                f"File size too large. Please upload images smaller than {limit_mb}MB."
            )

    def prepare_file(self, file: UploadedFile) -> UploadedFile:
        """Convert HEIC/HEIF files to JPEG; pass anything else through."""
        is_heic = (
            file.content_type in HEIC_MIME_TYPES
            or file.extension in HEIC_EXTENSIONS
        )
        if not is_heic:
            return file

        logger.info(f"Converting HEIC file to JPEG: {file.filename}")
        return self._convert_heic_to_jpeg(file)

    def _convert_heic_to_jpeg(self, file: UploadedFile) -> UploadedFile:
        try:
            with Image.open(io.BytesIO(file.data)) as img:
                buffer = io.BytesIO()
                img.convert("RGB").save(
                    buffer,
                    format="JPEG",
                    quality=self.settings.heic_jpeg_quality,
                )
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error(f"HEIC conversion failed: {file.filename} - {e}")
            raise ImageValidationError(
                "Failed to convert HEIC image. Please convert the image to "
                "JPEG using your device's photo app and try again."
            ) from e

        filename = re.sub(r"\.hei[cf]$", ".jpg", file.filename, flags=re.IGNORECASE)
        return UploadedFile(
            filename=filename,
            content_type="image/jpeg",
            data=buffer.getvalue(),
        )

    @staticmethod
    def image_dimensions(data: bytes) -> tuple[int, int]:
        """Pixel width and height of encoded image bytes."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                return img.size
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ImageValidationError("Failed to load image") from e

    def _object_path(self, file: UploadedFile, folder: str | None) -> tuple[str, str]:
        extension = file.extension.lstrip(".") or _extension_for_mimetype(file.content_type)
        filename = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}.{extension}"
        folder = (folder or "").strip("/")
        return filename, f"{folder}/{filename}" if folder else filename

    # ------------------------------------------------------------------
    # Upload / delete
    # ------------------------------------------------------------------

    async def upload_image(
        self,
        file: UploadedFile,
        folder: str | None = None,
        metadata: ImageUploadMetadata | None = None,
    ) -> ImageUploadResult:
        """Validate, convert, store and record an image.

        If the metadata record cannot be written the stored object is
        removed again so no orphan is left in the bucket.
        """
        self.validate_image_file(file)
        processed = self.prepare_file(file)
        width, height = self.image_dimensions(processed.data)
        metadata = metadata or ImageUploadMetadata()

        filename, storage_path = self._object_path(processed, folder)

        try:
            await self.backend.upload_object(
                storage_path,
                processed.data,
                processed.content_type,
                access_token=self._token,
            )
        except BackendError as e:
            raise e.with_context("Upload failed") from e

        public_url = self.backend.public_url(storage_path)

        record = {
            "filename": filename,
            "original_name": file.filename,
            "storage_path": storage_path,
            "public_url": public_url,
            "file_size": processed.size,
            "mime_type": processed.content_type,
            "width": width,
            "height": height,
            "photographer": metadata.photographer or self.settings.default_photographer,
            "copyright": metadata.copyright or self.settings.default_copyright,
            "alt_text": metadata.alt_text,
            "caption": metadata.caption,
            "uploaded_by": self.session.user_id,
        }

        try:
            row = await self.backend.insert(self.table, record, access_token=self._token)
        except BackendError as e:
            await self._remove_orphan(storage_path)
            raise e.with_context("Metadata save failed") from e

        logger.info(f"Image uploaded: {storage_path} ({processed.size} bytes)")
        return ImageUploadResult(
            id=str(row["id"]),
            filename=filename,
            public_url=public_url,
            width=width,
            height=height,
        )

    async def _remove_orphan(self, storage_path: str) -> None:
        try:
            await self.backend.remove_objects([storage_path], access_token=self._token)
            logger.info(f"Removed orphaned upload: {storage_path}")
        except BackendError as e:
            logger.error(f"Failed to remove orphaned upload {storage_path}: {e.message}")

    async def delete_image(self, path_or_id: str) -> bool:
        """Delete an image by record id (record, then object) or by storage path.

        Returns False if an id was given and no such record exists.
        """
        if UUID_PATTERN.match(path_or_id):
            try:
                rows = await self.backend.delete(
                    self.table,
                    eq={"id": path_or_id},
                    access_token=self._token,
                )
            except BackendError as e:
                raise e.with_context("Database deletion failed") from e
            if not rows:
                return False
            storage_path = rows[0]["storage_path"]
        else:
            storage_path = path_or_id

        try:
            await self.backend.remove_objects([storage_path], access_token=self._token)
        except BackendError as e:
            logger.error(f"Image deletion error: {storage_path} - {e.message}")
            raise e.with_context("Storage deletion failed") from e

        logger.info(f"Image deleted: {storage_path}")
        return True

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    async def list_images(self, limit: int = 50, offset: int = 0) -> list[ImageDTO]:
        """Uploaded images, newest first."""
        try:
            rows = await self.backend.select(
                self.table,
                order="created_at.desc",
                limit=limit,
                offset=offset,
                access_token=self._token,
            )
        except BackendError as e:
            raise e.with_context("Failed to fetch images") from e
        return [self._to_dto(ImageRecord.model_validate(row)) for row in rows]

    async def get_by_url(self, public_url: str) -> ImageDTO | None:
        """Metadata for one public URL; None if unknown or unavailable."""
        index = await self.get_by_urls([public_url])
        return index.get(public_url)

    async def get_by_urls(self, public_urls: list[str]) -> dict[str, ImageDTO]:
        """Metadata keyed by public URL.

        Lookup failures are logged and yield an empty index so pages still
        render with default attribution.
        """
        urls = [url for url in dict.fromkeys(public_urls) if url]
        if not urls:
            return {}

        try:
            rows = await self.backend.select(
                self.table,
                in_=("public_url", urls),
                order=None,
                access_token=self._token,
            )
        except BackendError as e:
            logger.error(f"Failed to fetch image metadata by URLs: {e.message}")
            return {}

        index = {}
        for row in rows:
            dto = self._to_dto(ImageRecord.model_validate(row))
            index[dto.public_url] = dto
        return index

    async def update_metadata(
        self, image_id: str, changes: ImageMetadataUpdate
    ) -> ImageDTO | None:
        """Update the editable attribution fields that were provided."""
        payload = changes.model_dump(exclude_unset=True)
        if not payload:
            raise ValidationError("At least one field is required")

        try:
            rows = await self.backend.update(
                self.table,
                payload,
                eq={"id": image_id},
                access_token=self._token,
            )
        except BackendError as e:
            raise e.with_context("Failed to update metadata") from e

        if not rows:
            return None
        return self._to_dto(ImageRecord.model_validate(rows[0]))

    @staticmethod
    def optimized_url(public_url: str, **options: object) -> str:
        """URL for a resized/re-encoded variant.

        Storage has no transformation support, so this is the original URL.
        """
        return public_url

    @staticmethod
    def _to_dto(record: ImageRecord) -> ImageDTO:
        return ImageDTO(
            id=record.id,
            filename=record.filename,
            original_name=record.original_name,
            public_url=record.public_url,
            file_size=record.file_size,
            mime_type=record.mime_type,
            width=record.width,
            height=record.height,
            alt_text=record.alt_text,
            caption=record.caption,
            photographer=record.photographer,
            copyright=record.copyright,
            created_at=record.created_at.isoformat() if record.created_at else None,
        )
