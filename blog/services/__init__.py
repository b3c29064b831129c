"""Service layer for business logic."""

from blog.services.attribution import AttributionResolver, resolve_display_name
from blog.services.auth_service import AuthService
from blog.services.embed_parser import derive_size_variants, is_embed_host_url, parse_embed
from blog.services.image_service import ImageService, UploadedFile
from blog.services.post_service import PostService
from blog.services.record_mapper import to_app, to_storage

__all__ = [
    "AttributionResolver",
    "AuthService",
    "ImageService",
    "PostService",
    "UploadedFile",
    "derive_size_variants",
    "is_embed_host_url",
    "parse_embed",
    "resolve_display_name",
    "to_app",
    "to_storage",
]
