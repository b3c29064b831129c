"""Post service: CRUD over the posts table and view assembly."""

from loguru import logger

from blog.backend.client import BackendClient
from blog.core.config import Settings
from blog.core.exceptions import AttributionRequiredError, BackendError, ValidationError
from blog.core.session import SessionContext
from blog.schemas.attribution import EmbedAttribution
from blog.schemas.post import (
    GalleryImage,
    PostCard,
    PostDetail,
    PostDTO,
    PostForm,
    StoredPost,
)
from blog.services.attribution import AttributionResolver
from blog.services.image_service import ImageService
from blog.services.record_mapper import render_blocks, to_app, to_storage

SEARCH_COLUMNS = ["title", "content", "excerpt"]
ALL_CATEGORIES = "all"


class PostService:
    """Blog post service."""

    def __init__(
        self,
        backend: BackendClient,
        settings: Settings,
        session: SessionContext | None = None,
    ):
        self.backend = backend
        self.settings = settings
        self.session = session or SessionContext()
        self.table = settings.posts_table
        self.resolver = AttributionResolver(settings)

    @property
    def _token(self) -> str | None:
        return self.session.access_token

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean_form(self, form: PostForm) -> PostForm:
        """Trim blank gallery slots and check required fields.

        Raises ValidationError before anything is sent to the backend.
        """
        images = [url.strip() for url in form.images if url and url.strip()]
        form = form.model_copy(update={"images": images})

        if not form.title.strip():
            raise ValidationError("Title is required")
        if not form.excerpt.strip():
            raise ValidationError("Excerpt is required")
        if not form.content.strip():
            raise ValidationError("Content is required")
        if not form.image_url.strip():
            raise ValidationError("Main image URL is required")
        if len(form.images) > self.settings.max_post_images:
            raise ValidationError(
                f"Maximum {self.settings.max_post_images} additional images allowed"
            )
        for entry in form.image_metadata.values():
            if isinstance(entry, EmbedAttribution) and not entry.photographer.strip():
                raise AttributionRequiredError(
                    "Please enter the photographer's name to continue"
                )

        return form

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def list_posts(self, category: str | None = None) -> list[PostDTO]:
        """All posts newest first, optionally filtered by category."""
        eq = None
        if category and category.lower() != ALL_CATEGORIES:
            eq = {"category": category.lower()}

        try:
            rows = await self.backend.select(self.table, eq=eq, access_token=self._token)
        except BackendError as e:
            raise e.with_context("Failed to fetch blog posts") from e
        return [to_app(StoredPost.model_validate(row)) for row in rows]

    async def search_posts(self, query: str) -> list[PostDTO]:
        """Posts whose title, body or excerpt contain the query."""
        if not query.strip():
            return await self.list_posts()

        try:
            rows = await self.backend.select(
                self.table,
                search=(query, SEARCH_COLUMNS),
                access_token=self._token,
            )
        except BackendError as e:
            raise e.with_context("Failed to search blog posts") from e
        return [to_app(StoredPost.model_validate(row)) for row in rows]

    async def get_post(self, post_id: str) -> PostDTO | None:
        """Post by id."""
        try:
            rows = await self.backend.select(
                self.table,
                eq={"id": post_id},
                order=None,
                limit=1,
                access_token=self._token,
            )
        except BackendError as e:
            # Malformed ids are rejected by the uuid column cast.
            if e.code == "22P02":
                return None
            raise e.with_context("Failed to fetch blog post") from e

        if not rows:
            return None
        return to_app(StoredPost.model_validate(rows[0]))

    async def create_post(self, form: PostForm) -> PostDTO:
        """Create a post. Exactly one insert is issued."""
        form = self.clean_form(form)
        payload = to_storage(form).to_payload()
        if self.session.user_id:
            payload["created_by"] = self.session.user_id

        try:
            row = await self.backend.insert(self.table, payload, access_token=self._token)
        except BackendError as e:
            raise e.with_context("Failed to create blog post") from e

        post = to_app(StoredPost.model_validate(row))
        logger.info(f"Created blog post {post.id}: {post.title}")
        return post

    async def update_post(self, post_id: str, form: PostForm) -> PostDTO | None:
        """Replace a post's editable fields."""
        form = self.clean_form(form)
        payload = to_storage(form).to_payload()

        try:
            rows = await self.backend.update(
                self.table,
                payload,
                eq={"id": post_id},
                access_token=self._token,
            )
        except BackendError as e:
            if e.code == "22P02":
                return None
            raise e.with_context("Failed to update blog post") from e

        if not rows:
            return None
        logger.info(f"Updated blog post {post_id}")
        return to_app(StoredPost.model_validate(rows[0]))

    async def delete_post(self, post_id: str) -> bool:
        """Delete a post."""
        try:
            rows = await self.backend.delete(
                self.table,
                eq={"id": post_id},
                access_token=self._token,
            )
        except BackendError as e:
            if e.code == "22P02":
                return False
            raise e.with_context("Failed to delete blog post") from e

        if rows:
            logger.info(f"Deleted blog post {post_id}")
        return bool(rows)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    async def list_cards(
        self,
        category: str | None = None,
        query: str | None = None,
    ) -> list[PostCard]:
        """Gallery grid: posts with the main image's photographer."""
        if query:
            posts = await self.search_posts(query)
            if category and category.lower() != ALL_CATEGORIES:
                posts = [p for p in posts if p.category == category.lower()]
        else:
            posts = await self.list_posts(category)

        images = ImageService(self.backend, self.settings, self.session)
        index = await images.get_by_urls(
            self.resolver.lookup_urls(p.image_url for p in posts)
        )

        return [
            PostCard(
                **post.model_dump(),
                photographer=self.resolver.card_label(post.image_url, index),
            )
            for post in posts
        ]

    async def get_detail(self, post_id: str) -> PostDetail | None:
        """Single post with rendered body and attributed gallery."""
        post = await self.get_post(post_id)
        if not post:
            return None

        gallery_urls = list(post.images)
        if post.image_url and post.image_url not in gallery_urls:
            gallery_urls.append(post.image_url)

        images = ImageService(self.backend, self.settings, self.session)
        index = await images.get_by_urls(self.resolver.lookup_urls(gallery_urls))

        gallery = [self._gallery_image(url, post, index) for url in gallery_urls]

        return PostDetail(
            post=post,
            photographer=self.resolver.display_name(
                post.image_url, post.image_metadata, index
            ),
            blocks=render_blocks(post.content),
            gallery=gallery,
        )

    def _gallery_image(self, url: str, post: PostDTO, index: dict) -> GalleryImage:
        record = index.get(url)
        embed = self.resolver.embed_entry(url, post.image_metadata)
        source = self.resolver.source(url)
        sizes = self.resolver.sizes(url)
        if source == "upload":
            sizes = {"original": ImageService.optimized_url(url)}

        return GalleryImage(
            url=url,
            photographer=self.resolver.display_name(url, post.image_metadata, index),
            source=source,
            alt_text=record.alt_text if record else None,
            caption=record.caption if record else None,
            title=embed.title if embed else None,
            page_url=embed.flickr_page_url if embed else None,
            sizes=sizes,
        )
