"""Blog service - posts, slugs, publishing, comments and likes"""

import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ... import storage
from ...errors import Conflict, NotFound, ValidationFailed
from ...models import BLOG_CATEGORIES, Blog, User
from ...policy import ADMIN, authorize, is_allowed
from ...security import sanitize_html
from ...shared.pagination import PageParams, paginate
from ...shared.timeutils import utcnow
from ...utils.sanitization import sanitize_string
from .repository import BlogRepository
from .schemas import BlogCreate, BlogStatusUpdate, BlogUpdate, CommentCreate

logger = logging.getLogger(__name__)

SLUG_STRIP = re.compile(r"[^a-z0-9]+")
FALLBACK_SLUG = "post"


def slugify(title: str) -> str:
    """lowercase, runs of non [a-z0-9] become '-', leading/trailing '-' trimmed"""
    return SLUG_STRIP.sub("-", (title or "").lower()).strip("-")


def stamp_publication(post: Blog) -> None:
    if post.status == "published" and not post.published_at:
        post.published_at = utcnow()


class BlogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = BlogRepository()

    def _can_see_unpublished(self, viewer: Optional[User]) -> bool:
        return is_allowed(viewer, "blog", "view_unpublished")

    def unique_slug(self, text: str, exclude_id: Optional[int] = None) -> str:
        base = slugify(text) or FALLBACK_SLUG
        taken = self.repo.slugs_like(self.db, base)
        if exclude_id is not None:
            current = self.repo.get_by_id(self.db, exclude_id)
            if current:
                taken.discard(current.slug)
        if base not in taken:
            return base
        suffix = 2
        while f"{base}-{suffix}" in taken:
            suffix += 1
        return f"{base}-{suffix}"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_posts(
        self,
        params: PageParams,
        viewer: Optional[User] = None,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Blog], int]:
        if category and category not in BLOG_CATEGORIES:
            raise ValidationFailed(f"Invalid category. Must be one of: {', '.join(BLOG_CATEGORIES)}")
        query = self.repo.query_posts(
            self.db, self._can_see_unpublished(viewer), category, featured, tag, search
        )
        return paginate(query, params)

    def _visible_or_404(self, post: Optional[Blog], viewer: Optional[User]) -> Blog:
        if not post:
            raise NotFound("Blog post not found")
        hidden = post.status != "published" or not post.is_public
        if hidden and not self._can_see_unpublished(viewer):
            raise NotFound("Blog post not found")
        return post

    def _viewed(self, post: Blog) -> Blog:
        self.repo.increment_views(self.db, post.id)
        self.db.refresh(post)
        return post

    def get_post(self, blog_id: int, viewer: Optional[User] = None, count_view: bool = True) -> Blog:
        post = self._visible_or_404(self.repo.get_by_id(self.db, blog_id), viewer)
        return self._viewed(post) if count_view else post

    def get_by_slug(self, slug: str, viewer: Optional[User] = None) -> Blog:
        return self._viewed(self._visible_or_404(self.repo.get_by_slug(self.db, slug.lower()), viewer))

    def featured(self) -> list[Blog]:
        return self.repo.get_featured(self.db)

    def related(self, blog_id: int) -> list[Blog]:
        post = self.repo.get_by_id(self.db, blog_id)
        if not post:
            raise NotFound("Blog post not found")
        return self.repo.get_related(self.db, post)

    def categories(self) -> list[dict]:
        return [
            {"value": category, "label": category.capitalize(), "count": count}
            for category, count in self.repo.category_counts(self.db).items()
        ]

    def tags(self) -> list[dict]:
        return [
            {"value": tag, "label": tag[:1].upper() + tag[1:], "count": count}
            for tag, count in self.repo.tag_counts(self.db).items()
        ]

    # ------------------------------------------------------------------
    # Admin writes
    # ------------------------------------------------------------------

    def create_post(self, data: BlogCreate, user: User) -> Blog:
        authorize(user, "blog", "manage")
        post = Blog(
            title=data.title.strip(),
            title_ar=data.titleAr.strip(),
            slug=self.unique_slug(data.slug or data.title),
            excerpt=sanitize_string(data.excerpt),
            excerpt_ar=sanitize_string(data.excerptAr),
            content=sanitize_html(data.content),
            content_ar=sanitize_html(data.contentAr),
            author_id=user.id,
            category=data.category,
            tags=data.tags,
            featured_image=data.featuredImage.model_dump() if data.featuredImage else None,
            images=[image.model_dump() for image in data.images],
            status=data.status,
            is_featured=data.isFeatured,
            is_public=data.isPublic,
            comments=[],
        )
        stamp_publication(post)
        self.db.add(post)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("A post with this slug already exists") from e
        self.db.refresh(post)
        logger.info(f"📝 Blog post {post.id} created with slug '{post.slug}'")
        return post

    def update_post(self, blog_id: int, data: BlogUpdate, user: User) -> Blog:
        authorize(user, "blog", "manage")
        post = self.get_post(blog_id, user, count_view=False)

        if data.slug is not None:
            post.slug = self.unique_slug(data.slug, exclude_id=post.id)
        if data.title is not None:
            post.title = data.title.strip()
        if data.titleAr is not None:
            post.title_ar = data.titleAr.strip()
        if data.excerpt is not None:
            post.excerpt = sanitize_string(data.excerpt)
        if data.excerptAr is not None:
            post.excerpt_ar = sanitize_string(data.excerptAr)
        if data.content is not None:
            post.content = sanitize_html(data.content)
        if data.contentAr is not None:
            post.content_ar = sanitize_html(data.contentAr)
        if data.category is not None:
            post.category = data.category
        if data.tags is not None:
            post.tags = data.tags
        if data.featuredImage is not None:
            post.featured_image = data.featuredImage.model_dump()
        if data.images is not None:
            post.images = [image.model_dump() for image in data.images]
        if data.status is not None:
            post.status = data.status
        if data.isFeatured is not None:
            post.is_featured = data.isFeatured
        if data.isPublic is not None:
            post.is_public = data.isPublic
        stamp_publication(post)

        try:
            return self.repo.save(self.db, post)
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("A post with this slug already exists") from e

    def set_status(self, blog_id: int, data: BlogStatusUpdate, user: User) -> Blog:
        authorize(user, "blog", "manage")
        post = self.get_post(blog_id, user, count_view=False)
        post.status = data.status
        stamp_publication(post)
        logger.info(f"🔄 Blog post {post.id} status -> {data.status}")
        return self.repo.save(self.db, post)

    def delete_post(self, blog_id: int, user: User) -> None:
        authorize(user, "blog", "manage")
        post = self.get_post(blog_id, user, count_view=False)
        public_ids = [image.get("publicId") for image in post.images or []]
        if post.featured_image:
            public_ids.append(post.featured_image.get("publicId"))
        self.repo.delete(self.db, post)
        storage.discard_files(public_ids)
        logger.info(f"🗑️ Blog post {blog_id} deleted")

    def remove_image(self, blog_id: int, public_id: str, user: User) -> Blog:
        authorize(user, "blog", "manage")
        post = self.get_post(blog_id, user, count_view=False)
        images = post.images or []
        remaining = [image for image in images if image.get("publicId") != public_id]
        if len(remaining) == len(images):
            raise NotFound("Image not found")
        storage.discard_files([public_id])
        post.images = remaining
        return self.repo.save(self.db, post)

    # ------------------------------------------------------------------
    # Reader interactions
    # ------------------------------------------------------------------

    def add_comment(self, blog_id: int, data: CommentCreate, user: User) -> Blog:
        authorize(user, "blog", "comment")
        post = self.get_post(blog_id, user, count_view=False)
        if post.status != "published":
            raise ValidationFailed("Comments are only allowed on published posts")
        comment = {
            "author": user.id,
            "content": sanitize_string(data.content),
            "contentAr": sanitize_string(data.contentAr),
            "isApproved": user.role == ADMIN,
            "createdAt": utcnow().isoformat(),
        }
        post.comments = [*(post.comments or []), comment]
        return self.repo.save(self.db, post)

    def toggle_like(self, blog_id: int, user: User) -> dict:
        authorize(user, "blog", "like")
        self.get_post(blog_id, user, count_view=False)

        like = self.repo.find_like(self.db, blog_id, user.id)
        if like:
            self.repo.remove_like(self.db, like)
            liked = False
        else:
            try:
                self.repo.add_like(self.db, blog_id, user.id)
            except IntegrityError as e:
                self.db.rollback()
                raise Conflict("Post already liked") from e
            liked = True
        return {"likes": self.repo.likes_count(self.db, blog_id), "userLiked": liked}
