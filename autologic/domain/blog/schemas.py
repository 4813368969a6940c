"""Blog schemas"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...i18n import localize, localize_entry
from ...models import BLOG_CATEGORIES, BLOG_STATUSES
from ...policy import is_allowed
from ...shared.validators import validate_choice
from ..services.schemas import ImageRef
from ..users.schemas import user_summary


def _lower_tags(tags: Optional[list[str]]) -> Optional[list[str]]:
    if tags is None:
        return None
    return [tag.strip().lower() for tag in tags if tag and tag.strip()]


class BlogCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    titleAr: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=200)
    excerpt: str = Field(..., min_length=1, max_length=500)
    excerptAr: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    contentAr: str = Field(..., min_length=1)
    category: str = "other"
    tags: list[str] = []
    featuredImage: Optional[ImageRef] = None
    images: list[ImageRef] = Field(default=[], max_length=10)
    status: str = "draft"
    isFeatured: bool = False
    isPublic: bool = True

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return validate_choice(v, BLOG_CATEGORIES, "category")

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, BLOG_STATUSES, "status")

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v):
        return _lower_tags(v)


class BlogUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    titleAr: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=200)
    excerpt: Optional[str] = Field(None, min_length=1, max_length=500)
    excerptAr: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = Field(None, min_length=1)
    contentAr: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    featuredImage: Optional[ImageRef] = None
    images: Optional[list[ImageRef]] = Field(None, max_length=10)
    status: Optional[str] = None
    isFeatured: Optional[bool] = None
    isPublic: Optional[bool] = None

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return validate_choice(v, BLOG_CATEGORIES, "category")

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, BLOG_STATUSES, "status")

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v):
        return _lower_tags(v)


class BlogStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, BLOG_STATUSES, "status")


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)
    contentAr: str = Field(..., min_length=1, max_length=1000)


def serialize_post_summary(post, locale: str) -> dict:
    return {
        "id": post.id,
        "title": localize(post, "title", locale),
        "slug": post.slug,
        "excerpt": localize(post, "excerpt", locale),
        "category": post.category,
        "tags": post.tags or [],
        "featuredImage": post.featured_image,
        "publishedAt": post.published_at,
    }


def serialize_post(post, locale: str, viewer=None) -> dict:
    """Full post; unapproved comments are only listed for admins"""
    moderator = is_allowed(viewer, "blog", "manage")
    comments = [
        {
            "author": comment.get("author"),
            "content": localize_entry(comment, "content", locale),
            "isApproved": comment.get("isApproved", False),
            "createdAt": comment.get("createdAt"),
        }
        for comment in post.comments or []
        if moderator or comment.get("isApproved")
    ]
    author = user_summary(post.author)
    return {
        **serialize_post_summary(post, locale),
        "content": localize(post, "content", locale),
        "author": {key: author[key] for key in ("id", "firstName", "lastName")} if author else None,
        "images": post.images or [],
        "status": post.status,
        "isFeatured": post.is_featured,
        "isPublic": post.is_public,
        "views": post.views,
        "likes": post.likes_count,
        "comments": comments,
        "totalEngagement": post.views + post.likes_count + len(comments),
        "createdAt": post.created_at,
        "updatedAt": post.updated_at,
    }
