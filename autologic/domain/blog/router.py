"""Blog router"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_optional_user
from ...database import get_db
from ...i18n import get_locale
from ...models import User
from ...policy import require
from ...shared.pagination import PageParams
from ...shared.responses import paginated, success
from .schemas import (
    BlogCreate,
    BlogStatusUpdate,
    BlogUpdate,
    CommentCreate,
    serialize_post,
    serialize_post_summary,
)
from .service import BlogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blog", tags=["Blog"])

require_admin = require("blog", "manage")


def get_blog_service(db: Session = Depends(get_db)) -> BlogService:
    """Dependency injection for BlogService"""
    return BlogService(db)


@router.get("")
async def list_posts(
    category: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    tag: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    viewer: Optional[User] = Depends(get_optional_user),
    locale: str = Depends(get_locale),
    service: BlogService = Depends(get_blog_service),
):
    posts, total = service.list_posts(params, viewer, category, featured, tag, search)
    return paginated("posts", [serialize_post(p, locale, viewer) for p in posts], total, params, locale)


@router.get("/categories/list")
async def blog_categories(service: BlogService = Depends(get_blog_service)):
    return success({"categories": service.categories()})


@router.get("/tags/list")
async def blog_tags(service: BlogService = Depends(get_blog_service)):
    return success({"tags": service.tags()})


@router.get("/featured/list")
async def featured_posts(
    locale: str = Depends(get_locale),
    service: BlogService = Depends(get_blog_service),
):
    posts = service.featured()
    return success({"posts": [serialize_post_summary(p, locale) for p in posts]}, locale, results=len(posts))


@router.get("/slug/{slug}")
async def get_post_by_slug(
    slug: str,
    viewer: Optional[User] = Depends(get_optional_user),
    locale: str = Depends(get_locale),
    service: BlogService = Depends(get_blog_service),
):
    post = service.get_by_slug(slug, viewer)
    return success({"post": serialize_post(post, locale, viewer)}, locale)


@router.get("/{blog_id}")
async def get_post(
    blog_id: int,
    viewer: Optional[User] = Depends(get_optional_user),
    locale: str = Depends(get_locale),
    service: BlogService = Depends(get_blog_service),
):
    post = service.get_post(blog_id, viewer)
    return success({"post": serialize_post(post, locale, viewer)}, locale)


@router.get("/{blog_id}/related")
async def related_posts(
    blog_id: int,
    locale: str = Depends(get_locale),
    service: BlogService = Depends(get_blog_service),
):
    posts = service.related(blog_id)
    return success({"posts": [serialize_post_summary(p, locale) for p in posts]}, locale, results=len(posts))


@router.post("", status_code=201)
async def create_post(
    data: BlogCreate,
    current_user: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: BlogService = Depends(get_blog_service),
):
    post = service.create_post(data, current_user)
    return success({"post": serialize_post(post, locale, current_user)}, locale)


@router.put("/{blog_id}")
async def update_post(
    blog_id: int,
    data: BlogUpdate,
    current_user: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: BlogService = Depends(get_blog_service),
):
    post = service.update_post(blog_id, data, current_user)
    return success({"post": serialize_post(post, locale, current_user)}, locale)


@router.put("/{blog_id}/status")
async def update_post_status(
    blog_id: int,
    data: BlogStatusUpdate,
    current_user: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: BlogService = Depends(get_blog_service),
):
    post = service.set_status(blog_id, data, current_user)
    return success({"post": serialize_post(post, locale, current_user)}, locale)


@router.delete("/{blog_id}", status_code=204)
async def delete_post(
    blog_id: int,
    current_user: User = Depends(require_admin),
    service: BlogService = Depends(get_blog_service),
):
    service.delete_post(blog_id, current_user)
    return Response(status_code=204)


@router.delete("/{blog_id}/images/{public_id:path}")
async def delete_post_image(
    blog_id: int,
    public_id: str,
    current_user: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: BlogService = Depends(get_blog_service),
):
    post = service.remove_image(blog_id, public_id, current_user)
    return success({"post": serialize_post(post, locale, current_user)}, locale, message="Image deleted successfully")


@router.post("/{blog_id}/comments", status_code=201)
async def add_comment(
    blog_id: int,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BlogService = Depends(get_blog_service),
):
    post = service.add_comment(blog_id, data, current_user)
    return success({"post": serialize_post(post, locale, current_user)}, locale)


@router.post("/{blog_id}/like")
async def like_post(
    blog_id: int,
    current_user: User = Depends(get_current_user),
    service: BlogService = Depends(get_blog_service),
):
    return success(service.toggle_like(blog_id, current_user))
