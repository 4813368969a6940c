"""Blog repository - Database operations for posts and likes"""

from typing import Optional

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Query, Session, joinedload

from ...models import Blog, BlogLike


def _tag_pattern(tag: str) -> str:
    # Tags are stored as a JSON array of strings; match the quoted element
    return f'%"{tag}"%'


class BlogRepository:
    @staticmethod
    def _with_author(query: Query) -> Query:
        return query.options(joinedload(Blog.author))

    @staticmethod
    def _visible(db: Session, include_unpublished: bool) -> Query:
        query = BlogRepository._with_author(db.query(Blog))
        if not include_unpublished:
            query = query.filter(Blog.status == "published", Blog.is_public.is_(True))
        return query

    @staticmethod
    def get_by_id(db: Session, blog_id: int) -> Optional[Blog]:
        return BlogRepository._with_author(db.query(Blog)).filter(Blog.id == blog_id).first()

    @staticmethod
    def get_by_slug(db: Session, slug: str) -> Optional[Blog]:
        return BlogRepository._with_author(db.query(Blog)).filter(Blog.slug == slug).first()

    @staticmethod
    def slugs_like(db: Session, base: str) -> set[str]:
        rows = db.query(Blog.slug).filter(Blog.slug.like(f"{base}%")).all()
        return {row[0] for row in rows}

    @staticmethod
    def query_posts(
        db: Session,
        include_unpublished: bool = False,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Query:
        query = BlogRepository._visible(db, include_unpublished)
        if category:
            query = query.filter(Blog.category == category)
        if featured is not None:
            query = query.filter(Blog.is_featured == featured)
        if tag:
            query = query.filter(cast(Blog.tags, String).like(_tag_pattern(tag.lower())))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Blog.title.ilike(pattern),
                    Blog.title_ar.ilike(pattern),
                    Blog.content.ilike(pattern),
                    Blog.content_ar.ilike(pattern),
                    cast(Blog.tags, String).ilike(pattern),
                )
            )
        return query.order_by(Blog.published_at.desc(), Blog.created_at.desc(), Blog.id.desc())

    @staticmethod
    def get_featured(db: Session, limit: int = 5) -> list[Blog]:
        return (
            BlogRepository._visible(db, False)
            .filter(Blog.is_featured.is_(True))
            .order_by(Blog.published_at.desc(), Blog.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_related(db: Session, post: Blog, limit: int = 5) -> list[Blog]:
        """Published posts sharing the category or at least one tag"""
        matches = [Blog.category == post.category]
        matches += [cast(Blog.tags, String).like(_tag_pattern(tag)) for tag in post.tags or []]
        return (
            BlogRepository._visible(db, False)
            .filter(Blog.id != post.id, or_(*matches))
            .order_by(Blog.published_at.desc(), Blog.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def category_counts(db: Session) -> dict[str, int]:
        """Published post count for every category in use"""
        published = dict(
            db.query(Blog.category, func.count(Blog.id))
            .filter(Blog.status == "published", Blog.is_public.is_(True))
            .group_by(Blog.category)
            .all()
        )
        used = [row[0] for row in db.query(Blog.category).distinct().all()]
        return {category: int(published.get(category, 0)) for category in sorted(used)}

    @staticmethod
    def tag_counts(db: Session) -> dict[str, int]:
        counts: dict[str, int] = {}
        rows = db.query(Blog.tags, Blog.status, Blog.is_public).all()
        for tags, status, is_public in rows:
            for tag in tags or []:
                counts.setdefault(tag, 0)
                if status == "published" and is_public:
                    counts[tag] += 1
        return dict(sorted(counts.items()))

    @staticmethod
    def create(db: Session, **post_data) -> Blog:
        post = Blog(**post_data)
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    @staticmethod
    def save(db: Session, post: Blog) -> Blog:
        db.commit()
        db.refresh(post)
        return post

    @staticmethod
    def delete(db: Session, post: Blog) -> None:
        db.query(BlogLike).filter(BlogLike.blog_id == post.id).delete(synchronize_session=False)
        db.delete(post)
        db.commit()

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    @staticmethod
    def increment_views(db: Session, blog_id: int) -> None:
        db.query(Blog).filter(Blog.id == blog_id).update(
            {Blog.views: Blog.views + 1}, synchronize_session=False
        )
        db.commit()

    @staticmethod
    def find_like(db: Session, blog_id: int, user_id: int) -> Optional[BlogLike]:
        return db.query(BlogLike).filter(BlogLike.blog_id == blog_id, BlogLike.user_id == user_id).first()

    @staticmethod
    def add_like(db: Session, blog_id: int, user_id: int) -> None:
        db.add(BlogLike(blog_id=blog_id, user_id=user_id))
        db.flush()
        db.query(Blog).filter(Blog.id == blog_id).update(
            {Blog.likes_count: Blog.likes_count + 1}, synchronize_session=False
        )
        db.commit()

    @staticmethod
    def remove_like(db: Session, like: BlogLike) -> None:
        blog_id = like.blog_id
        db.delete(like)
        db.query(Blog).filter(Blog.id == blog_id, Blog.likes_count > 0).update(
            {Blog.likes_count: Blog.likes_count - 1}, synchronize_session=False
        )
        db.commit()

    @staticmethod
    def likes_count(db: Session, blog_id: int) -> int:
        return db.query(Blog.likes_count).filter(Blog.id == blog_id).scalar() or 0
