"""
Blog Service
Admin-authored posts; published posts are public and accept comments
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func, or_

from taskportal.core.exceptions import BlogPostNotFoundError, ForbiddenError, ValidationFailure
from taskportal.core.logging_config import logger
from taskportal.models.blog import BlogPost, BlogComment, BlogStatus
from taskportal.models.user import User, StudentCategory
from taskportal.schemas.blog import CreateBlogPost, UpdateBlogPost
from taskportal.services.base_store import BaseStore


class BlogService(BaseStore):
    """Service for blog posts and their comments"""

    async def find(self, post_id: str) -> Optional[BlogPost]:
        result = await self._execute(select(BlogPost).where(BlogPost.id == post_id), "load_post")
        return result.scalar_one_or_none()

    async def get(self, post_id: str) -> BlogPost:
        post = await self.find(post_id)
        if post is None:
            raise BlogPostNotFoundError(post_id)
        return post

    async def list_posts(
        self,
        status: Optional[BlogStatus] = None,
        category: Optional[StudentCategory] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[BlogPost], int]:
        """Newest first (by publish date, then creation date)"""
        conditions = []
        if status is not None:
            conditions.append(BlogPost.status == status)
        if category is not None:
            conditions.append(BlogPost.category == category)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(BlogPost.title).like(pattern),
                func.lower(BlogPost.content).like(pattern),
            ))

        statement = select(BlogPost).where(*conditions).order_by(
            BlogPost.published_at.desc().nulls_last(), BlogPost.created_at.desc()
        )
        posts = list((await self._execute(statement, "list_posts")).scalars().all())

        # JSON tag lists are matched in Python
        if tag:
            wanted = tag.strip().lower()
            posts = [post for post in posts if wanted in (t.lower() for t in post.tags or [])]
        return posts[offset:offset + limit], len(posts)

    async def view(self, post_id: str, viewer: Optional[User] = None) -> BlogPost:
        """
        Fetch a post for reading.

        Non-admins only see published posts. Published posts count a view.
        """
        post = await self.get(post_id)
        if post.status != BlogStatus.PUBLISHED:
            if viewer is None or not viewer.is_admin:
                raise BlogPostNotFoundError(post_id)
            return post

        post.views = (post.views or 0) + 1
        self.db.add(post)
        await self._commit("count_view")
        return post

    async def create(self, command: CreateBlogPost, author: User) -> BlogPost:
        if not author.is_admin:
            raise ForbiddenError("Only admins can write blog posts")

        post = BlogPost(
            title=command.title,
            content=command.content,
            meta_description=command.meta_description,
            category=command.category,
            tags=list(command.tags),
            author_id=author.id,
            author=author,
            status=BlogStatus.DRAFT,
            views=0,
            comments=[],
        )
        if command.featured_image is not None:
            post.featured_image_url = command.featured_image.url
            post.featured_image_alt = command.featured_image.alt
        self._apply_status(post, command.status)

        self.db.add(post)
        await self._commit("create_post")
        logger.info(f"Blog post {post.id} created by {author.id} ({post.status.value})")
        return post

    @staticmethod
    def _apply_status(post: BlogPost, status: BlogStatus) -> None:
        if status == BlogStatus.PUBLISHED:
            if post.status != BlogStatus.PUBLISHED:
                post.publish()
        elif status == BlogStatus.ARCHIVED:
            post.archive()
        else:
            post.status = status

    @staticmethod
    def _require_editor(post: BlogPost, actor: User) -> None:
        if not actor.is_admin and post.author_id != actor.id:
            raise ForbiddenError("Access denied")

    async def update(self, post_id: str, command: UpdateBlogPost, actor: User) -> BlogPost:
        post = await self.get(post_id)
        self._require_editor(post, actor)

        changes = command.model_dump(exclude_unset=True, exclude={"status", "featured_image"})
        for field, value in changes.items():
            if value is None:
                raise ValidationFailure(f"'{field}' cannot be null", field=field)
            setattr(post, field, value)
        if "featured_image" in command.model_fields_set:
            image = command.featured_image
            post.featured_image_url = image.url if image else None
            post.featured_image_alt = image.alt if image else None
        if command.status is not None:
            self._apply_status(post, command.status)

        self.db.add(post)
        await self._commit("update_post")
        return post

    async def delete(self, post_id: str, actor: User) -> None:
        post = await self.get(post_id)
        self._require_editor(post, actor)
        await self.db.delete(post)
        await self._commit("delete_post")
        logger.info(f"Blog post {post_id} deleted by {actor.id}")

    async def add_comment(self, post_id: str, user: User, content: str) -> BlogComment:
        post = await self.get(post_id)
        if post.status != BlogStatus.PUBLISHED:
            raise ValidationFailure("Cannot comment on unpublished post")

        comment = BlogComment(post_id=post.id, user_id=user.id, user=user, content=content)
        post.comments.append(comment)
        await self._commit("add_comment")
        return comment

    async def stats(self) -> Dict[str, Any]:
        by_status = {status.value: 0 for status in BlogStatus}
        result = await self._execute(
            select(BlogPost.status, func.count(BlogPost.id)).group_by(BlogPost.status), "post_stats"
        )
        for status, count in result.all():
            by_status[status.value] = count

        result = await self._execute(
            select(BlogPost.category, func.count(BlogPost.id)).group_by(BlogPost.category), "post_stats"
        )
        by_category = {category.value: count for category, count in result.all()}

        total_views, avg_views = (await self._execute(
            select(func.coalesce(func.sum(BlogPost.views), 0), func.avg(BlogPost.views)), "post_stats"
        )).one()

        return {
            "by_status": by_status,
            "by_category": by_category,
            "total_views": int(total_views or 0),
            "average_views": float(avg_views) if avg_views is not None else None,
        }
