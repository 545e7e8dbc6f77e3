"""
Blog endpoints. Reading published posts needs no account; writing is admin-only.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from taskportal.core.database import get_db
from taskportal.models.blog import BlogStatus
from taskportal.models.user import User, StudentCategory
from taskportal.modules.auth.dependencies import get_current_user, get_current_admin, get_optional_user
from taskportal.schemas.blog import (
    CreateBlogPost,
    UpdateBlogPost,
    CreateComment,
    BlogPostResponse,
    CommentResponse,
)
from taskportal.schemas.common import MessageResponse
from taskportal.services.blog_service import BlogService
from taskportal.utils.pagination import PaginationParams, pagination_params, create_paginated_response

router = APIRouter()


@router.get("")
async def list_published_posts(
    category: Optional[StudentCategory] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    pagination: PaginationParams = Depends(pagination_params),
    db: AsyncSession = Depends(get_db),
):
    posts, total = await BlogService(db).list_posts(
        status=BlogStatus.PUBLISHED,
        category=category,
        tag=tag,
        search=search,
        offset=pagination.offset,
        limit=pagination.limit,
    )
    return create_paginated_response(
        [BlogPostResponse.model_validate(post) for post in posts],
        total,
        pagination.page,
        pagination.page_size,
    )


@router.post("", response_model=BlogPostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: CreateBlogPost,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await BlogService(db).create(data, current_admin)


@router.get("/admin/all")
async def list_all_posts(
    status_filter: Optional[BlogStatus] = Query(None, alias="status"),
    category: Optional[StudentCategory] = None,
    search: Optional[str] = None,
    pagination: PaginationParams = Depends(pagination_params),
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Drafts and archived posts included"""
    posts, total = await BlogService(db).list_posts(
        status=status_filter,
        category=category,
        search=search,
        offset=pagination.offset,
        limit=pagination.limit,
    )
    return create_paginated_response(
        [BlogPostResponse.model_validate(post) for post in posts],
        total,
        pagination.page,
        pagination.page_size,
    )


@router.get("/admin/stats")
async def post_stats(
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await BlogService(db).stats()


@router.get("/{post_id}", response_model=BlogPostResponse)
async def get_post(
    post_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """Published posts count a view; admins can also open drafts"""
    return await BlogService(db).view(post_id, viewer)


@router.patch("/{post_id}", response_model=BlogPostResponse)
async def update_post(
    post_id: str,
    data: UpdateBlogPost,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await BlogService(db).update(post_id, data, current_admin)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    await BlogService(db).delete(post_id, current_admin)
    return {"message": "Post deleted successfully"}


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    data: CreateComment,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await BlogService(db).add_comment(post_id, current_user, data.content)
