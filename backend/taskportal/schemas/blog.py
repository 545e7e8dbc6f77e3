"""
Blog Schemas
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime

from taskportal.models.blog import BlogStatus
from taskportal.models.user import StudentCategory
from taskportal.schemas.common import UserSummary


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    return [tag.strip() for tag in tags if tag and tag.strip()]


class FeaturedImage(BaseModel):
    url: str = Field(..., max_length=500)
    alt: Optional[str] = Field(None, max_length=255)


class CreateBlogPost(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    meta_description: str = Field(..., min_length=1, max_length=160)
    category: StudentCategory
    tags: List[str] = Field(default_factory=list)
    status: BlogStatus = BlogStatus.DRAFT
    featured_image: Optional[FeaturedImage] = None

    @field_validator('tags')
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)


class UpdateBlogPost(BaseModel):
    """Any subset of the editable fields; status changes publish or archive the post"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    meta_description: Optional[str] = Field(None, min_length=1, max_length=160)
    category: Optional[StudentCategory] = None
    tags: Optional[List[str]] = None
    status: Optional[BlogStatus] = None
    featured_image: Optional[FeaturedImage] = None

    model_config = {"extra": "forbid"}

    @field_validator('tags')
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)

    @model_validator(mode='after')
    def require_a_change(self):
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        return self


class CreateComment(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

    @field_validator('content')
    @classmethod
    def strip_content(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        return v


class CommentResponse(BaseModel):
    id: str
    user_id: str
    user: Optional[UserSummary] = None
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class BlogPostResponse(BaseModel):
    id: str
    title: str
    content: str
    meta_description: str
    category: StudentCategory
    tags: List[str] = Field(default_factory=list)
    author_id: str
    author: Optional[UserSummary] = None
    status: BlogStatus
    featured_image_url: Optional[str] = None
    featured_image_alt: Optional[str] = None
    views: int = 0
    published_at: Optional[datetime] = None
    comments: List[CommentResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
