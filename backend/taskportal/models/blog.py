"""Blog posts written by admins, readable by everyone once published"""
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
import enum

from taskportal.core.database import Base, new_id, utc_now
from taskportal.models.user import StudentCategory


class BlogStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class BlogPost(Base):
    __tablename__ = "blog_posts"

    __table_args__ = (
        Index('ix_blog_posts_status_published', 'status', 'published_at'),
        Index('ix_blog_posts_category', 'category'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    meta_description = Column(String(160), nullable=False)
    category = Column(SQLEnum(StudentCategory), nullable=False)
    tags = Column(JSON, default=list, nullable=False)
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    status = Column(SQLEnum(BlogStatus), default=BlogStatus.DRAFT, nullable=False)

    featured_image_url = Column(String(500), nullable=True)
    featured_image_alt = Column(String(255), nullable=True)

    views = Column(Integer, default=0, nullable=False)
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    author = relationship("User", lazy="selectin")
    comments = relationship(
        "BlogComment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="BlogComment.created_at",
        lazy="selectin",
    )

    def publish(self):
        self.status = BlogStatus.PUBLISHED
        self.published_at = utc_now()

    def archive(self):
        self.status = BlogStatus.ARCHIVED

    def __repr__(self):
        return f"<BlogPost {self.title} [{self.status.value if self.status else '?'}]>"


class BlogComment(Base):
    __tablename__ = "blog_comments"

    id = Column(String(36), primary_key=True, default=new_id)
    post_id = Column(String(36), ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    post = relationship("BlogPost", back_populates="comments")
    user = relationship("User", lazy="selectin")
