from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Text, Index
import enum

from taskportal.core.database import Base, new_id, utc_now


class UserRole(str, enum.Enum):
    """User roles"""
    ADMIN = "admin"
    STUDENT = "student"


class StudentCategory(str, enum.Enum):
    """Program tracks a student enrols in (also used for blog categories)"""
    WEB_DEVELOPMENT = "Web Development"
    DATA_SCIENCE = "Data Science"
    MOBILE_DEVELOPMENT = "Mobile Development"
    UI_UX_DESIGN = "UI/UX Design"


class User(Base):
    """Identity record: an admin or a student"""
    __tablename__ = "users"

    __table_args__ = (
        Index('ix_users_role_active', 'role', 'is_active'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    role = Column(SQLEnum(UserRole), default=UserRole.STUDENT, nullable=False)
    # Present iff role == student, e.g. "S007"
    student_number = Column(String(32), unique=True, index=True, nullable=True)
    category = Column(SQLEnum(StudentCategory), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Profile fields
    avatar = Column(Text, nullable=True)
    github_profile = Column(String(255), nullable=True)
    linkedin_profile = Column(String(255), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
    last_login = Column(DateTime, nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def __repr__(self):
        return f"<User {self.email} ({self.role.value if self.role else '?'})>"
