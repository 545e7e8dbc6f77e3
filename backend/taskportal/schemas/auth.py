from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from taskportal.models.user import StudentCategory, UserRole


class StudentRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    category: StudentCategory
    student_number: Optional[str] = Field(None, max_length=32, description="Generated (S001...) when omitted")

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class AdminLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class StudentLogin(BaseModel):
    """Students sign in with their student number (an email is accepted too)"""
    student_number: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ChangePassword(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    student_number: Optional[str] = None
    category: Optional[StudentCategory] = None
    avatar: Optional[str] = None
    github_profile: Optional[str] = None
    linkedin_profile: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
