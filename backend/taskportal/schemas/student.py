"""
Student and admin profile schemas
"""

from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Any, Dict, List, Optional

from taskportal.models.user import StudentCategory


class UpdateProfile(BaseModel):
    """Fields a student may change on their own profile"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    avatar: Optional[str] = None
    github_profile: Optional[str] = Field(None, max_length=255)
    linkedin_profile: Optional[str] = Field(None, max_length=255)

    model_config = {"extra": "forbid"}

    @model_validator(mode='after')
    def require_a_change(self):
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("'name' cannot be null")
        return self


class UpdateAdminProfile(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    avatar: Optional[str] = None

    model_config = {"extra": "forbid"}

    @model_validator(mode='after')
    def require_a_change(self):
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("'name' cannot be null")
        return self


class CreateStudent(BaseModel):
    """Admin-created student account"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    category: StudentCategory
    student_number: Optional[str] = Field(None, max_length=32)


class StudentStatusUpdate(BaseModel):
    is_active: bool


class BulkCreateStudents(BaseModel):
    """
    Rows are validated one at a time against CreateStudent, so a bad row is
    counted as an error instead of rejecting the whole batch.
    """
    students: List[Dict[str, Any]] = Field(..., min_length=1, max_length=500)


class BulkRowError(BaseModel):
    index: int
    email: Optional[str] = None
    reason: str


class BulkCreateResult(BaseModel):
    created: int
    errors: int
    failures: List[BulkRowError] = Field(default_factory=list)
