"""
Shared schema pieces
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from taskportal.models.user import StudentCategory, UserRole


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Columns store naive UTC; aware inputs are converted, naive inputs are taken as UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class UserSummary(BaseModel):
    """Compact identity embedded in task, message and blog responses"""
    id: str
    name: str
    email: str
    role: UserRole
    student_number: Optional[str] = None
    category: Optional[StudentCategory] = None

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    """Plain acknowledgement"""
    message: str
    success: bool = True
