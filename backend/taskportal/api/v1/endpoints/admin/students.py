"""
Admin Student Management endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from pydantic import ValidationError

from taskportal.core.database import get_db
from taskportal.core.exceptions import UserNotFoundError, ValidationFailure
from taskportal.core.logging_config import logger
from taskportal.models.user import User, StudentCategory
from taskportal.modules.auth.dependencies import get_current_admin
from taskportal.schemas.auth import UserResponse
from taskportal.schemas.student import (
    BulkCreateResult,
    BulkCreateStudents,
    BulkRowError,
    CreateStudent,
    StudentStatusUpdate,
)
from taskportal.services.identity_store import IdentityStore
from taskportal.utils.pagination import PaginationParams, pagination_params, create_paginated_response

router = APIRouter()


@router.get("")
async def list_students(
    category: Optional[StudentCategory] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    pagination: PaginationParams = Depends(pagination_params),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """List students with filtering and pagination, ordered by name"""
    students, total = await IdentityStore(db).list_students(
        category=category,
        is_active=is_active,
        search=search,
        offset=pagination.offset,
        limit=pagination.limit,
    )
    return create_paginated_response(
        [UserResponse.model_validate(student) for student in students],
        total,
        pagination.page,
        pagination.page_size,
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    data: CreateStudent,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    student = await IdentityStore(db).create_student(
        name=data.name,
        email=data.email,
        password=data.password,
        category=data.category,
        student_number=data.student_number,
    )
    logger.info(f"Admin {current_admin.id} created student {student.student_number}")
    return student


@router.post("/bulk", response_model=BulkCreateResult)
async def bulk_create_students(
    data: BulkCreateStudents,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Create students row by row; invalid or duplicate rows are reported, not fatal"""
    identities = IdentityStore(db)
    result = BulkCreateResult(created=0, errors=0)

    for index, row in enumerate(data.students):
        email = row.get("email") if isinstance(row.get("email"), str) else None
        try:
            student_data = CreateStudent.model_validate(row)
            await identities.create_student(
                name=student_data.name,
                email=student_data.email,
                password=student_data.password,
                category=student_data.category,
                student_number=student_data.student_number,
            )
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            reason = f"{field}: {first['msg']}" if field else first["msg"]
            result.failures.append(BulkRowError(index=index, email=email, reason=reason))
        except ValidationFailure as e:
            logger.warning(f"Bulk student row {index} rejected: {e.message}")
            result.failures.append(BulkRowError(index=index, email=email, reason=e.message))
        else:
            result.created += 1

    result.errors = len(result.failures)
    logger.info(
        f"Admin {current_admin.id} bulk-created {result.created} students, {result.errors} errors"
    )
    return result


@router.patch("/{student_id}/status", response_model=UserResponse)
async def update_student_status(
    student_id: str,
    data: StudentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Activate or deactivate a student; accounts are never deleted"""
    identities = IdentityStore(db)
    student = await identities.find_by_id(student_id)
    if student is None or not student.is_student:
        raise UserNotFoundError(student_id)

    student.is_active = data.is_active
    student = await identities.save(student)
    logger.info(
        f"Admin {current_admin.id} {'activated' if data.is_active else 'deactivated'} student {student_id}"
    )
    return student
