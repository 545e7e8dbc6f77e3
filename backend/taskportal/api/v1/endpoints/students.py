"""
Student self-service endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from taskportal.core.database import get_db
from taskportal.models.user import User
from taskportal.modules.auth.dependencies import get_current_student
from taskportal.schemas.auth import UserResponse
from taskportal.schemas.student import UpdateProfile
from taskportal.schemas.task import TaskResponse
from taskportal.services.identity_store import IdentityStore
from taskportal.services.reporting import ReportingService

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_student: User = Depends(get_current_student)):
    return current_student


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    data: UpdateProfile,
    current_student: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(current_student, field, value)
    return await IdentityStore(db).save(current_student)


@router.get("/dashboard")
async def get_dashboard(
    current_student: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Upcoming tasks, counts per status and grading metrics"""
    dashboard = await ReportingService(db).student_dashboard(current_student)
    dashboard["tasks"] = [TaskResponse.model_validate(task) for task in dashboard["tasks"]]
    return dashboard


@router.get("/performance", response_model=List[dict])
async def get_performance(
    current_student: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """One row per reviewed task"""
    return await ReportingService(db).student_performance(current_student)
