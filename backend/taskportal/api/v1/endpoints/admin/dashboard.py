"""
Admin Dashboard endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskportal.core.database import get_db
from taskportal.models.user import User
from taskportal.modules.auth.dependencies import get_current_admin
from taskportal.schemas.blog import BlogPostResponse
from taskportal.schemas.task import TaskResponse
from taskportal.services.reporting import ReportingService

router = APIRouter()


@router.get("/dashboard")
async def get_dashboard(
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """User/task/category counts, recent activity and per-student performance"""
    dashboard = await ReportingService(db).admin_dashboard()
    recent = dashboard["recent"]
    recent["tasks"] = [TaskResponse.model_validate(task) for task in recent["tasks"]]
    recent["blogs"] = [BlogPostResponse.model_validate(post) for post in recent["blogs"]]
    return dashboard


@router.get("/stats")
async def get_system_stats(
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Row counts across users, tasks, blog posts and messages"""
    return await ReportingService(db).system_stats()
