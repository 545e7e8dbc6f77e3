"""
Task endpoints: admin authoring, student lifecycle transitions and the
per-task notification log.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from taskportal.api.v1.deps import get_dispatcher, get_lifecycle
from taskportal.core.database import get_db
from taskportal.models.task import Task, TaskStatus, TaskPriority
from taskportal.models.user import User
from taskportal.modules.auth.dependencies import get_current_user, get_current_admin, get_current_student
from taskportal.schemas.common import MessageResponse
from taskportal.schemas.message import ReadResult
from taskportal.schemas.task import (
    CreateTask,
    UpdateTaskDetails,
    RescheduleTask,
    ReassignTask,
    SubmitTask,
    ReviewTask,
    TaskResponse,
    TaskNotification,
    TaskStatsResponse,
)
from taskportal.services.presence import NotificationDispatcher, EventType
from taskportal.services.reporting import ReportingService
from taskportal.services.task_lifecycle import TaskLifecycle, ensure_can_view
from taskportal.services.task_store import TaskStore, TaskFilter, TaskSort
from taskportal.utils.pagination import PaginationParams, pagination_params, create_paginated_response

router = APIRouter()


def _event_payload(task: Task, actor: User) -> dict:
    return {
        "task": TaskResponse.model_validate(task),
        "actor": {"id": actor.id, "name": actor.name},
    }


# ============================================
# Admin
# ============================================

@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    command: CreateTask,
    current_admin: User = Depends(get_current_admin),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Create a task for one or more active students"""
    task = await lifecycle.create_task(command, current_admin)
    await dispatcher.dispatch_many(task.assignee_ids, EventType.TASK_ASSIGNED, _event_payload(task, current_admin))
    return task


@router.get("/admin/all")
async def list_all_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = None,
    category: Optional[str] = None,
    assignee_id: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    pagination: PaginationParams = Depends(pagination_params),
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """All tasks with filtering, sorting, and pagination"""
    tasks, total = await TaskStore(db).query(
        TaskFilter(
            status=status_filter,
            priority=priority,
            category=category,
            assignee_id=assignee_id,
            search=search,
        ),
        TaskSort(field=sort_by, descending=sort_order == "desc"),
        offset=pagination.offset,
        limit=pagination.limit,
    )
    return create_paginated_response(
        [TaskResponse.model_validate(task) for task in tasks],
        total,
        pagination.page,
        pagination.page_size,
    )


@router.get("/admin/stats", response_model=TaskStatsResponse)
async def task_stats(
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ReportingService(db).task_stats()


# ============================================
# Student / shared reads
# ============================================

@router.get("/student", response_model=List[TaskResponse])
async def list_my_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    current_student: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """The signed-in student's tasks, soonest deadline first"""
    return await TaskStore(db).list_for_assignee(current_student.id, status_filter)


@router.get("/notifications", response_model=List[TaskNotification])
async def unread_notifications(
    current_user: User = Depends(get_current_user),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    """Unread task log entries addressed to the caller, newest first"""
    return await lifecycle.unread_notifications(current_user)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = await TaskStore(db).load(task_id)
    ensure_can_view(task, current_user)
    return task


@router.patch("/{task_id}/details", response_model=TaskResponse)
async def update_task_details(
    task_id: str,
    command: UpdateTaskDetails,
    current_admin: User = Depends(get_current_admin),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.update_details(task_id, command, current_admin)


@router.patch("/{task_id}/deadline", response_model=TaskResponse)
async def reschedule_task(
    task_id: str,
    command: RescheduleTask,
    current_admin: User = Depends(get_current_admin),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.reschedule(task_id, command, current_admin)


@router.patch("/{task_id}/assignees", response_model=TaskResponse)
async def reassign_task(
    task_id: str,
    command: ReassignTask,
    current_admin: User = Depends(get_current_admin),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    task = await lifecycle.reassign(task_id, command, current_admin)
    await dispatcher.dispatch_many(task.assignee_ids, EventType.TASK_ASSIGNED, _event_payload(task, current_admin))
    return task


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    current_admin: User = Depends(get_current_admin),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    await lifecycle.delete_task(task_id, current_admin)
    return {"message": "Task deleted successfully"}


# ============================================
# Lifecycle transitions
# ============================================

@router.post("/{task_id}/start", response_model=TaskResponse)
async def start_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.start(task_id, current_user)


@router.post("/{task_id}/submit", response_model=TaskResponse)
async def submit_task(
    task_id: str,
    data: SubmitTask,
    current_user: User = Depends(get_current_user),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    task = await lifecycle.submit(task_id, current_user, data.submission_link)
    await dispatcher.dispatch(task.created_by, EventType.TASK_SUBMITTED, _event_payload(task, current_user))
    return task


@router.post("/{task_id}/complete", response_model=TaskResponse)
async def complete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    task = await lifecycle.complete(task_id, current_user)
    await dispatcher.dispatch(task.created_by, EventType.TASK_COMPLETED, _event_payload(task, current_user))
    return task


@router.post("/{task_id}/review", response_model=TaskResponse)
async def review_task(
    task_id: str,
    data: ReviewTask,
    current_user: User = Depends(get_current_user),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Grade a task; non-admins get 403 from the lifecycle engine"""
    task = await lifecycle.review(task_id, current_user, data.status, data.feedback, data.score)
    await dispatcher.dispatch_many(task.assignee_ids, EventType.TASK_REVIEWED, _event_payload(task, current_user))
    return task


@router.post("/{task_id}/notifications/read", response_model=ReadResult)
async def mark_task_notifications_read(
    task_id: str,
    current_user: User = Depends(get_current_user),
    lifecycle: TaskLifecycle = Depends(get_lifecycle),
):
    return {"updated": await lifecycle.mark_notifications_read(task_id, current_user)}
