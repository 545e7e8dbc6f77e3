"""
Reporting Service
Grading metrics and the admin/student dashboard aggregates
"""

from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from taskportal.core.config import settings
from taskportal.core.database import utc_now
from taskportal.models.blog import BlogPost, BlogStatus
from taskportal.models.message import Message
from taskportal.models.task import Task, TaskStatus, TaskPriority
from taskportal.models.user import User, UserRole
from taskportal.services.base_store import BaseStore
from taskportal.services.task_store import TaskStore, TaskFilter, TaskSort


# ============================================
# Metrics
# ============================================

def average_score(scores: Iterable[Optional[int]]) -> Optional[float]:
    """Mean of the present scores; ungraded entries count neither way"""
    graded = [score for score in scores if score is not None]
    if not graded:
        return None
    return sum(graded) / len(graded)


def is_on_time(task: Task) -> Optional[bool]:
    """None when the task has no completion timestamp"""
    finished = task.completion_timestamp
    if finished is None:
        return None
    return finished <= task.deadline


def on_time_rate(tasks: Iterable[Task]) -> Optional[float]:
    """Percentage of timestamped tasks finished by their deadline"""
    outcomes = [outcome for outcome in (is_on_time(task) for task in tasks) if outcome is not None]
    if not outcomes:
        return None
    return sum(1 for outcome in outcomes if outcome) / len(outcomes) * 100


def performance_summary(tasks: List[Task]) -> Dict[str, Any]:
    completed = [task for task in tasks if task.status == TaskStatus.COMPLETED]
    return {
        "average_score": average_score(task.score for task in completed),
        "on_time_rate": on_time_rate(completed),
        "tasks_completed": len(completed),
    }


# ============================================
# Service
# ============================================

class ReportingService(BaseStore):
    """Read-only aggregates over users, tasks, blogs and messages"""

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.tasks = TaskStore(db)

    async def _count(self, column, *conditions) -> int:
        result = await self._execute(select(func.count(column)).where(*conditions), "count")
        return result.scalar() or 0

    async def task_stats(self, task_filter: Optional[TaskFilter] = None) -> Dict[str, Any]:
        """Totals by status and priority plus overdue/upcoming deadline buckets"""
        tasks, total = await self.tasks.query(task_filter)
        now = utc_now()
        horizon = now + timedelta(days=settings.UPCOMING_DEADLINE_DAYS)

        by_status = {status.value: 0 for status in TaskStatus}
        by_priority = {priority.value: 0 for priority in TaskPriority}
        overdue = upcoming = 0
        for task in tasks:
            by_status[task.status.value] += 1
            by_priority[task.priority.value] += 1
            if task.status == TaskStatus.COMPLETED:
                continue
            if task.deadline < now:
                overdue += 1
            elif task.deadline <= horizon:
                upcoming += 1

        return {
            "total": total,
            "by_status": by_status,
            "by_priority": by_priority,
            "overdue": overdue,
            "upcoming": upcoming,
        }

    async def student_dashboard(self, student: User) -> Dict[str, Any]:
        tasks = await self.tasks.list_for_assignee(student.id)
        counts = {status.value: 0 for status in TaskStatus}
        for task in tasks:
            counts[task.status.value] += 1

        return {
            "tasks": tasks[:settings.DASHBOARD_RECENT_LIMIT],
            "stats": {"total_tasks": len(tasks), **counts},
            "performance": performance_summary(tasks),
        }

    async def student_performance(self, student: User) -> List[Dict[str, Any]]:
        """One row per reviewed task"""
        tasks = await self.tasks.list_for_assignee(student.id)
        return [
            {
                "task_id": task.id,
                "title": task.title,
                "category": task.category,
                "status": task.status.value,
                "score": task.score,
                "feedback": task.feedback,
                "deadline": task.deadline,
                "submitted_at": task.submitted_at,
                "reviewed_at": task.reviewed_at,
                "on_time": is_on_time(task),
            }
            for task in tasks
            if task.reviewed_at is not None
        ]

    async def _user_stats(self) -> Dict[str, Dict[str, int]]:
        result = await self._execute(
            select(User.role, User.is_active, func.count(User.id)).group_by(User.role, User.is_active),
            "user_stats",
        )
        stats = {role.value: {"count": 0, "active": 0} for role in UserRole}
        for role, is_active, count in result.all():
            stats[role.value]["count"] += count
            if is_active:
                stats[role.value]["active"] += count
        return stats

    async def _students_performance(self) -> List[Dict[str, Any]]:
        students = (await self._execute(
            select(User).where(User.role == UserRole.STUDENT).order_by(User.name),
            "students_performance",
        )).scalars().all()
        tasks, _ = await self.tasks.query()

        by_student: Dict[str, List[Task]] = {student.id: [] for student in students}
        for task in tasks:
            for assignee_id in task.assignee_ids:
                if assignee_id in by_student:
                    by_student[assignee_id].append(task)

        return [
            {
                "student_id": student.id,
                "name": student.name,
                "student_number": student.student_number,
                "category": student.category.value if student.category else None,
                "tasks_assigned": len(by_student[student.id]),
                **performance_summary(by_student[student.id]),
            }
            for student in students
        ]

    async def admin_dashboard(self) -> Dict[str, Any]:
        limit = settings.DASHBOARD_RECENT_LIMIT
        recent_tasks, _ = await self.tasks.query(None, TaskSort(field="created_at"), limit=limit)
        recent_blogs = (await self._execute(
            select(BlogPost).order_by(BlogPost.created_at.desc()).limit(limit), "recent_blogs"
        )).scalars().all()

        return {
            "stats": {
                "users": await self._user_stats(),
                "tasks": await self.tasks.count_by_status(),
                "categories": await self.tasks.count_by_category(),
            },
            "recent": {
                "tasks": recent_tasks,
                "blogs": list(recent_blogs),
            },
            "performance": await self._students_performance(),
        }

    async def system_stats(self) -> Dict[str, Any]:
        return {
            "users": {
                "total": await self._count(User.id),
                "active": await self._count(User.id, User.is_active == True),  # noqa: E712
            },
            "tasks": {
                "total": await self._count(Task.id),
                "completed": await self._count(Task.id, Task.status == TaskStatus.COMPLETED),
            },
            "blogs": {
                "total": await self._count(BlogPost.id),
                "published": await self._count(BlogPost.id, BlogPost.status == BlogStatus.PUBLISHED),
            },
            "messages": {
                "total": await self._count(Message.id),
                "unread": await self._count(Message.id, Message.read == False),  # noqa: E712
            },
        }
