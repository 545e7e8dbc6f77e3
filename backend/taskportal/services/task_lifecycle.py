"""
Task Lifecycle Engine
=====================

Legal transitions of a task and the notification entries they append:

    start     assignee, not_started                      -> in_progress
    submit    assignee, any status except completed      -> submitted   (+ submission entry for the creator)
    complete  assignee, any status except completed      -> completed   (+ completion entry for the creator)
    review    admin, submitted | completed | rejected    -> completed | rejected
                                                            (+ task_review entry per assignee)

The ``apply_*`` functions check every precondition before touching the task,
so a failed transition leaves it unchanged. ``TaskLifecycle`` wraps them with
loading and a single save of the row and its embedded log.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from taskportal.core.database import new_id, utc_now
from taskportal.core.exceptions import (
    ForbiddenError,
    InvalidTransitionError,
    NotAssignedError,
    ValidationFailure,
)
from taskportal.core.logging_config import logger
from taskportal.models.task import Task, TaskStatus, NotificationType
from taskportal.models.user import User
from taskportal.schemas.task import CreateTask, UpdateTaskDetails, RescheduleTask, ReassignTask
from taskportal.services.identity_store import IdentityStore
from taskportal.services.task_store import TaskStore, TaskFilter

SUBMITTABLE_STATES = {
    TaskStatus.NOT_STARTED,
    TaskStatus.IN_PROGRESS,
    TaskStatus.SUBMITTED,
    TaskStatus.REJECTED,
}
REVIEWABLE_STATES = {TaskStatus.SUBMITTED, TaskStatus.COMPLETED, TaskStatus.REJECTED}
REVIEW_OUTCOMES = {TaskStatus.COMPLETED, TaskStatus.REJECTED}


# ============================================
# Notification log
# ============================================

def make_notification(
    notification_type: NotificationType,
    message: str,
    recipient_ids: List[str],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """A JSON-safe log entry; the timestamp is stored as ISO text"""
    return {
        "id": new_id(),
        "type": notification_type.value,
        "message": message,
        "timestamp": (now or utc_now()).isoformat(),
        "read": False,
        "recipient_ids": list(recipient_ids),
    }


def append_notification(task: Task, entry: Dict[str, Any]) -> None:
    # Reassign so the JSON column is flagged dirty
    task.notifications = [*(task.notifications or []), entry]


def unread_entries_for(task: Task, user_id: str) -> List[Dict[str, Any]]:
    return [
        entry for entry in (task.notifications or [])
        if user_id in entry.get("recipient_ids", []) and not entry.get("read")
    ]


def mark_entries_read(task: Task, user_id: str) -> int:
    """Flip ``read`` on entries addressed to ``user_id``; returns how many changed"""
    changed = 0
    entries = []
    for entry in task.notifications or []:
        if user_id in entry.get("recipient_ids", []) and not entry.get("read"):
            entry = {**entry, "read": True}
            changed += 1
        entries.append(entry)
    if changed:
        task.notifications = entries
    return changed


# ============================================
# Transitions
# ============================================

def _require_assignee(task: Task, actor: User) -> None:
    if not task.is_assignee(actor.id):
        raise NotAssignedError(task.id)


def apply_start(task: Task, actor: User, now: Optional[datetime] = None) -> None:
    _require_assignee(task, actor)
    if task.status != TaskStatus.NOT_STARTED:
        raise InvalidTransitionError("task has already been started", current_status=task.status.value)
    task.status = TaskStatus.IN_PROGRESS


def apply_submit(task: Task, actor: User, submission_link: str, now: Optional[datetime] = None) -> None:
    _require_assignee(task, actor)
    if task.status not in SUBMITTABLE_STATES:
        raise InvalidTransitionError("task is not in a submittable state", current_status=task.status.value)
    if not submission_link or not submission_link.strip():
        raise ValidationFailure("Submission link is required", field="submission_link")

    now = now or utc_now()
    task.submission_link = submission_link.strip()
    task.submitted_at = now
    task.status = TaskStatus.SUBMITTED
    append_notification(task, make_notification(
        NotificationType.SUBMISSION,
        f"{actor.name} submitted '{task.title}'",
        [task.created_by],
        now,
    ))


def apply_complete(task: Task, actor: User, now: Optional[datetime] = None) -> None:
    _require_assignee(task, actor)
    if task.status == TaskStatus.COMPLETED:
        raise InvalidTransitionError("task is already completed", current_status=task.status.value)

    now = now or utc_now()
    task.status = TaskStatus.COMPLETED
    task.completed_at = now
    task.completed_by = actor.id
    append_notification(task, make_notification(
        NotificationType.COMPLETION,
        f"{actor.name} marked '{task.title}' as completed",
        [task.created_by],
        now,
    ))


def apply_review(
    task: Task,
    actor: User,
    status: TaskStatus,
    feedback: Optional[str] = None,
    score: Optional[int] = None,
    now: Optional[datetime] = None,
) -> None:
    """Grade the task. Repeating a review overwrites the previous outcome."""
    if not actor.is_admin:
        raise ForbiddenError("Only admins can review tasks")
    if status not in REVIEW_OUTCOMES:
        raise ValidationFailure("Review status must be 'completed' or 'rejected'", field="status")
    if score is not None and not 0 <= score <= 100:
        raise ValidationFailure("Score must be between 0 and 100", field="score")
    if task.status not in REVIEWABLE_STATES:
        raise InvalidTransitionError("task has not been submitted for review", current_status=task.status.value)

    now = now or utc_now()
    task.status = status
    task.feedback = feedback
    task.score = score
    task.reviewed_at = now

    message = f"Your task '{task.title}' has been reviewed: {status.value}"
    if score is not None:
        message += f" (score {score})"
    # One entry per assignee so each student's read flag is their own
    for assignee_id in task.assignee_ids:
        append_notification(task, make_notification(
            NotificationType.TASK_REVIEW, message, [assignee_id], now,
        ))


def ensure_can_view(task: Task, actor: User) -> None:
    if actor.is_admin or task.is_assignee(actor.id):
        return
    raise ForbiddenError("You do not have access to this task")


# ============================================
# Engine
# ============================================

class TaskLifecycle:
    """Loads a task, applies a transition or admin command, saves once"""

    def __init__(self, tasks: TaskStore, identities: IdentityStore):
        self.tasks = tasks
        self.identities = identities

    @classmethod
    def for_session(cls, db: AsyncSession) -> "TaskLifecycle":
        return cls(TaskStore(db), IdentityStore(db))

    async def _transition(self, task_id: str, actor: User, name: str, apply, *args) -> Task:
        task = await self.tasks.load(task_id)
        from_status = task.status
        apply(task, actor, *args)
        task = await self.tasks.save(task)
        logger.log_transition(task.id, name, from_status.value, task.status.value, actor.id)
        return task

    async def start(self, task_id: str, actor: User) -> Task:
        return await self._transition(task_id, actor, "start", apply_start)

    async def submit(self, task_id: str, actor: User, submission_link: str) -> Task:
        return await self._transition(task_id, actor, "submit", apply_submit, submission_link)

    async def complete(self, task_id: str, actor: User) -> Task:
        return await self._transition(task_id, actor, "complete", apply_complete)

    async def review(
        self,
        task_id: str,
        actor: User,
        status: TaskStatus,
        feedback: Optional[str] = None,
        score: Optional[int] = None,
    ) -> Task:
        return await self._transition(task_id, actor, "review", apply_review, status, feedback, score)

    # ---------- admin authoring ----------

    @staticmethod
    def _require_admin(actor: User) -> None:
        if not actor.is_admin:
            raise ForbiddenError("Admin access required")

    async def _resolve_assignees(self, ids: List[str]) -> List[User]:
        active = await self.identities.list_active_students(ids)
        invalid = [user_id for user_id in ids if user_id not in active]
        if invalid:
            raise ValidationFailure(
                f"Unknown or inactive students: {', '.join(invalid)}", field="assigned_to"
            )
        users = {user.id: user for user in await self.identities.load_many(ids)}
        return [users[user_id] for user_id in ids]

    async def create_task(self, command: CreateTask, actor: User) -> Task:
        self._require_admin(actor)
        assignees = await self._resolve_assignees(command.assigned_to)
        task = Task(
            title=command.title,
            description=command.description,
            category=command.category,
            deadline=command.deadline,
            priority=command.priority,
            requirements=list(command.requirements),
            created_by=actor.id,
            creator=actor,
            status=TaskStatus.NOT_STARTED,
            notifications=[],
            assignees=assignees,
        )
        task = await self.tasks.save(task)
        logger.info(f"Task {task.id} created by {actor.id} for {len(assignees)} student(s)")
        return task

    async def update_details(self, task_id: str, command: UpdateTaskDetails, actor: User) -> Task:
        self._require_admin(actor)
        task = await self.tasks.load(task_id)
        for field, value in command.model_dump(exclude_unset=True).items():
            setattr(task, field, value)
        return await self.tasks.save(task)

    async def reschedule(self, task_id: str, command: RescheduleTask, actor: User) -> Task:
        self._require_admin(actor)
        task = await self.tasks.load(task_id)
        task.deadline = command.deadline
        return await self.tasks.save(task)

    async def reassign(self, task_id: str, command: ReassignTask, actor: User) -> Task:
        self._require_admin(actor)
        task = await self.tasks.load(task_id)
        task.assignees = await self._resolve_assignees(command.assigned_to)
        task = await self.tasks.save(task)
        logger.info(f"Task {task.id} reassigned by {actor.id} to {task.assignee_ids}")
        return task

    async def delete_task(self, task_id: str, actor: User) -> None:
        self._require_admin(actor)
        task = await self.tasks.load(task_id)
        await self.tasks.delete(task)
        logger.info(f"Task {task_id} deleted by {actor.id}")

    # ---------- notification log ----------

    async def unread_notifications(self, actor: User) -> List[Dict[str, Any]]:
        """
        Unread entries addressed to ``actor``, newest first.

        Admins see entries on tasks they created; students see entries on
        tasks they are assigned to.
        """
        if actor.is_admin:
            task_filter = TaskFilter(created_by=actor.id)
        else:
            task_filter = TaskFilter(assignee_id=actor.id)
        tasks, _ = await self.tasks.query(task_filter)

        entries = []
        for task in tasks:
            for entry in unread_entries_for(task, actor.id):
                entries.append({**entry, "task_id": task.id, "task_title": task.title})
        entries.sort(key=lambda entry: entry["timestamp"], reverse=True)
        return entries

    async def mark_notifications_read(self, task_id: str, actor: User) -> int:
        task = await self.tasks.load(task_id)
        changed = mark_entries_read(task, actor.id)
        if changed:
            await self.tasks.save(task)
        return changed
