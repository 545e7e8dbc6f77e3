"""
Task Store
Persistence for tasks, their assignee sets and embedded notification logs
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, func, or_

from taskportal.core.exceptions import TaskNotFoundError, ValidationFailure
from taskportal.models.task import Task, TaskStatus, TaskPriority, task_assignees
from taskportal.services.base_store import BaseStore

SORTABLE_FIELDS = {
    "created_at": Task.created_at,
    "deadline": Task.deadline,
    "title": Task.title,
    "priority": Task.priority,
    "status": Task.status,
    "updated_at": Task.updated_at,
}


@dataclass
class TaskFilter:
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    category: Optional[str] = None
    assignee_id: Optional[str] = None
    created_by: Optional[str] = None
    search: Optional[str] = None

    def clauses(self) -> list:
        conditions = []
        if self.status is not None:
            conditions.append(Task.status == self.status)
        if self.priority is not None:
            conditions.append(Task.priority == self.priority)
        if self.category:
            conditions.append(Task.category == self.category)
        if self.created_by:
            conditions.append(Task.created_by == self.created_by)
        if self.assignee_id:
            conditions.append(Task.id.in_(
                select(task_assignees.c.task_id).where(task_assignees.c.user_id == self.assignee_id)
            ))
        if self.search:
            pattern = f"%{self.search.lower()}%"
            conditions.append(or_(
                func.lower(Task.title).like(pattern),
                func.lower(Task.description).like(pattern),
            ))
        return conditions


@dataclass
class TaskSort:
    field: str = "created_at"
    descending: bool = True

    def order_by(self) -> list:
        column = SORTABLE_FIELDS.get(self.field)
        if column is None:
            raise ValidationFailure(
                f"Cannot sort by '{self.field}'; choose one of {sorted(SORTABLE_FIELDS)}",
                field="sort_by",
            )
        primary = column.desc() if self.descending else column.asc()
        return [primary, Task.id.asc()]


class TaskStore(BaseStore):
    """Service for task rows"""

    async def find(self, task_id: str) -> Optional[Task]:
        result = await self._execute(select(Task).where(Task.id == task_id), "load_task")
        return result.scalar_one_or_none()

    async def load(self, task_id: str) -> Task:
        task = await self.find(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def save(self, task: Task) -> Task:
        """Write the whole row, assignee set and notification log in one commit"""
        self.db.add(task)
        await self._commit("save_task")
        return task

    async def delete(self, task: Task) -> None:
        await self.db.delete(task)
        await self._commit("delete_task")

    async def query(
        self,
        task_filter: Optional[TaskFilter] = None,
        sort: Optional[TaskSort] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Task], int]:
        """Matching tasks in sort order plus the unpaginated total"""
        conditions = (task_filter or TaskFilter()).clauses()
        order = (sort or TaskSort()).order_by()

        total = (await self._execute(
            select(func.count(Task.id)).where(*conditions), "count_tasks"
        )).scalar() or 0

        statement = select(Task).where(*conditions).order_by(*order).offset(offset)
        if limit is not None:
            statement = statement.limit(limit)
        result = await self._execute(statement, "query_tasks")
        return list(result.scalars().all()), total

    async def list_for_assignee(self, user_id: str, status: Optional[TaskStatus] = None) -> List[Task]:
        """A student's tasks, soonest deadline first"""
        tasks, _ = await self.query(
            TaskFilter(assignee_id=user_id, status=status),
            TaskSort(field="deadline", descending=False),
        )
        return tasks

    async def count_by_status(self, task_filter: Optional[TaskFilter] = None) -> Dict[str, int]:
        """Every status present with a zero default"""
        conditions = (task_filter or TaskFilter()).clauses()
        result = await self._execute(
            select(Task.status, func.count(Task.id)).where(*conditions).group_by(Task.status),
            "count_by_status",
        )
        counts = {status.value: 0 for status in TaskStatus}
        for status, count in result.all():
            counts[status.value] = count
        return counts

    async def count_by_category(self) -> Dict[str, int]:
        result = await self._execute(
            select(Task.category, func.count(Task.id)).group_by(Task.category).order_by(Task.category),
            "count_by_category",
        )
        return {category: count for category, count in result.all()}
