"""
Unit Tests for Grading Metrics and Dashboards
"""
import pytest
from datetime import datetime, timedelta

from taskportal.models.task import Task, TaskStatus
from taskportal.models.user import UserRole
from taskportal.services.reporting import (
    ReportingService,
    average_score,
    is_on_time,
    on_time_rate,
    performance_summary,
)

DEADLINE = datetime(2024, 3, 2, 12, 0)


def graded(score=None, completed_at=None, reviewed_at=None, status=TaskStatus.COMPLETED):
    return Task(
        title="t",
        deadline=DEADLINE,
        status=status,
        score=score,
        completed_at=completed_at,
        reviewed_at=reviewed_at,
    )


class TestMetrics:
    """Tests for the pure metric functions"""

    def test_average_ignores_missing_scores(self):
        assert average_score([80, None, 60]) == 70

    def test_average_of_nothing(self):
        assert average_score([]) is None
        assert average_score([None, None]) is None

    def test_on_time_rate(self):
        tasks = [
            graded(reviewed_at=DEADLINE - timedelta(hours=1)),
            graded(reviewed_at=DEADLINE + timedelta(hours=1)),
        ]
        assert on_time_rate(tasks) == 50.0

    def test_on_time_rate_without_timestamps(self):
        assert on_time_rate([graded()]) is None
        assert on_time_rate([]) is None

    def test_review_time_takes_precedence(self):
        task = graded(
            completed_at=DEADLINE - timedelta(days=1),
            reviewed_at=DEADLINE + timedelta(days=1),
        )
        assert is_on_time(task) is False

    def test_deadline_itself_is_on_time(self):
        assert is_on_time(graded(completed_at=DEADLINE)) is True

    def test_performance_summary_only_counts_completed(self):
        tasks = [
            graded(score=90, reviewed_at=DEADLINE),
            graded(score=10, reviewed_at=DEADLINE, status=TaskStatus.REJECTED),
        ]

        summary = performance_summary(tasks)

        assert summary == {"average_score": 90, "on_time_rate": 100.0, "tasks_completed": 1}


class TestReportingService:
    """Dashboard aggregates against the database"""

    @pytest.mark.asyncio
    async def test_task_stats_buckets(self, db_session, make_task):
        await make_task(deadline_days=-1)
        await make_task(deadline_days=2)
        await make_task(deadline_days=30)
        await make_task(deadline_days=-5, status=TaskStatus.COMPLETED)

        stats = await ReportingService(db_session).task_stats()

        assert stats["total"] == 4
        assert stats["by_status"]["not_started"] == 3
        assert stats["by_status"]["completed"] == 1
        assert stats["overdue"] == 1
        assert stats["upcoming"] == 1

    @pytest.mark.asyncio
    async def test_student_dashboard(self, db_session, student_user, other_student, make_task):
        await make_task(status=TaskStatus.COMPLETED, score=80, reviewed_at=datetime.utcnow())
        await make_task(status=TaskStatus.IN_PROGRESS)
        await make_task(assignees=[other_student])

        dashboard = await ReportingService(db_session).student_dashboard(student_user)

        assert dashboard["stats"]["total_tasks"] == 2
        assert dashboard["stats"]["completed"] == 1
        assert dashboard["stats"]["in_progress"] == 1
        assert dashboard["performance"]["average_score"] == 80
        assert dashboard["performance"]["tasks_completed"] == 1

    @pytest.mark.asyncio
    async def test_student_performance_lists_reviewed(self, db_session, student_user, make_task):
        reviewed = await make_task(status=TaskStatus.REJECTED, score=30, reviewed_at=datetime.utcnow())
        await make_task()

        rows = await ReportingService(db_session).student_performance(student_user)

        assert [row["task_id"] for row in rows] == [reviewed.id]
        assert rows[0]["score"] == 30

    @pytest.mark.asyncio
    async def test_admin_dashboard(self, db_session, admin_user, student_user, make_user, make_task):
        await make_user(UserRole.STUDENT, is_active=False)
        await make_task()

        dashboard = await ReportingService(db_session).admin_dashboard()

        assert dashboard["stats"]["users"]["student"] == {"count": 2, "active": 1}
        assert dashboard["stats"]["users"]["admin"]["count"] == 1
        assert dashboard["stats"]["tasks"]["not_started"] == 1
        assert len(dashboard["recent"]["tasks"]) == 1
        rows = {row["student_id"]: row for row in dashboard["performance"]}
        assert rows[student_user.id]["tasks_assigned"] == 1

    @pytest.mark.asyncio
    async def test_system_stats(self, db_session, admin_user, student_user, make_task):
        await make_task()

        stats = await ReportingService(db_session).system_stats()

        assert stats["users"]["total"] == 2
        assert stats["tasks"] == {"total": 1, "completed": 0}
        assert stats["blogs"]["total"] == 0
        assert stats["messages"]["unread"] == 0
