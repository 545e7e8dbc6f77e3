"""
Database Seed Data Module

``ensure_default_admin`` runs at startup; the sample data is for local
development only.
Run with: python -m taskportal.db.seed_data
"""
import asyncio
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from taskportal.core.config import settings
from taskportal.core.database import AsyncSessionLocal, init_db, utc_now
from taskportal.core.logging_config import logger
from taskportal.models.task import TaskPriority
from taskportal.models.user import User, UserRole, StudentCategory
from taskportal.schemas.task import CreateTask
from taskportal.services.identity_store import IdentityStore
from taskportal.services.task_lifecycle import TaskLifecycle


# ==================== Sample Data Constants ====================

SAMPLE_STUDENTS = [
    {"name": "Aarav Shah", "email": "aarav@students.example.com", "category": StudentCategory.WEB_DEVELOPMENT},
    {"name": "Diya Menon", "email": "diya@students.example.com", "category": StudentCategory.DATA_SCIENCE},
    {"name": "Kabir Rao", "email": "kabir@students.example.com", "category": StudentCategory.MOBILE_DEVELOPMENT},
    {"name": "Isha Kapoor", "email": "isha@students.example.com", "category": StudentCategory.UI_UX_DESIGN},
]

SAMPLE_TASKS = [
    {
        "title": "Build a REST API",
        "description": "Expose CRUD endpoints for a todo list with validation.",
        "category": "Web Development",
        "priority": TaskPriority.HIGH,
        "requirements": ["Use pagination", "Return 404 for missing items"],
        "days": 7,
    },
    {
        "title": "Exploratory data analysis",
        "description": "Summarise the provided dataset and plot three insights.",
        "category": "Data Science",
        "priority": TaskPriority.MEDIUM,
        "requirements": ["Notebook committed", "Charts labelled"],
        "days": 10,
    },
]

SAMPLE_PASSWORD = "student123"


async def ensure_default_admin(db: AsyncSession) -> Optional[User]:
    """Create the configured admin when no account uses its email yet"""
    if not settings.DEFAULT_ADMIN_EMAIL or not settings.DEFAULT_ADMIN_PASSWORD:
        logger.info("[Seed] DEFAULT_ADMIN_EMAIL/PASSWORD not set - skipping default admin")
        return None

    identities = IdentityStore(db)
    existing = await identities.find_by_email_or_student_number(settings.DEFAULT_ADMIN_EMAIL)
    if existing is not None:
        return existing

    admin = await identities.create_admin(
        name=settings.DEFAULT_ADMIN_NAME,
        email=settings.DEFAULT_ADMIN_EMAIL,
        password=settings.DEFAULT_ADMIN_PASSWORD,
    )
    logger.info(f"[Seed] Created default admin {admin.email}")
    return admin


async def seed_students(db: AsyncSession) -> List[User]:
    identities = IdentityStore(db)
    students = []
    for data in SAMPLE_STUDENTS:
        existing = await identities.find_by_email_or_student_number(data["email"])
        if existing is not None:
            students.append(existing)
            continue
        students.append(await identities.create_student(password=SAMPLE_PASSWORD, **data))
    return students


async def seed_tasks(db: AsyncSession, admin: User, students: List[User]) -> None:
    lifecycle = TaskLifecycle.for_session(db)
    for data in SAMPLE_TASKS:
        command = CreateTask(
            title=data["title"],
            description=data["description"],
            category=data["category"],
            priority=data["priority"],
            requirements=data["requirements"],
            deadline=utc_now() + timedelta(days=data["days"]),
            assigned_to=[student.id for student in students if student.category.value == data["category"]]
            or [students[0].id],
        )
        await lifecycle.create_task(command, admin)


async def seed_all():
    """Seed the default admin plus sample students and tasks"""
    logger.info("Starting database seeding...")
    await init_db()

    async with AsyncSessionLocal() as db:
        admin = await ensure_default_admin(db)
        if admin is None or admin.role != UserRole.ADMIN:
            logger.error("Seeding needs DEFAULT_ADMIN_EMAIL and DEFAULT_ADMIN_PASSWORD for an admin account")
            return
        students = await seed_students(db)
        await seed_tasks(db, admin, students)

    logger.info(f"Seeded {len(SAMPLE_STUDENTS)} students and {len(SAMPLE_TASKS)} tasks")


def main():
    asyncio.run(seed_all())


if __name__ == "__main__":
    main()
