"""
Identity Store
Lookup, registration and credential checks for admin and student accounts
"""

import re
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy import select, func, or_

from taskportal.core.exceptions import DuplicateIdentityError, UserNotFoundError
from taskportal.core.security import get_password_hash, verify_password
from taskportal.core.database import utc_now
from taskportal.models.user import User, UserRole, StudentCategory
from taskportal.services.base_store import BaseStore

STUDENT_NUMBER_PATTERN = re.compile(r"^S(\d+)$")


def format_student_number(sequence: int) -> str:
    """S001, S002, ... S999, S1000"""
    return f"S{sequence:03d}"


class IdentityStore(BaseStore):
    """Service for user records"""

    async def find_by_id(self, user_id: str) -> Optional[User]:
        result = await self._execute(select(User).where(User.id == user_id), "find_by_id")
        return result.scalar_one_or_none()

    async def get(self, user_id: str) -> User:
        """Like find_by_id but raises UserNotFoundError"""
        user = await self.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def find_by_email_or_student_number(self, key: str) -> Optional[User]:
        """Emails are matched case-insensitively, student numbers upper-cased"""
        key = key.strip()
        result = await self._execute(
            select(User).where(
                or_(User.email == key.lower(), User.student_number == key.upper())
            ),
            "find_by_email_or_student_number",
        )
        return result.scalars().first()

    async def verify_credential(self, user_id: str, secret: str) -> bool:
        user = await self.find_by_id(user_id)
        if user is None:
            return False
        return verify_password(secret, user.hashed_password)

    async def list_active_students(self, ids: Iterable[str]) -> Set[str]:
        """Subset of ``ids`` that are active students"""
        ids = set(ids)
        if not ids:
            return set()
        result = await self._execute(
            select(User.id).where(
                User.id.in_(ids),
                User.role == UserRole.STUDENT,
                User.is_active == True,  # noqa: E712
            ),
            "list_active_students",
        )
        return set(result.scalars().all())

    async def load_many(self, ids: Iterable[str]) -> List[User]:
        ids = list(ids)
        if not ids:
            return []
        result = await self._execute(select(User).where(User.id.in_(ids)), "load_many")
        return list(result.scalars().all())

    async def find_admin(self) -> Optional[User]:
        """The first active admin; resolves the ``"admin"`` recipient alias"""
        result = await self._execute(
            select(User)
            .where(User.role == UserRole.ADMIN, User.is_active == True)  # noqa: E712
            .order_by(User.created_at)
            .limit(1),
            "find_admin",
        )
        return result.scalar_one_or_none()

    async def next_student_number(self) -> str:
        result = await self._execute(
            select(User.student_number).where(User.student_number.is_not(None)),
            "next_student_number",
        )
        highest = 0
        for number in result.scalars().all():
            match = STUDENT_NUMBER_PATTERN.match(number)
            if match:
                highest = max(highest, int(match.group(1)))
        return format_student_number(highest + 1)

    async def _ensure_unique(self, email: str, student_number: Optional[str] = None) -> None:
        existing = await self._execute(select(User.id).where(User.email == email), "ensure_unique")
        if existing.scalar_one_or_none() is not None:
            raise DuplicateIdentityError("Email already registered", field="email")
        if student_number:
            existing = await self._execute(
                select(User.id).where(User.student_number == student_number), "ensure_unique"
            )
            if existing.scalar_one_or_none() is not None:
                raise DuplicateIdentityError("Student ID already registered", field="student_number")

    async def create_student(
        self,
        name: str,
        email: str,
        password: str,
        category: StudentCategory,
        student_number: Optional[str] = None,
    ) -> User:
        """Register a student; a student number is generated when none is given"""
        email = email.lower()
        student_number = student_number.upper() if student_number else await self.next_student_number()
        await self._ensure_unique(email, student_number)

        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=UserRole.STUDENT,
            student_number=student_number,
            category=category,
        )
        return await self.save(user)

    async def create_admin(self, name: str, email: str, password: str) -> User:
        email = email.lower()
        await self._ensure_unique(email)
        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=UserRole.ADMIN,
        )
        return await self.save(user)

    async def save(self, user: User) -> User:
        self.db.add(user)
        await self._commit("save_user")
        return user

    async def record_login(self, user: User) -> User:
        user.last_login = utc_now()
        return await self.save(user)

    async def set_password(self, user: User, new_password: str) -> User:
        user.hashed_password = get_password_hash(new_password)
        return await self.save(user)

    async def list_students(
        self,
        category: Optional[StudentCategory] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[User], int]:
        """Students ordered by name, with the unpaginated total"""
        conditions = [User.role == UserRole.STUDENT]
        if category is not None:
            conditions.append(User.category == category)
        if is_active is not None:
            conditions.append(User.is_active == is_active)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(User.name).like(pattern),
                func.lower(User.email).like(pattern),
                func.lower(User.student_number).like(pattern),
            ))

        total = (await self._execute(
            select(func.count(User.id)).where(*conditions), "count_students"
        )).scalar() or 0
        result = await self._execute(
            select(User).where(*conditions).order_by(User.name).offset(offset).limit(limit),
            "list_students",
        )
        return list(result.scalars().all()), total
