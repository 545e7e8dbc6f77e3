"""
Admin Profile endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskportal.core.database import get_db
from taskportal.models.user import User
from taskportal.modules.auth.dependencies import get_current_admin
from taskportal.schemas.auth import UserResponse
from taskportal.schemas.student import UpdateAdminProfile
from taskportal.services.identity_store import IdentityStore

router = APIRouter()


@router.get("", response_model=UserResponse)
async def get_profile(current_admin: User = Depends(get_current_admin)):
    return current_admin


@router.patch("", response_model=UserResponse)
async def update_profile(
    data: UpdateAdminProfile,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(current_admin, field, value)
    return await IdentityStore(db).save(current_admin)
