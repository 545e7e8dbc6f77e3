from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskportal.core.database import get_db
from taskportal.core.exceptions import AuthenticationError
from taskportal.core.security import verify_password, create_access_token
from taskportal.core.logging_config import logger, set_user_id
from taskportal.models.user import User, UserRole
from taskportal.schemas.auth import (
    StudentRegister,
    AdminLogin,
    StudentLogin,
    ChangePassword,
    LoginResponse,
    UserResponse,
)
from taskportal.schemas.common import MessageResponse
from taskportal.modules.auth.dependencies import get_current_user
from taskportal.services.identity_store import IdentityStore

router = APIRouter()


async def _issue_token(user: User, identities: IdentityStore, client_ip: str) -> dict:
    user = await identities.record_login(user)
    set_user_id(user.id)

    access_token = create_access_token({
        "sub": user.id,
        "email": user.email,
        "role": user.role.value,
    })

    logger.log_auth_event(
        event="login",
        success=True,
        identifier=user.email,
        client_ip=client_ip,
        user_role=user.role.value
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user,
    }


def _check_login(user: User, password: str, expected_role: UserRole, identifier: str, client_ip: str) -> None:
    if not user or user.role != expected_role or not verify_password(password, user.hashed_password):
        logger.log_auth_event(
            event="login",
            success=False,
            identifier=identifier,
            reason="Invalid credentials",
            client_ip=client_ip
        )
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        logger.log_auth_event(
            event="login",
            success=False,
            identifier=identifier,
            reason="Account inactive",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )


@router.post("/student/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register_student(
    request: Request,
    data: StudentRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a student account and sign it in"""
    identities = IdentityStore(db)
    user = await identities.create_student(
        name=data.name,
        email=data.email,
        password=data.password,
        category=data.category,
        student_number=data.student_number,
    )
    logger.log_auth_event(event="register", success=True, identifier=user.student_number)

    client_ip = request.client.host if request.client else "unknown"
    return await _issue_token(user, identities, client_ip)


@router.post("/admin/login", response_model=LoginResponse)
async def admin_login(
    request: Request,
    credentials: AdminLogin,
    db: AsyncSession = Depends(get_db)
):
    """Admins sign in by email"""
    client_ip = request.client.host if request.client else "unknown"
    identities = IdentityStore(db)

    user = await identities.find_by_email_or_student_number(credentials.email)
    _check_login(user, credentials.password, UserRole.ADMIN, credentials.email, client_ip)
    return await _issue_token(user, identities, client_ip)


@router.post("/student/login", response_model=LoginResponse)
async def student_login(
    request: Request,
    credentials: StudentLogin,
    db: AsyncSession = Depends(get_db)
):
    """Students sign in by student number"""
    client_ip = request.client.host if request.client else "unknown"
    identities = IdentityStore(db)

    user = await identities.find_by_email_or_student_number(credentials.student_number)
    _check_login(user, credentials.password, UserRole.STUDENT, credentials.student_number, client_ip)
    return await _issue_token(user, identities, client_ip)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    data: ChangePassword,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    if not verify_password(data.current_password, current_user.hashed_password):
        logger.log_auth_event(
            event="change_password",
            success=False,
            identifier=current_user.email,
            reason="Wrong current password"
        )
        raise AuthenticationError("Current password is incorrect")

    await IdentityStore(db).set_password(current_user, data.new_password)
    logger.log_auth_event(event="change_password", success=True, identifier=current_user.email)
    return {"message": "Password updated successfully"}
