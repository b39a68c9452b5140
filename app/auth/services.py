import logging
from typing import Optional

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.schemas import AuthResponse, LoginRequest, RegisterRequest, UserInfo
from app.auth.security import access_token_for, hash_password, verify_password
from app.core.exceptions import ConflictError, ServiceError

logger = logging.getLogger(__name__)


def _user_info(user: User) -> UserInfo:
    return UserInfo(
        id=user.id,
        name=user.full_name,
        email=user.email,
        role=user.role,
        created_at=user.created_at,
    )


def _issue_token(user: User) -> AuthResponse:
    access_token = access_token_for(user.id, user.role)
    return AuthResponse(access_token=access_token, user=_user_info(user))


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    stmt = select(User).where(func.lower(User.email) == email.strip().lower())
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, payload: RegisterRequest) -> AuthResponse:
    # 1. Email must be unique (case-insensitive)
    if await get_user_by_email(db, payload.email):
        raise ConflictError("Email is already in use")

    # 2. Create user with hashed password
    user = User(
        full_name=payload.name,
        email=payload.email.lower(),
        password_hash=hash_password(payload.password),
        role=payload.role.value,
        status="ACTIVE",
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("Email is already in use") from e
    await db.refresh(user)
    logger.info("Registered %s user %s", user.role, user.id)

    # 3. Auto-login after registration
    return _issue_token(user)


async def login_user(db: AsyncSession, payload: LoginRequest) -> AuthResponse:
    # 1. Find user by email (case-insensitive)
    user = await get_user_by_email(db, payload.email)
    if not user:
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    # 2. Verify password hash
    if not verify_password(payload.password, user.password_hash):
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    # 3. Check user status
    if user.status != "ACTIVE":
        raise ServiceError("User is inactive", status.HTTP_403_FORBIDDEN)

    return _issue_token(user)
