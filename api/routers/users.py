"""User Management Router - admin-only account administration."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import admin_auth, get_db
from api.models import UserCreateRequest, UserUpdateRequest, success
from database.models.user import User, UserRole
from database.operations import user_ops
from utils.auth import validators
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.monitoring import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(admin_auth)])


async def _get_user_or_404(session: AsyncSession, user_id: int) -> User:
    user = await user_ops.get_user_by_id(session, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("")
async def list_users(session: AsyncSession = Depends(get_db)) -> List[dict]:
    """All accounts, without password hashes."""
    return [user.to_dict() for user in await user_ops.list_users(session)]


@router.get("/{user_id}")
async def get_user(user_id: int, session: AsyncSession = Depends(get_db)):
    return (await _get_user_or_404(session, user_id)).to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreateRequest, session: AsyncSession = Depends(get_db)):
    """Create an account with any role."""
    errors = (
        validators.check_username(body.username)
        + validators.check_email(body.email)
        + validators.check_new_password(body.password)
        + validators.check_role(body.role)
    )
    if errors:
        raise ValidationError(errors)

    if await user_ops.find_conflicting_user(session, email=body.email, username=body.username):
        raise ConflictError()

    user = await user_ops.create_user(
        session, body.username, body.email, body.password, role=body.role or UserRole.USER
    )
    await session.commit()
    return user.to_dict()


@router.put("/{user_id}")
async def update_user(user_id: int, body: UserUpdateRequest, session: AsyncSession = Depends(get_db)):
    """Change username, email, role or active flag. Omitted fields are left alone."""
    user = await _get_user_or_404(session, user_id)

    errors = (
        validators.check_username(body.username, required=False)
        + validators.check_email(body.email, required=False)
        + validators.check_role(body.role)
    )
    if errors:
        raise ValidationError(errors)

    email = body.email if body.email and body.email != user.email else None
    username = body.username if body.username and body.username != user.username else None
    if await user_ops.find_conflicting_user(session, email=email, username=username, exclude_id=user.id):
        raise ConflictError()

    if username is not None:
        user.username = username
    if email is not None:
        user.email = email
    if body.role is not None:
        user.role = body.role
    if body.is_active is not None:
        user.is_active = body.is_active

    await user_ops.flush_or_conflict(session)
    await session.commit()
    await session.refresh(user)
    logger.info("✏️  User updated", user_id=user.id)
    return user.to_dict()


@router.delete("/{user_id}")
async def delete_user(user_id: int, session: AsyncSession = Depends(get_db)):
    user = await _get_user_or_404(session, user_id)
    await user_ops.delete_user(session, user)
    await session.commit()
    return success("User deleted successfully")
