"""
User Database Operations

Lookups and writes for account records. Callers own the transaction and
commit once the whole operation has succeeded.
"""

from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models.user import User, UserRole
from utils.auth.password import hash_password
from utils.errors import ConflictError
from utils.monitoring import get_logger

logger = get_logger(__name__)


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[User]:
    """
    Get user by primary key.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User or None if not found
    """
    return await session.get(User, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    """Get user by exact email match."""
    result = await session.execute(select(User).where(User.email == email))
    return result.scalars().first()


async def find_conflicting_user(
    session: AsyncSession,
    email: Optional[str] = None,
    username: Optional[str] = None,
    exclude_id: Optional[int] = None,
) -> Optional[User]:
    """
    Find another user holding the given email or username.

    Args:
        session: Database session
        email: Email to check (skipped if None)
        username: Username to check (skipped if None)
        exclude_id: Ignore this user (the one being updated)

    Returns:
        The first conflicting user, or None
    """
    conditions = []
    if email is not None:
        conditions.append(User.email == email)
    if username is not None:
        conditions.append(User.username == username)
    if not conditions:
        return None

    query = select(User).where(or_(*conditions))
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    result = await session.execute(query)
    return result.scalars().first()


async def create_user(
    session: AsyncSession,
    username: str,
    email: str,
    password: str,
    role: str = UserRole.USER,
) -> User:
    """
    Add a new user to the session and flush it to obtain an id.

    The password is hashed on the thread pool before the record is built.

    Raises:
        ConflictError: The email or username was taken by a concurrent write
    """
    user = User(
        username=username,
        email=email,
        password_hash=await hash_password(password),
        role=role,
        is_active=True,
    )
    session.add(user)
    await flush_or_conflict(session)
    await session.refresh(user)
    logger.info("✅ User created", user_id=user.id, username=username)
    return user


async def flush_or_conflict(session: AsyncSession) -> None:
    """
    Flush pending user changes, turning a unique index violation into ConflictError.

    Rows inserted by a concurrent request after the conflict check are only
    caught here.
    """
    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        logger.warning("⚠️  User write rejected by unique index", error_type=type(e).__name__)
        raise ConflictError() from e


async def list_users(session: AsyncSession) -> List[User]:
    """All users, newest first."""
    result = await session.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def delete_user(session: AsyncSession, user: User) -> None:
    await session.delete(user)
    await session.flush()
    logger.info("🗑️  User deleted", user_id=user.id)
