"""
Contact Submission Operations

Storage and filtered listing for contact form submissions.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models.contact import ContactSubmission
from utils.monitoring import get_logger

logger = get_logger(__name__)


async def create_submission(
    session: AsyncSession,
    first_name: str,
    last_name: str,
    email: str,
    message: str,
    phone: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> ContactSubmission:
    submission = ContactSubmission(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        message=message,
        ip_address=ip_address,
    )
    session.add(submission)
    await session.flush()
    await session.refresh(submission)
    logger.info("📨 Contact submission stored", submission_id=submission.id)
    return submission


async def get_submission(session: AsyncSession, submission_id: int) -> Optional[ContactSubmission]:
    return await session.get(ContactSubmission, submission_id)


async def list_submissions(
    session: AsyncSession,
    email: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> Tuple[int, List[ContactSubmission]]:
    """
    List submissions newest first.

    Args:
        session: Database session
        email: Case-insensitive substring filter on the email
        date_from: Only submissions at or after this time
        date_to: Only submissions at or before this time
        page: 1-based page number; no paging when page or limit is None
        limit: Page size

    Returns:
        (total matching rows, rows on the requested page)
    """
    conditions = []
    if email:
        conditions.append(ContactSubmission.email.ilike(f"%{email}%"))
    if date_from is not None:
        conditions.append(ContactSubmission.submitted_at >= date_from)
    if date_to is not None:
        conditions.append(ContactSubmission.submitted_at <= date_to)

    count_query = select(func.count(ContactSubmission.id)).where(*conditions)
    total = (await session.execute(count_query)).scalar_one()

    query = (
        select(ContactSubmission)
        .where(*conditions)
        .order_by(ContactSubmission.submitted_at.desc(), ContactSubmission.id.desc())
    )
    if page is not None and limit is not None:
        query = query.offset((page - 1) * limit).limit(limit)

    result = await session.execute(query)
    return total, list(result.scalars().all())
