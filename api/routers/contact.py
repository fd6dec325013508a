"""
Contact Router

Public contact form submission plus admin listing, filtering and CSV export.
"""

import csv
import io
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import admin_auth, get_db, get_email_service, get_recaptcha, get_settings_cipher
from api.models import ContactRequest
from database.models.base import as_utc, isoformat
from database.operations import contact_ops, settings_ops
from utils.email import EmailService
from utils.errors import NotFoundError
from utils.monitoring import get_logger
from utils.security import RecaptchaVerifier, SettingsCipher

logger = get_logger(__name__)

router = APIRouter(prefix="/api/contact", tags=["contact"])

CSV_HEADER = ["First Name", "Last Name", "Email", "Phone", "Message", "Submitted At", "IP Address"]

_CLIENT_IP_HEADERS = ("X-Forwarded-For", "X-Real-IP", "X-Client-IP")


def _get_client_ip(request: Request) -> str:
    """Extract client IP address from proxy headers, then the socket peer."""
    for header in _CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            return value.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_contact(
    body: ContactRequest,
    request: Request,
    session: AsyncSession = Depends(get_db),
    recaptcha: RecaptchaVerifier = Depends(get_recaptcha),
    cipher: SettingsCipher = Depends(get_settings_cipher),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Store a contact form message after captcha verification and notify the
    configured recipients.
    """
    ip_address = _get_client_ip(request)
    await recaptcha.verify(body.captcha_token, remote_ip=ip_address)

    submission = await contact_ops.create_submission(
        session,
        first_name=body.first_name,
        last_name=body.last_name,
        email=str(body.email),
        phone=body.phone,
        message=body.message,
        ip_address=ip_address,
    )
    await session.commit()
    payload = submission.to_dict()

    recipients = await settings_ops.get_notification_emails(session, cipher)
    if recipients:
        delivered = await email_service.send_contact_notification(recipients, payload)
        if delivered < len(recipients):
            logger.warning(
                "⚠️  Contact notification not delivered to every recipient",
                submission_id=submission.id,
                delivered=delivered,
                recipients=len(recipients),
            )

    return payload


def _submissions_csv(submissions) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for s in submissions:
        writer.writerow([
            s.first_name,
            s.last_name,
            s.email,
            s.phone or "",
            s.message,
            isoformat(s.submitted_at),
            s.ip_address or "",
        ])
    return buffer.getvalue()


@router.get("/submissions", dependencies=[Depends(admin_auth)])
async def list_submissions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=1000),
    email: Optional[str] = Query(None, description="Substring of the sender email"),
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    export_csv: bool = Query(False, alias="exportCsv"),
    session: AsyncSession = Depends(get_db),
):
    """Newest submissions first; ``exportCsv=true`` returns the page as a CSV download."""
    total, submissions = await contact_ops.list_submissions(
        session,
        email=email,
        date_from=as_utc(date_from),
        date_to=as_utc(date_to),
        page=page,
        limit=limit,
    )

    if export_csv:
        return Response(
            content=_submissions_csv(submissions),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="contact_submissions.csv"'},
        )

    return {"total": total, "submissions": [s.to_dict() for s in submissions]}


@router.get("/submissions/{submission_id}", dependencies=[Depends(admin_auth)])
async def get_submission(submission_id: int, session: AsyncSession = Depends(get_db)):
    submission = await contact_ops.get_submission(session, submission_id)
    if submission is None:
        raise NotFoundError("Submission not found")
    return submission.to_dict()
