"""Settings Router - encrypted notification email list."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import admin_auth, auth, get_db, get_settings_cipher
from api.models import NotificationEmailsRequest
from database.operations import settings_ops
from utils.security import SettingsCipher

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("/emails", dependencies=[Depends(auth)])
async def get_notification_emails(
    session: AsyncSession = Depends(get_db),
    cipher: SettingsCipher = Depends(get_settings_cipher),
):
    """Addresses notified about new contact submissions."""
    return {"emails": await settings_ops.get_notification_emails(session, cipher)}


@router.post("/emails", dependencies=[Depends(admin_auth)])
async def save_notification_emails(
    body: NotificationEmailsRequest,
    session: AsyncSession = Depends(get_db),
    cipher: SettingsCipher = Depends(get_settings_cipher),
):
    emails = await settings_ops.save_notification_emails(session, cipher, body.emails)
    return {"success": True, "emails": emails}
