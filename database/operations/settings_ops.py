"""
Settings Database Operations

Key/value rows in the settings table plus the encrypted notification email
list stored under ``notification_emails``.
"""

import json
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models.setting import Setting
from utils.auth.validators import validate_notification_emails
from utils.errors import InternalError, ValidationError
from utils.monitoring import get_logger
from utils.security.crypto import SettingsCipher, SettingsCipherError

logger = get_logger(__name__)

NOTIFICATION_EMAILS_KEY = "notification_emails"


async def get_setting(session: AsyncSession, key: str) -> Optional[Setting]:
    result = await session.execute(select(Setting).where(Setting.key == key))
    return result.scalars().first()


async def upsert_setting(session: AsyncSession, key: str, value: str) -> Setting:
    """Insert the key or overwrite its value."""
    setting = await get_setting(session, key)
    if setting is None:
        setting = Setting(key=key, value=value)
        session.add(setting)
    else:
        setting.value = value
    await session.flush()
    return setting


async def get_notification_emails(session: AsyncSession, cipher: SettingsCipher) -> List[str]:
    """
    Decrypted notification recipients.

    Returns an empty list when nothing is stored or the stored value cannot
    be decrypted or parsed.
    """
    setting = await get_setting(session, NOTIFICATION_EMAILS_KEY)
    if setting is None or not setting.value:
        return []

    try:
        emails = json.loads(cipher.decrypt(setting.value))
    except (SettingsCipherError, ValueError) as e:
        logger.error("❌ Failed to decrypt or parse notification emails", error=e)
        return []

    if not isinstance(emails, list):
        logger.error("❌ Stored notification emails are not a list")
        return []
    return [email for email in emails if isinstance(email, str)]


async def save_notification_emails(session: AsyncSession, cipher: SettingsCipher, emails) -> List[str]:
    """
    Validate, encrypt and store the notification recipients.

    Raises:
        ValidationError: Empty list or an invalid address
        InternalError: No settings key is configured
    """
    errors = validate_notification_emails(emails)
    if errors:
        raise ValidationError(errors)

    if not cipher.enabled:
        logger.error("❌ SETTINGS_ENCRYPT_KEY is not configured; cannot store notification emails")
        raise InternalError()

    await upsert_setting(session, NOTIFICATION_EMAILS_KEY, cipher.encrypt(json.dumps(emails)))
    await session.commit()
    logger.info("⚙️  Notification emails updated", count=len(emails))
    return list(emails)
