"""
Database Operations Package

High-level database operations organized by domain:
- user_ops: Account lookups and writes
- settings_ops: Key/value settings rows
- contact_ops: Contact form submissions
"""

from .user_ops import (
    get_user_by_id,
    get_user_by_email,
    find_conflicting_user,
    create_user,
    flush_or_conflict,
    list_users,
    delete_user,
)
from .settings_ops import (
    get_setting,
    upsert_setting,
    get_notification_emails,
    save_notification_emails,
)
from .contact_ops import create_submission, get_submission, list_submissions

__all__ = [
    'get_user_by_id',
    'get_user_by_email',
    'find_conflicting_user',
    'create_user',
    'flush_or_conflict',
    'list_users',
    'delete_user',
    'get_setting',
    'upsert_setting',
    'get_notification_emails',
    'save_notification_emails',
    'create_submission',
    'get_submission',
    'list_submissions',
]
