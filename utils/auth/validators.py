"""
Field rules for account and settings input.

Each ``validate_*`` function returns a list of human readable messages, one
per failed rule, and an empty list when the input is acceptable. Callers
raise ValidationError with the whole list.
"""

import re
from typing import Any, List, Optional

from email_validator import EmailNotValidError, validate_email

USERNAME_RE = re.compile(r"[a-zA-Z0-9_]+")
USERNAME_MIN = 3
USERNAME_MAX = 30

PASSWORD_MIN = 8
# lower, upper, digit and one of @$!%*?& somewhere; first character from that alphabet
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")

ROLES = ("admin", "user")


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def is_valid_email(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def check_username(username: Any, required: bool = True) -> List[str]:
    if _missing(username):
        return ["Username is required"] if required else []
    if not isinstance(username, str):
        return ["Username must be a string"]
    errors = []
    if len(username) < USERNAME_MIN:
        errors.append("Username must be at least 3 characters long")
    if len(username) > USERNAME_MAX:
        errors.append("Username cannot exceed 30 characters")
    if not USERNAME_RE.fullmatch(username):
        errors.append("Username can only contain letters, numbers, and underscores")
    return errors


def check_email(email: Any, required: bool = True) -> List[str]:
    if _missing(email):
        return ["Email is required"] if required else []
    if not is_valid_email(email):
        return ["Please provide a valid email address"]
    return []


def check_new_password(password: Any, label: str = "Password") -> List[str]:
    if _missing(password):
        return [f"{label} is required"]
    if not isinstance(password, str):
        return [f"{label} must be a string"]
    errors = []
    if len(password) < PASSWORD_MIN:
        errors.append(f"{label} must be at least 8 characters long")
    if not PASSWORD_RE.match(password):
        errors.append(
            f"{label} must contain at least one uppercase letter, one lowercase letter, "
            "one number, and one special character"
        )
    return errors


def check_confirmation(password: Any, confirm_password: Any, prompt: str = "Please confirm your password") -> List[str]:
    if _missing(confirm_password):
        return [prompt]
    if confirm_password != password:
        return ["Passwords do not match"]
    return []


def check_role(role: Optional[str]) -> List[str]:
    if role is None:
        return []
    if role not in ROLES:
        return [f"Role must be one of: {', '.join(ROLES)}"]
    return []


def validate_signup(username: Any, email: Any, password: Any, confirm_password: Any) -> List[str]:
    return (
        check_username(username)
        + check_email(email)
        + check_new_password(password)
        + check_confirmation(password, confirm_password)
    )


def validate_login(email: Any, password: Any) -> List[str]:
    errors = check_email(email)
    if _missing(password):
        errors.append("Password is required")
    elif not isinstance(password, str):
        errors.append("Password must be a string")
    return errors


def validate_forgot_password(email: Any) -> List[str]:
    return check_email(email)


def validate_reset_password(token: Any, password: Any, confirm_password: Any) -> List[str]:
    errors = ["Reset token is required"] if _missing(token) else []
    return errors + check_new_password(password) + check_confirmation(password, confirm_password)


def validate_change_password(current_password: Any, new_password: Any, confirm_password: Any) -> List[str]:
    errors = ["Current password is required"] if _missing(current_password) else []
    return (
        errors
        + check_new_password(new_password, label="New password")
        + check_confirmation(new_password, confirm_password, prompt="Please confirm your new password")
    )


def validate_notification_emails(emails: Any) -> List[str]:
    if not isinstance(emails, list) or not emails:
        return ["At least one notification email is required"]
    errors = []
    for index, email in enumerate(emails):
        if not is_valid_email(email):
            errors.append(f"emails[{index}] must be a valid email address")
    return errors
