"""User credential model."""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from utils.auth.password import hash_password_sync, is_password_hash

from .base import Base, as_utc, isoformat, utcnow


class UserRole:
    """Allowed values of ``User.role``."""
    ADMIN = "admin"
    USER = "user"

    ALL = (ADMIN, USER)


class User(Base):
    """Account record used for login, password reset and admin management."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # bcrypt hash only; write plaintext through ``User.password``
    password_hash = Column(String(255), nullable=False)

    role = Column(String(20), nullable=False, default=UserRole.USER)
    image = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Outstanding password reset token and its server-side expiry; set and cleared together
    reset_token = Column(Text, nullable=True)
    reset_token_expiry = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __init__(self, password: Optional[str] = None, **kwargs: Any):
        super().__init__(**kwargs)
        if password is not None:
            self.password = password

    @property
    def password(self):
        raise AttributeError("password is write-only")

    @password.setter
    def password(self, plaintext: str) -> None:
        self.password_hash = hash_password_sync(plaintext)

    @validates("password_hash")
    def _validate_password_hash(self, key, value):
        if not is_password_hash(value):
            raise ValueError("password_hash must be a bcrypt hash")
        return value

    @validates("role")
    def _validate_role(self, key, value):
        if value not in UserRole.ALL:
            raise ValueError(f"role must be one of {UserRole.ALL}")
        return value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def set_reset_token(self, token: str, lifetime: timedelta) -> None:
        self.reset_token = token
        self.reset_token_expiry = utcnow() + lifetime

    def clear_reset_token(self) -> None:
        self.reset_token = None
        self.reset_token_expiry = None

    def reset_token_expired(self, now: Optional[datetime] = None) -> bool:
        expiry = as_utc(self.reset_token_expiry)
        if expiry is None:
            return True
        return expiry <= (now or utcnow())

    def to_dict(self) -> Dict[str, Any]:
        """Public representation; never includes the password hash or reset token."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "image": self.image,
            "isActive": self.is_active,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def to_summary(self) -> Dict[str, Any]:
        return {"id": self.id, "username": self.username, "email": self.email, "role": self.role}

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role!r}>"
