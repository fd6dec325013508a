"""Contact form submission model."""

from typing import Any, Dict

from sqlalchemy import Column, DateTime, Integer, String, Text

from .base import Base, isoformat, utcnow


class ContactSubmission(Base):
    """A message posted through the public contact form."""

    __tablename__ = "contact_us_submissions"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(30), nullable=True)
    message = Column(Text, nullable=False)
    ip_address = Column(String(64), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "message": self.message,
            "ipAddress": self.ip_address,
            "submittedAt": isoformat(self.submitted_at),
        }
