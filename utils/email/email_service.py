"""
Email Service for sending emails via SMTP.

Supports Gmail, Office365, and other SMTP providers. When email is disabled
the service runs as a console backend and only logs what would be sent.
"""

import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool

from config import Settings
from utils.monitoring import get_logger

logger = get_logger(__name__)


class EmailService:
    """Email service for sending emails."""

    def __init__(self, settings: Settings):
        """Initialize email service with settings."""
        self.enabled = settings.email_enabled
        self.host = settings.email_host
        self.port = settings.email_port
        self.use_tls = settings.email_use_tls
        self.use_ssl = settings.email_use_ssl
        self.username = settings.email_host_user
        self.password = settings.email_host_password
        self.from_address = settings.email_from_address
        self.from_name = settings.email_from_name
        self.frontend_url = settings.frontend_url.rstrip("/")

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> bool:
        """
        Send an email.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML email content
            text_content: Plain text fallback content

        Returns:
            True if email sent successfully, False otherwise
        """
        if not self.enabled:
            logger.info("📧 Email disabled; console backend", to=to_email, subject=subject)
            return True

        if not self.username or not self.password:
            logger.error("❌ Email credentials not configured")
            return False

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = f"{self.from_name} <{self.from_address}>"
        msg['To'] = to_email
        if text_content:
            msg.attach(MIMEText(text_content, 'plain'))
        msg.attach(MIMEText(html_content, 'html'))

        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.host, self.port)
            else:
                server = smtplib.SMTP(self.host, self.port)
            with server:
                if self.use_tls and not self.use_ssl:
                    server.starttls()
                server.login(self.username, self.password)
                server.sendmail(self.from_address, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"❌ Failed to send email to {to_email}", error=e, subject=subject)
            return False

        logger.info(f"✅ Email sent successfully to {to_email}", subject=subject)
        return True

    async def send_email_async(self, *args, **kwargs) -> bool:
        """``send_email`` on the thread pool so SMTP never blocks the event loop."""
        return await run_in_threadpool(self.send_email, *args, **kwargs)

    def reset_url(self, reset_token: str) -> str:
        return f"{self.frontend_url}/reset-password?token={reset_token}"

    async def send_password_reset_email(self, to_email: str, reset_token: str) -> bool:
        """
        Send password reset email with reset link.

        Args:
            to_email: Recipient email address
            reset_token: Signed password reset token

        Returns:
            True if email sent successfully
        """
        reset_url = self.reset_url(reset_token)
        subject = "Password Reset Request"

        html_content = f"""
        <!DOCTYPE html>
        <html>
        <head><meta charset="utf-8"><title>Password Reset</title></head>
        <body>
          <div style="max-width: 600px; margin: 0 auto; padding: 20px; font-family: Arial, sans-serif;">
            <h2>Password Reset Request</h2>
            <p>You have requested to reset your password. Click the link below to proceed:</p>
            <p><a href="{reset_url}" style="background-color: #007bff; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px;">Reset Password</a></p>
            <p>If you didn't request this, please ignore this email.</p>
            <p>This link will expire in 1 hour.</p>
            <hr>
            <p style="font-size: 12px; color: #666;">This is an automated email from {escape(self.from_name)}.</p>
          </div>
        </body>
        </html>
        """

        text_content = (
            "You have requested to reset your password.\n\n"
            f"Open this link to proceed: {reset_url}\n\n"
            "If you didn't request this, please ignore this email.\n"
            "This link will expire in 1 hour.\n"
        )

        if not self.enabled:
            # The link itself is a live credential; only its existence is logged
            logger.info("📧 Password reset link generated", to=to_email)

        return await self.send_email_async(to_email, subject, html_content, text_content)

    async def send_contact_notification(self, recipients: List[str], submission: Dict[str, Any]) -> int:
        """
        Notify each recipient about a new contact submission.

        Returns:
            Number of recipients the notification was delivered to
        """
        if not recipients:
            return 0

        subject = "New Contact Us Submission"
        name = f"{submission['firstName']} {submission['lastName']}"
        phone = submission.get("phone") or "-"

        text_content = (
            "New contact form submission:\n\n"
            f"Name: {name}\n"
            f"Email: {submission['email']}\n"
            f"Phone: {phone}\n"
            f"Message: {submission['message']}\n"
            f"Submitted At: {submission['submittedAt']}\n"
            f"IP Address: {submission['ipAddress']}\n"
        )
        html_content = f"""
        <h2>New Contact Us Submission</h2>
        <p><strong>Name:</strong> {escape(name)}</p>
        <p><strong>Email:</strong> {escape(submission['email'])}</p>
        <p><strong>Phone:</strong> {escape(phone)}</p>
        <p><strong>Message:</strong><br/>{escape(submission['message'])}</p>
        <p><strong>Submitted At:</strong> {escape(str(submission['submittedAt']))}</p>
        <p><strong>IP Address:</strong> {escape(str(submission['ipAddress']))}</p>
        """

        delivered = 0
        for email in recipients:
            if await self.send_email_async(email, subject, html_content, text_content):
                delivered += 1
        return delivered
