"""Email service using SendGrid."""

import html
import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from spiritlove.config import settings

logger = logging.getLogger(__name__)

APP_NAME = "Spirit Love Play"


class EmailService:
    """Transactional email. Without a SendGrid key the message is logged instead."""

    @staticmethod
    def _send_email(to_email: str, subject: str, html_content: str, text_content: str) -> bool:
        """Send email via SendGrid. Returns True if successful."""
        if not settings.sendgrid_api_key:
            logger.info(
                f"SendGrid API key not configured; email to {to_email} not sent.\n"
                f"Subject: {subject}\n{text_content}"
            )
            return False

        message = Mail(
            from_email=(settings.email_from_address, settings.email_from_name),
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
            plain_text_content=text_content,
        )

        try:
            sg = SendGridAPIClient(settings.sendgrid_api_key)
            response = sg.send(message)
            logger.info(f"Email sent to {to_email}, status: {response.status_code}")
            return response.status_code in (200, 201, 202)
        except Exception:
            logger.exception(f"Failed to send email to {to_email}")
            return False

    @classmethod
    def send_password_reset_email(cls, email: str, name: str, token: str) -> bool:
        """Send the password reset link."""
        reset_url = f"{settings.frontend_url}/reset-password?token={token}"
        expiry = settings.reset_token_expiry_hours
        hours = "1 hour" if expiry == 1 else f"{expiry} hours"
        html_content = f"""
        <h2 style="color: #ec4899;">Password Reset Request</h2>
        <p>Hi {html.escape(name)},</p>
        <p>We received a request to reset your password for {APP_NAME}.
        Click the link below to create a new password:</p>
        <p><a href="{reset_url}">Reset My Password</a></p>
        <p>This link will expire in {hours} for security.</p>
        <p>If you didn't request this reset, you can safely ignore this email.</p>
        <p style="font-size: 12px;">Or copy and paste this link:<br>{reset_url}</p>
        """
        text = (
            f"Password Reset Request - {APP_NAME}\n\n"
            f"Hi {name},\n\n"
            f"We received a request to reset your password for {APP_NAME}.\n\n"
            f"Click the link below to create a new password:\n{reset_url}\n\n"
            f"This link will expire in {hours} for security.\n\n"
            "If you didn't request this reset, you can safely ignore this email."
        )
        return cls._send_email(email, f"Password Reset - {APP_NAME}", html_content, text)

    @classmethod
    def send_password_changed_notification(cls, email: str, name: str) -> bool:
        """Notify the user their password was changed."""
        html_content = f"""
        <h2>Password Changed</h2>
        <p>Hi {html.escape(name)}, your {APP_NAME} password was just changed.</p>
        <p>If you didn't make this change, reset your password right away.</p>
        """
        text = (
            f"Hi {name}, your {APP_NAME} password was just changed.\n\n"
            "If you didn't make this change, reset your password right away."
        )
        return cls._send_email(email, f"Your Password Was Changed - {APP_NAME}", html_content, text)
