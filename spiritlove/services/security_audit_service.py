"""Service for logging security events."""

import logging

from fastapi import Request
from sqlalchemy.orm import Session

from spiritlove.models.security_audit_log import SecurityAuditLog

logger = logging.getLogger(__name__)


class SecurityEventType:
    """Constants for security event types."""

    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    SIGNUP = "signup"
    PASSWORD_SETUP = "password_setup"
    PASSWORD_SETUP_REJECTED = "password_setup_rejected"
    PASSWORD_CHANGED = "password_changed"
    PASSWORD_CHANGE_FAILED = "password_change_failed"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET_COMPLETED = "password_reset_completed"
    PASSWORD_RESET_FAILED = "password_reset_failed"
    PARTNER_CHANGE_REJECTED = "partner_change_rejected"


class SecurityAuditService:
    """Service for recording security audit events."""

    @staticmethod
    def log_event(
        db: Session,
        event_type: str,
        user_id: str | None = None,
        request: Request | None = None,
        details: dict | None = None,
    ) -> None:
        """Add an audit row. The caller commits."""
        ip_address, user_agent = SecurityAuditService.get_request_info(request)
        db.add(
            SecurityAuditLog(
                user_id=user_id,
                event_type=event_type,
                ip_address=ip_address,
                user_agent=user_agent,
                details=details,
            )
        )

        # Also log to application logger for monitoring
        logger.info(f"Security event: {event_type} | user_id={user_id} | ip={ip_address}")

    @staticmethod
    def get_request_info(request: Request | None) -> tuple[str | None, str | None]:
        """Extract IP address and user agent from a request."""
        if request is None:
            return None, None

        ip_address = None
        # Behind a proxy the first X-Forwarded-For entry is the client
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            ip_address = forwarded_for.split(",")[0].strip()[:45]
        elif request.client:
            ip_address = request.client.host

        user_agent = request.headers.get("User-Agent", "")[:500]
        return ip_address, user_agent
