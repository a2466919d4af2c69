"""SQLAlchemy ORM models."""

from spiritlove.models.security_audit_log import SecurityAuditLog
from spiritlove.models.session import Session
from spiritlove.models.user import User

__all__ = [
    "SecurityAuditLog",
    "Session",
    "User",
]
