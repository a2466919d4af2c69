"""Authentication and credential lifecycle services.

Password hashing, reset tokens, server-side sessions and the flows that
combine them.
"""

from .auth_flow import AuthFlowController, LocalPasswordAuthFlow
from .password_hasher import PasswordHasher
from .reset_token_service import ResetTokenService
from .session_manager import SessionData, SessionManager

__all__ = [
    "AuthFlowController",
    "LocalPasswordAuthFlow",
    "PasswordHasher",
    "ResetTokenService",
    "SessionData",
    "SessionManager",
]
