"""Authentication flows: login, password setup/change, signup and reset."""

import logging
from abc import ABC, abstractmethod
from datetime import timedelta

from fastapi import BackgroundTasks, Request, Response
from sqlalchemy.orm import Session

from spiritlove.config import Settings, settings
from spiritlove.models import User
from spiritlove.services.email_service import EmailService
from spiritlove.services.repositories import DuplicateError, UserRepository
from spiritlove.services.security_audit_service import SecurityAuditService, SecurityEventType
from spiritlove.utils.datetime_utils import as_utc, utcnow

from .exceptions import (
    AuthenticationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from .password_hasher import PasswordHasher
from .reset_token_service import ResetTokenService
from .session_manager import SessionData, SessionManager

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_RESET_TOKEN = "Invalid or expired reset token"
ACCOUNT_EXISTS = "An account with that name or email already exists"
PASSWORD_ALREADY_SET = "Password already set. Use change password instead."


class AuthFlowController(ABC):
    """Operations every authentication strategy exposes to the routers.

    One strategy is bound per deployment (``settings.auth_strategy``).
    Implementations raise ``AuthFlowError`` subclasses on failure.
    """

    @abstractmethod
    def login(self, request: Request, response: Response, name: str, password: str) -> User: ...

    @abstractmethod
    def logout(self, request: Request, response: Response) -> None: ...

    @abstractmethod
    def current_user(self, request: Request) -> tuple[User, SessionData]: ...

    @abstractmethod
    def setup_password(
        self, request: Request, response: Response, user_id: str, password: str
    ) -> User: ...

    @abstractmethod
    def change_password(
        self,
        request: Request,
        response: Response,
        current_password: str,
        new_password: str,
        background_tasks: BackgroundTasks | None = None,
    ) -> User: ...

    @abstractmethod
    def check_setup(self, name: str) -> User: ...

    @abstractmethod
    def signup(
        self, request: Request, response: Response, name: str, email: str, password: str
    ) -> User: ...

    @abstractmethod
    def request_password_reset(
        self, request: Request, email: str, background_tasks: BackgroundTasks | None = None
    ) -> None: ...

    @abstractmethod
    def validate_password_reset(self, token: str) -> User: ...

    @abstractmethod
    def complete_password_reset(
        self,
        request: Request,
        response: Response,
        token: str,
        new_password: str,
        background_tasks: BackgroundTasks | None = None,
    ) -> User: ...


def _send_email(background_tasks: BackgroundTasks | None, send, *args) -> None:
    """Queue an email after the response when possible, otherwise send it now."""
    if background_tasks is not None:
        background_tasks.add_task(send, *args)
    else:
        send(*args)


def _hash_password(password: str) -> str:
    try:
        return PasswordHasher.hash_password(password)
    except ValueError as e:
        logger.error(f"Password hashing failed: {e}")
        raise InternalError() from e


class LocalPasswordAuthFlow(AuthFlowController):
    """Name/email + password authentication with server-side sessions.

    Account credential status per login attempt:

    - no password set: only ``setup_password`` works; login fails closed
    - password set: ``login`` and ``change_password`` work, ``setup_password``
      is rejected

    The reset flow works in either state and always ends with a password set
    and a fresh session. Each method commits its own transaction.
    """

    def __init__(
        self,
        db: Session,
        users: UserRepository,
        sessions: SessionManager,
        reset_tokens: ResetTokenService,
        config: Settings = settings,
    ) -> None:
        self._db = db
        self._users = users
        self._sessions = sessions
        self._reset_tokens = reset_tokens
        self._config = config

    def login(self, request: Request, response: Response, name: str, password: str) -> User:
        user = self._users.find_by_login(name)
        if user is None or user.password_hash is None:
            # Same bcrypt cost as a real check so timing does not reveal the account
            PasswordHasher.verify_password(password, PasswordHasher.get_dummy_hash())
            self._fail_login(request, user, "no_account_or_password")

        if not PasswordHasher.verify_password(password, user.password_hash):
            self._fail_login(request, user, "invalid_password")

        self._sessions.regenerate(request, response, user)
        SecurityAuditService.log_event(
            self._db, SecurityEventType.LOGIN_SUCCESS, user_id=user.id, request=request
        )
        self._db.commit()

        logger.info(f"User logged in: {user.name}")
        return user

    def _fail_login(self, request: Request, user: User | None, reason: str) -> None:
        SecurityAuditService.log_event(
            self._db,
            SecurityEventType.LOGIN_FAILED,
            user_id=user.id if user else None,
            request=request,
            details={"reason": reason},
        )
        self._db.commit()
        raise AuthenticationError(INVALID_CREDENTIALS)

    def logout(self, request: Request, response: Response) -> None:
        session = self._sessions.load(request)
        self._sessions.destroy(request, response)
        if session is not None:
            SecurityAuditService.log_event(
                self._db, SecurityEventType.LOGOUT, user_id=session.user_id, request=request
            )
        self._db.commit()

    def current_user(self, request: Request) -> tuple[User, SessionData]:
        session = self._sessions.load(request)
        if session is None:
            raise AuthenticationError("Not authenticated")
        user = self._users.find_by_id(session.user_id)
        if user is None:
            raise AuthenticationError("Not authenticated")
        return user, session

    def setup_password(
        self, request: Request, response: Response, user_id: str, password: str
    ) -> User:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if user.password_hash is not None:
            self._reject_setup(request, user)

        password_hash = _hash_password(password)
        # Two setup calls can race past the check above; the conditional
        # update lets only one of them through.
        if not self._users.set_password_if_unset(user.id, password_hash):
            self._reject_setup(request, user)

        self._sessions.regenerate(request, response, user)
        SecurityAuditService.log_event(
            self._db, SecurityEventType.PASSWORD_SETUP, user_id=user.id, request=request
        )
        self._db.commit()

        logger.info(f"Password set up for user: {user.name}")
        return user

    def _reject_setup(self, request: Request, user: User) -> None:
        SecurityAuditService.log_event(
            self._db, SecurityEventType.PASSWORD_SETUP_REJECTED, user_id=user.id, request=request
        )
        self._db.commit()
        raise ConflictError(PASSWORD_ALREADY_SET)

    def change_password(
        self,
        request: Request,
        response: Response,
        current_password: str,
        new_password: str,
        background_tasks: BackgroundTasks | None = None,
    ) -> User:
        user, session = self.current_user(request)

        max_age = timedelta(minutes=self._config.reauth_max_age_minutes)
        if utcnow() - as_utc(session.authenticated_at) > max_age:
            raise AuthenticationError("Please log in again to change your password")

        if not PasswordHasher.verify_password(current_password, user.password_hash):
            SecurityAuditService.log_event(
                self._db, SecurityEventType.PASSWORD_CHANGE_FAILED, user_id=user.id, request=request
            )
            self._db.commit()
            raise AuthenticationError("Current password is incorrect")

        self._users.set_password(user, _hash_password(new_password))

        # Keep this browser logged in on a new id; every other session ends
        new_session = self._sessions.regenerate(request, response, user)
        self._sessions.destroy_other_sessions(user.id, keep_sid=new_session.sid)

        SecurityAuditService.log_event(
            self._db, SecurityEventType.PASSWORD_CHANGED, user_id=user.id, request=request
        )
        self._db.commit()

        if user.email:
            _send_email(
                background_tasks,
                EmailService.send_password_changed_notification,
                user.email,
                user.name,
            )

        logger.info(f"Password changed for user: {user.name}")
        return user

    def check_setup(self, name: str) -> User:
        user = self._users.find_by_name(name)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def signup(
        self, request: Request, response: Response, name: str, email: str, password: str
    ) -> User:
        if self._users.find_by_name(name) or self._users.find_by_email(email):
            raise ConflictError(ACCOUNT_EXISTS)

        password_hash = _hash_password(password)
        try:
            user = self._users.create(name=name, email=email, password_hash=password_hash)
        except DuplicateError as e:
            # Lost a race with a concurrent signup after the check above
            raise ConflictError(ACCOUNT_EXISTS) from e

        self._sessions.regenerate(request, response, user)
        SecurityAuditService.log_event(
            self._db, SecurityEventType.SIGNUP, user_id=user.id, request=request
        )
        self._db.commit()

        logger.info(f"User signed up: {user.name}")
        return user

    def request_password_reset(
        self, request: Request, email: str, background_tasks: BackgroundTasks | None = None
    ) -> None:
        issued = self._reset_tokens.request(email)
        if issued is None:
            return

        user, raw_token = issued
        SecurityAuditService.log_event(
            self._db, SecurityEventType.PASSWORD_RESET_REQUESTED, user_id=user.id, request=request
        )
        self._db.commit()

        _send_email(
            background_tasks,
            EmailService.send_password_reset_email,
            user.email,
            user.name,
            raw_token,
        )

    def validate_password_reset(self, token: str) -> User:
        user = self._reset_tokens.validate(token)
        if user is None:
            raise ValidationError(INVALID_RESET_TOKEN)
        return user

    def complete_password_reset(
        self,
        request: Request,
        response: Response,
        token: str,
        new_password: str,
        background_tasks: BackgroundTasks | None = None,
    ) -> User:
        try:
            user = self._reset_tokens.complete(token, new_password)
        except ValueError as e:
            logger.error(f"Password hashing failed during reset: {e}")
            raise InternalError() from e
        if user is None:
            SecurityAuditService.log_event(
                self._db, SecurityEventType.PASSWORD_RESET_FAILED, request=request
            )
            self._db.commit()
            raise ValidationError(INVALID_RESET_TOKEN)

        new_session = self._sessions.regenerate(request, response, user)
        self._sessions.destroy_other_sessions(user.id, keep_sid=new_session.sid)

        SecurityAuditService.log_event(
            self._db, SecurityEventType.PASSWORD_RESET_COMPLETED, user_id=user.id, request=request
        )
        self._db.commit()

        if user.email:
            _send_email(
                background_tasks,
                EmailService.send_password_changed_notification,
                user.email,
                user.name,
            )

        logger.info(f"Password reset for user: {user.name}")
        return user
