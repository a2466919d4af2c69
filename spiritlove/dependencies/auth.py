"""Authentication dependencies for routes."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from spiritlove.config import settings
from spiritlove.database import get_db
from spiritlove.models.user import User
from spiritlove.services.auth import (
    AuthFlowController,
    LocalPasswordAuthFlow,
    ResetTokenService,
    SessionManager,
)
from spiritlove.services.repositories import SessionRepository, UserRepository

# Strategy name -> AuthFlowController implementation
AUTH_STRATEGIES: dict[str, type[AuthFlowController]] = {
    "local": LocalPasswordAuthFlow,
}


def get_auth_flow(db: Session = Depends(get_db)) -> AuthFlowController:
    """
    Build the configured authentication strategy for this request.

    Usage:
        @router.post("/login")
        def login(flow: AuthFlowController = Depends(get_auth_flow)):
            ...
    """
    strategy = AUTH_STRATEGIES.get(settings.auth_strategy)
    if strategy is None:
        raise RuntimeError(f"Unknown auth strategy: {settings.auth_strategy}")

    users = UserRepository(db)
    return strategy(
        db=db,
        users=users,
        sessions=SessionManager(SessionRepository(db)),
        reset_tokens=ResetTokenService(users),
    )


def get_current_user(
    request: Request,
    flow: AuthFlowController = Depends(get_auth_flow),
) -> User:
    """
    Get the user bound to the request's session; 401 when there is none.

    Usage:
        @router.get("/protected")
        def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    user, _ = flow.current_user(request)
    return user
