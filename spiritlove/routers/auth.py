"""Authentication router."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from spiritlove.dependencies.auth import get_auth_flow
from spiritlove.dependencies.readiness import require_ready
from spiritlove.rate_limiter import limiter
from spiritlove.schemas.auth import (
    ChangePasswordRequest,
    CheckSetupResponse,
    LoginRequest,
    MeResponse,
    MessageResponse,
    SetupPasswordRequest,
    SignupRequest,
    UserInfo,
    UserMessageResponse,
    UserResponse,
)
from spiritlove.services.auth import AuthFlowController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], dependencies=[Depends(require_ready)])


@router.post("/login", response_model=UserResponse)
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    flow: AuthFlowController = Depends(get_auth_flow),
) -> dict:
    """Authenticate by name (or email) and password; starts a new session."""
    user = flow.login(request, response, data.name, data.password)
    return {"user": UserInfo.model_validate(user)}


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request, response: Response, flow: AuthFlowController = Depends(get_auth_flow)
) -> dict:
    """Destroy the current session."""
    flow.logout(request, response)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
def get_me(request: Request, flow: AuthFlowController = Depends(get_auth_flow)) -> dict:
    """Get the current authenticated user."""
    user, _ = flow.current_user(request)
    return {"id": user.id, "name": user.name, "needs_password_setup": user.needs_password_setup}


@router.post("/setup-password", response_model=UserMessageResponse)
@limiter.limit("10/minute")
def setup_password(
    request: Request,
    response: Response,
    data: SetupPasswordRequest,
    flow: AuthFlowController = Depends(get_auth_flow),
) -> dict:
    """Set the first password of a provisioned account and log it in."""
    user = flow.setup_password(request, response, data.user_id, data.password)
    return {"message": "Password set successfully", "user": UserInfo.model_validate(user)}


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    request: Request,
    response: Response,
    data: ChangePasswordRequest,
    background_tasks: BackgroundTasks,
    flow: AuthFlowController = Depends(get_auth_flow),
) -> dict:
    """Change password while logged in; the current password must be re-proven."""
    flow.change_password(
        request, response, data.current_password, data.new_password, background_tasks
    )
    return {"message": "Password changed successfully"}


@router.get("/check-setup/{name}", response_model=CheckSetupResponse)
def check_setup(name: str, flow: AuthFlowController = Depends(get_auth_flow)) -> dict:
    """Whether the named account still needs its first password."""
    user = flow.check_setup(name)
    return {"user_id": user.id, "needs_setup": user.needs_password_setup}


@router.post("/signup", response_model=UserResponse)
@limiter.limit("5/minute")
def signup(
    request: Request,
    response: Response,
    data: SignupRequest,
    flow: AuthFlowController = Depends(get_auth_flow),
) -> dict:
    """Register a new account and log it in."""
    user = flow.signup(request, response, data.name, data.email, data.password)
    return {"user": UserInfo.model_validate(user)}
