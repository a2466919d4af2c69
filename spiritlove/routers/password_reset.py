"""Password reset router: request, validate and complete."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from spiritlove.dependencies.auth import get_auth_flow
from spiritlove.dependencies.readiness import require_ready
from spiritlove.rate_limiter import limiter
from spiritlove.schemas.auth import (
    MessageResponse,
    PasswordResetCompleteRequest,
    PasswordResetRequest,
    PasswordResetValidateRequest,
    ResetTokenValidResponse,
    UserInfo,
    UserMessageResponse,
)
from spiritlove.services.auth import AuthFlowController

router = APIRouter(
    prefix="/auth/password-reset",
    tags=["password reset"],
    dependencies=[Depends(require_ready)],
)

RESET_REQUESTED_MESSAGE = (
    "If an account exists with that email, a password reset link has been sent."
)


@router.post("/request", response_model=MessageResponse)
@limiter.limit("3/hour")
def request_reset(
    request: Request,
    data: PasswordResetRequest,
    background_tasks: BackgroundTasks,
    flow: AuthFlowController = Depends(get_auth_flow),
) -> dict:
    """Email a reset link. The answer is the same whether or not the account exists."""
    flow.request_password_reset(request, data.email, background_tasks)
    return {"message": RESET_REQUESTED_MESSAGE}


@router.post("/validate", response_model=ResetTokenValidResponse)
def validate_reset(
    data: PasswordResetValidateRequest, flow: AuthFlowController = Depends(get_auth_flow)
) -> dict:
    """Check a reset token without consuming it."""
    user = flow.validate_password_reset(data.token)
    return {"valid": True, "user_name": user.name}


@router.post("/complete", response_model=UserMessageResponse)
def complete_reset(
    request: Request,
    response: Response,
    data: PasswordResetCompleteRequest,
    background_tasks: BackgroundTasks,
    flow: AuthFlowController = Depends(get_auth_flow),
) -> dict:
    """Consume a reset token, set the new password and start a new session."""
    user = flow.complete_password_reset(
        request, response, data.token, data.new_password, background_tasks
    )
    return {"message": "Password reset successfully", "user": UserInfo.model_validate(user)}
