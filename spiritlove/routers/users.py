"""User profile router."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from spiritlove.database import get_db
from spiritlove.dependencies.auth import get_current_user
from spiritlove.dependencies.readiness import require_ready
from spiritlove.models.user import User
from spiritlove.schemas.user import PartnerInfo, UserProfile, UserUpdate
from spiritlove.services.auth.exceptions import ConflictError
from spiritlove.services.repositories import DuplicateError, ImmutableFieldError, UserRepository
from spiritlove.services.security_audit_service import SecurityAuditService, SecurityEventType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_ready)])


def _profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        name=user.name,
        email=user.email,
        partner_id=user.partner_id,
        needs_password_setup=user.needs_password_setup,
    )


@router.get("/me", response_model=UserProfile)
def get_profile(current_user: User = Depends(get_current_user)) -> UserProfile:
    """Get the current user's profile."""
    return _profile(current_user)


@router.patch("/me", response_model=UserProfile)
def update_profile(
    request: Request,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserProfile:
    """Update the current user's name or email. Partner links cannot be changed here."""
    update_data = data.model_dump(exclude_unset=True)
    repo = UserRepository(db)
    try:
        repo.update(current_user, **update_data)
    except ImmutableFieldError:
        SecurityAuditService.log_event(
            db, SecurityEventType.PARTNER_CHANGE_REJECTED, user_id=current_user.id, request=request
        )
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Partner link cannot be changed",
        )
    except DuplicateError as e:
        raise ConflictError("That name or email is already in use") from e

    db.commit()
    db.refresh(current_user)
    return _profile(current_user)


@router.get("/me/partner", response_model=PartnerInfo)
def get_partner(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    """Get the current user's partner."""
    partner = UserRepository(db).find_partner(current_user)
    if partner is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No partner linked")
    return partner
