"""User model: identity, password hash and password-reset state."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from spiritlove.database import Base

if TYPE_CHECKING:
    from spiritlove.models.session import Session


class User(Base):
    """An account in the couple.

    ``password_hash`` is NULL until the owner completes first-time setup.
    The ``reset_token_*`` columns hold at most one live reset token; only the
    SHA-256 digest of the token is stored.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    # Stored lower-cased
    email: Mapped[str | None] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255))
    password_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    reset_token_hash: Mapped[str | None] = mapped_column(String(64), unique=True, index=True)
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    reset_token_issued_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Set once by provisioning; never through the generic update path
    partner_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL")
    )

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    sessions: Mapped[list["Session"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def needs_password_setup(self) -> bool:
        return self.password_hash is None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}')>"
