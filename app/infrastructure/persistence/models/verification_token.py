"""Single-use verification token ORM model (email verify, password reset)."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class VerificationToken(CuidMixin, CreatedAtMixin, Base):
    """Stored by token_hash; used_at marks redemption, superseded_at a newer request."""

    __tablename__ = "verification_token"

    principal_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("principal.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    purpose: Mapped[str] = mapped_column(String(32), nullable=False)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    superseded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_verification_token_principal_purpose", "principal_id", "purpose"),
    )
