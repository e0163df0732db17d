"""Login attempt ORM model (login history). Append-only."""

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class LoginAttempt(CuidMixin, CreatedAtMixin, Base):
    """One login attempt. principal_id is null when the identifier matched nothing."""

    __tablename__ = "login_attempt"

    principal_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("principal.id", ondelete="CASCADE"),
        nullable=True,
    )
    identifier: Mapped[str] = mapped_column(String(254), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    succeeded: Mapped[bool] = mapped_column(Boolean, nullable=False)
    failure_reason: Mapped[str | None] = mapped_column(String(32), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        Index("ix_login_attempt_principal_time", "principal_id", "created_at"),
    )
