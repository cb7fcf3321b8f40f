"""
PetHaven Backend — Adoption Application SQLAlchemy Model
==========================================================

What:  ORM model for the `applications` table.
Who:   Written only by ApplicationService (create/delete) and the status
       transition engine (status + updated_at).

Table Design Rationale:
    - Intake answers are immutable after creation; only `status` and
      `updated_at` ever change.
    - Optional intake answers are NULL when omitted, never "".
    - CHECK constraint keeps `status` inside {-1, 0, 1} even for writes
      that bypass the service layer.
    - Index on pet_id: the transition engine and operators look up all
      applications for one pet.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class ApplicationStatus(enum.IntEnum):
    """Decision state of an application. Any state may move to any other."""

    REJECTED = -1
    PENDING = 0
    APPROVED = 1


REQUIRED_INTAKE_FIELDS = (
    "adoption_reason",
    "living_situation",
    "experience",
    "household_members",
    "work_schedule",
)

OPTIONAL_INTAKE_FIELDS = (
    "pet_types_cared_for",
    "travel_frequency",
    "time_commitment",
    "outdoor_space",
    "pet_allergies",
    "pet_training",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Application(Base):
    """
    A user's request to adopt a specific pet.

    Lifecycle:
        1. Created Pending with created_at == updated_at
        2. Moved between Pending / Approved / Rejected by the transition engine;
           each move refreshes updated_at
        3. Deleted by an operator (pet status untouched)
    """

    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    pet_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pets.id", ondelete="CASCADE"), nullable=False
    )

    # ── Required intake answers ───────────────────────────────────────────
    adoption_reason: Mapped[str] = mapped_column(Text, nullable=False)
    living_situation: Mapped[str] = mapped_column(Text, nullable=False)
    experience: Mapped[str] = mapped_column(Text, nullable=False)
    household_members: Mapped[str] = mapped_column(Text, nullable=False)
    work_schedule: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Optional intake answers ───────────────────────────────────────────
    pet_types_cared_for: Mapped[str | None] = mapped_column(Text, nullable=True)
    travel_frequency: Mapped[str | None] = mapped_column(Text, nullable=True)
    time_commitment: Mapped[str | None] = mapped_column(Text, nullable=True)
    outdoor_space: Mapped[str | None] = mapped_column(Text, nullable=True)
    pet_allergies: Mapped[str | None] = mapped_column(Text, nullable=True)
    pet_training: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
        default=int(ApplicationStatus.PENDING),
        server_default=text("0"),
        comment="0 pending, 1 approved, -1 rejected",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("status IN (-1, 0, 1)", name="ck_applications_status"),
        Index("idx_applications_pet_id", "pet_id"),
        Index("idx_applications_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Application(id={self.id}, user_id={self.user_id}, "
            f"pet_id={self.pet_id}, status={self.status})>"
        )
