"""
PetHaven Backend — Pet and Breed SQLAlchemy Models
====================================================

What:  ORM models for the pet catalog: `pets`, `dog_breeds`, `cat_breeds`.
Why:   The catalog owns the full Pet entity; the adoption workflow only
       touches `pets.status` through the Pet Status Ledger.

Breed resolution:
    `pets.breed_id` points into `dog_breeds` or `cat_breeds` depending on
    `pets.species` ("Dog" / "Cat"). There is no FK because the target
    table varies; lookups join conditionally on species.

Status codes:
    0 = Unlisted   (not offered for adoption yet)
    1 = Available  (open for applications)
    2 = Reserved   (an application was approved)
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, SmallInteger, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

DOG = "Dog"
CAT = "Cat"


class PetStatus(enum.IntEnum):
    UNLISTED = 0
    AVAILABLE = 1
    RESERVED = 2


class DogBreed(Base):
    __tablename__ = "dog_breeds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)


class CatBreed(Base):
    __tablename__ = "cat_breeds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)


class Pet(Base):
    """
    A pet listed for adoption.

    Lifecycle of `status`:
        Created as Available by the catalog (or Unlisted if the caller says so).
        Approving an application reserves it (2); rejecting one frees it (1).
    """

    __tablename__ = "pets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)

    # "Dog", "Cat" or any other free-text species (breed lookup only for Dog/Cat)
    species: Mapped[str] = mapped_column(String(50), nullable=False)
    breed_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    status: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
        default=int(PetStatus.AVAILABLE),
        server_default=text("1"),
        comment="0 unlisted, 1 available, 2 reserved",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_pets_species_status", "species", "status"),
    )

    def __repr__(self) -> str:
        return f"<Pet(id={self.id}, name='{self.name}', status={self.status})>"
