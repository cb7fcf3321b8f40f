"""
PetHaven Backend — Breed Lookup Service
=========================================

What:  Lists dog/cat breeds and builds the species-conditional breed join
       shared by the pet catalog and the application listing.

Breed resolution rule:
    species = "Dog"  → dog_breeds.name
    species = "Cat"  → cat_breeds.name
    anything else    → NULL
"""

import logging
from typing import List

from sqlalchemy import Select, and_, case, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import bounded
from app.exceptions import PersistenceError, ValidationError
from app.models.pet import CAT, DOG, CatBreed, DogBreed, Pet
from app.schemas.pet import BreedResponse

logger = logging.getLogger(__name__)

BREED_TABLES = {DOG: DogBreed, CAT: CatBreed}


def breed_name_column():
    """Labelled CASE expression picking the breed name for the pet's species."""
    return case(
        (Pet.species == DOG, DogBreed.name),
        (Pet.species == CAT, CatBreed.name),
        else_=None,
    ).label("breed_name")


def join_breeds(query: Select) -> Select:
    """Outer-join both breed tables onto a query that already selects from Pet."""
    return query.outerjoin(
        DogBreed, and_(Pet.species == DOG, DogBreed.id == Pet.breed_id)
    ).outerjoin(
        CatBreed, and_(Pet.species == CAT, CatBreed.id == Pet.breed_id)
    )


def breed_table_for(species: str):
    """Breed model for a species, or ValidationError for anything but Dog/Cat."""
    normalized = species.strip().capitalize() if species else species
    table = BREED_TABLES.get(normalized)
    if table is None:
        raise ValidationError(
            message=f"Unknown species '{species}'. Breeds exist for: {', '.join(BREED_TABLES)}",
            field="species",
        )
    return table


class BreedService:

    async def list_breeds(self, db: AsyncSession, species: str) -> List[BreedResponse]:
        table = breed_table_for(species)
        try:
            result = await bounded(
                db.execute(select(table).order_by(table.name)),
                "breeds.list",
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing %s breeds: %s", species, str(e))
            raise PersistenceError(
                message="Could not retrieve breeds. Please try again.",
                context={"species": species, "error_type": type(e).__name__},
            )
        return [BreedResponse.model_validate(b) for b in result.scalars().all()]

    async def breed_exists(self, db: AsyncSession, species: str, breed_id: int) -> bool:
        """True when breed_id is a row of the breed table for this species."""
        table = BREED_TABLES.get(species)
        if table is None:
            # Other species carry no breed reference to check
            return True
        result = await bounded(
            db.execute(select(table.id).where(table.id == breed_id)),
            "breeds.exists",
        )
        return result.scalar_one_or_none() is not None


breed_service = BreedService()
