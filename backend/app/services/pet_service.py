"""
PetHaven Backend — Pet Catalog Service
========================================

What:  CRUD for pets plus image attachment through blob storage.
Why:   The catalog owns every pet attribute; the adoption workflow only
       reads/writes `status` through the Pet Status Ledger.
How:   Each read joins the species-appropriate breed table so responses
       carry a breed display name.

Image upload flow (POST /pets/{id}/image):
    ┌──────────┐    ┌──────────────┐    ┌─────────────────┐
    │ Upload   │───▶│ FileService  │───▶│ pets.image_url  │
    │ (Route)  │    │ store_upload │    │ (flush)         │
    └──────────┘    └──────────────┘    └─────────────────┘
    If the DB write fails the stored blob is removed again.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import bounded
from app.exceptions import NotFoundError, PersistenceError, ValidationError
from app.models.pet import Pet
from app.schemas.pet import PetCreate, PetListResponse, PetResponse, PetUpdate
from app.services.breed_service import breed_name_column, breed_service, join_breeds
from app.services.file_service import file_service

logger = logging.getLogger(__name__)


def _to_response(pet: Pet, breed_name: Optional[str]) -> PetResponse:
    response = PetResponse.model_validate(pet)
    response.breed_name = breed_name
    return response


class PetService:

    async def _check_breed(self, db: AsyncSession, species: str, breed_id: Optional[int]) -> None:
        if breed_id is None:
            return
        if not await breed_service.breed_exists(db, species, breed_id):
            raise ValidationError(
                message=f"Breed {breed_id} does not exist for species '{species}'",
                field="breedId",
            )

    async def _fetch(self, db: AsyncSession, pet_id: int) -> Pet:
        result = await bounded(db.execute(select(Pet).where(Pet.id == pet_id)), "pets.read")
        pet = result.scalar_one_or_none()
        if pet is None:
            raise NotFoundError(resource="pet", resource_id=pet_id)
        return pet

    async def get_pet(self, db: AsyncSession, pet_id: int) -> PetResponse:
        query = join_breeds(select(Pet, breed_name_column())).where(Pet.id == pet_id)
        try:
            result = await bounded(db.execute(query), "pets.read")
            row = result.first()
        except SQLAlchemyError as e:
            logger.error("Database error fetching pet %s: %s", pet_id, str(e))
            raise PersistenceError(
                message="Could not retrieve the pet. Please try again.",
                context={"pet_id": pet_id},
            )
        if row is None:
            raise NotFoundError(resource="pet", resource_id=pet_id)
        return _to_response(row.Pet, row.breed_name)

    async def list_pets(
        self,
        db: AsyncSession,
        species: Optional[str] = None,
        status: Optional[int] = None,
    ) -> PetListResponse:
        """Pets newest first, optionally filtered by species and/or status code."""
        query = join_breeds(select(Pet, breed_name_column()))
        if species:
            query = query.where(Pet.species == species)
        if status is not None:
            query = query.where(Pet.status == status)
        query = query.order_by(desc(Pet.created_at), desc(Pet.id))

        try:
            result = await bounded(db.execute(query), "pets.list")
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing pets: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not retrieve pets. Please try again.",
                context={"error_type": type(e).__name__},
            )

        pets = [_to_response(row.Pet, row.breed_name) for row in rows]
        return PetListResponse(pets=pets, total_count=len(pets))

    async def create_pet(self, db: AsyncSession, payload: PetCreate) -> PetResponse:
        await self._check_breed(db, payload.species, payload.breed_id)

        now = datetime.now(timezone.utc)
        pet = Pet(
            name=payload.name.strip(),
            species=payload.species.strip(),
            breed_id=payload.breed_id,
            gender=payload.gender,
            age=payload.age,
            description=payload.description,
            image_url=payload.image_url,
            status=payload.status,
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(pet)
            await bounded(db.flush(), "pets.insert")
        except SQLAlchemyError as e:
            logger.error("Database error creating pet: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="The pet could not be saved. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Pet %s created: %s (%s)", pet.id, pet.name, pet.species)
        return await self.get_pet(db, pet.id)

    async def update_pet(self, db: AsyncSession, pet_id: int, payload: PetUpdate) -> PetResponse:
        """Write only the fields present in the request body."""
        pet = await self._fetch(db, pet_id)
        changes = payload.model_dump(exclude_unset=True)
        # NOT NULL columns: an explicit null means "leave as is"
        for name in ("name", "species", "status"):
            if name in changes and changes[name] is None:
                del changes[name]
        if not changes:
            return await self.get_pet(db, pet_id)

        species = changes.get("species", pet.species)
        if "breed_id" in changes or "species" in changes:
            await self._check_breed(db, species, changes.get("breed_id", pet.breed_id))

        for name, value in changes.items():
            setattr(pet, name, value)
        pet.updated_at = datetime.now(timezone.utc)

        try:
            await bounded(db.flush(), "pets.update")
        except SQLAlchemyError as e:
            logger.error("Database error updating pet %s: %s", pet_id, str(e))
            raise PersistenceError(
                message="The pet could not be updated. Please try again.",
                context={"pet_id": pet_id},
            )

        logger.info("Pet %s updated: %s", pet_id, sorted(changes))
        return await self.get_pet(db, pet_id)

    async def delete_pet(self, db: AsyncSession, pet_id: int) -> None:
        pet = await self._fetch(db, pet_id)
        image_path = file_service.relative_path_from_url(pet.image_url)
        try:
            await db.delete(pet)
            await bounded(db.flush(), "pets.delete")
        except SQLAlchemyError as e:
            logger.error("Database error deleting pet %s: %s", pet_id, str(e))
            raise PersistenceError(
                message="The pet could not be deleted. Please try again.",
                context={"pet_id": pet_id},
            )
        if image_path:
            await file_service.cleanup_file(image_path)
        logger.info("Pet %s deleted", pet_id)

    async def attach_image(
        self,
        db: AsyncSession,
        pet_id: int,
        filename: Optional[str],
        content_type: Optional[str],
        content: bytes,
        content_length: Optional[int] = None,
    ) -> PetResponse:
        """Store an image and point pets.image_url at it."""
        pet = await self._fetch(db, pet_id)
        upload = await file_service.store_upload(
            filename=filename,
            content_type=content_type,
            content=content,
            content_length=content_length,
        )

        pet.image_url = upload.url
        pet.updated_at = datetime.now(timezone.utc)
        try:
            await bounded(db.flush(), "pets.update_image")
        except Exception:
            await file_service.cleanup_file(upload.path)
            raise

        logger.info("Pet %s image set to %s", pet_id, upload.path)
        return await self.get_pet(db, pet_id)


pet_service = PetService()
