"""
PetHaven Backend — Application Service (Adoption Application Repository)
=========================================================================

What:  Creates, lists, fetches and deletes adoption applications.
Why:   Single writer of `applications` rows (apart from status changes,
       which belong to the status transition engine).
How:   Validates intake answers, persists through the request session and
       enriches listings with applicant and pet display fields.

Enriched listing query:
    SELECT applications.*, users.first_name, users.last_name, users.email,
           users.phone_number, pets.name AS pet_name, pets.species,
           pets.gender, pets.age,
           CASE species WHEN 'Dog' THEN dog_breeds.name
                        WHEN 'Cat' THEN cat_breeds.name END AS breed_name
    FROM applications
    JOIN users ON ... JOIN pets ON ...
    LEFT JOIN dog_breeds ON species = 'Dog' AND ...
    LEFT JOIN cat_breeds ON species = 'Cat' AND ...
    [WHERE applications.user_id = :user_id]
    ORDER BY created_at DESC

An empty result is a valid answer (200 with []), not a 404.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import bounded
from app.exceptions import NotFoundError, PersistenceError, ValidationError
from app.models.application import (
    OPTIONAL_INTAKE_FIELDS,
    REQUIRED_INTAKE_FIELDS,
    Application,
    ApplicationStatus,
)
from app.models.pet import Pet
from app.models.user import User
from app.schemas.application import (
    ApplicationCreate,
    ApplicationListItem,
    ApplicationListResponse,
    ApplicationResponse,
)
from app.services.breed_service import breed_name_column, join_breeds

logger = logging.getLogger(__name__)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _api_name(field_name: str) -> str:
    """Name of a field as the client sent it (alias if one exists)."""
    field = ApplicationCreate.model_fields[field_name]
    return field.alias or field_name


class ApplicationService:
    """
    Repository for adoption applications.

    Error Handling Strategy:
        Missing intake answers → ValidationError listing every missing field.
        Constraint violations (unknown user/pet) and driver errors →
        PersistenceError with details kept in the log context only.
    """

    def missing_required_fields(self, payload: ApplicationCreate) -> List[str]:
        """Client-facing names of every required field that is absent or blank."""
        required = ("user_id", "pet_id") + REQUIRED_INTAKE_FIELDS
        return [_api_name(name) for name in required if _is_blank(getattr(payload, name))]

    async def create_application(
        self, db: AsyncSession, payload: ApplicationCreate
    ) -> ApplicationResponse:
        """
        Persist a new application in Pending state.

        Optional answers that are omitted or blank are stored as NULL.
        created_at and updated_at get the same instant.

        Raises:
            ValidationError:  a required field is missing (→ 400)
            PersistenceError: the insert was rejected (→ 500)
        """
        missing = self.missing_required_fields(payload)
        if missing:
            raise ValidationError(
                message=f"Missing required fields: {', '.join(missing)}",
                context={"missing": missing},
            )

        now = datetime.now(timezone.utc)
        values = {name: getattr(payload, name).strip() for name in REQUIRED_INTAKE_FIELDS}
        for name in OPTIONAL_INTAKE_FIELDS:
            raw = getattr(payload, name)
            values[name] = None if _is_blank(raw) else raw.strip()

        application = Application(
            user_id=payload.user_id,
            pet_id=payload.pet_id,
            status=int(ApplicationStatus.PENDING),
            created_at=now,
            updated_at=now,
            **values,
        )

        try:
            db.add(application)
            await bounded(db.flush(), "applications.insert")
        except IntegrityError as e:
            logger.warning(
                "Application insert rejected for user=%s pet=%s: %s",
                payload.user_id, payload.pet_id, str(e.orig),
            )
            raise PersistenceError(
                message="The application could not be saved. Check that the user and pet exist.",
                context={"user_id": payload.user_id, "pet_id": payload.pet_id},
            )
        except SQLAlchemyError as e:
            logger.error("Database error creating application: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="The application could not be saved. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info(
            "Application %s created: user=%s pet=%s (status=pending)",
            application.id, application.user_id, application.pet_id,
        )
        return ApplicationResponse.model_validate(application)

    async def fetch(self, db: AsyncSession, application_id: int) -> Application:
        """ORM row for an application, or NotFoundError."""
        try:
            result = await bounded(
                db.execute(select(Application).where(Application.id == application_id)),
                "applications.read",
            )
        except SQLAlchemyError as e:
            logger.error("Database error fetching application %s: %s", application_id, str(e))
            raise PersistenceError(
                message="Could not retrieve the application. Please try again.",
                context={"application_id": application_id},
            )

        application = result.scalar_one_or_none()
        if application is None:
            raise NotFoundError(resource="application", resource_id=application_id)
        return application

    async def find_other_approved(
        self, db: AsyncSession, pet_id: int, application_id: int
    ) -> Optional[int]:
        """Id of an Approved application for this pet other than `application_id`, or None."""
        result = await bounded(
            db.execute(
                select(Application.id)
                .where(
                    Application.pet_id == pet_id,
                    Application.status == int(ApplicationStatus.APPROVED),
                    Application.id != application_id,
                )
                .order_by(Application.id)
                .limit(1)
            ),
            "applications.find_approved",
        )
        return result.scalar_one_or_none()

    async def get_application(self, db: AsyncSession, application_id: int) -> ApplicationResponse:
        application = await self.fetch(db, application_id)
        return ApplicationResponse.model_validate(application)

    async def list_applications(
        self, db: AsyncSession, user_id: Optional[int] = None
    ) -> ApplicationListResponse:
        """
        Applications with applicant and pet display fields, newest first.

        Args:
            user_id: when given, only that user's applications
        """
        query = join_breeds(
            select(
                Application,
                User.first_name,
                User.last_name,
                User.email,
                User.phone_number,
                Pet.name.label("pet_name"),
                Pet.species,
                Pet.gender,
                Pet.age,
                breed_name_column(),
            )
            .join(User, User.id == Application.user_id)
            .join(Pet, Pet.id == Application.pet_id)
        )
        if user_id is not None:
            query = query.where(Application.user_id == user_id)
        query = query.order_by(desc(Application.created_at), desc(Application.id))

        try:
            result = await bounded(db.execute(query), "applications.list")
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing applications: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not retrieve applications. Please try again.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

        items = [
            ApplicationListItem(
                **ApplicationResponse.model_validate(row.Application).model_dump(),
                first_name=row.first_name,
                last_name=row.last_name,
                email=row.email,
                phone_number=row.phone_number,
                pet_name=row.pet_name,
                species=row.species,
                gender=row.gender,
                age=row.age,
                breed_name=row.breed_name,
            )
            for row in rows
        ]
        return ApplicationListResponse(applications=items, total_count=len(items))

    async def delete_application(self, db: AsyncSession, application_id: int) -> None:
        """
        Remove an application. The pet's status is left exactly as it is.

        Raises:
            NotFoundError: unknown id (→ 404)
        """
        application = await self.fetch(db, application_id)
        pet_id = application.pet_id
        try:
            await db.delete(application)
            await bounded(db.flush(), "applications.delete")
        except SQLAlchemyError as e:
            logger.error("Database error deleting application %s: %s", application_id, str(e))
            raise PersistenceError(
                message="Could not delete the application. Please try again.",
                context={"application_id": application_id},
            )
        logger.info("Application %s deleted (pet %s untouched)", application_id, pet_id)


application_service = ApplicationService()
