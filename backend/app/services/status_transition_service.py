"""
PetHaven Backend — Status Transition Engine
=============================================

What:  Moves an adoption application between Pending / Approved / Rejected
       and applies the matching pet availability change.
Why:   This is the one place where a rule spans two tables: approving an
       application reserves its pet, rejecting one frees it. Both rows must
       change together or not at all.

State machine (application.status):

          ┌─────────── any ───────────┐
          ▼                           │
     Pending(0) ◀──▶ Approved(1) ◀──▶ Rejected(-1)
          ▲                                 │
          └─────────────────────────────────┘

    Every state is reachable from every other so operators can correct
    mistakes. Pet side effects:
        → Approved(1):  pet.status = 2 (reserved)
        → Rejected(-1): pet.status = 1 (available)
        → Pending(0):   pet untouched

Transition steps (one transaction):
    1. Validate the target status                  → ValidationError
    2. Load the application                        → NotFoundError
    3. Check a caller-supplied petId matches it    → ValidationError
    4. Lock the pet row (SELECT ... FOR UPDATE)
    5. Refuse to approve while a different application for the pet is
       Approved                                    → ConsistencyError
    6. Write application.status/updated_at and the pet status
    7. Commit; on failure roll both back           → ConsistencyError

Step 5 looks at the applications, not at pets.status: moving an approved
application back to Pending leaves the pet Reserved, and re-approving it
(or approving another application) must still be possible.

Concurrency:
    Two approvals for different applications of the same pet both block on
    the pet row lock in step 4. The second one to get the lock sees the
    first one's committed approval and fails at step 5 without writing.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import bounded
from app.exceptions import ConsistencyError, PetHavenError, ValidationError
from app.models.application import ApplicationStatus
from app.models.pet import PetStatus
from app.schemas.application import ApplicationResponse, StatusChangeResponse
from app.services.application_service import application_service
from app.services.pet_status_ledger import pet_status_ledger

logger = logging.getLogger(__name__)

# Pet status written for each target application status (Pending has none)
PET_EFFECTS = {
    ApplicationStatus.APPROVED: PetStatus.RESERVED,
    ApplicationStatus.REJECTED: PetStatus.AVAILABLE,
}


def parse_target_status(value) -> ApplicationStatus:
    """
    Convert a requested status into ApplicationStatus.

    Booleans are refused even though bool is an int subclass.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            message="status must be one of 1 (approved), 0 (pending), -1 (rejected)",
            field="status",
            context={"received": repr(value)},
        )
    try:
        return ApplicationStatus(value)
    except ValueError:
        raise ValidationError(
            message=f"Invalid status {value}. Must be one of 1 (approved), 0 (pending), -1 (rejected)",
            field="status",
            context={"received": value},
        )


class StatusTransitionService:

    async def set_application_status(
        self,
        db: AsyncSession,
        application_id: int,
        target_status,
        pet_id: Optional[int] = None,
    ) -> StatusChangeResponse:
        """
        Apply a status change and its pet side effect atomically.

        Args:
            db:             request session; this method commits it
            application_id: application to move
            target_status:  1, 0 or -1
            pet_id:         optional cross-check; the pet actually updated is
                            always the one stored on the application

        Returns:
            StatusChangeResponse with the updated application and pet status

        Raises:
            ValidationError:  bad status, or pet_id does not match (→ 400)
            NotFoundError:    unknown application or pet (→ 404)
            ConsistencyError: pet already reserved, or the combined write
                              failed and was rolled back (→ 409)
            ServiceUnavailableError: storage timed out (→ 503)
        """
        target = parse_target_status(target_status)

        # Existence is checked before anything is written
        application = await application_service.fetch(db, application_id)

        if pet_id is not None and pet_id != application.pet_id:
            raise ValidationError(
                message=(
                    f"petId {pet_id} does not match pet {application.pet_id} "
                    f"of application {application_id}"
                ),
                field="petId",
                context={"application_id": application_id, "pet_id": pet_id},
            )
        pet_id = application.pet_id
        new_pet_status = PET_EFFECTS.get(target)
        context = {
            "application_id": application_id,
            "pet_id": pet_id,
            "from_status": application.status,
            "to_status": int(target),
        }

        current_pet_status = await pet_status_ledger.get_pet_status(
            db, pet_id, lock=new_pet_status is not None
        )

        # Read under the pet lock; pets.status alone can be stale after a move to Pending
        holder_id = None
        if new_pet_status is not None:
            holder_id = await application_service.find_other_approved(db, pet_id, application_id)

        if target == ApplicationStatus.APPROVED and holder_id is not None:
            logger.warning(
                "Approval refused: pet %s already reserved by application %s (application %s)",
                pet_id, holder_id, application_id,
            )
            await db.rollback()
            raise ConsistencyError(
                message=f"Pet {pet_id} is already reserved by approved application {holder_id}",
                context={**context, "approved_application_id": holder_id},
            )
        if target == ApplicationStatus.REJECTED and holder_id is not None:
            logger.warning(
                "Pet %s released by rejecting application %s while application %s is still approved",
                pet_id, application_id, holder_id,
            )

        try:
            application.status = int(target)
            application.updated_at = datetime.now(timezone.utc)
            if new_pet_status is not None:
                await pet_status_ledger.set_pet_availability(db, pet_id, new_pet_status)
            await bounded(db.flush(), "applications.write_status")
            await bounded(db.commit(), "transition.commit")
        except PetHavenError:
            await db.rollback()
            logger.error("Transition rolled back: %s", context)
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Transition rolled back after storage failure: %s | %s",
                context, str(e), exc_info=True,
            )
            raise ConsistencyError(context={**context, "error_type": type(e).__name__})

        final_pet_status = int(new_pet_status) if new_pet_status is not None else current_pet_status
        logger.info(
            "Application %s → %s; pet %s status %s",
            application_id, target.name.lower(), pet_id, final_pet_status,
        )
        return StatusChangeResponse(
            application=ApplicationResponse.model_validate(application),
            pet_id=pet_id,
            pet_status=final_pet_status,
        )


status_transition_service = StatusTransitionService()
