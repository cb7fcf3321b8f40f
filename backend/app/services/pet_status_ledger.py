"""
PetHaven Backend — Pet Status Ledger
======================================

What:  The narrow read/write interface onto `pets.status`.
Why:   The adoption workflow must never touch other pet attributes; funnelling
       its writes through one place keeps that boundary visible.
Who:   Driven by StatusTransitionService. The pet catalog writes status
       through its own update path.

Trust model:
    No validation of the code happens here. The transition engine only ever
    passes PetStatus.AVAILABLE or PetStatus.RESERVED.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import bounded
from app.exceptions import NotFoundError
from app.models.pet import Pet

logger = logging.getLogger(__name__)


class PetStatusLedger:

    async def get_pet_status(self, db: AsyncSession, pet_id: int, lock: bool = False) -> int:
        """
        Current status code of a pet.

        Args:
            lock: take a row lock (SELECT ... FOR UPDATE) held until the
                  surrounding transaction ends. Concurrent transitions on the
                  same pet queue behind it and then read the committed value.

        Raises:
            NotFoundError: no pet with this id
        """
        query = select(Pet.status).where(Pet.id == pet_id)
        if lock:
            query = query.with_for_update()

        result = await bounded(db.execute(query), "pets.read_status")
        status = result.scalar_one_or_none()
        if status is None:
            raise NotFoundError(resource="pet", resource_id=pet_id)
        return int(status)

    async def set_pet_availability(self, db: AsyncSession, pet_id: int, code: int) -> None:
        """
        Set `pets.status` to exactly `code` inside the caller's transaction.

        Nothing is committed here; the caller commits or rolls back.
        """
        result = await bounded(
            db.execute(
                update(Pet)
                .where(Pet.id == pet_id)
                .values(status=int(code), updated_at=datetime.now(timezone.utc))
            ),
            "pets.write_status",
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="pet", resource_id=pet_id)
        logger.debug("Pet %s status set to %s", pet_id, int(code))


pet_status_ledger = PetStatusLedger()
