"""
PetHaven Backend — Status Transition Engine Tests
===================================================

What:  Tests for application status changes and their pet side effects.
How:   Runs against the seeded in-memory database and re-reads committed
       state through a fresh session after every transition.

Test Strategy:
    ✅ Approve reserves the pet, reject frees it, pending leaves it alone
    ✅ Repeating a transition gives the same state
    ✅ Invalid status, unknown application and petId mismatch change nothing
    ✅ Approved → Pending → Approved works (pet stays Reserved in between)
    ✅ A second approval for a reserved pet is refused
    ✅ Two approvals racing for one pet: exactly one wins
    ✅ A failed commit rolls back BOTH rows

SQLite ignores FOR UPDATE, so the race runs on serialized_db, where every
transaction takes the database write lock up front.
"""

import asyncio
import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from app.exceptions import ConsistencyError, NotFoundError, ServiceUnavailableError, ValidationError
from app.models.application import Application, ApplicationStatus
from app.services.status_transition_service import StatusTransitionService, parse_target_status
from conftest import DOG_PET_ID, OTHER_USER_ID, USER_ID, read_state


async def _insert_application(session_factory, user_id=USER_ID, pet_id=DOG_PET_ID, status=0):
    created = datetime(2026, 1, 1, tzinfo=timezone.utc)
    async with session_factory() as session:
        application = Application(
            user_id=user_id,
            pet_id=pet_id,
            adoption_reason="space",
            living_situation="house",
            experience="none",
            household_members="2",
            work_schedule="remote",
            status=status,
            created_at=created,
            updated_at=created,
        )
        session.add(application)
        await session.commit()
        return application.id


class TestParseTargetStatus:

    @pytest.mark.parametrize("value, expected", [
        (1, ApplicationStatus.APPROVED),
        (0, ApplicationStatus.PENDING),
        (-1, ApplicationStatus.REJECTED),
    ])
    def test_accepts_known_codes(self, value, expected):
        assert parse_target_status(value) is expected

    @pytest.mark.parametrize("value", [2, -2, None, "1", 1.0, True])
    def test_rejects_everything_else(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_target_status(value)
        assert exc_info.value.field == "status"


class TestTransitions:

    def setup_method(self):
        self.service = StatusTransitionService()

    async def _transition(self, session_factory, application_id, status, pet_id=None):
        async with session_factory() as session:
            return await self.service.set_application_status(session, application_id, status, pet_id)

    @pytest.mark.asyncio
    async def test_approve_then_reject(self, seeded_db):
        app_id = await _insert_application(seeded_db)

        approved = await self._transition(seeded_db, app_id, 1, DOG_PET_ID)
        assert approved.application.status == 1
        assert (approved.pet_id, approved.pet_status) == (DOG_PET_ID, 2)
        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (1, 2)
        async with seeded_db() as session:
            stored = await session.get(Application, app_id)
            assert stored.updated_at > stored.created_at

        rejected = await self._transition(seeded_db, app_id, -1, DOG_PET_ID)
        assert rejected.pet_status == 1
        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (-1, 1)

    @pytest.mark.asyncio
    async def test_pet_id_is_optional(self, seeded_db):
        app_id = await _insert_application(seeded_db)

        result = await self._transition(seeded_db, app_id, 1)

        assert result.pet_id == DOG_PET_ID
        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (1, 2)

    @pytest.mark.asyncio
    async def test_repeated_transitions_are_stable(self, seeded_db):
        app_id = await _insert_application(seeded_db)

        await self._transition(seeded_db, app_id, 1)
        await self._transition(seeded_db, app_id, 1)
        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (1, 2)

        await self._transition(seeded_db, app_id, -1)
        await self._transition(seeded_db, app_id, -1)
        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (-1, 1)

    @pytest.mark.asyncio
    async def test_back_to_pending_keeps_pet_status(self, seeded_db):
        app_id = await _insert_application(seeded_db)
        await self._transition(seeded_db, app_id, 1)

        result = await self._transition(seeded_db, app_id, 0)

        assert result.application.status == 0
        assert result.pet_status == 2
        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (0, 2)

    @pytest.mark.asyncio
    async def test_reapprove_after_back_to_pending(self, seeded_db):
        """The pet stays Reserved while Pending; approving again must still work."""
        app_id = await _insert_application(seeded_db)

        await self._transition(seeded_db, app_id, 1)
        await self._transition(seeded_db, app_id, 0)
        result = await self._transition(seeded_db, app_id, 1, DOG_PET_ID)

        assert result.application.status == 1
        assert result.pet_status == 2
        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (1, 2)

    @pytest.mark.asyncio
    async def test_reject_sets_available_even_from_pending(self, seeded_db):
        app_id = await _insert_application(seeded_db)

        await self._transition(seeded_db, app_id, -1)

        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (-1, 1)

    @pytest.mark.asyncio
    async def test_invalid_status_changes_nothing(self, seeded_db):
        app_id = await _insert_application(seeded_db)

        with pytest.raises(ValidationError, match="Invalid status 2"):
            await self._transition(seeded_db, app_id, 2, DOG_PET_ID)

        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (0, 1)

    @pytest.mark.asyncio
    async def test_unknown_application_writes_no_pet(self, seeded_db):
        with patch(
            "app.services.status_transition_service.pet_status_ledger.set_pet_availability",
            new_callable=AsyncMock,
        ) as mock_set:
            with pytest.raises(NotFoundError, match="application"):
                await self._transition(seeded_db, 999, 1, DOG_PET_ID)

        mock_set.assert_not_called()

    @pytest.mark.asyncio
    async def test_pet_id_mismatch_rejected(self, seeded_db):
        app_id = await _insert_application(seeded_db)

        with pytest.raises(ValidationError) as exc_info:
            await self._transition(seeded_db, app_id, 1, DOG_PET_ID + 100)

        assert exc_info.value.field == "petId"
        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (0, 1)

    @pytest.mark.asyncio
    async def test_application_for_missing_pet(self, seeded_db):
        """SQLite does not enforce the FK, which lets us store a dangling pet_id."""
        app_id = await _insert_application(seeded_db, pet_id=404)

        with pytest.raises(NotFoundError, match="pet"):
            await self._transition(seeded_db, app_id, 1)

        async with seeded_db() as session:
            assert (await session.get(Application, app_id)).status == 0


class TestConsistency:

    def setup_method(self):
        self.service = StatusTransitionService()

    @pytest.mark.asyncio
    async def test_second_approval_for_reserved_pet_refused(self, seeded_db):
        first = await _insert_application(seeded_db, user_id=USER_ID)
        second = await _insert_application(seeded_db, user_id=OTHER_USER_ID)

        async with seeded_db() as session:
            await self.service.set_application_status(session, first, 1)

        async with seeded_db() as session:
            with pytest.raises(ConsistencyError, match="already reserved"):
                await self.service.set_application_status(session, second, 1)

        assert await read_state(seeded_db, first, DOG_PET_ID) == (1, 2)
        assert await read_state(seeded_db, second, DOG_PET_ID) == (0, 2)

    @pytest.mark.asyncio
    async def test_approval_allowed_after_other_rejected(self, seeded_db):
        first = await _insert_application(seeded_db, user_id=USER_ID)
        second = await _insert_application(seeded_db, user_id=OTHER_USER_ID)

        async with seeded_db() as session:
            await self.service.set_application_status(session, first, 1)
        async with seeded_db() as session:
            await self.service.set_application_status(session, first, -1)
        async with seeded_db() as session:
            await self.service.set_application_status(session, second, 1)

        assert await read_state(seeded_db, second, DOG_PET_ID) == (1, 2)

    @pytest.mark.asyncio
    async def test_approval_allowed_after_other_moved_to_pending(self, seeded_db):
        first = await _insert_application(seeded_db, user_id=USER_ID)
        second = await _insert_application(seeded_db, user_id=OTHER_USER_ID)

        async with seeded_db() as session:
            await self.service.set_application_status(session, first, 1)
        async with seeded_db() as session:
            await self.service.set_application_status(session, first, 0)
        async with seeded_db() as session:
            await self.service.set_application_status(session, second, 1)

        assert await read_state(seeded_db, first, DOG_PET_ID) == (0, 2)
        assert await read_state(seeded_db, second, DOG_PET_ID) == (1, 2)

    @pytest.mark.asyncio
    async def test_rejecting_other_application_releases_pet_and_logs(self, seeded_db, caplog):
        first = await _insert_application(seeded_db, user_id=USER_ID)
        second = await _insert_application(seeded_db, user_id=OTHER_USER_ID)

        async with seeded_db() as session:
            await self.service.set_application_status(session, first, 1)
        with caplog.at_level(logging.WARNING, logger="app.services.status_transition_service"):
            async with seeded_db() as session:
                await self.service.set_application_status(session, second, -1)

        assert await read_state(seeded_db, first, DOG_PET_ID) == (1, 1)
        assert f"while application {first} is still approved" in caplog.text

    @pytest.mark.asyncio
    async def test_concurrent_approvals_only_one_wins(self, serialized_db):
        first = await _insert_application(serialized_db, user_id=USER_ID)
        second = await _insert_application(serialized_db, user_id=OTHER_USER_ID)

        async def approve(application_id):
            async with serialized_db() as session:
                return await self.service.set_application_status(session, application_id, 1, DOG_PET_ID)

        outcomes = await asyncio.gather(approve(first), approve(second), return_exceptions=True)

        winners = [o for o in outcomes if not isinstance(o, Exception)]
        losers = [o for o in outcomes if isinstance(o, Exception)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], ConsistencyError)

        winner_id = winners[0].application.id
        loser_id = second if winner_id == first else first
        assert await read_state(serialized_db, winner_id, DOG_PET_ID) == (1, 2)
        assert await read_state(serialized_db, loser_id, DOG_PET_ID) == (0, 2)

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back_both_rows(self, seeded_db):
        app_id = await _insert_application(seeded_db)

        async with seeded_db() as session:
            session.commit = AsyncMock(
                side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))
            )
            with pytest.raises(ConsistencyError) as exc_info:
                await self.service.set_application_status(session, app_id, 1)

        assert exc_info.value.context["application_id"] == app_id
        assert exc_info.value.context["pet_id"] == DOG_PET_ID
        assert exc_info.value.context["error_type"] == "OperationalError"
        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (0, 1)

    @pytest.mark.asyncio
    async def test_timeout_rolls_back(self, seeded_db):
        app_id = await _insert_application(seeded_db)

        async with seeded_db() as session:
            session.commit = AsyncMock(side_effect=ServiceUnavailableError(context={"operation": "transition.commit"}))
            with pytest.raises(ServiceUnavailableError):
                await self.service.set_application_status(session, app_id, -1)

        assert await read_state(seeded_db, app_id, DOG_PET_ID) == (0, 1)
