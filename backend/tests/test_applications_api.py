"""
PetHaven Backend — Adoption Application API Tests
===================================================

What:  End-to-end tests of /application(s) through the FastAPI app.
How:   HTTPX AsyncClient over ASGITransport; get_db_session is overridden to
       use the seeded in-memory database (see conftest.test_client).
"""

import pytest

from conftest import CAT_PET_ID, DOG_PET_ID, OTHER_USER_ID, USER_ID


async def _submit(client, payload):
    response = await client.post("/application", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestSubmitApplication:

    @pytest.mark.asyncio
    async def test_create_returns_pending_application(self, test_client, application_payload):
        body = await _submit(test_client, application_payload)

        assert body["status"] == 0
        assert body["user_id"] == USER_ID
        assert body["pet_id"] == DOG_PET_ID
        assert body["pet_allergies"] is None
        assert body["created_at"] == body["updated_at"]

    @pytest.mark.asyncio
    async def test_missing_field_is_400(self, test_client, application_payload):
        del application_payload["experience"]
        del application_payload["workSchedule"]

        response = await test_client.post("/application", json=application_payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["missing"] == ["experience", "workSchedule"]
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_malformed_body_is_400(self, test_client):
        response = await test_client.post("/application", json={"user_id": "seven"})

        assert response.status_code == 400
        assert response.json()["details"]["errors"]


class TestListApplications:

    @pytest.mark.asyncio
    async def test_empty_list_is_200(self, test_client):
        response = await test_client.get("/applications")

        assert response.status_code == 200
        assert response.json() == {"applications": [], "total_count": 0}

    @pytest.mark.asyncio
    async def test_list_filtered_by_user_id(self, test_client, application_payload):
        mine = await _submit(test_client, application_payload)
        await _submit(test_client, {**application_payload, "user_id": OTHER_USER_ID, "pet_id": CAT_PET_ID})

        everyone = (await test_client.get("/applications")).json()
        only_mine = (await test_client.get("/applications", params={"id": USER_ID})).json()

        assert everyone["total_count"] == 2
        assert [a["id"] for a in only_mine["applications"]] == [mine["id"]]
        assert only_mine["applications"][0]["pet_name"] == "Biscuit"
        assert only_mine["applications"][0]["breed_name"] == "Labrador Retriever"

    @pytest.mark.asyncio
    async def test_get_unknown_application_is_404(self, test_client):
        response = await test_client.get("/applications/999")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestStatusChanges:

    @pytest.mark.asyncio
    async def test_approve_reject_scenario(self, test_client, application_payload):
        created = await _submit(test_client, application_payload)
        app_id = created["id"]

        approved = await test_client.put(
            f"/applications/{app_id}/status", json={"status": 1, "petId": DOG_PET_ID}
        )
        assert approved.status_code == 200
        assert approved.json()["application"]["status"] == 1
        assert approved.json()["pet_status"] == 2
        assert (await test_client.get(f"/pets/{DOG_PET_ID}")).json()["status"] == 2

        rejected = await test_client.put(
            f"/applications/{app_id}/status", json={"status": -1, "petId": DOG_PET_ID}
        )
        assert rejected.status_code == 200
        assert rejected.json()["application"]["status"] == -1
        assert (await test_client.get(f"/pets/{DOG_PET_ID}")).json()["status"] == 1

    @pytest.mark.asyncio
    async def test_operator_can_undo_and_redo_approval(self, test_client, application_payload):
        created = await _submit(test_client, application_payload)
        url = f"/applications/{created['id']}/status"

        assert (await test_client.put(url, json={"status": 1})).status_code == 200
        assert (await test_client.put(url, json={"status": 0})).status_code == 200
        again = await test_client.put(url, json={"status": 1, "petId": DOG_PET_ID})

        assert again.status_code == 200
        assert again.json()["application"]["status"] == 1
        assert (await test_client.get(f"/pets/{DOG_PET_ID}")).json()["status"] == 2

    @pytest.mark.asyncio
    async def test_invalid_status_is_400_and_changes_nothing(self, test_client, application_payload):
        created = await _submit(test_client, application_payload)

        response = await test_client.put(
            f"/applications/{created['id']}/status", json={"status": 2, "petId": DOG_PET_ID}
        )

        assert response.status_code == 400
        assert (await test_client.get(f"/applications/{created['id']}")).json()["status"] == 0
        assert (await test_client.get(f"/pets/{DOG_PET_ID}")).json()["status"] == 1

    @pytest.mark.asyncio
    async def test_missing_status_is_400(self, test_client, application_payload):
        created = await _submit(test_client, application_payload)

        response = await test_client.put(f"/applications/{created['id']}/status", json={})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_application_is_404(self, test_client):
        response = await test_client.put("/applications/999/status", json={"status": 1, "petId": DOG_PET_ID})

        assert response.status_code == 404
        assert (await test_client.get(f"/pets/{DOG_PET_ID}")).json()["status"] == 1

    @pytest.mark.asyncio
    async def test_pet_mismatch_is_400(self, test_client, application_payload):
        created = await _submit(test_client, application_payload)

        response = await test_client.put(
            f"/applications/{created['id']}/status", json={"status": 1, "petId": CAT_PET_ID}
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "petId"
        assert (await test_client.get(f"/pets/{CAT_PET_ID}")).json()["status"] == 1

    @pytest.mark.asyncio
    async def test_second_approval_is_409(self, test_client, application_payload):
        first = await _submit(test_client, application_payload)
        second = await _submit(test_client, {**application_payload, "user_id": OTHER_USER_ID})

        await test_client.put(f"/applications/{first['id']}/status", json={"status": 1})
        response = await test_client.put(f"/applications/{second['id']}/status", json={"status": 1})

        assert response.status_code == 409
        assert response.json()["error"] == "consistency_error"
        assert (await test_client.get(f"/applications/{second['id']}")).json()["status"] == 0


class TestDeleteApplication:

    @pytest.mark.asyncio
    async def test_delete_then_404(self, test_client, application_payload):
        created = await _submit(test_client, application_payload)
        await test_client.put(f"/applications/{created['id']}/status", json={"status": 1})

        response = await test_client.delete(f"/applications/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Application deleted", "id": created["id"]}
        assert (await test_client.get(f"/applications/{created['id']}")).status_code == 404
        assert (await test_client.get(f"/pets/{DOG_PET_ID}")).json()["status"] == 2

    @pytest.mark.asyncio
    async def test_delete_unknown_is_404(self, test_client):
        response = await test_client.delete("/applications/999")

        assert response.status_code == 404
