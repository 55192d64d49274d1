"""
OwlDoor CRM - HTTP API tests

Runs the FastAPI app in-process (httpx ASGITransport) over the fake
record store and the mocked remote procedure gateway.
"""

import pytest


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, api):
        response = await api.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "running"


class TestPipelineAPI:

    @pytest.mark.asyncio
    async def test_stages(self, api):
        response = await api.get("/api/pipeline/client/stages")
        stages = [s["value"] for s in response.json()["stages"]]
        assert stages[0] == "new_recruit"

    @pytest.mark.asyncio
    async def test_unknown_pipeline_type(self, api):
        response = await api.get("/api/pipeline/sales/board")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_board_and_move(self, api, fake_db, rpc, jane_doe):
        fake_db.seed("pros", jane_doe)

        board = (await api.get("/api/pipeline/staff/board", params={"search": "jane"})).json()
        assert board["total"] == 1
        assert board["columns"][0]["records"][0]["card"]["initials"] == "JD"

        response = await api.post(
            "/api/pipeline/staff/move",
            json={"record_id": "pro-jane", "stage": "qualifying"},
            headers={"X-Actor": "admin@owldoor.com"},
        )
        await rpc.gateway.drain()

        assert response.status_code == 200
        assert response.json()["message"] == "Moved Jane Doe to Qualifying"
        assert rpc.calls_to("auto-enrich-trigger") == [{"type": "lead_qualifying", "record_id": "pro-jane"}]
        assert fake_db.rows("event_log")[0]["user"] == "admin@owldoor.com"

    @pytest.mark.asyncio
    async def test_move_to_unknown_stage(self, api, fake_db, jane_doe):
        fake_db.seed("pros", jane_doe)
        response = await api.post("/api/pipeline/staff/move", json={"record_id": "pro-jane", "stage": "limbo"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_store_failure_envelope(self, api, fake_db, jane_doe):
        fake_db.seed("pros", jane_doe)
        fake_db.fail("pros", "find_one_and_update")

        response = await api.post("/api/pipeline/staff/move", json={"record_id": "pro-jane", "stage": "matched"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to update lead stage"}


class TestLeadsAPI:

    @pytest.mark.asyncio
    async def test_detail(self, api, fake_db, jane_doe):
        fake_db.seed("pros", {**jane_doe, "source": None})
        body = (await api.get("/api/leads/pro-jane")).json()

        assert body["form"]["cities"] == "Austin, Round Rock"
        assert body["display"]["total_sales"] == "$1.25M"
        assert body["display"]["source"] == "N/A"
        assert body["custom_fields"] == []

    @pytest.mark.asyncio
    async def test_missing_lead(self, api):
        response = await api.get("/api/leads/ghost")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_save(self, api, fake_db, jane_doe):
        fake_db.seed("pros", jane_doe)
        response = await api.put("/api/leads/pro-jane", json={"brokerage": "Keller", "experience": "9"})

        assert response.status_code == 200
        row = fake_db.rows("pros")[0]
        assert row["brokerage"] == "Keller"
        assert row["experience"] == 9

    @pytest.mark.asyncio
    async def test_custom_field_value(self, api, fake_db, jane_doe):
        fake_db.seed("pros", jane_doe)
        created = (await api.post("/api/custom-fields", json={"field_name": "Referral code"})).json()
        field_id = created["field"]["id"]

        await api.put(f"/api/leads/pro-jane/custom-fields/{field_id}", json={"value": "A1"})
        await api.put(f"/api/leads/pro-jane/custom-fields/{field_id}", json={"value": "B2"})

        values = (await api.get("/api/leads/pro-jane/custom-fields")).json()
        assert values["count"] == 1
        assert values["values"][0]["value"] == "B2"


class TestClientsAPI:

    @pytest.mark.asyncio
    async def test_filtered_list(self, api, fake_db):
        fake_db.seed(
            "clients",
            {"id": "a", "company_name": "A", "active": True, "current_package_id": "p1", "credits_balance": 5},
            {"id": "b", "company_name": "B", "active": False, "current_package_id": "p1"},
            {"id": "c", "company_name": "C", "active": True, "current_package_id": None},
        )
        response = await api.get("/api/clients", params=[("package", "has_package"), ("status", "active")])
        body = response.json()

        assert [c["id"] for c in body["clients"]] == ["a"]
        assert body["clients"][0]["eligibility"]["eligible"] is True
        assert body["active_filter_count"] == 2

    @pytest.mark.asyncio
    async def test_deduct_insufficient(self, api, fake_db):
        fake_db.seed("clients", {"id": "c1", "credits_balance": 3})
        response = await api.post("/api/clients/c1/credits/deduct", json={"amount": 5})

        assert response.status_code == 409
        assert response.json()["success"] is False
        assert fake_db.rows("clients")[0]["credits_balance"] == 3

    @pytest.mark.asyncio
    async def test_add_credits(self, api, fake_db):
        fake_db.seed("clients", {"id": "c1", "credits_balance": 3})
        response = await api.post("/api/clients/c1/credits/add", json={"amount": 10})
        assert response.json()["credits_balance"] == 13

    @pytest.mark.asyncio
    async def test_non_positive_amount_is_422(self, api, fake_db):
        fake_db.seed("clients", {"id": "c1", "credits_balance": 3})
        response = await api.post("/api/clients/c1/credits/add", json={"amount": 0})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_save_refuses_balance(self, api, fake_db):
        fake_db.seed("clients", {"id": "c1", "company_name": "Acme", "email": "a@acme.com", "credits_balance": 3})
        response = await api.put("/api/clients/c1", json={"credits_balance": 1000})

        assert response.status_code == 400
        assert fake_db.rows("clients")[0]["credits_balance"] == 3

    @pytest.mark.asyncio
    async def test_remote_error_kind(self, api, rpc, fake_db):
        fake_db.seed("clients", {"id": "c1", "user_id": "u1"})
        rpc.respond("generate-magic-link", {"error": "rate limited"}, status=429)

        response = await api.post("/api/clients/c1/magic-link")

        assert response.status_code == 429
        assert response.json()["error_kind"] == "rate_limited"


class TestZapierAPI:

    @pytest.mark.asyncio
    async def test_key_shown_once(self, api, fake_db):
        created = (await api.post("/api/zapier/keys", json={"user_id": "u1", "name": "Main"})).json()
        assert created["key"]["api_key"].startswith("owl_")

        listed = (await api.get("/api/zapier/keys", params={"user_id": "u1"})).json()
        assert listed["count"] == 1
        assert "api_key" not in listed["keys"][0]
        assert "api_key_hash" not in listed["keys"][0]

    @pytest.mark.asyncio
    async def test_auth_with_key_header(self, api, fake_db):
        created = (await api.post("/api/zapier/keys", json={"user_id": "u1", "name": "Main"})).json()

        response = await api.get("/api/zapier/auth", headers={"x-api-key": created["key"]["api_key"]})

        assert response.status_code == 200
        assert response.json()["user_id"] == "u1"
        assert response.json()["key_name"] == "Main"

    @pytest.mark.asyncio
    async def test_auth_rejects_missing_and_unknown_keys(self, api):
        missing = await api.get("/api/zapier/auth")
        assert missing.status_code == 401
        assert missing.json()["error_kind"] == "unauthorized"

        unknown = await api.get("/api/zapier/auth", headers={"Authorization": "Bearer owl_nope"})
        assert unknown.status_code == 401
        assert unknown.json()["message"] == "Invalid API key"

    @pytest.mark.asyncio
    async def test_webhook_export(self, api, rpc, fake_db):
        created = (await api.post("/api/zapier/webhooks", json={
            "user_id": "u1", "webhook_url": "https://hooks.zapier.com/x", "event_type": "lead.created",
        })).json()
        rpc.respond("zapier-export", {"exported": 3})

        response = await api.post(f"/api/zapier/webhooks/{created['webhook']['id']}/export")

        assert response.status_code == 200
        assert response.json()["message"] == "Exported 3 pros records"
        assert rpc.calls_to("zapier-export")[0]["entity_type"] == "pros"
