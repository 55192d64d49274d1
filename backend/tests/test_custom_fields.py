"""
OwlDoor CRM - Custom field definitions and per-record values
"""

import pytest

from services.custom_fields import create_field, get_values_for_record, list_fields, upsert_value
from services.errors import InputValidationError


@pytest.fixture
def referral_field(fake_db):
    fake_db.seed("custom_fields", {
        "id": "f-ref", "field_name": "Referral code", "field_type": "text",
        "target_table": "leads", "active": True,
    })
    return "f-ref"


class TestDefinitions:

    @pytest.mark.asyncio
    async def test_create(self, store, fake_db):
        field = await create_field("  Languages ", "text")

        assert field["field_name"] == "Languages"
        assert field["target_table"] == "leads"
        assert field["active"] is True
        assert fake_db.rows("event_log")[0]["action"] == "create_custom_field"

    @pytest.mark.asyncio
    async def test_blank_name(self, store, fake_db):
        with pytest.raises(InputValidationError) as exc_info:
            await create_field("   ")
        assert exc_info.value.message == "Please enter a field name"
        assert fake_db.calls == []

    @pytest.mark.asyncio
    async def test_unknown_type(self, store, fake_db):
        with pytest.raises(InputValidationError):
            await create_field("Birthday", "datetime")
        assert fake_db.calls == []

    @pytest.mark.asyncio
    async def test_list_active_sorted(self, store, fake_db):
        fake_db.seed(
            "custom_fields",
            {"id": "1", "field_name": "Zodiac", "field_type": "text", "target_table": "leads", "active": True},
            {"id": "2", "field_name": "Age", "field_type": "number", "target_table": "leads", "active": True},
            {"id": "3", "field_name": "Old", "field_type": "text", "target_table": "leads", "active": False},
            {"id": "4", "field_name": "Tier", "field_type": "text", "target_table": "clients", "active": True},
        )
        names = [f["field_name"] for f in await list_fields()]
        assert names == ["Age", "Zodiac"]


class TestValues:

    @pytest.mark.asyncio
    async def test_second_write_replaces_first(self, store, fake_db, referral_field):
        await upsert_value(referral_field, "pro-jane", "ABC")
        saved = await upsert_value(referral_field, "pro-jane", "XYZ")

        rows = fake_db.rows("custom_field_values")
        assert len(rows) == 1
        assert rows[0]["value"] == "XYZ"
        assert saved["value"] == "XYZ"

    @pytest.mark.asyncio
    async def test_value_id_is_stable(self, store, fake_db, referral_field):
        first = await upsert_value(referral_field, "pro-jane", "ABC")
        second = await upsert_value(referral_field, "pro-jane", "ABC")
        assert first["id"] == second["id"]

    @pytest.mark.asyncio
    async def test_values_are_stored_as_text(self, store, fake_db, referral_field):
        saved = await upsert_value(referral_field, "pro-jane", 42)
        assert saved["value"] == "42"
        cleared = await upsert_value(referral_field, "pro-jane", None)
        assert cleared["value"] is None

    @pytest.mark.asyncio
    async def test_unknown_field(self, store, fake_db):
        with pytest.raises(InputValidationError):
            await upsert_value("f-missing", "pro-jane", "x")
        assert fake_db.rows("custom_field_values") == []

    @pytest.mark.asyncio
    async def test_joined_and_orphans_dropped(self, store, fake_db, referral_field):
        fake_db.seed("custom_fields", {
            "id": "f-age", "field_name": "Age", "field_type": "number",
            "target_table": "leads", "active": True,
        })
        fake_db.seed(
            "custom_field_values",
            {"id": "v1", "custom_field_id": "f-ref", "record_id": "pro-jane", "value": "ABC"},
            {"id": "v2", "custom_field_id": "f-age", "record_id": "pro-jane", "value": "41"},
            {"id": "v3", "custom_field_id": "f-gone", "record_id": "pro-jane", "value": "?"},
            {"id": "v4", "custom_field_id": "f-ref", "record_id": "pro-bob", "value": "DEF"},
        )
        values = await get_values_for_record("pro-jane")

        assert [(v["field_name"], v["field_type"], v["value"]) for v in values] == [
            ("Age", "number", "41"),
            ("Referral code", "text", "ABC"),
        ]

    @pytest.mark.asyncio
    async def test_no_values(self, store, fake_db):
        assert await get_values_for_record("pro-jane") == []
        assert fake_db.calls_for("custom_fields", "find") == []
