"""
OwlDoor CRM - Custom fields

Admin-defined typed fields attached to a target table.
- definitions: append-only (create + list, no update/delete flow)
- values: one row per (custom_field_id, record_id), overwritten in place
"""

import logging
from typing import Any, Dict, List, Optional

from models.custom_field import DEFAULT_TARGET_TABLE, VALID_FIELD_TYPES
from services.errors import InputValidationError
from services.event_logger import log_event
from services.record_store import get_store, store_failure

logger = logging.getLogger("custom_fields")

FIELDS_TABLE = "custom_fields"
VALUES_TABLE = "custom_field_values"
VALUE_KEY = ("custom_field_id", "record_id")


async def create_field(
    field_name: str,
    field_type: str = "text",
    target_table: str = DEFAULT_TARGET_TABLE,
    user: str = "system",
) -> Dict[str, Any]:
    name = (field_name or "").strip()
    if not name:
        raise InputValidationError("Please enter a field name")
    field_type = getattr(field_type, "value", field_type)
    if field_type not in VALID_FIELD_TYPES:
        raise InputValidationError(f"Invalid field type '{field_type}'. Expected one of {VALID_FIELD_TYPES}")

    with store_failure("Failed to create custom field"):
        field = await get_store().insert(FIELDS_TABLE, {
            "field_name": name,
            "field_type": field_type,
            "target_table": target_table or DEFAULT_TARGET_TABLE,
            "active": True,
        })

    logger.info(f"[CUSTOM_FIELDS] created {field['id']} '{name}' ({field_type}) on {field['target_table']}")
    await log_event("create_custom_field", "custom_field", field["id"], user=user,
                    details={"field_name": name, "field_type": field_type})
    return field


async def list_fields(target_table: str = DEFAULT_TARGET_TABLE) -> List[Dict[str, Any]]:
    """Active definitions for a table, ordered by field_name"""
    return await get_store().select(
        FIELDS_TABLE,
        {"target_table": target_table, "active": True},
        order=[("field_name", 1)],
    )


async def upsert_value(custom_field_id: str, record_id: str, value: Optional[Any]) -> Dict[str, Any]:
    """Write the value for (field, record); a second write replaces the first"""
    if not custom_field_id or not record_id:
        raise InputValidationError("custom_field_id and record_id are required")

    store = get_store()
    field = await store.find_one(FIELDS_TABLE, {"id": custom_field_id})
    if not field:
        raise InputValidationError(f"Unknown custom field {custom_field_id}")

    with store_failure("Failed to save custom field value"):
        return await store.upsert(
            VALUES_TABLE,
            {
                "custom_field_id": custom_field_id,
                "record_id": record_id,
                "value": None if value is None else str(value),
            },
            conflict_keys=VALUE_KEY,
        )


async def get_values_for_record(record_id: str) -> List[Dict[str, Any]]:
    """
    Values of one record joined to their definition (field_name, field_type).
    Values whose definition no longer exists are dropped.
    """
    store = get_store()
    values = await store.select(VALUES_TABLE, {"record_id": record_id})
    if not values:
        return []

    field_ids = list({v["custom_field_id"] for v in values})
    fields = await store.select(FIELDS_TABLE, {"id": {"$in": field_ids}})
    by_id = {f["id"]: f for f in fields}

    joined = []
    for value in values:
        field = by_id.get(value["custom_field_id"])
        if not field:
            continue
        joined.append({
            **value,
            "field_name": field["field_name"],
            "field_type": field["field_type"],
        })
    joined.sort(key=lambda v: v["field_name"])
    return joined
