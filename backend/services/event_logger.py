"""
OwlDoor CRM - Event Logger

Centralized audit trail for sensitive actions (stage moves, saves,
credit changes, API keys). Single function to call from any route/service.
"""

import logging

from services.errors import RecordStoreError
from services.record_store import get_store

logger = logging.getLogger("event_logger")


async def log_event(
    action: str,
    entity_type: str,
    entity_id: str,
    user: str = "system",
    details: dict = None,
    related: dict = None
):
    """
    Write a single event to the event_log table.

    Args:
        action: e.g. move_stage, save_lead, add_credits, create_api_key
        entity_type: pro | ai_lead | client | custom_field | zapier_key
        entity_id: ID of the primary entity
        user: who performed the action
        details: free-form dict (old_value, new_value, amount, etc.)
        related: linked entity IDs (client_id, pro_id, etc.)

    An audit write failure is logged and never fails the audited action.
    """
    try:
        await get_store().insert("event_log", {
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "user": user,
            "details": details or {},
            "related": related or {},
        })
    except RecordStoreError as e:
        logger.warning(f"[EVENT_LOG] could not record {action} on {entity_type} {entity_id}: {e}")


async def list_events(entity_type: str = None, entity_id: str = None, limit: int = 100):
    query = {}
    if entity_type:
        query["entity_type"] = entity_type
    if entity_id:
        query["entity_id"] = entity_id
    return await get_store().select("event_log", query, order=[("created_at", -1)], limit=limit)
