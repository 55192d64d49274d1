"""
OwlDoor CRM - Routes Event Log (audit trail)
"""

from fastapi import APIRouter, Query
from typing import Optional

from services.event_logger import list_events

router = APIRouter(prefix="/event-log", tags=["EventLog"])


@router.get("")
async def get_events(
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
):
    """Newest first, optionally for one entity"""
    events = await list_events(entity_type, entity_id, limit)
    return {"events": events, "count": len(events)}
