"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Routes Leads (pros)                                           ║
║                                                                              ║
║  Detail view, edit save, enrichment, custom field values.                    ║
║  Pros are never deleted from here.                                           ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, Body, Depends
from typing import Any, Dict

from models.custom_field import CustomFieldValueSave
from routes.deps import get_actor
from services.custom_fields import get_values_for_record, upsert_value
from services.display import format_currency, format_source, pipeline_card
from services.edit_session import LeadEditBuffer, save_lead
from services.integrations import enrich_lead
from services.record_store import get_store

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.get("/{lead_id}")
async def get_lead(lead_id: str):
    """Lead with its custom field values, edit buffer and display block"""
    lead = await get_store().get("pros", lead_id)
    custom_values = await get_values_for_record(lead_id)
    card = pipeline_card(lead)
    return {
        "lead": lead,
        "form": LeadEditBuffer.from_record(lead).values(),
        "custom_fields": custom_values,
        "display": {
            **card,
            "total_sales": format_currency(lead.get("total_sales")),
            "source": format_source(lead.get("source")),
        },
    }


@router.put("/{lead_id}")
async def update_lead(
    lead_id: str,
    changes: Dict[str, Any] = Body(..., description="Edited form fields (lists as comma-joined text)"),
    actor: str = Depends(get_actor),
):
    return await save_lead(lead_id, changes, user=actor)


@router.post("/{lead_id}/enrich")
async def enrich(lead_id: str, actor: str = Depends(get_actor)):
    return await enrich_lead(lead_id, user=actor)


@router.get("/{lead_id}/custom-fields")
async def list_custom_values(lead_id: str):
    values = await get_values_for_record(lead_id)
    return {"values": values, "count": len(values)}


@router.put("/{lead_id}/custom-fields/{field_id}")
async def save_custom_value(lead_id: str, field_id: str, data: CustomFieldValueSave):
    value = await upsert_value(field_id, lead_id, data.value)
    return {"success": True, "value": value}
