"""
OwlDoor CRM - Routes Custom Fields (definitions; values live under /leads)
"""

from fastapi import APIRouter, Depends

from models.custom_field import DEFAULT_TARGET_TABLE, CustomFieldCreate
from routes.deps import get_actor
from services.custom_fields import create_field, list_fields

router = APIRouter(prefix="/custom-fields", tags=["CustomFields"])


@router.get("")
async def get_fields(target_table: str = DEFAULT_TARGET_TABLE):
    fields = await list_fields(target_table)
    return {"fields": fields, "count": len(fields)}


@router.post("")
async def create(data: CustomFieldCreate, actor: str = Depends(get_actor)):
    field = await create_field(data.field_name, data.field_type, data.target_table, user=actor)
    return {"success": True, "field": field}
