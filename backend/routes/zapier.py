"""
OwlDoor CRM - Routes Zapier (API keys + webhooks)

/zapier/auth is called by Zapier itself with one of the keys.
"""

from fastapi import APIRouter, Header
from pydantic import BaseModel
from typing import Optional

from models.account import ZapierKeyCreate, ZapierWebhookCreate
from services import zapier

router = APIRouter(prefix="/zapier", tags=["Zapier"])


class WebhookToggle(BaseModel):
    active: bool


# ==================== API KEYS ====================

@router.get("/keys")
async def list_keys(user_id: str):
    keys = await zapier.list_api_keys(user_id)
    return {"keys": keys, "count": len(keys)}


@router.post("/keys")
async def create_key(data: ZapierKeyCreate):
    """The plaintext key is only ever in this response"""
    key = await zapier.create_api_key(data.user_id, data.name)
    return {"success": True, "message": "API key created. Copy it now, it will not be shown again.", "key": key}


@router.delete("/keys/{key_id}")
async def revoke_key(key_id: str, user_id: str):
    await zapier.revoke_api_key(key_id, user_id)
    return {"success": True, "message": "API key revoked"}


@router.get("/auth")
async def check_auth(
    x_api_key: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
):
    """Connection test for a Zap: resolves the calling key"""
    key = await zapier.authenticate(x_api_key, authorization)
    return {"success": True, "user_id": key.get("user_id"), "key_name": key.get("name")}


# ==================== WEBHOOKS ====================

@router.get("/webhooks")
async def list_hooks(user_id: str):
    webhooks = await zapier.list_webhooks(user_id)
    return {"webhooks": webhooks, "count": len(webhooks)}


@router.post("/webhooks")
async def create_hook(data: ZapierWebhookCreate):
    webhook = await zapier.create_webhook(data.user_id, data.webhook_url, data.event_type, data.entity_type)
    return {"success": True, "message": "Webhook configured successfully", "webhook": webhook}


@router.put("/webhooks/{webhook_id}")
async def toggle_hook(webhook_id: str, data: WebhookToggle):
    webhook = await zapier.set_webhook_active(webhook_id, data.active)
    return {"success": True, "webhook": webhook}


@router.delete("/webhooks/{webhook_id}")
async def delete_hook(webhook_id: str):
    await zapier.delete_webhook(webhook_id)
    return {"success": True, "message": "Webhook deleted"}


@router.post("/webhooks/{webhook_id}/export")
async def export_hook(webhook_id: str, user_id: str = "system"):
    return await zapier.export_webhook(webhook_id, user=user_id)
