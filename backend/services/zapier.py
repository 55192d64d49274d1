"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Zapier API keys and webhooks                                  ║
║                                                                              ║
║  API KEYS                                                                    ║
║  - plaintext "owl_" + 64 hex, returned ONCE at creation                      ║
║  - only the SHA-256 hex digest is stored (api_key_hash)                      ║
║  - listing never returns hashes                                              ║
║  - inbound calls send the key as x-api-key or "Authorization: Bearer"        ║
║                                                                              ║
║  WEBHOOKS                                                                    ║
║  - export pushes every {entity_type} row to the webhook via zapier-export    ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import Any, Dict, List, Optional

from config import generate_api_key, hash_api_key, now_iso
from services.errors import InputValidationError, RecordNotFound, RemoteCallFailed, Unauthorized
from services.event_logger import log_event
from services.record_store import get_store, store_failure
from services.remote_procedures import ZAPIER_EXPORT, get_gateway

logger = logging.getLogger("zapier")

KEYS_TABLE = "zapier_api_keys"
WEBHOOKS_TABLE = "zapier_webhooks"


def _public_key(row: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in row.items() if k != "api_key_hash"}


# ==================== API KEYS ====================

async def create_api_key(user_id: str, name: str) -> Dict[str, Any]:
    if not (name or "").strip():
        raise InputValidationError("Please enter a name for the API key")

    api_key = generate_api_key()
    with store_failure("Failed to create API key"):
        row = await get_store().insert(KEYS_TABLE, {
            "user_id": user_id,
            "name": name.strip(),
            "api_key_hash": hash_api_key(api_key),
            "active": True,
            "last_used_at": None,
        })

    logger.info(f"[ZAPIER] api key {row['id']} created for {user_id}")
    await log_event("create_api_key", "zapier_key", row["id"], user=user_id)
    return {**_public_key(row), "api_key": api_key}


async def list_api_keys(user_id: str) -> List[Dict[str, Any]]:
    rows = await get_store().select(KEYS_TABLE, {"user_id": user_id}, order=[("created_at", -1)])
    return [_public_key(r) for r in rows]


async def revoke_api_key(key_id: str, user_id: Optional[str] = None) -> None:
    match = {"id": key_id}
    if user_id:
        match["user_id"] = user_id
    with store_failure("Failed to revoke API key"):
        deleted = await get_store().delete(KEYS_TABLE, match)
    if not deleted:
        raise RecordNotFound(f"API key {key_id} not found")
    await log_event("revoke_api_key", "zapier_key", key_id, user=user_id or "system")


async def verify_api_key(api_key: str) -> Optional[Dict[str, Any]]:
    """Active key row for a plaintext key (stamping last_used_at), or None"""
    if not api_key:
        return None
    store = get_store()
    row = await store.find_one(KEYS_TABLE, {"api_key_hash": hash_api_key(api_key), "active": True})
    if not row:
        return None
    row["last_used_at"] = now_iso()
    await store.update(KEYS_TABLE, {"last_used_at": row["last_used_at"]}, {"id": row["id"]})
    return _public_key(row)


def key_from_headers(x_api_key: Optional[str], authorization: Optional[str]) -> str:
    if x_api_key:
        return x_api_key.strip()
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return ""


async def authenticate(x_api_key: Optional[str] = None, authorization: Optional[str] = None) -> Dict[str, Any]:
    api_key = key_from_headers(x_api_key, authorization)
    if not api_key:
        raise Unauthorized("API key is required in x-api-key or Authorization header")
    row = await verify_api_key(api_key)
    if not row:
        logger.warning("[ZAPIER] rejected unknown API key")
        raise Unauthorized("Invalid API key")
    return row


# ==================== WEBHOOKS ====================

async def create_webhook(
    user_id: str,
    webhook_url: str,
    event_type: str,
    entity_type: str = "pros",
) -> Dict[str, Any]:
    url = (webhook_url or "").strip()
    if not url:
        raise InputValidationError("Please enter a webhook URL")
    if not url.startswith(("http://", "https://")):
        raise InputValidationError("Webhook URL must start with http:// or https://")

    with store_failure("Failed to configure webhook"):
        return await get_store().insert(WEBHOOKS_TABLE, {
            "user_id": user_id,
            "webhook_url": url,
            "event_type": event_type,
            "entity_type": entity_type,
            "active": True,
        })


async def list_webhooks(user_id: str) -> List[Dict[str, Any]]:
    return await get_store().select(WEBHOOKS_TABLE, {"user_id": user_id}, order=[("created_at", -1)])


async def set_webhook_active(webhook_id: str, active: bool) -> Dict[str, Any]:
    store = get_store()
    with store_failure("Failed to update webhook"):
        await store.update(WEBHOOKS_TABLE, {"active": active}, {"id": webhook_id})
        return await store.get(WEBHOOKS_TABLE, webhook_id)


async def delete_webhook(webhook_id: str) -> None:
    with store_failure("Failed to delete webhook"):
        deleted = await get_store().delete(WEBHOOKS_TABLE, {"id": webhook_id})
    if not deleted:
        raise RecordNotFound(f"Webhook {webhook_id} not found")


async def export_webhook(webhook_id: str, user: str = "system") -> Dict[str, Any]:
    """Send every record of the webhook's entity type to its URL (one remote call)"""
    with store_failure("Failed to load webhook"):
        webhook = await get_store().get(WEBHOOKS_TABLE, webhook_id)
    entity_type = webhook.get("entity_type") or "pros"

    result = await get_gateway().invoke(ZAPIER_EXPORT, {
        "webhook_url": webhook["webhook_url"],
        "entity_type": entity_type,
        "user_id": webhook.get("user_id"),
    })
    if not result.ok:
        raise RemoteCallFailed(f"Export failed: {result.message}", result.error_kind.value, result.http_status)

    data = result.data if isinstance(result.data, dict) else {}
    exported = data.get("exported") or 0
    logger.info(f"[ZAPIER] webhook {webhook_id}: exported {exported} {entity_type}")
    await log_event("zapier_export", "zapier_webhook", webhook_id, user=user,
                    details={"entity_type": entity_type, "exported": exported})
    return {"success": True, "exported": exported, "message": f"Exported {exported} {entity_type} records"}
