"""
OwlDoor CRM - Pricing packages

Standard packages are shared. A client can have at most one custom package
(is_custom=True, client_id set); saving it assigns it to the client and makes
sure the client has a package_access_token for its public page.
"""

import logging
from typing import Any, Dict, List, Optional

from config import PUBLIC_APP_URL
from models.account import CustomPackageSave
from services.errors import InputValidationError, RemoteCallFailed
from services.event_logger import log_event
from services.record_store import get_store, store_failure
from services.remote_procedures import GENERATE_PACKAGE_ACCESS_TOKEN, get_gateway

logger = logging.getLogger("packages")

TABLE = "pricing_packages"


def package_url(token: str) -> str:
    return f"{PUBLIC_APP_URL}/package/{token}"


def location_filter(form: CustomPackageSave) -> Optional[Dict[str, Any]]:
    """Coverage entries with both parts filled; None when nothing is left"""
    zip_radius = [{"zip": e.zip, "radius": e.radius} for e in form.zip_radius if e.zip and e.radius]
    city_state = [{"city": e.city, "state": e.state} for e in form.city_state if e.city and e.state]
    county_state = [{"county": e.county, "state": e.state} for e in form.county_state if e.county and e.state]

    result = {}
    if zip_radius:
        result["zip_radius"] = zip_radius
    if city_state:
        result["city_state"] = city_state
    if county_state:
        result["county_state"] = county_state
    return result or None


async def list_packages() -> List[Dict[str, Any]]:
    return await get_store().select(TABLE, {"is_custom": {"$ne": True}}, order=[("price_per_lead", 1)])


async def get_custom_package(client_id: str) -> Dict[str, Any]:
    store = get_store()
    package = await store.find_one(TABLE, {"client_id": client_id, "is_custom": True})
    client = await store.get("clients", client_id)
    token = client.get("package_access_token")
    return {
        "package": package,
        "package_url": package_url(token) if package and token else None,
    }


async def generate_access_token() -> str:
    result = await get_gateway().invoke(GENERATE_PACKAGE_ACCESS_TOKEN, {})
    if not result.ok:
        raise RemoteCallFailed(f"Failed to generate access token: {result.message}",
                               result.error_kind.value, result.http_status)
    token = result.data
    if isinstance(token, dict):
        token = token.get("token")
    if not token or not isinstance(token, str):
        raise RemoteCallFailed("Failed to generate access token: empty response")
    return token


async def save_custom_package(client_id: str, form: CustomPackageSave, user: str = "system") -> Dict[str, Any]:
    if not form.name.strip():
        raise InputValidationError("Package name is required")

    store = get_store()
    client = await store.get("clients", client_id)

    data = {
        "name": form.name.strip(),
        "description": form.description,
        "price_per_lead": form.price_per_lead,
        "monthly_cost": form.monthly_cost,
        "setup_fee": form.setup_fee,
        "transaction_minimum": form.transaction_minimum,
        "leads_per_month": form.leads_per_month,
        "package_type": form.package_type,
        "location_filter": location_filter(form),
        "client_id": client_id,
        "is_custom": True,
        "active": True,
        "credits_included": 0,
    }

    with store_failure("Failed to save custom package"):
        existing = await store.find_one(TABLE, {"client_id": client_id, "is_custom": True})
        if existing:
            await store.update(TABLE, data, {"id": existing["id"]})
            package = {**existing, **data}
            message = "Custom package updated"
        else:
            package = await store.insert(TABLE, data)
            message = "Custom package created"

    token = client.get("package_access_token")
    client_patch = {"custom_package_id": package["id"], "setup_fee": form.setup_fee}
    if not token:
        token = await generate_access_token()
        client_patch["package_access_token"] = token

    with store_failure("Failed to assign custom package"):
        await store.update("clients", client_patch, {"id": client_id})

    logger.info(f"[PACKAGES] {message.lower()} for client {client_id}: {package['id']}")
    await log_event("save_custom_package", "client", client_id, user=user,
                    related={"package_id": package["id"]})
    return {
        "success": True,
        "message": message,
        "package": package,
        "package_url": package_url(token),
    }
