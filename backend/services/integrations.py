"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Remote procedure operations                                   ║
║                                                                              ║
║  pdl-enrich               lead enrichment (email preferred, else phone)      ║
║  generate-magic-link      passwordless login for a client's user (24 h)      ║
║  generate-payment-link    checkout link for a client                         ║
║  create-client-admin      manual client creation                             ║
║  research-lead            AI research on a PURCHASED recruit                 ║
║                                                                              ║
║  Input checks happen before anything goes on the network.                    ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from models.client import ClientCreate
from services.coercion import float_or_none, int_or_none
from services.errors import InputValidationError, RemoteCallFailed
from services.event_logger import log_event
from services.record_store import get_store
from services.remote_procedures import (
    CREATE_CLIENT_ADMIN,
    ENRICH_LOOKUP,
    GENERATE_MAGIC_LINK,
    GENERATE_PAYMENT_LINK,
    RESEARCH_LEAD,
    ErrorKind,
    RemoteResult,
    get_gateway,
)

logger = logging.getLogger("integrations")

MAGIC_LINK_VALID_HOURS = 24


class EnrichmentOutcome(str, Enum):
    ENRICHED = "enriched"
    NO_DATA = "no_data"
    FAILED = "failed"


# notification tone per outcome
OUTCOME_TONE = {
    EnrichmentOutcome.ENRICHED: "success",
    EnrichmentOutcome.NO_DATA: "warning",
    EnrichmentOutcome.FAILED: "error",
}


def _raise_for(result: RemoteResult, prefix: str) -> None:
    if not result.ok:
        raise RemoteCallFailed(f"{prefix}: {result.message}", result.error_kind.value, result.http_status)


def _data(result: RemoteResult) -> Dict[str, Any]:
    return result.data if isinstance(result.data, dict) else {}


# ==================== ENRICHMENT ====================

def enrichment_params(lead: Dict[str, Any]) -> Dict[str, str]:
    if lead.get("email"):
        return {"email": lead["email"]}
    if lead.get("phone"):
        return {"phone": lead["phone"]}
    raise InputValidationError("Need email or phone to enrich")


def classify_enrichment(result: RemoteResult) -> EnrichmentOutcome:
    if not result.ok:
        return EnrichmentOutcome.FAILED
    data = _data(result)
    if data.get("status") == 200 and data.get("data"):
        return EnrichmentOutcome.ENRICHED
    return EnrichmentOutcome.NO_DATA


async def enrich_lead(record_id: str, user: str = "system") -> Dict[str, Any]:
    """
    Ask the enrichment provider about one lead.
    The three outcomes map to three notification tones; a remote error is
    reported in the result (tone "error"), not raised.
    """
    lead = await get_store().get("pros", record_id)
    params = enrichment_params(lead)

    result = await get_gateway().invoke(ENRICH_LOOKUP, {
        "action": "enrich",
        "type": "person",
        "params": params,
        "recordId": record_id,
    })
    outcome = classify_enrichment(result)

    if outcome == EnrichmentOutcome.ENRICHED:
        message = "Successfully enriched lead!"
    elif outcome == EnrichmentOutcome.NO_DATA:
        message = "No additional data found"
    else:
        message = f"Enrichment failed: {result.message}"

    logger.info(f"[ENRICH] {record_id}: {outcome.value}")
    if outcome == EnrichmentOutcome.ENRICHED:
        await log_event("enrich_lead", "pro", record_id, user=user, details={"params": list(params)})

    return {
        "success": outcome != EnrichmentOutcome.FAILED,
        "outcome": outcome.value,
        "tone": OUTCOME_TONE[outcome],
        "message": message,
        "error_kind": result.error_kind.value if result.error_kind else None,
        "data": _data(result).get("data") if result.ok else None,
    }


# ==================== CLIENT ACCOUNT LINKS ====================

async def generate_magic_link(client_id: str, user: str = "system") -> Dict[str, Any]:
    client = await get_store().get("clients", client_id)
    if not client.get("user_id"):
        raise InputValidationError("Client has no linked user account")

    result = await get_gateway().invoke(GENERATE_MAGIC_LINK, {"targetUserId": client["user_id"]})
    _raise_for(result, "Failed to generate magic link")
    link = _data(result).get("magicLink")
    if not link:
        raise RemoteCallFailed("Failed to generate magic link: empty response")

    await log_event("generate_magic_link", "client", client_id, user=user)
    return {
        "success": True,
        "magic_link": link,
        "valid_hours": MAGIC_LINK_VALID_HOURS,
        "message": f"Magic link generated (valid for {MAGIC_LINK_VALID_HOURS} hours)",
    }


async def generate_payment_link(client_id: str, user: str = "system") -> Dict[str, Any]:
    await get_store().get("clients", client_id)

    result = await get_gateway().invoke(GENERATE_PAYMENT_LINK, {"client_id": client_id})
    _raise_for(result, "Failed to generate payment link")
    link = _data(result).get("link")
    if not link:
        raise RemoteCallFailed("Failed to generate payment link: empty response")

    await log_event("generate_payment_link", "client", client_id, user=user)
    return {"success": True, "link": link, "message": "Payment link generated"}


# ==================== CLIENT CREATION ====================

def create_client_body(form: ClientCreate) -> Dict[str, Any]:
    """Request body; optional blanks are left out, single location values become lists"""
    body = {
        "company_name": form.company_name.strip(),
        "contact_name": form.contact_name,
        "email": form.email.strip(),
        "phone": form.phone,
        "package_id": form.package_id or None,
    }
    optional = {
        "password": form.password or None,
        "first_name": form.first_name or None,
        "last_name": form.last_name or None,
        "cities": [form.city] if form.city else None,
        "states": [form.state] if form.state else None,
        "zip_codes": [form.zip_code] if form.zip_code else None,
        "county": form.county or None,
        "years_experience": int_or_none(form.years_experience) if form.years_experience else None,
        "yearly_sales": float_or_none(form.yearly_sales) if form.yearly_sales else None,
    }
    body.update({k: v for k, v in optional.items() if v is not None})
    return body


async def create_client(form: ClientCreate, user: str = "system") -> Dict[str, Any]:
    if not form.company_name.strip() or not form.email.strip():
        raise InputValidationError("Company name and email are required")

    result = await get_gateway().invoke(CREATE_CLIENT_ADMIN, create_client_body(form))
    _raise_for(result, "Failed to create client")
    data = _data(result)
    if not data.get("success"):
        raise RemoteCallFailed(data.get("error") or "Failed to create client", ErrorKind.UPSTREAM.value, 502)

    logger.info(f"[CLIENTS] created {form.company_name} <{form.email}>")
    await log_event("create_client", "client", data.get("client_id") or form.email, user=user,
                    details={"company_name": form.company_name, "package_id": form.package_id})
    return {
        "success": True,
        "message": "Client created successfully",
        "description": "Payment link has been sent to the client" if form.package_id
        else "Client account has been created",
        "data": data,
    }


# ==================== RESEARCH ====================

async def research_lead(client_id: str, pro_id: str) -> Dict[str, Any]:
    """AI research on a recruit; only allowed once the client purchased the match"""
    match: Optional[Dict[str, Any]] = None
    if client_id and pro_id:
        match = await get_store().find_one("matches", {"client_id": client_id, "pro_id": pro_id})
    if not match or not match.get("purchased"):
        raise InputValidationError("You must purchase this recruit first to research them.")

    result = await get_gateway().invoke(RESEARCH_LEAD, {"pro_id": pro_id, "client_id": client_id})
    _raise_for(result, "Failed to research lead")
    data = _data(result)
    if not data.get("success"):
        raise RemoteCallFailed(data.get("error") or "Failed to research lead", ErrorKind.UPSTREAM.value, 502)

    return {
        "success": True,
        "message": "AI has completed researching this lead!",
        "research": data.get("research"),
    }
