"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Routes Clients                                                ║
║                                                                              ║
║  List (sidebar filters), detail, admin edit, credits, account links,         ║
║  manual creation, matches as the client sees them.                           ║
║  Clients are never deleted from here.                                        ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, Body, Depends, Query
from typing import Any, Dict, List

from models.client import ClientCreate, ClientFilterParams, CreditAdjust
from routes.deps import get_actor
from services.client_filters import eligibility_status, list_clients
from services.credits import add_credits, deduct_credits
from services.edit_session import ClientEditBuffer, save_client
from services.integrations import create_client, generate_magic_link, generate_payment_link
from services.matches import list_client_matches
from services.record_store import get_store

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("")
async def get_clients(
    search: str = Query("", description="company / contact / email"),
    location: str = Query("", description="state, city or zip"),
    package: List[str] = Query([], description="has_package | no_package"),
    status: List[str] = Query([], description="active | inactive"),
    payment: List[str] = Query([], description="has_card | needs_card"),
    credits: List[str] = Query([], description="has_credits | no_credits"),
):
    params = ClientFilterParams(
        search=search,
        location=location,
        package=package,
        status=status,
        payment=payment,
        credits=credits,
    )
    return await list_clients(params)


@router.post("")
async def create(data: ClientCreate, actor: str = Depends(get_actor)):
    """Manual creation through create-client-admin"""
    return await create_client(data, user=actor)


@router.get("/{client_id}")
async def get_client(client_id: str):
    client = await get_store().get("clients", client_id)
    return {
        "client": client,
        "form": ClientEditBuffer.from_record(client).values(),
        "eligibility": eligibility_status(client),
    }


@router.put("/{client_id}")
async def update_client(
    client_id: str,
    changes: Dict[str, Any] = Body(..., description="Edited form fields; credit columns are refused"),
    actor: str = Depends(get_actor),
):
    return await save_client(client_id, changes, user=actor)


@router.post("/{client_id}/credits/add")
async def credits_add(client_id: str, data: CreditAdjust, actor: str = Depends(get_actor)):
    client = await add_credits(client_id, data.amount, user=actor)
    return {
        "success": True,
        "message": f"Added {data.amount} credits",
        "credits_balance": client["credits_balance"],
    }


@router.post("/{client_id}/credits/deduct")
async def credits_deduct(client_id: str, data: CreditAdjust, actor: str = Depends(get_actor)):
    client = await deduct_credits(client_id, data.amount, user=actor)
    return {
        "success": True,
        "message": f"Deducted {data.amount} credits",
        "credits_balance": client["credits_balance"],
        "credits_used": client.get("credits_used", 0),
    }


@router.post("/{client_id}/magic-link")
async def magic_link(client_id: str, actor: str = Depends(get_actor)):
    return await generate_magic_link(client_id, user=actor)


@router.post("/{client_id}/payment-link")
async def payment_link(client_id: str, actor: str = Depends(get_actor)):
    return await generate_payment_link(client_id, user=actor)


@router.get("/{client_id}/matches")
async def get_matches(client_id: str):
    """Contact fields are stripped from matches that are not purchased"""
    matches = await list_client_matches(client_id)
    return {"matches": matches, "count": len(matches)}
