"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Client list filters                                           ║
║                                                                              ║
║  AND across categories, OR inside a category, empty category = pass all.     ║
║                                                                              ║
║  search    company_name / contact_name / email (case-insensitive)            ║
║  location  any state or city (case-insensitive), any zip (plain substring)   ║
║  package   has_package | no_package  (current OR custom package set)         ║
║  status    active | inactive                                                 ║
║  payment   has_card | needs_card                                             ║
║  credits   has_credits (> 0) | no_credits (<= 0)                             ║
║                                                                              ║
║  Eligibility is recomputed on every call, never stored.                      ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Any, Callable, Dict, Iterable, List

from models.client import ClientFilterParams
from services.record_store import get_store

ClientPredicate = Callable[[Dict[str, Any]], bool]

HAS_PACKAGE = "has_package"
NO_PACKAGE = "no_package"
ACTIVE = "active"
INACTIVE = "inactive"
HAS_CARD = "has_card"
NEEDS_CARD = "needs_card"
HAS_CREDITS = "has_credits"
NO_CREDITS = "no_credits"

READY_FOR_AUTO_BUY = "Ready for auto-buy"


def _balance(client: Dict[str, Any]) -> float:
    return client.get("credits_balance") or 0


def has_package(client: Dict[str, Any]) -> bool:
    return bool(client.get("current_package_id") or client.get("custom_package_id"))


def matches_search(client: Dict[str, Any], search: str) -> bool:
    if not search:
        return True
    term = search.lower()
    return any(
        term in (client.get(name) or "").lower()
        for name in ("company_name", "contact_name", "email")
    )


def matches_location(client: Dict[str, Any], location: str) -> bool:
    if not location:
        return True
    term = location.lower()
    return (
        any(term in (s or "").lower() for s in client.get("states") or [])
        or any(term in (c or "").lower() for c in client.get("cities") or [])
        or any(location in (z or "") for z in client.get("zip_codes") or [])
    )


# category -> {selected value -> predicate}
CATEGORY_PREDICATES: Dict[str, Dict[str, ClientPredicate]] = {
    "package": {
        HAS_PACKAGE: has_package,
        NO_PACKAGE: lambda c: not has_package(c),
    },
    "status": {
        ACTIVE: lambda c: bool(c.get("active")),
        INACTIVE: lambda c: not c.get("active"),
    },
    "payment": {
        HAS_CARD: lambda c: bool(c.get("has_payment_method")),
        NEEDS_CARD: lambda c: not c.get("has_payment_method"),
    },
    "credits": {
        HAS_CREDITS: lambda c: _balance(c) > 0,
        NO_CREDITS: lambda c: _balance(c) <= 0,
    },
}


def matches_category(client: Dict[str, Any], category: str, selected: Iterable[str]) -> bool:
    selected = list(selected)
    if not selected:
        return True
    predicates = CATEGORY_PREDICATES[category]
    return any(predicates[value](client) for value in selected if value in predicates)


def matches(client: Dict[str, Any], params: ClientFilterParams) -> bool:
    if not matches_search(client, params.search):
        return False
    if not matches_location(client, params.location):
        return False
    return all(
        matches_category(client, category, getattr(params, category))
        for category in CATEGORY_PREDICATES
    )


def filter_clients(clients: List[Dict[str, Any]], params: ClientFilterParams) -> List[Dict[str, Any]]:
    return [c for c in clients if matches(c, params)]


def is_eligible(client: Dict[str, Any]) -> bool:
    """Auto-buy eligibility; a payment method is not required"""
    return bool(client.get("active")) and _balance(client) > 0


def eligibility_status(client: Dict[str, Any]) -> Dict[str, Any]:
    reasons = []
    if not client.get("active"):
        reasons.append("Inactive account")
    if _balance(client) <= 0:
        reasons.append("No credits")
    if not client.get("has_payment_method"):
        reasons.append("No payment method")
    return {
        "eligible": is_eligible(client),
        "reasons": reasons or [READY_FOR_AUTO_BUY],
    }


def active_filter_count(params: ClientFilterParams) -> int:
    selected = sum(len(getattr(params, category)) for category in CATEGORY_PREDICATES)
    return selected + (1 if params.location else 0)


async def list_clients(params: ClientFilterParams) -> Dict[str, Any]:
    """Full slice, filtered in memory, each row annotated with its eligibility"""
    clients = await get_store().select("clients", {}, order=[("created_at", -1)])
    rows = [
        {**client, "eligibility": eligibility_status(client)}
        for client in filter_clients(clients, params)
    ]
    return {
        "clients": rows,
        "count": len(rows),
        "total": len(clients),
        "active_filter_count": active_filter_count(params),
    }
