"""
OwlDoor CRM - Client credits

credits_balance only moves through these two functions, each a single
atomic $inc on the clients row (no read-modify-write).
"""

import logging
from typing import Any, Dict

from services.errors import InputValidationError, InsufficientCredits, RecordNotFound
from services.event_logger import log_event
from services.record_store import get_store, store_failure

logger = logging.getLogger("credits")


def _check_amount(amount: float) -> float:
    if amount is None or amount <= 0:
        raise InputValidationError("Amount must be greater than 0")
    return amount


async def add_credits(client_id: str, amount: float, user: str = "system") -> Dict[str, Any]:
    amount = _check_amount(amount)
    with store_failure("Failed to add credits"):
        client = await get_store().increment("clients", {"id": client_id}, {"credits_balance": amount})
    if client is None:
        raise RecordNotFound(f"Client {client_id} not found")

    logger.info(f"[CREDITS] +{amount} -> {client_id} (balance {client['credits_balance']})")
    await log_event("add_credits", "client", client_id, user=user,
                    details={"amount": amount, "new_balance": client["credits_balance"]})
    return client


async def deduct_credits(client_id: str, amount: float, user: str = "system") -> Dict[str, Any]:
    """
    Consume `amount` credits only if the balance covers it.
    The balance check and the decrement are the same store operation.
    """
    amount = _check_amount(amount)
    store = get_store()
    with store_failure("Failed to deduct credits"):
        client = await store.increment(
            "clients",
            {"id": client_id},
            {"credits_balance": -amount, "credits_used": amount},
            guard={"credits_balance": {"$gte": amount}},
        )
        if client is None:
            existing = await store.get("clients", client_id)

    if client is None:
        logger.warning(f"[CREDITS] {client_id}: balance {existing.get('credits_balance', 0)} < {amount}")
        raise InsufficientCredits(
            f"Insufficient credits: balance {existing.get('credits_balance', 0)}, required {amount}"
        )

    logger.info(f"[CREDITS] -{amount} <- {client_id} (balance {client['credits_balance']})")
    await log_event("deduct_credits", "client", client_id, user=user,
                    details={"amount": amount, "new_balance": client["credits_balance"]})
    return client
