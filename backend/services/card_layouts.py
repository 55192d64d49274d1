"""
OwlDoor CRM - AI recruiter card layouts

One layout per (client_id, view_type). No saved layout = every field shown.
"""

import logging
from typing import Dict

from models.ai_recruiter import CARD_FIELDS, CARD_TOGGLE_KEYS, CardLayoutResponse, ViewType
from services.errors import InputValidationError
from services.record_store import get_store, store_failure

logger = logging.getLogger("card_layouts")

TABLE = "ai_card_layouts"
LAYOUT_KEY = ("client_id", "view_type")


def default_toggles() -> Dict[str, bool]:
    return {key: True for key in CARD_TOGGLE_KEYS}


def _response(client_id: str, view_type: ViewType, toggles: Dict[str, bool], is_default: bool) -> CardLayoutResponse:
    return CardLayoutResponse(
        client_id=client_id,
        view_type=view_type,
        toggles=toggles,
        is_default=is_default,
        visible_fields=[key for key, _, _ in CARD_FIELDS if toggles.get(f"show_{key}")],
    )


async def get_layout(client_id: str, view_type: ViewType) -> CardLayoutResponse:
    view_type = ViewType(view_type)
    row = await get_store().find_one(TABLE, {"client_id": client_id, "view_type": view_type.value})
    if not row:
        return _response(client_id, view_type, default_toggles(), True)
    # toggles added to the catalogue after the layout was saved default to on
    toggles = {key: bool(row.get(key, True)) for key in CARD_TOGGLE_KEYS}
    return _response(client_id, view_type, toggles, False)


async def save_layout(client_id: str, view_type: ViewType, toggles: Dict[str, bool]) -> CardLayoutResponse:
    """Upsert on (client_id, view_type); toggles not sent keep their stored (or default) value"""
    if not client_id:
        raise InputValidationError("client_id is required")
    view_type = ViewType(view_type)
    unknown = [k for k in toggles if k not in CARD_TOGGLE_KEYS]
    if unknown:
        raise InputValidationError(f"Unknown card fields: {unknown}")

    current = await get_layout(client_id, view_type)
    merged = {**current.toggles, **{k: bool(v) for k, v in toggles.items()}}

    with store_failure("Failed to save card layout"):
        await get_store().upsert(
            TABLE,
            {"client_id": client_id, "view_type": view_type.value, **merged},
            conflict_keys=LAYOUT_KEY,
        )

    logger.info(f"[CARD_LAYOUT] {client_id}/{view_type.value} saved ({sum(merged.values())} fields shown)")
    return _response(client_id, view_type, merged, False)
