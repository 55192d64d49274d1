"""
OwlDoor CRM - Matches as the client sees them

Contact fields leave the server only for purchased matches.
"""

from typing import Any, Dict, List

from models.match import MATCH_CONTACT_FIELDS
from services.record_store import get_store


def client_view(match: Dict[str, Any]) -> Dict[str, Any]:
    if match.get("purchased"):
        return dict(match)
    hidden = {k: v for k, v in match.items() if k not in MATCH_CONTACT_FIELDS}
    hidden["contact_locked"] = True
    return hidden


async def list_client_matches(client_id: str) -> List[Dict[str, Any]]:
    matches = await get_store().select(
        "matches",
        {"client_id": client_id},
        order=[("match_score", -1), ("created_at", -1)],
    )
    return [client_view(m) for m in matches]
