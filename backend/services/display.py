"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Display formats                                               ║
║                                                                              ║
║  Must match the dashboard character for character:                           ║
║  - currency   < 1K "$n" | < 1M "$nK" (0 dp) | >= 1M "$n.nnM" (2 dp)          ║
║  - rounding   ties go up (toFixed / Math.round), NOT banker's rounding       ║
║  - stars      floor(score / 10 + 0.5), 0..10                                 ║
║  - initials   first letter of each word, upper, max 2                        ║
║  - source     "model-match" -> "OwlDoor Match"                               ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

from services.coercion import clamp

MODEL_MATCH_SOURCE = "model-match"
MODEL_MATCH_LABEL = "OwlDoor Match"


def _is_blank_number(amount) -> bool:
    return not amount or (isinstance(amount, float) and math.isnan(amount))


def to_fixed(value: float, digits: int) -> str:
    """Fixed-point string, ties rounded upward"""
    quantum = Decimal(1).scaleb(-digits)
    return format(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP), "f")


def js_number(value: float) -> str:
    """Number as the browser prints it (no trailing .0)"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def format_currency(amount: Optional[float]) -> str:
    if _is_blank_number(amount):
        return "$0"
    if amount >= 1_000_000:
        return f"${to_fixed(amount / 1_000_000, 2)}M"
    if amount >= 1_000:
        return f"${to_fixed(amount / 1_000, 0)}K"
    return f"${js_number(amount)}"


def get_initials(name: Optional[str]) -> str:
    return "".join(part[0] for part in (name or "").split()).upper()[:2]


def js_round(value: float) -> int:
    return math.floor(value + 0.5)


def score_to_stars(qualification_score: Optional[float]) -> int:
    """Stars out of 10"""
    return clamp(js_round((qualification_score or 0) / 10), 0, 10)


def motivation_percent(motivation: Optional[float]) -> float:
    """Width of the motivation bar"""
    return clamp(float(motivation or 0) * 10, 0, 100)


def format_source(source: Optional[str], fallback: str = "N/A") -> str:
    """Detail views fall back to "N/A", pipeline cards to "Referral" """
    if source == MODEL_MATCH_SOURCE:
        return MODEL_MATCH_LABEL
    return source or fallback


def agent_type(buyer_percentage: Optional[float], seller_percentage: Optional[float]) -> Optional[str]:
    if not buyer_percentage and not seller_percentage:
        return None
    if (buyer_percentage or 0) > 60:
        return "Buyer Agent"
    if (seller_percentage or 0) > 60:
        return "Listing Agent"
    return "Balanced"


def pipeline_card(lead: Dict[str, Any]) -> Dict[str, Any]:
    """Display block for one kanban card"""
    total_volume = lead.get("total_volume") or lead.get("total_sales") or 0
    total_units = lead.get("total_units") or lead.get("transactions") or 0
    motivation = lead.get("motivation") or 0
    return {
        "initials": get_initials(lead.get("full_name")),
        "company": lead.get("brokerage") or lead.get("company") or "Independent",
        "volume": format_currency(total_volume),
        "average_price": format_currency(total_volume / total_units) if total_units > 0 else "$0",
        "stars": score_to_stars(lead.get("qualification_score")),
        "motivation": f"{motivation}/10",
        "motivation_percent": motivation_percent(motivation),
        "source": format_source(lead.get("source"), fallback="Referral"),
        "agent_type": agent_type(lead.get("buyer_percentage"), lead.get("seller_percentage")),
    }
