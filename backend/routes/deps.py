"""
OwlDoor CRM - Shared route dependencies
"""

from typing import Optional

from fastapi import Header


async def get_actor(x_actor: Optional[str] = Header(None)) -> str:
    """Name written to the audit trail; sign-in happens upstream of this service"""
    return (x_actor or "").strip() or "system"
