"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Client Model (paying account)                                 ║
║                                                                              ║
║  CREDIT RULES:                                                               ║
║  - credits_balance is NEVER written by a client edit/save                    ║
║  - only add_credits / deduct_credits touch it (atomic $inc)                  ║
║                                                                              ║
║  ELIGIBILITY (auto-buy) is derived, never stored:                            ║
║  - eligible = active AND credits_balance > 0 (payment method optional)       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Any, Optional, List
from pydantic import BaseModel, Field
import re


# List-typed columns on the client edit form
CLIENT_LIST_FIELDS = ["cities", "states", "zip_codes", "provides"]

# Columns a client save must never send
CLIENT_PROTECTED_FIELDS = ["id", "credits_balance", "credits_used", "user_id", "created_at"]


def is_valid_email_format(email: str) -> bool:
    """Basic email format check"""
    if not email:
        return False
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


class ClientUpdate(BaseModel):
    """Admin edit of a client. Credit columns are not part of it."""
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    active: Optional[bool] = None
    has_payment_method: Optional[bool] = None
    current_package_id: Optional[str] = None
    custom_package_id: Optional[str] = None
    setup_fee: Optional[float] = None
    cities: Optional[List[str]] = None
    states: Optional[List[str]] = None
    zip_codes: Optional[List[str]] = None
    hide_bids: Optional[bool] = None
    provides: Optional[List[str]] = None


class ClientEditForm(BaseModel):
    """Admin edit buffer: list columns as comma-joined strings"""
    company_name: str = ""
    contact_name: str = ""
    email: str = ""
    phone: str = ""
    active: bool = True
    has_payment_method: bool = False
    current_package_id: str = ""
    custom_package_id: str = ""
    setup_fee: Any = None
    cities: str = ""
    states: str = ""
    zip_codes: str = ""
    hide_bids: bool = False
    provides: str = ""


class ClientCreate(BaseModel):
    """Payload for the create-client-admin procedure"""
    company_name: str = ""
    email: str = ""
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    package_id: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    county: Optional[str] = None
    years_experience: Optional[str] = None
    yearly_sales: Optional[str] = None


class CreditAdjust(BaseModel):
    amount: float = Field(gt=0)


class ClientFilterParams(BaseModel):
    """Selected filters of the client list sidebar"""
    search: str = ""
    location: str = ""
    package: List[str] = []   # has_package | no_package
    status: List[str] = []    # active | inactive
    payment: List[str] = []   # has_card | needs_card
    credits: List[str] = []   # has_credits | no_credits
