"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Pro (Lead) Model                                              ║
║                                                                              ║
║  INVARIANTS:                                                                 ║
║  - full_name == trim(first_name + " " + last_name) after any name edit       ║
║  - qualification_score in [0, 100]                                           ║
║  - motivation in [0, 10]                                                     ║
║  - phone is required                                                         ║
║  - pros are never deleted by CRM flows                                       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Any, Optional, List
from pydantic import BaseModel, Field


# List-typed columns, edited as comma-joined strings
PRO_LIST_FIELDS = ["cities", "states", "counties", "zip_codes", "skills", "wants"]

# Plain text columns ("" is stored as null, except phone/status/stage)
PRO_TEXT_FIELDS = [
    "first_name", "last_name", "email", "brokerage", "company",
    "pro_type", "license_type", "source", "team", "notes",
]


def compose_full_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """trim(first + " " + last), missing parts treated as empty"""
    return f"{first_name or ''} {last_name or ''}".strip()


class ProUpdate(BaseModel):
    """
    Typed partial update for a pro.
    Only fields explicitly set are written (model_dump(exclude_unset=True)).
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    pipeline_stage: Optional[str] = None
    pro_type: Optional[str] = None
    brokerage: Optional[str] = None
    company: Optional[str] = None
    license_type: Optional[str] = None
    source: Optional[str] = None
    team: Optional[str] = None
    notes: Optional[str] = None
    experience: Optional[int] = None
    transactions: Optional[int] = None
    total_sales: Optional[float] = None
    qualification_score: Optional[int] = Field(default=None, ge=0, le=100)
    motivation: Optional[int] = Field(default=None, ge=0, le=10)
    cities: Optional[List[str]] = None
    states: Optional[List[str]] = None
    counties: Optional[List[str]] = None
    zip_codes: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    wants: Optional[List[str]] = None


class ProEditForm(BaseModel):
    """
    Edit buffer as the detail modal holds it:
    list columns as comma-joined strings, numerics as raw input.
    """
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    brokerage: str = ""
    company: str = ""
    status: str = "new"
    pipeline_stage: str = "new"
    experience: Any = 0
    transactions: Any = 0
    total_sales: Any = 0
    qualification_score: Any = 0
    motivation: Any = 0
    license_type: str = ""
    source: str = ""
    team: str = ""
    notes: str = ""
    pro_type: str = ""
    cities: str = ""
    states: str = ""
    counties: str = ""
    zip_codes: str = ""
    skills: str = ""
    wants: str = ""


class StageMove(BaseModel):
    """Drop of a card on a kanban column"""
    record_id: str
    stage: str
