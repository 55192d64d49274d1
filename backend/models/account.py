"""
OwlDoor CRM - Client-account satellite models: reviews, pricing packages, Zapier
"""

from typing import Optional, List
from pydantic import BaseModel, Field


# ==================== REVIEWS ====================

class ClientReviewSave(BaseModel):
    """Create/update body; blank required fields are rejected by the service"""
    reviewer_name: str = ""
    review_text: str = ""
    reviewer_role: Optional[str] = None
    rating: int = Field(default=5, ge=1, le=5)
    years_with_team: Optional[str] = None


# ==================== PACKAGES ====================

class ZipRadius(BaseModel):
    zip: str = ""
    radius: Optional[float] = None


class CityState(BaseModel):
    city: str = ""
    state: str = ""


class CountyState(BaseModel):
    county: str = ""
    state: str = ""


class CustomPackageSave(BaseModel):
    name: str = ""
    description: str = ""
    price_per_lead: float = Field(default=0, ge=0)
    monthly_cost: float = Field(default=0, ge=0)
    setup_fee: float = Field(default=0, ge=0)
    transaction_minimum: int = Field(default=0, ge=0)
    leads_per_month: Optional[int] = None
    package_type: str = "non_exclusive"
    zip_radius: List[ZipRadius] = []
    city_state: List[CityState] = []
    county_state: List[CountyState] = []


# ==================== ZAPIER ====================

class ZapierKeyCreate(BaseModel):
    user_id: str
    name: str = ""


class ZapierWebhookCreate(BaseModel):
    user_id: str
    webhook_url: str
    event_type: str = "lead.created"
    entity_type: str = "pros"
