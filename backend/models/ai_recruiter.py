"""
OwlDoor CRM - AI recruiter models (ai_leads, ai_tasks, ai_card_layouts)
"""

from enum import Enum
from typing import Optional, List, Dict
from pydantic import BaseModel, field_validator


# ==================== TASKS ====================

class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AITaskCreate(BaseModel):
    client_id: str
    title: str
    ai_lead_id: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM


class AITaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[str] = None
    priority: Optional[TaskPriority] = None
    completed: Optional[bool] = None


# ==================== CARD LAYOUTS ====================

class ViewType(str, Enum):
    KANBAN = "kanban"
    LIST = "list"


# (key, label, category)
CARD_FIELDS = [
    ("avatar", "Avatar/Photo", "basic"),
    ("location", "Location", "basic"),
    ("hot_badge", "HOT Badge", "basic"),
    ("stage_badge", "Stage Badge", "basic"),
    ("engagement_score", "Engagement Score", "scores"),
    ("match_score", "Match Score", "scores"),
    ("experience", "Years Experience", "stats"),
    ("deals", "Total Deals", "stats"),
    ("volume", "Total Volume", "stats"),
    ("license_years", "Licensed Years", "stats"),
    ("phone", "Phone Number", "contact"),
    ("email", "Email Address", "contact"),
    ("wants", "Wants/Interests", "details"),
    ("service_areas", "Service Areas", "details"),
    ("next_action", "Next Action", "activity"),
    ("last_contact", "Last Contact Time", "activity"),
    ("messages_count", "Messages Count", "activity"),
    ("tasks_count", "Tasks Count", "activity"),
]

CARD_TOGGLE_KEYS = [f"show_{key}" for key, _, _ in CARD_FIELDS]


class CardLayoutSave(BaseModel):
    toggles: Dict[str, bool]

    @field_validator('toggles')
    @classmethod
    def known_toggles_only(cls, v):
        unknown = [k for k in v if k not in CARD_TOGGLE_KEYS]
        if unknown:
            raise ValueError(f"Unknown card fields: {unknown}")
        return v


class CardLayoutResponse(BaseModel):
    client_id: str
    view_type: ViewType
    toggles: Dict[str, bool]
    is_default: bool = False
    visible_fields: List[str] = []
