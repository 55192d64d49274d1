"""
OwlDoor CRM - Custom fields

Definitions are append-only. Values are unique per (custom_field_id, record_id).
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


VALID_FIELD_TYPES = [t.value for t in FieldType]

DEFAULT_TARGET_TABLE = "leads"


class CustomFieldCreate(BaseModel):
    field_name: str
    field_type: FieldType = FieldType.TEXT
    target_table: str = DEFAULT_TARGET_TABLE


class CustomFieldValueSave(BaseModel):
    value: Optional[str] = None
