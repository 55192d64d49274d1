"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Edit sessions (lead and client detail modals)                 ║
║                                                                              ║
║  OPEN    fetch the record fresh, drop any previous buffer                    ║
║  EDIT    buffer = copy of every editable field, lists as "a, b, c"           ║
║  CHANGE  any set_field -> has_changes = True                                 ║
║  CANCEL  buffer discarded, has_changes = False                               ║
║  SAVE    buffer -> typed update -> diff vs loaded record -> ONE update       ║
║          - only edited fields (and full_name from the names) are written     ║
║          - lists re-split / trimmed / empties dropped                        ║
║          - numerics parseInt/parseFloat, failure or 0 -> null, never raises  ║
║          - full_name = trim(first + " " + last)                              ║
║          - stage into "qualifying" -> auto-enrich (after the write)          ║
║          - store failure: buffer KEPT, "Failed to update lead"               ║
║                                                                              ║
║  Stale fetches: each open() bumps a generation counter; a fetch that         ║
║  completes after a newer open() is ignored.                                  ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set, Tuple, Type

from pydantic import BaseModel, ValidationError

from models.client import (
    CLIENT_LIST_FIELDS,
    CLIENT_PROTECTED_FIELDS,
    ClientEditForm,
    ClientUpdate,
    is_valid_email_format,
)
from models.lead import (
    PRO_LIST_FIELDS,
    PRO_TEXT_FIELDS,
    ProEditForm,
    ProUpdate,
    compose_full_name,
)
from models.pipeline import PipelineType, ProStatus, ProType, is_valid_stage
from services.coercion import clamp, float_or_none, int_or_none, join_list, split_list
from services.custom_fields import get_values_for_record
from services.errors import InputValidationError
from services.event_logger import log_event
from services.record_store import get_store, store_failure
from services.stage_transitions import on_pipeline_stage_change

logger = logging.getLogger("edit_session")

LEAD_SAVE_FAILED = "Failed to update lead"
LEAD_SAVED = "Lead updated successfully"
CLIENT_SAVE_FAILED = "Failed to update client"
CLIENT_SAVED = "Client updated successfully"
NO_CHANGES = "No changes to save"

# Lead text columns kept as typed even when blank
PRO_VERBATIM_FIELDS = ["phone", "status", "pipeline_stage"]

# Boards backed by pros.pipeline_stage
LEAD_PIPELINES = (PipelineType.STAFF, PipelineType.CLIENT)


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value) or None


# ==================== BUFFERS ====================

class EditBuffer:
    """Editable copy of one record, held as form values"""

    form_model: Type[BaseModel] = BaseModel
    list_fields: List[str] = []
    # derived column -> form fields it is computed from
    derived_fields: Dict[str, Tuple[str, ...]] = {}

    def __init__(self, form: BaseModel):
        self.form = form
        self.touched: Set[str] = set()

    @property
    def has_changes(self) -> bool:
        return bool(self.touched)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "EditBuffer":
        values = {}
        for name, field in cls.form_model.model_fields.items():
            raw = record.get(name)
            if name in cls.list_fields:
                values[name] = join_list(raw)
            elif raw is None:
                values[name] = field.get_default()
            else:
                values[name] = raw
        return cls(cls.form_model.model_construct(**values))

    def get_field(self, name: str) -> Any:
        return getattr(self.form, name)

    def set_field(self, name: str, value: Any) -> None:
        if name not in self.form_model.model_fields:
            raise InputValidationError(f"'{name}' is not an editable field")
        setattr(self.form, name, value)
        self.touched.add(name)

    def apply(self, changes: Dict[str, Any]) -> None:
        for name, value in changes.items():
            self.set_field(name, value)

    def values(self) -> Dict[str, Any]:
        return {name: getattr(self.form, name) for name in self.form_model.model_fields}

    def to_update(self) -> BaseModel:
        raise NotImplementedError

    def diff(self, original: Dict[str, Any]) -> Dict[str, Any]:
        """
        Edited fields (plus the columns derived from them) whose typed value
        differs from the loaded record. Untouched fields are never written,
        even when the record lacks them and the form shows a default.
        """
        names = set(self.touched)
        names.update(d for d, sources in self.derived_fields.items() if names.intersection(sources))
        update = self.to_update().model_dump()
        return {
            name: value for name, value in update.items()
            if name in names and original.get(name) != value
        }

    def merge(self, original: Dict[str, Any]) -> Dict[str, Any]:
        return {**original, **self.diff(original)}

class LeadEditBuffer(EditBuffer):
    form_model = ProEditForm
    list_fields = PRO_LIST_FIELDS
    derived_fields = {"full_name": ("first_name", "last_name")}

    def diff(self, original: Dict[str, Any]) -> Dict[str, Any]:
        """Stage and status are only checked when they change (legacy rows stay saveable)"""
        patch = super().diff(original)
        stage = patch.get("pipeline_stage")
        if "pipeline_stage" in patch and not any(is_valid_stage(p, stage) for p in LEAD_PIPELINES):
            raise InputValidationError(f"Unknown pipeline stage '{stage}'")
        if "status" in patch and patch["status"] not in [s.value for s in ProStatus]:
            raise InputValidationError(f"Unknown status '{patch['status']}'")
        pro_type = patch.get("pro_type")
        if pro_type is not None and pro_type not in [t.value for t in ProType]:
            raise InputValidationError(f"Unknown pro type '{pro_type}'")
        return patch

    def to_update(self) -> ProUpdate:
        form = self.form
        data = {name: _text_or_none(getattr(form, name)) for name in PRO_TEXT_FIELDS}
        for name in PRO_VERBATIM_FIELDS:
            data[name] = getattr(form, name)
        for name in PRO_LIST_FIELDS:
            data[name] = split_list(getattr(form, name))

        data["experience"] = int_or_none(form.experience)
        data["transactions"] = int_or_none(form.transactions)
        data["qualification_score"] = clamp(int_or_none(form.qualification_score), 0, 100)
        data["motivation"] = clamp(int_or_none(form.motivation), 0, 10)
        data["total_sales"] = float_or_none(form.total_sales)
        data["full_name"] = compose_full_name(form.first_name, form.last_name)
        return ProUpdate(**data)


class ClientEditBuffer(EditBuffer):
    form_model = ClientEditForm
    list_fields = CLIENT_LIST_FIELDS

    def set_field(self, name: str, value: Any) -> None:
        if name in CLIENT_PROTECTED_FIELDS:
            raise InputValidationError(f"'{name}' cannot be edited here")
        super().set_field(name, value)

    def diff(self, original: Dict[str, Any]) -> Dict[str, Any]:
        """The email format is only checked when the email changes"""
        patch = super().diff(original)
        if "email" in patch and not is_valid_email_format(patch["email"]):
            raise InputValidationError(f"Invalid email format: {patch['email']}")
        return patch

    def to_update(self) -> ClientUpdate:
        form = self.form
        if not (form.company_name or "").strip() or not (form.email or "").strip():
            raise InputValidationError("Company name and email are required")

        data = {
            "company_name": form.company_name.strip(),
            "contact_name": form.contact_name or "",
            "email": form.email.strip(),
            "phone": _text_or_none(form.phone),
            "active": bool(form.active),
            "has_payment_method": bool(form.has_payment_method),
            "current_package_id": _text_or_none(form.current_package_id),
            "custom_package_id": _text_or_none(form.custom_package_id),
            "setup_fee": float_or_none(form.setup_fee),
            "hide_bids": bool(form.hide_bids),
        }
        for name in CLIENT_LIST_FIELDS:
            data[name] = split_list(getattr(form, name)) or []
        try:
            return ClientUpdate(**data)
        except ValidationError as e:
            raise InputValidationError(e.errors()[0]["msg"].replace("Value error, ", "")) from e


# ==================== COMMITS ====================

async def commit_lead(record: Dict[str, Any], buffer: LeadEditBuffer, user: str = "system") -> Dict[str, Any]:
    """
    Write the buffer's changes to `record` in a single update.
    Raises (buffer untouched) when the store rejects the write.
    """
    patch = buffer.diff(record)
    if not patch:
        return {"success": True, "message": NO_CHANGES, "record": record, "changed": []}

    record_id = record["id"]
    with store_failure(LEAD_SAVE_FAILED):
        previous = await get_store().swap("pros", patch, {"id": record_id})

    if "pipeline_stage" in patch:
        on_pipeline_stage_change(record_id, previous.get("pipeline_stage"), patch["pipeline_stage"])

    logger.info(f"[EDIT] pros {record_id} saved: {sorted(patch)}")
    await log_event("save_lead", "pro", record_id, user=user, details={"fields": sorted(patch)})
    return {"success": True, "message": LEAD_SAVED, "record": {**previous, **patch}, "changed": sorted(patch)}


async def save_lead(record_id: str, changes: Dict[str, Any], user: str = "system") -> Dict[str, Any]:
    """Open, apply edited fields, save (HTTP path: one request = one session)"""
    with store_failure(LEAD_SAVE_FAILED):
        record = await get_store().get("pros", record_id)
    buffer = LeadEditBuffer.from_record(record)
    buffer.apply(changes)
    return await commit_lead(record, buffer, user)


async def commit_client(record: Dict[str, Any], buffer: ClientEditBuffer, user: str = "system") -> Dict[str, Any]:
    patch = buffer.diff(record)
    for name in CLIENT_PROTECTED_FIELDS:
        patch.pop(name, None)
    if not patch:
        return {"success": True, "message": NO_CHANGES, "record": record, "changed": []}

    client_id = record["id"]
    with store_failure(CLIENT_SAVE_FAILED):
        await get_store().update("clients", patch, {"id": client_id})

    logger.info(f"[EDIT] clients {client_id} saved: {sorted(patch)}")
    await log_event("save_client", "client", client_id, user=user, details={"fields": sorted(patch)})
    return {"success": True, "message": CLIENT_SAVED, "record": {**record, **patch}, "changed": sorted(patch)}


async def save_client(client_id: str, changes: Dict[str, Any], user: str = "system") -> Dict[str, Any]:
    with store_failure(CLIENT_SAVE_FAILED):
        record = await get_store().get("clients", client_id)
    buffer = ClientEditBuffer.from_record(record)
    buffer.apply(changes)
    return await commit_client(record, buffer, user)


# ==================== SESSION ====================

class LeadEditSession:
    """
    State of one lead detail modal.
    Reusable across records: open() a different id to switch.
    """

    def __init__(self, user: str = "system"):
        self.user = user
        self.generation = 0
        self.record_id: Optional[str] = None
        self.record: Optional[Dict[str, Any]] = None
        self.custom_values: List[Dict[str, Any]] = []
        self.buffer: Optional[LeadEditBuffer] = None

    @property
    def editing(self) -> bool:
        return self.buffer is not None

    @property
    def has_changes(self) -> bool:
        return self.buffer is not None and self.buffer.has_changes

    async def open(self, record_id: str) -> Optional[Dict[str, Any]]:
        """
        Load the record and its custom field values.
        Returns None if another open()/close() happened while loading.
        """
        self.generation += 1
        generation = self.generation
        self.record_id = record_id
        self.record = None
        self.custom_values = []
        self.buffer = None

        record, values = await asyncio.gather(
            get_store().get("pros", record_id),
            get_values_for_record(record_id),
        )
        if generation != self.generation:
            logger.info(f"[EDIT] stale load of {record_id} ignored")
            return None

        self.record = record
        self.custom_values = values
        return record

    def close(self) -> None:
        self.generation += 1
        self.record_id = None
        self.record = None
        self.custom_values = []
        self.buffer = None

    def start_edit(self) -> LeadEditBuffer:
        if self.record is None:
            raise InputValidationError("No lead loaded")
        self.buffer = LeadEditBuffer.from_record(self.record)
        return self.buffer

    def set_field(self, name: str, value: Any) -> None:
        if self.buffer is None:
            raise InputValidationError("Lead is not in edit mode")
        self.buffer.set_field(name, value)

    def cancel_edit(self) -> None:
        self.buffer = None

    async def save(self) -> Dict[str, Any]:
        if self.buffer is None or self.record is None:
            raise InputValidationError("Lead is not in edit mode")
        generation = self.generation
        result = await commit_lead(self.record, self.buffer, self.user)
        if generation == self.generation:
            self.record = result["record"]
            self.buffer = None
        return result
