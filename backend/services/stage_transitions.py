"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Stage transition side effects                                 ║
║                                                                              ║
║  RULE: old_stage != "qualifying" AND new_stage == "qualifying"               ║
║        -> ONE fire-and-forget auto-enrich-trigger                            ║
║           {type: "lead_qualifying", record_id}                               ║
║                                                                              ║
║  - qualifying -> qualifying: nothing                                         ║
║  - the trigger never blocks nor fails the stage update                       ║
║  - shared by the kanban drop and the edit session save                       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import Optional

from models.pipeline import QUALIFYING_STAGE
from services.remote_procedures import AUTO_ENRICH_TRIGGER, get_gateway

logger = logging.getLogger("stage_transitions")

LEAD_QUALIFYING_EVENT = "lead_qualifying"


def should_trigger_enrichment(old_stage: Optional[str], new_stage: Optional[str]) -> bool:
    return old_stage != QUALIFYING_STAGE and new_stage == QUALIFYING_STAGE


def on_pipeline_stage_change(record_id: str, old_stage: Optional[str], new_stage: Optional[str]) -> bool:
    """
    Run the side effects of a committed pros.pipeline_stage change.
    Call only AFTER the store update succeeded. Returns True if enrichment fired.
    """
    if not should_trigger_enrichment(old_stage, new_stage):
        return False

    get_gateway().fire_and_forget(
        AUTO_ENRICH_TRIGGER,
        {"type": LEAD_QUALIFYING_EVENT, "record_id": record_id},
    )
    logger.info(f"[STAGE] {record_id} {old_stage} -> {new_stage}: auto-enrich scheduled")
    return True
