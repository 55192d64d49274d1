"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Kanban Board                                                  ║
║                                                                              ║
║  BOARD = filter (name contains search, case-insensitive) THEN bucket         ║
║  - one column per stage of the pipeline, in stage order                      ║
║  - each visible record sits in exactly one column                            ║
║  - records whose stage is not in the pipeline are in NO column               ║
║    (reported as hidden_count only)                                           ║
║                                                                              ║
║  DROP = one single-field update of the stage column for that id              ║
║  - no local mutation: caller re-fetches the board                            ║
║  - failure: "Failed to update lead stage", no retry                          ║
║  - last write wins (no version check)                                        ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from models.pipeline import (
    PipelineType,
    PIPELINE_TABLES,
    get_stages,
    is_valid_stage,
    stage_label,
)
from services.display import pipeline_card
from services.errors import InputValidationError
from services.event_logger import log_event
from services.record_store import get_store, store_failure
from services.stage_transitions import on_pipeline_stage_change

logger = logging.getLogger("kanban")

MOVE_FAILED_MESSAGE = "Failed to update lead stage"


def record_name(record: Dict[str, Any], pipeline_type: PipelineType) -> str:
    """ai_leads carry their pro under `pro` (joined at load time)"""
    if PipelineType(pipeline_type) == PipelineType.AI_RECRUITER:
        return (record.get("pro") or {}).get("full_name") or ""
    return record.get("full_name") or ""


def record_stage(record: Dict[str, Any], pipeline_type: PipelineType) -> Optional[str]:
    _, column = PIPELINE_TABLES[PipelineType(pipeline_type)]
    return record.get(column)


def filter_by_name(
    records: List[Dict[str, Any]],
    search: str,
    pipeline_type: PipelineType = PipelineType.STAFF,
) -> List[Dict[str, Any]]:
    term = (search or "").lower()
    if not term:
        return list(records)
    return [r for r in records if term in record_name(r, pipeline_type).lower()]


def bucket_by_stage(
    records: List[Dict[str, Any]],
    pipeline_type: PipelineType,
) -> Tuple[Dict[str, List[Dict[str, Any]]], List[Dict[str, Any]]]:
    """
    Partition records by stage.
    Returns (buckets keyed by stage value in stage order, records with unknown stage).
    """
    buckets = {stage.value: [] for stage in get_stages(pipeline_type)}
    unplaced = []
    for record in records:
        stage = record_stage(record, pipeline_type)
        if stage in buckets:
            buckets[stage].append(record)
        else:
            unplaced.append(record)
    return buckets, unplaced


def build_board(
    records: List[Dict[str, Any]],
    pipeline_type: PipelineType,
    search: str = "",
) -> Dict[str, Any]:
    pipeline_type = PipelineType(pipeline_type)
    visible = filter_by_name(records, search, pipeline_type)
    buckets, unplaced = bucket_by_stage(visible, pipeline_type)

    columns = []
    for stage in get_stages(pipeline_type):
        stage_records = buckets[stage.value]
        cards = stage_records
        if pipeline_type != PipelineType.AI_RECRUITER:
            cards = [{**r, "card": pipeline_card(r)} for r in stage_records]
        columns.append({
            "stage": stage.value,
            "label": stage.label,
            "color": stage.color,
            "count": len(stage_records),
            "records": cards,
        })

    return {
        "pipeline_type": pipeline_type.value,
        "search": search or "",
        "columns": columns,
        "total": len(visible) - len(unplaced),
        "hidden_count": len(unplaced),
    }


async def load_records(pipeline_type: PipelineType, client_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Full slice for the board, newest first"""
    pipeline_type = PipelineType(pipeline_type)
    table, _ = PIPELINE_TABLES[pipeline_type]
    store = get_store()

    query = {}
    if client_id and pipeline_type == PipelineType.AI_RECRUITER:
        query["client_id"] = client_id

    records = await store.select(table, query, order=[("created_at", -1)])

    if pipeline_type == PipelineType.AI_RECRUITER:
        pro_ids = list({r["pro_id"] for r in records if r.get("pro_id")})
        pros = await store.select("pros", {"id": {"$in": pro_ids}}) if pro_ids else []
        pro_map = {p["id"]: p for p in pros}
        for record in records:
            record["pro"] = pro_map.get(record.get("pro_id"))

    return records


async def load_board(
    pipeline_type: PipelineType,
    search: str = "",
    client_id: Optional[str] = None,
) -> Dict[str, Any]:
    records = await load_records(pipeline_type, client_id)
    board = build_board(records, pipeline_type, search)
    if board["hidden_count"]:
        logger.info(f"[KANBAN] {pipeline_type}: {board['hidden_count']} record(s) outside known stages")
    return board


async def move_to_stage(
    pipeline_type: PipelineType,
    record_id: str,
    stage: str,
    user: str = "system",
) -> Dict[str, Any]:
    """
    Drop handler: a single update of the stage column for `record_id`.
    The previous stage comes back from that same write, so concurrent drops
    of one card see each edge into "qualifying" once.
    """
    pipeline_type = PipelineType(pipeline_type)
    if not is_valid_stage(pipeline_type, stage):
        raise InputValidationError(f"Unknown stage '{stage}' for {pipeline_type.value} pipeline")

    table, column = PIPELINE_TABLES[pipeline_type]
    store = get_store()

    with store_failure(MOVE_FAILED_MESSAGE):
        record = await store.swap(table, {column: stage}, {"id": record_id})
    old_stage = record.get(column)
    if pipeline_type == PipelineType.AI_RECRUITER and record.get("pro_id"):
        record["pro"] = await store.find_one("pros", {"id": record["pro_id"]})

    enrichment_triggered = False
    if table == "pros":
        enrichment_triggered = on_pipeline_stage_change(record_id, old_stage, stage)

    name = record_name(record, pipeline_type)
    label = stage_label(pipeline_type, stage)
    logger.info(f"[KANBAN] {table} {record_id}: {old_stage} -> {stage}")
    await log_event(
        "move_stage",
        "pro" if table == "pros" else "ai_lead",
        record_id,
        user=user,
        details={"old_value": old_stage, "new_value": stage, "pipeline_type": pipeline_type.value},
    )

    return {
        "success": True,
        "message": f"Moved {name} to {label}",
        "record_id": record_id,
        "stage": stage,
        "enrichment_triggered": enrichment_triggered,
    }
