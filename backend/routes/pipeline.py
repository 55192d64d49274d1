"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Routes Pipeline (kanban boards)                               ║
║                                                                              ║
║  staff / client boards read `pros.pipeline_stage`                            ║
║  ai_recruiter board reads `ai_leads.stage`                                   ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from models.lead import StageMove
from models.pipeline import PipelineType, get_stages
from routes.deps import get_actor
from services.kanban import load_board, move_to_stage

router = APIRouter(prefix="/pipeline", tags=["Pipeline"])


@router.get("/{pipeline_type}/stages")
async def list_stages(pipeline_type: PipelineType):
    return {
        "pipeline_type": pipeline_type.value,
        "stages": [stage._asdict() for stage in get_stages(pipeline_type)],
    }


@router.get("/{pipeline_type}/board")
async def get_board(
    pipeline_type: PipelineType,
    search: str = Query("", description="Case-insensitive match on full name"),
    client_id: Optional[str] = Query(None, description="ai_recruiter board only"),
):
    return await load_board(pipeline_type, search, client_id)


@router.post("/{pipeline_type}/move")
async def move_card(
    pipeline_type: PipelineType,
    data: StageMove,
    actor: str = Depends(get_actor),
):
    """Drop a card on a column; the caller re-fetches the board afterwards"""
    return await move_to_stage(pipeline_type, data.record_id, data.stage, user=actor)
