"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Routes AI Recruiter                                           ║
║                                                                              ║
║  Tasks, card layouts and lead research for a client's AI recruiter.          ║
║  The ai_leads board itself is served by /pipeline/ai_recruiter.              ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, Query
from pydantic import BaseModel
from typing import Optional

from models.ai_recruiter import AITaskCreate, AITaskUpdate, CardLayoutSave, ViewType
from services.ai_tasks import create_task, delete_task, list_tasks, update_task
from services.card_layouts import get_layout, save_layout
from services.integrations import research_lead

router = APIRouter(prefix="/ai-recruiter", tags=["AIRecruiter"])


class ResearchRequest(BaseModel):
    client_id: str
    pro_id: str


# ==================== TASKS ====================

@router.get("/tasks")
async def get_tasks(client_id: str, ai_lead_id: Optional[str] = Query(None)):
    tasks = await list_tasks(client_id, ai_lead_id)
    return {"tasks": tasks, "count": len(tasks)}


@router.post("/tasks")
async def add_task(data: AITaskCreate):
    task = await create_task(data)
    return {"success": True, "message": "Task created", "task": task}


@router.put("/tasks/{task_id}")
async def edit_task(task_id: str, data: AITaskUpdate):
    task = await update_task(task_id, data)
    return {"success": True, "message": "Task updated", "task": task}


@router.delete("/tasks/{task_id}")
async def remove_task(task_id: str):
    await delete_task(task_id)
    return {"success": True, "message": "Task deleted"}


# ==================== CARD LAYOUTS ====================

@router.get("/card-layouts/{client_id}/{view_type}")
async def get_card_layout(client_id: str, view_type: ViewType):
    return await get_layout(client_id, view_type)


@router.put("/card-layouts/{client_id}/{view_type}")
async def put_card_layout(client_id: str, view_type: ViewType, data: CardLayoutSave):
    return await save_layout(client_id, view_type, data.toggles)


# ==================== RESEARCH ====================

@router.post("/research")
async def research(data: ResearchRequest):
    return await research_lead(data.client_id, data.pro_id)
