"""
OwlDoor CRM - AI recruiter follow-up tasks
"""

import logging
from typing import Any, Dict, List, Optional

from models.ai_recruiter import AITaskCreate, AITaskUpdate
from services.errors import InputValidationError, RecordNotFound
from services.record_store import get_store, store_failure

logger = logging.getLogger("ai_tasks")

TABLE = "ai_tasks"


async def list_tasks(client_id: str, ai_lead_id: Optional[str] = None) -> List[Dict[str, Any]]:
    query = {"client_id": client_id}
    if ai_lead_id:
        query["ai_lead_id"] = ai_lead_id
    return await get_store().select(TABLE, query, order=[("created_at", -1)])


async def create_task(task: AITaskCreate) -> Dict[str, Any]:
    if not task.title.strip():
        raise InputValidationError("Task title is required")
    data = task.model_dump()
    data["title"] = task.title.strip()
    data["priority"] = task.priority.value
    data["completed"] = False
    with store_failure("Failed to create task"):
        created = await get_store().insert(TABLE, data)
    logger.info(f"[AI_TASKS] created {created['id']} for client {task.client_id}")
    return created


async def update_task(task_id: str, updates: AITaskUpdate) -> Dict[str, Any]:
    patch = updates.model_dump(exclude_unset=True)
    if "title" in patch and not (patch["title"] or "").strip():
        raise InputValidationError("Task title is required")
    if patch.get("priority") is not None:
        patch["priority"] = updates.priority.value
    store = get_store()
    with store_failure("Failed to update task"):
        if patch:
            await store.update(TABLE, patch, {"id": task_id})
        return await store.get(TABLE, task_id)


async def delete_task(task_id: str) -> None:
    with store_failure("Failed to delete task"):
        deleted = await get_store().delete(TABLE, {"id": task_id})
    if not deleted:
        raise RecordNotFound(f"Task {task_id} not found")
