"""
OwlDoor CRM - Client reviews (testimonials shown on the client's page)
"""

import logging
from typing import Any, Dict, List

from models.account import ClientReviewSave
from services.errors import InputValidationError, RecordNotFound
from services.record_store import get_store, store_failure

logger = logging.getLogger("reviews")

TABLE = "client_reviews"


def _review_data(form: ClientReviewSave) -> Dict[str, Any]:
    if not form.reviewer_name.strip() or not form.review_text.strip():
        raise InputValidationError("Please fill in required fields")
    return {
        "reviewer_name": form.reviewer_name.strip(),
        "reviewer_role": form.reviewer_role or None,
        "rating": form.rating,
        "review_text": form.review_text.strip(),
        "years_with_team": form.years_with_team or None,
    }


async def list_reviews(client_id: str) -> List[Dict[str, Any]]:
    return await get_store().select(TABLE, {"client_id": client_id}, order=[("created_at", -1)])


async def create_review(client_id: str, form: ClientReviewSave) -> Dict[str, Any]:
    data = _review_data(form)
    with store_failure("Failed to save review"):
        review = await get_store().insert(TABLE, {"client_id": client_id, **data})
    logger.info(f"[REVIEWS] added {review['id']} for client {client_id}")
    return review


async def update_review(review_id: str, form: ClientReviewSave) -> Dict[str, Any]:
    data = _review_data(form)
    store = get_store()
    with store_failure("Failed to save review"):
        await store.update(TABLE, data, {"id": review_id})
        return await store.get(TABLE, review_id)


async def delete_review(review_id: str) -> None:
    with store_failure("Failed to delete review"):
        deleted = await get_store().delete(TABLE, {"id": review_id})
    if not deleted:
        raise RecordNotFound(f"Review {review_id} not found")
    logger.info(f"[REVIEWS] deleted {review_id}")
