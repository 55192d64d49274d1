"""
OwlDoor CRM - Routes Client Reviews
"""

from fastapi import APIRouter

from models.account import ClientReviewSave
from services.reviews import create_review, delete_review, list_reviews, update_review

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.get("")
async def get_reviews(client_id: str):
    reviews = await list_reviews(client_id)
    return {"reviews": reviews, "count": len(reviews)}


@router.post("")
async def add_review(client_id: str, data: ClientReviewSave):
    review = await create_review(client_id, data)
    return {"success": True, "message": "Review added successfully", "review": review}


@router.put("/{review_id}")
async def edit_review(review_id: str, data: ClientReviewSave):
    review = await update_review(review_id, data)
    return {"success": True, "message": "Review updated successfully", "review": review}


@router.delete("/{review_id}")
async def remove_review(review_id: str):
    await delete_review(review_id)
    return {"success": True, "message": "Review deleted successfully"}
