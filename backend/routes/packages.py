"""
OwlDoor CRM - Routes Pricing Packages
"""

from fastapi import APIRouter, Depends

from models.account import CustomPackageSave
from routes.deps import get_actor
from services.packages import get_custom_package, list_packages, save_custom_package

router = APIRouter(prefix="/packages", tags=["Packages"])


@router.get("")
async def get_packages():
    packages = await list_packages()
    return {"packages": packages, "count": len(packages)}


@router.get("/custom/{client_id}")
async def get_custom(client_id: str):
    return await get_custom_package(client_id)


@router.put("/custom/{client_id}")
async def put_custom(client_id: str, data: CustomPackageSave, actor: str = Depends(get_actor)):
    """Create or update the client's custom package and return its public URL"""
    return await save_custom_package(client_id, data, user=actor)
