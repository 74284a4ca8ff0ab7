"""
Collectible routes

Admin sticker/accessory management and AI sticker generation, plus the
public mystery-chest pick.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Response

from ..models.requests import CollectibleRequest, CollectibleUpdateRequest
from ..services.collectibles import to_collectible
from ..services.errors import NotFoundError, ValidationError
from .dependencies import get_collectibles, get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["collectibles"])

# Explicit null clears these columns
NULLABLE_COLUMNS = {"world_id", "pet_id"}


@router.get("/admin/collectibles")
async def list_collectibles(
    type: Optional[str] = None,
    world_id: Optional[str] = Query(None, alias="worldId"),
    rarity: Optional[str] = None,
    published: Optional[bool] = None
):
    filters = {}
    if type:
        filters["type"] = type
    if world_id:
        filters["world_id"] = world_id
    if rarity:
        filters["rarity"] = rarity
    if published is not None:
        filters["is_published"] = 1 if published else 0

    rows = await get_db().list_collectibles(filters)
    return {"collectibles": [to_collectible(row) for row in rows]}


@router.post("/admin/collectibles", status_code=201)
async def create_collectible(req: CollectibleRequest, response: Response):
    """
    Create a collectible, or generate stickers with AI.

    Request body (manual):
    {
        "type": "accessory",
        "name": "tiny-crown",
        "displayName": "Tiny Crown",
        "imageUrl": "https://...",
        "rarity": "rare",
        "petId": "sparkle"
    }

    Actions:
        generate        {"action": "generate", "worldId": "...", "worldName": "..."}
        generate-batch  {"action": "generate-batch", "worldId": "...", "worldName": "...", "count": 3}
    Without worldId and worldName a universal sticker is generated.
    """
    service = get_collectibles()

    if req.action == "generate":
        saved = await service.generate_sticker(req.world_id, req.world_name, req.world_description or "")
        response.status_code = 200
        return {"collectible": to_collectible(saved)}

    if req.action == "generate-batch":
        saved = await service.generate_batch(req.world_id, req.world_name, req.count)
        response.status_code = 200
        return {"collectibles": [to_collectible(row) for row in saved]}

    if not (req.type and req.name and req.display_name and req.image_url):
        raise ValidationError("Missing required fields: type, name, displayName, imageUrl")

    collectible = await get_db().create_collectible({
        "type": req.type,
        "name": req.name,
        "display_name": req.display_name,
        "description": req.description or "",
        "image_url": req.image_url,
        "rarity": req.rarity or "common",
        "world_id": req.world_id,
        "pet_id": req.pet_id,
        "is_published": True,
    })
    return {"collectible": to_collectible(collectible)}


@router.get("/admin/collectibles/{collectible_id}")
async def get_collectible(collectible_id: str):
    collectible = await get_db().get_collectible(collectible_id)
    if not collectible:
        raise NotFoundError("Collectible not found")
    return {"collectible": to_collectible(collectible)}


@router.put("/admin/collectibles/{collectible_id}")
async def update_collectible(collectible_id: str, req: CollectibleUpdateRequest):
    """Partial update; worldId and petId may be set to null to detach"""
    values = req.provided()
    nullable = NULLABLE_COLUMNS & set(values)

    collectible = await get_db().update_collectible(collectible_id, values, nullable)
    if not collectible:
        raise NotFoundError("Collectible not found")
    return {"collectible": to_collectible(collectible)}


@router.delete("/admin/collectibles/{collectible_id}")
async def delete_collectible(collectible_id: str):
    if not await get_db().delete_collectible(collectible_id):
        raise NotFoundError("Collectible not found")
    return {"success": True}


@router.get("/collectibles/random")
async def random_collectible(world_id: Optional[str] = Query(None, alias="worldId")):
    """Weighted pick for the mystery chest; items from worldId are favoured"""
    picked = await get_collectibles().random_collectible(world_id)
    if not picked:
        raise NotFoundError("No collectibles available")
    return {"collectible": to_collectible(picked)}
