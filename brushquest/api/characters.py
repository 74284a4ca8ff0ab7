"""
Character overlay routes

Pose definitions (expression prompt templates per character type) and the
sprites generated from them for a specific child character or pet.

    GET    /api/admin/characters?entity=poses[&characterType=child|pet]
    POST   /api/admin/characters?entity=poses        create or replace by (type, key)
    PUT    /api/admin/characters?entity=poses        update by id
    DELETE /api/admin/characters?entity=poses&id=...
    GET    /api/admin/characters?entity=sprites&ownerType=...&ownerId=...
    POST   /api/admin/characters?entity=sprites      generate | generateAll
    DELETE /api/admin/characters?entity=sprites&ownerType=...&ownerId=...[&poseKey=...]
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query, Response

from ..models.requests import PoseRequest, SpriteActionRequest
from ..services.errors import NotFoundError, ValidationError
from .dependencies import get_db, get_media

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["characters"])

CHARACTER_TYPES = ("child", "pet")
INVALID_ENTITY = 'Missing or invalid entity parameter. Use "poses" or "sprites"'


def to_pose(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "characterType": row["character_type"],
        "poseKey": row["pose_key"],
        "displayName": row["display_name"],
        "generationPrompt": row["generation_prompt"],
        "sortOrder": row.get("sort_order"),
        "isActive": bool(row.get("is_active")),
        "createdAt": row.get("created_at"),
    }


def to_sprite(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "ownerType": row["owner_type"],
        "ownerId": row["owner_id"],
        "poseKey": row["pose_key"],
        "spriteUrl": row.get("sprite_url"),
        "generationStatus": row.get("generation_status"),
        "generatedAt": row.get("generated_at"),
    }


def _require_owner(owner_type: Optional[str], owner_id: Optional[str]):
    if not owner_type or not owner_id:
        raise ValidationError("Missing required parameters: ownerType, ownerId")


@router.get("/admin/characters")
async def get_characters(
    entity: Optional[str] = None,
    character_type: Optional[str] = Query(None, alias="characterType"),
    owner_type: Optional[str] = Query(None, alias="ownerType"),
    owner_id: Optional[str] = Query(None, alias="ownerId")
):
    db = get_db()

    if entity == "poses":
        if character_type not in CHARACTER_TYPES:
            character_type = None
        return {"poses": [to_pose(p) for p in await db.list_poses(character_type)]}

    if entity == "sprites":
        _require_owner(owner_type, owner_id)
        sprites = {s["pose_key"]: s for s in await db.list_sprites(owner_type, owner_id)}
        poses = await db.list_poses(owner_type, active_only=True)

        merged = []
        for pose in poses:
            sprite = sprites.get(pose["pose_key"]) or {}
            merged.append({
                "poseKey": pose["pose_key"],
                "displayName": pose["display_name"],
                "generationPrompt": pose["generation_prompt"],
                "spriteUrl": sprite.get("sprite_url") or None,
                "generationStatus": sprite.get("generation_status") or "not_started",
                "generatedAt": sprite.get("generated_at"),
            })
        return {"sprites": merged}

    raise ValidationError(INVALID_ENTITY)


@router.post("/admin/characters")
async def post_characters(
    response: Response,
    entity: Optional[str] = None,
    body: Dict[str, Any] = Body(default={})
):
    """
    Create a pose, or generate sprites.

    Pose body:
    {
        "characterType": "child",
        "poseKey": "sleepy",
        "displayName": "Sleepy",
        "generationPrompt": "Heavy eyelids, small yawn..."
    }

    Sprite body:
    {
        "action": "generate" | "generateAll",
        "ownerType": "pet",
        "ownerId": "sparkle",
        "poseKey": "happy",
        "sourceAvatarUrl": "https://..."
    }
    """
    if entity == "poses":
        req = PoseRequest.model_validate(body)
        if not (req.character_type and req.pose_key and req.display_name and req.generation_prompt):
            raise ValidationError("Missing required fields: characterType, poseKey, displayName, generationPrompt")
        if req.character_type not in CHARACTER_TYPES:
            raise ValidationError('characterType must be "child" or "pet"')

        pose = await get_db().upsert_pose(req.character_type, req.pose_key, {
            "display_name": req.display_name,
            "generation_prompt": req.generation_prompt,
            "sort_order": req.sort_order or 0,
            "is_active": req.is_active is not False,
        })
        response.status_code = 201
        return {"pose": to_pose(pose)}

    if entity == "sprites":
        req = SpriteActionRequest.model_validate(body)
        media = get_media()

        if req.action == "generate":
            row = await media.generate_pose_sprite(req.owner_type, req.owner_id, req.pose_key, req.source_avatar_url)
            return {"sprite": to_sprite(row)}

        if req.action == "generateAll":
            results = await media.generate_all_sprites(req.owner_type, req.owner_id, req.source_avatar_url)
            return {"results": results}

        raise ValidationError('Invalid action. Use "generate" or "generateAll"')

    raise ValidationError(INVALID_ENTITY)


@router.put("/admin/characters")
async def put_characters(entity: Optional[str] = None, body: Dict[str, Any] = Body(default={})):
    """Update a pose by id; omitted fields keep their stored values"""
    if entity != "poses":
        raise ValidationError(INVALID_ENTITY)

    req = PoseRequest.model_validate(body)
    if not req.id:
        raise ValidationError("Missing required field: id")

    values = {
        "display_name": req.display_name,
        "generation_prompt": req.generation_prompt,
        "sort_order": req.sort_order,
        "is_active": req.is_active,
    }
    pose = await get_db().update_pose(req.id, values)
    if not pose:
        raise NotFoundError("Pose definition not found")
    return {"pose": to_pose(pose)}


@router.delete("/admin/characters")
async def delete_characters(
    entity: Optional[str] = None,
    id: Optional[str] = None,
    owner_type: Optional[str] = Query(None, alias="ownerType"),
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    pose_key: Optional[str] = Query(None, alias="poseKey")
):
    db = get_db()

    if entity == "poses":
        if not id:
            raise ValidationError("Missing required parameter: id")
        await db.delete_pose(id)
        return {"success": True}

    if entity == "sprites":
        _require_owner(owner_type, owner_id)
        count = await db.delete_sprites(owner_type, owner_id, pose_key)
        logger.info(f"🗑️ Deleted {count} sprites for {owner_type}/{owner_id}")
        return {"success": True}

    raise ValidationError(INVALID_ENTITY)


@router.get("/sprites")
async def public_sprites(
    owner_type: Optional[str] = Query(None, alias="ownerType"),
    owner_id: Optional[str] = Query(None, alias="ownerId")
):
    """Stored sprites for one child character or pet"""
    _require_owner(owner_type, owner_id)
    if owner_type not in CHARACTER_TYPES:
        raise ValidationError('ownerType must be "child" or "pet"')

    rows = await get_db().list_sprites(owner_type, owner_id)
    return {"sprites": [to_sprite(row) for row in sorted(rows, key=lambda r: r["pose_key"])]}
