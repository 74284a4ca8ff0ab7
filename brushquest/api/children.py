"""
Child profile routes

Profiles are stored snake_case and served camelCase. Creating a profile
speaks the child's name (plain and possessive) when speech and blob storage
are configured.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter

from ..config.limits import CHILD_MAX_AGE, CHILD_MIN_AGE, CHILD_NAME_MAX_LENGTH
from ..models.requests import ChildCreateRequest, ChildUpdateRequest, NameAudioRequest
from ..services.errors import BrushQuestError, NotFoundError, ValidationError
from .dependencies import get_db, get_media, get_providers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["children"])

CHILD_DEFAULTS = {
    "character_id": "boy",
    "active_pet_id": "sparkle",
    "active_brush_id": "star-swirl",
    "active_world_id": "magical-forest",
    "points": 0,
    "total_brush_sessions": 0,
    "current_streak": 0,
    "longest_streak": 0,
    "unlocked_pets": ["sparkle", "bubbles"],
    "unlocked_brushes": ["star-swirl"],
    "unlocked_worlds": ["magical-forest", "space-station"],
    "completed_story_arcs": [],
    "collected_stickers": [],
    "collected_accessories": [],
    "equipped_accessories": {},
}

# PUT writes these through even when null (clearing an arc, a brush date, accessories)
NULLABLE_COLUMNS = {"current_story_arc", "last_brush_date", "equipped_accessories"}


def to_child(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "name": row["name"],
        "age": row["age"],
        "characterId": row.get("character_id"),
        "activePetId": row.get("active_pet_id"),
        "activeBrushId": row.get("active_brush_id"),
        "activeWorldId": row.get("active_world_id"),
        "points": row.get("points"),
        "totalBrushSessions": row.get("total_brush_sessions"),
        "currentStreak": row.get("current_streak"),
        "longestStreak": row.get("longest_streak"),
        "unlockedPets": row.get("unlocked_pets"),
        "unlockedBrushes": row.get("unlocked_brushes"),
        "unlockedWorlds": row.get("unlocked_worlds"),
        "currentStoryArc": row.get("current_story_arc"),
        "completedStoryArcs": row.get("completed_story_arcs"),
        "lastBrushDate": row.get("last_brush_date"),
        "nameAudioUrl": row.get("name_audio_url"),
        "namePossessiveAudioUrl": row.get("name_possessive_audio_url"),
        "nameAudioUrls": row.get("name_audio_urls") or [],
        "namePossessiveAudioUrls": row.get("name_possessive_audio_urls") or [],
        "createdAt": row.get("created_at"),
        "collectedStickers": row.get("collected_stickers") or [],
        "collectedAccessories": row.get("collected_accessories") or [],
        "equippedAccessories": row.get("equipped_accessories") or {},
    }


def _validate_name(name) -> None:
    if not name or not isinstance(name, str) or len(name) > CHILD_NAME_MAX_LENGTH:
        raise ValidationError(f"Name is required and must be {CHILD_NAME_MAX_LENGTH} characters or less")


def _validate_age(age) -> None:
    if not age or age < CHILD_MIN_AGE or age > CHILD_MAX_AGE:
        raise ValidationError(f"Age is required and must be between {CHILD_MIN_AGE} and {CHILD_MAX_AGE}")


async def _speak_name(child_id: str, name: str) -> Dict[str, Any]:
    """Generate name audio and return the child columns to store"""
    audio = await get_media().name_audio(NameAudioRequest(name=name, name_type="child", id=child_id))
    return {
        "name_audio_url": audio["audioUrl"],
        "name_possessive_audio_url": audio["possessiveAudioUrl"],
        "name_audio_urls": audio["audioUrls"],
        "name_possessive_audio_urls": audio["possessiveAudioUrls"],
    }


@router.get("/children")
async def list_children():
    return {"children": [to_child(row) for row in await get_db().list_children()]}


@router.post("/children", status_code=201)
async def create_child(req: ChildCreateRequest):
    """
    Create a child profile.

    Request body:
    {
        "name": "Maya",
        "age": 6,
        "characterId": "girl",
        "activePetId": "sparkle"
    }

    Existing local profiles can be migrated by also sending their id,
    points, streaks and unlocks.
    """
    _validate_name(req.name)
    _validate_age(req.age)

    provided = {k: v for k, v in req.provided().items() if v is not None and k != "action"}
    values = {**CHILD_DEFAULTS, **provided}

    db = get_db()
    child = await db.create_child(values)
    logger.info(f"👧 Child created: {child['name']} ({child['id']})")

    if not child.get("name_audio_url") and get_providers().has_audio:
        try:
            audio_columns = await _speak_name(child["id"], child["name"])
        except BrushQuestError as e:
            logger.warning(f"⚠️ Name audio skipped for {child['id']}: {e.message}")
        else:
            child = await db.update_child(child["id"], audio_columns)

    return {"child": to_child(child)}


@router.get("/children/{child_id}")
async def get_child(child_id: str):
    child = await get_db().get_child(child_id)
    if not child:
        raise NotFoundError("Child not found")
    return {"child": to_child(child)}


@router.put("/children/{child_id}")
async def update_child(child_id: str, req: ChildUpdateRequest):
    """Partial update; currentStoryArc, lastBrushDate and equippedAccessories accept null"""
    values = {k: v for k, v in req.provided().items() if k != "action"}
    if "name" in values:
        _validate_name(values["name"])
    if "age" in values:
        _validate_age(values["age"])

    nullable = NULLABLE_COLUMNS & set(values)
    child = await get_db().update_child(child_id, values, nullable)
    if not child:
        raise NotFoundError("Child not found")
    return {"child": to_child(child)}


@router.delete("/children/{child_id}")
async def delete_child(child_id: str):
    if not await get_db().delete_child(child_id):
        raise NotFoundError("Child not found")
    return {"success": True, "id": child_id}


@router.post("/children/{child_id}")
async def child_action(child_id: str, req: ChildUpdateRequest):
    """
    Per-child actions.

    Request body:
    {
        "action": "regenerateAudio"
    }
    """
    if req.action != "regenerateAudio":
        raise ValidationError("Invalid action")

    db = get_db()
    child = await db.get_child(child_id)
    if not child:
        raise NotFoundError("Child not found")

    columns = await _speak_name(child_id, child["name"])
    await db.update_child(child_id, columns)

    return {
        "success": True,
        "nameAudioUrl": columns["name_audio_url"],
        "namePossessiveAudioUrl": columns["name_possessive_audio_url"],
        "nameAudioUrls": columns["name_audio_urls"],
        "namePossessiveAudioUrls": columns["name_possessive_audio_urls"],
    }
