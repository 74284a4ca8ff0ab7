"""
Pet routes

Public pet list for the app, plus admin pet CRUD, AI suggestions and
pet name audio.
"""

import logging
from typing import Dict

from fastapi import APIRouter, Response

from ..models.requests import PetRequest, PetUpdateRequest
from ..services.errors import NotFoundError, ValidationError
from .dependencies import get_db, get_pets

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["pets"])


@router.get("/pets")
async def public_pets():
    """Published pets in camelCase; the built-in pets when none are published"""
    return {"pets": await get_pets().public_pets()}


@router.get("/admin/pets")
async def list_pets(audio: bool = False):
    """
    All pets plus pending suggestions.

    With ?audio=true returns name audio maps instead:
    {"petAudio": {petId: url}, "petAudioPossessive": {petId: url}}
    """
    db = get_db()

    if audio:
        pet_audio: Dict[str, str] = {}
        pet_audio_possessive: Dict[str, str] = {}
        for row in await db.list_pet_audio():
            pet_audio[row["pet_id"]] = row["audio_url"]
            if row.get("possessive_audio_url"):
                pet_audio_possessive[row["pet_id"]] = row["possessive_audio_url"]
        return {"petAudio": pet_audio, "petAudioPossessive": pet_audio_possessive}

    return {"pets": await db.list_pets(), "suggestions": await db.list_suggestions()}


@router.post("/admin/pets", status_code=201)
async def create_pet(req: PetRequest, response: Response):
    """
    Create a pet, generate suggestions, or store pet name audio.

    Request body (manual):
    {
        "name": "luna-moth",
        "displayName": "Luna",
        "description": "A glowing moth who loves bedtime",
        "storyPersonality": "gentle and wise",
        "unlockCost": 50
    }

    Actions:
        generate   {"action": "generate", "count": 3}
        saveAudio  {"action": "saveAudio", "petId": "sparkle", "audioUrl": "...",
                    "possessiveAudioUrl": "..."}
    """
    if req.action == "saveAudio":
        if not (req.pet_id and req.audio_url):
            raise ValidationError("Missing petId or audioUrl")
        await get_db().save_pet_audio(req.pet_id, {
            "audio_url": req.audio_url,
            "possessive_audio_url": req.possessive_audio_url,
            "audio_urls": req.audio_urls,
            "possessive_audio_urls": req.possessive_audio_urls,
        })
        response.status_code = 200
        return {
            "success": True,
            "petId": req.pet_id,
            "audioUrl": req.audio_url,
            "possessiveAudioUrl": req.possessive_audio_url,
        }

    if req.action == "generate":
        response.status_code = 200
        return {"suggestions": await get_pets().suggest(req.count)}

    if not (req.name and req.display_name and req.description and req.story_personality):
        raise ValidationError("Missing required fields: name, displayName, description, storyPersonality")

    pet = await get_db().create_pet({
        "name": req.name,
        "display_name": req.display_name,
        "description": req.description,
        "story_personality": req.story_personality,
        "unlock_cost": req.unlock_cost or 0,
        "is_starter": bool(req.is_starter),
    })
    logger.info(f"🐾 Pet created: {pet['display_name']}")
    return {"pet": pet}


@router.get("/admin/pets/{pet_id}")
async def get_pet(pet_id: str):
    pet = await get_db().get_pet(pet_id)
    if not pet:
        raise NotFoundError("Pet not found")
    return {"pet": pet}


@router.put("/admin/pets/{pet_id}")
async def update_pet(pet_id: str, req: PetUpdateRequest):
    pet = await get_db().update_pet(pet_id, req.provided())
    if not pet:
        raise NotFoundError("Pet not found")
    return {"pet": pet}


@router.delete("/admin/pets/{pet_id}")
async def delete_pet(pet_id: str):
    if not await get_db().delete_pet(pet_id):
        raise NotFoundError("Pet not found")
    return {"success": True}


@router.post("/admin/pets/{suggestion_id}")
async def suggestion_action(suggestion_id: str, req: PetRequest, response: Response):
    """
    Approve or reject a pet suggestion.

    Request body:
    {
        "action": "approve"
    }
    Approving copies the suggestion into pets (201). A suggestion that was
    already approved returns 409.
    """
    pets = get_pets()

    if req.action == "approve":
        pet = await pets.approve(suggestion_id)
        response.status_code = 201
        return {"pet": pet}

    if req.action == "reject":
        await pets.reject(suggestion_id)
        return {"success": True}

    raise ValidationError("Invalid action")
