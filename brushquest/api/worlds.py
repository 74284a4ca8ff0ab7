"""
World admin routes

World CRUD plus the story pipeline entry points that hang off a world:
pitches, outline-from-idea, full story generation and icon regeneration.
"""

import logging

from fastapi import APIRouter, Response

from ..models.requests import WorldActionRequest, WorldCreateRequest, WorldUpdateRequest
from ..services.errors import NotFoundError, ValidationError
from .dependencies import get_db, get_pipeline, get_providers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["worlds"])

WORLD_COLUMNS = (
    "name", "display_name", "description", "theme", "background_image_url",
    "background_music_url", "unlock_cost", "is_starter", "is_published",
)


@router.get("/admin/worlds")
async def list_worlds():
    """All worlds, newest first, each with its story_count"""
    return {"worlds": await get_db().list_worlds()}


@router.post("/admin/worlds", status_code=201)
async def create_world(req: WorldCreateRequest, response: Response):
    """
    Create a world manually, or invent one with AI.

    Request body (manual):
    {
        "name": "crystal-caves",
        "displayName": "Crystal Caves",
        "description": "Glittering caverns deep underground",
        "theme": "crystal-caves",
        "unlockCost": 100,
        "isStarter": false
    }

    Request body (AI):
    {
        "action": "generate"
    }

    The world icon is rendered in the background; poll /api/jobs/{imageJobId}.
    """
    pipeline = get_pipeline()

    if req.action == "generate":
        response.status_code = 200
        return await pipeline.generate_world()

    if not (req.name and req.display_name and req.description):
        raise ValidationError("Missing required fields: name, displayName, description")

    world = await get_db().create_world({
        "name": req.name,
        "display_name": req.display_name,
        "description": req.description,
        "theme": req.theme,
        "background_image_url": req.background_image_url,
        "background_music_url": req.background_music_url,
        "unlock_cost": req.unlock_cost or 0,
        "is_starter": bool(req.is_starter),
        "is_published": bool(req.is_published),
    })
    logger.info(f"🌍 World created: {world['display_name']} ({world['id']})")

    image_job_id = None
    if not world.get("background_image_url") and get_providers().has_images:
        image_job_id = pipeline.submit_world_image(world)

    return {"world": world, "imageJobId": image_job_id}


@router.get("/admin/worlds/{world_id}")
async def get_world(world_id: str):
    """A world with its stories (newest first) and unused pitches"""
    db = get_db()
    world = await db.get_world(world_id)
    if not world:
        raise NotFoundError("World not found")

    stories = await db.list_stories(world_id)
    pitches = await db.list_pitches(world_id)
    return {"world": world, "stories": stories, "pitches": pitches}


@router.put("/admin/worlds/{world_id}")
async def update_world(world_id: str, req: WorldUpdateRequest):
    """Partial update; omitted fields keep their stored values"""
    values = {k: v for k, v in req.provided().items() if k in WORLD_COLUMNS}

    world = await get_db().update_world(world_id, values)
    if not world:
        raise NotFoundError("World not found")
    return {"world": world}


@router.delete("/admin/worlds/{world_id}")
async def delete_world(world_id: str):
    """Delete a world; its stories, chapters and segments cascade"""
    if not await get_db().delete_world(world_id):
        raise NotFoundError("World not found")
    return {"success": True}


@router.post("/admin/worlds/{world_id}")
async def world_action(world_id: str, req: WorldActionRequest, response: Response):
    """
    Run a story pipeline step for a world.

    Actions:
        pitches          {"action": "pitches", "count": 3}
        outline          {"action": "outline", "idea": "A lost star wants to go home"}
        generate         {"action": "generate", "title": "...", "description": "...",
                          "outline": [{"chapter": 1, "title": "...", "summary": "..."}],
                          "pitchId": "..."}
        regenerateImage  {"action": "regenerateImage"}
    """
    pipeline = get_pipeline()

    if req.action == "pitches":
        return {"pitches": await pipeline.generate_pitches(world_id, req.count)}

    if req.action == "outline":
        return {"pitch": await pipeline.outline_from_idea(world_id, req.idea)}

    if req.action == "generate":
        outline = [entry.model_dump() for entry in req.outline] if req.outline else None
        result = await pipeline.generate_story(world_id, req.title, req.description, outline, req.pitch_id)
        response.status_code = 201
        return result

    if req.action == "regenerateImage":
        return await pipeline.regenerate_world_image(world_id)

    raise ValidationError("Invalid action")
