"""
Story admin routes

Story, chapter and segment editing, publish toggling, and the story-level
asset actions (reference sheets, cover, background music, reference tags).

Chapter and segment rows are addressed through the owning story's URL:
    PUT /api/admin/stories/{id}?chapter=<chapterId>
    PUT /api/admin/stories/{id}?segment=<segmentId>
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query

from ..models.requests import (
    ChapterUpdateRequest,
    CoverImageRequest,
    ReferenceImageRequest,
    SegmentUpdateRequest,
    StoryActionRequest,
    StoryUpdateRequest,
)
from ..services.errors import NotFoundError, ValidationError
from ..services.jobs import JOB_STORY_MUSIC
from ..services.storyboard import StoryboardBuilder
from .dependencies import get_db, get_jobs, get_media, get_providers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["stories"])

REFERENCE_TYPES = ("character", "object", "location")


async def _require_story(story_id: str) -> Dict[str, Any]:
    story = await get_db().get_story(story_id)
    if not story:
        raise NotFoundError("Story not found")
    return story


async def _set_published(story_id: str, publish: bool) -> Dict[str, Any]:
    story = await get_db().update_story(story_id, {
        "is_published": publish,
        "status": "published" if publish else "draft",
    })
    if not story:
        raise NotFoundError("Story not found")
    logger.info(f"📖 Story {story_id} {'published' if publish else 'unpublished'}")
    return story


@router.get("/admin/stories")
async def list_stories(world_id: Optional[str] = Query(None, alias="worldId")):
    return {"stories": await get_db().list_stories(world_id)}


@router.get("/admin/stories/{story_id}")
async def get_story(story_id: str, chapter: Optional[str] = None, segment: Optional[str] = None):
    """Full story tree with references, or a single chapter/segment row"""
    db = get_db()

    if chapter:
        row = await db.get_chapter(chapter)
        if not row:
            raise NotFoundError("Chapter not found")
        return {"chapter": row}

    if segment:
        row = await db.get_segment(segment)
        if not row:
            raise NotFoundError("Segment not found")
        return {"segment": row}

    story = await db.get_story_tree(story_id)
    if not story:
        raise NotFoundError("Story not found")
    return {"story": story, "references": await db.list_references(story_id)}


@router.put("/admin/stories/{story_id}")
async def update_story(
    story_id: str,
    chapter: Optional[str] = None,
    segment: Optional[str] = None,
    body: Dict[str, Any] = Body(default={})
):
    """
    Partial update of a story, chapter or segment.

    Omitted fields keep their stored values. Narration sequences are lists of
    {"type": "audio", "url"} and {"type": "name", "placeholder"} entries.
    """
    db = get_db()

    if chapter:
        values = ChapterUpdateRequest.model_validate(body).provided()
        if not values:
            raise ValidationError("No update data provided")
        row = await db.update_chapter(chapter, values)
        if not row:
            raise NotFoundError("Chapter not found")
        return {"chapter": row}

    if segment:
        values = SegmentUpdateRequest.model_validate(body).provided()
        if not values:
            raise ValidationError("No update data provided")
        row = await db.update_segment(segment, values)
        if not row:
            raise NotFoundError("Segment not found")
        return {"segment": row}

    values = StoryUpdateRequest.model_validate(body).provided()
    story = await db.update_story(story_id, values)
    if not story:
        raise NotFoundError("Story not found")
    return {"story": story}


@router.delete("/admin/stories/{story_id}")
async def delete_story(story_id: str):
    if not await get_db().delete_story(story_id):
        raise NotFoundError("Story not found")
    return {"success": True}


@router.post("/admin/stories/{story_id}/publish")
async def publish_story(story_id: str, req: StoryActionRequest):
    """
    Publish or unpublish a story.

    Request body:
    {
        "publish": false
    }
    Omitting publish publishes the story.
    """
    return {"story": await _set_published(story_id, req.publish)}


@router.post("/admin/stories/{story_id}")
async def story_action(story_id: str, req: StoryActionRequest):
    """
    Story-level actions. With no action the body is a publish toggle.

    Actions:
        publish                 {"publish": true}
        addReference            {"action": "addReference", "type": "object",
                                 "name": "Golden Key", "description": "..."}
        generateReferenceImage  {"action": "generateReferenceImage", "referenceId": "..."}
        generateCover           {"action": "generateCover"}
        generateMusic           {"action": "generateMusic"}
        suggestTags             {"action": "suggestTags"} re-tags every segment's references
    """
    if req.action in (None, "publish"):
        return {"story": await _set_published(story_id, req.publish)}

    db = get_db()
    story = await _require_story(story_id)

    if req.action == "addReference":
        if not (req.type and req.name and req.description):
            raise ValidationError("Missing required fields: type, name, description")
        if req.type not in REFERENCE_TYPES:
            raise ValidationError(f"Invalid reference type. Must be: {', '.join(REFERENCE_TYPES)}")
        existing = await db.list_references(story_id)
        reference = await db.create_reference({
            "story_id": story_id,
            "type": req.type,
            "name": req.name,
            "description": req.description,
            "source": "manual",
            "sort_order": len(existing),
        })
        return {"reference": reference}

    if req.action == "generateReferenceImage":
        if not req.reference_id:
            raise ValidationError("Missing required field: referenceId")
        reference = await db.get_reference(req.reference_id)
        if not reference or reference["story_id"] != story_id:
            raise NotFoundError("Reference not found")

        result = await get_media().reference_image(ReferenceImageRequest(
            reference_id=reference["id"],
            reference_type=reference["type"],
            name=reference["name"],
            description=reference["description"],
            story_bible=story.get("story_bible"),
        ))
        reference = await db.update_reference(reference["id"], {"image_url": result["imageUrl"]})
        return {"reference": reference}

    if req.action == "generateCover":
        tree = await db.get_story_tree(story_id)
        scene_urls = [
            seg["image_url"]
            for ch in tree["chapters"]
            for seg in ch.get("segments", [])
            if seg.get("image_url")
        ]
        result = await get_media().cover_image(CoverImageRequest(
            story_id=story_id,
            story_title=story["title"],
            story_description=story.get("description"),
            reference_image_urls=scene_urls,
            story_bible=story.get("story_bible"),
        ))
        story = await db.update_story(story_id, {"cover_image_url": result["coverImageUrl"]})
        return {"story": story}

    if req.action == "generateMusic":
        world = await db.get_world(story["world_id"]) or {}
        media = get_media()
        job = get_jobs().submit(JOB_STORY_MUSIC, story_id, lambda: media.story_music_job(story, world))
        return {"musicJobId": job.id}

    if req.action == "suggestTags":
        tree = await db.get_story_tree(story_id)
        segments = [seg for ch in tree["chapters"] for seg in ch.get("segments", [])]
        references = await db.list_references(story_id)
        tags = await StoryboardBuilder(get_providers().text).suggest_segment_reference_tags(segments, references)
        for segment_id, reference_ids in tags.items():
            await db.update_segment(segment_id, {"reference_ids": reference_ids})
        logger.info(f"🏷️ Tagged {len(tags)} segments of story {story_id}")
        return {"tags": tags}

    raise ValidationError("Invalid action")
