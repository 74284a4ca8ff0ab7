"""
Public content feed

Everything the app needs to play stories: published worlds and, per world
name, the published stories with their chapters and segments.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter

from .dependencies import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["content"])

DEFAULT_THEME = "magical-forest"


def format_world(row: Dict[str, Any]) -> Dict[str, Any]:
    theme = row.get("theme") or DEFAULT_THEME
    return {
        "id": row["id"],
        "name": row["name"],
        "displayName": row["display_name"],
        "description": row["description"],
        "theme": theme,
        "backgroundImageUrl": row.get("background_image_url") or f"/worlds/{theme}.png",
        "backgroundMusicUrl": row.get("background_music_url") or None,
        "unlockCost": row.get("unlock_cost"),
        "isStarter": bool(row.get("is_starter")),
    }


def format_segment(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "text": row["text"],
        "durationSeconds": row.get("duration_seconds"),
        "brushingZone": row.get("brushing_zone"),
        "brushingPrompt": row.get("brushing_prompt"),
        "imagePrompt": row.get("image_prompt"),
        "imageUrl": row.get("image_url"),
        "narrationSequence": row.get("narration_sequence"),
        "childPose": row.get("child_pose") or None,
        "petPose": row.get("pet_pose") or None,
        "childPosition": row.get("child_position") or "center",
        "petPosition": row.get("pet_position") or "right",
    }


def format_chapter(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "chapterNumber": row["chapter_number"],
        "title": row["title"],
        "recap": row.get("recap"),
        "cliffhanger": row.get("cliffhanger"),
        "nextChapterTeaser": row.get("next_chapter_teaser"),
        "isRead": False,
        "readAt": None,
        "recapNarrationSequence": row.get("recap_narration_sequence"),
        "cliffhangerNarrationSequence": row.get("cliffhanger_narration_sequence"),
        "teaserNarrationSequence": row.get("teaser_narration_sequence"),
        "segments": [format_segment(seg) for seg in row.get("segments", [])],
    }


def format_story(tree: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": tree["id"],
        "worldId": tree["world_id"],
        "title": tree["title"],
        "description": tree["description"],
        "coverImageUrl": tree.get("cover_image_url") or "",
        "backgroundMusicUrl": tree.get("background_music_url") or None,
        "totalChapters": tree.get("total_chapters"),
        "chapters": [format_chapter(ch) for ch in tree.get("chapters", [])],
    }


@router.get("/content")
async def get_content():
    """
    Published worlds and stories.

    Returns:
    {
        "worlds": [...],
        "storyTemplates": {"<world name>": [story, ...]}
    }
    Stories whose world is unpublished are left out.
    """
    db = get_db()
    worlds = await db.list_published_worlds()

    story_templates: Dict[str, List[Dict[str, Any]]] = {}
    for world in worlds:
        for story in await db.list_published_stories(world["id"]):
            tree = await db.get_story_tree(story["id"])
            story_templates.setdefault(world["name"], []).append(format_story(tree))

    return {
        "worlds": [format_world(w) for w in worlds],
        "storyTemplates": story_templates,
    }
