"""
Story Generation Pipeline

World -> pitches -> story. Generating a story runs these steps in order:

    1. Story bible (fatal on failure)
    2. Story row created in 'generating' status, bible references inserted
    3. Chapters written one at a time, each persisted as soon as it exists
    4. Reference extraction from the prose (non-fatal)
    5. Storyboard for every segment (non-fatal)
    6. Story moved to 'draft'; background music job submitted

A failure in step 3 leaves the story in 'generating' with the chapters
written so far; the admin can inspect or delete it.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from ..config.limits import DEFAULT_PITCH_COUNT, MAX_PITCH_COUNT
from ..models.drafts import StoryPitchDraft, WorldDraft
from ..models.models import GeneratedChapter, Reference
from ..prompts.story import (
    get_generate_world_prompt,
    get_outline_from_idea_prompt,
    get_story_pitches_prompt,
)
from .chapter_generator import ChapterGenerator
from .errors import BrushQuestError, NotFoundError, ValidationError
from .jobs import JOB_STORY_MUSIC, JOB_WORLD_IMAGE
from .story_bible import StoryBibleBuilder
from .storyboard import StoryboardBuilder
from .validation_service import validate_list, validate_payload

logger = logging.getLogger(__name__)


def reference_row(story_id: str, ref: Reference, sort_order: int) -> Dict[str, Any]:
    return {
        "story_id": story_id,
        "type": ref.type.value,
        "name": ref.name,
        "description": ref.description,
        "mood": ref.mood,
        "personality": ref.personality,
        "role": ref.role,
        "source": ref.source.value,
        "sort_order": sort_order,
    }


def chapter_row(story_id: str, chapter: GeneratedChapter) -> Dict[str, Any]:
    return {
        "story_id": story_id,
        "chapter_number": chapter.chapter_number,
        "title": chapter.title,
        "recap": chapter.recap,
        "cliffhanger": chapter.cliffhanger,
        "next_chapter_teaser": chapter.next_chapter_teaser,
    }


def segment_rows(chapter_id: str, chapter: GeneratedChapter) -> List[Dict[str, Any]]:
    return [
        {
            "chapter_id": chapter_id,
            "segment_order": seg.segment_order,
            "text": seg.text,
            "duration_seconds": seg.duration_seconds,
            "brushing_zone": seg.brushing_zone.value if seg.brushing_zone else None,
            "brushing_prompt": seg.brushing_prompt,
            "image_prompt": seg.image_prompt,
            "child_pose": seg.child_pose.value,
            "pet_pose": seg.pet_pose.value,
        }
        for seg in chapter.segments
    ]


class StoryPipeline:
    """AI-driven world, pitch and story creation"""

    def __init__(self, providers, db, jobs, media, app_logger=None, chapter_generator=None):
        self.providers = providers
        self.db = db
        self.jobs = jobs
        self.media = media
        self.app_logger = app_logger
        self._chapter_generator = chapter_generator

    @property
    def chapter_generator(self) -> ChapterGenerator:
        if self._chapter_generator is None:
            self._chapter_generator = ChapterGenerator(self.providers.text, app_logger=self.app_logger)
        return self._chapter_generator

    async def _require_world(self, world_id: str) -> Dict[str, Any]:
        world = await self.db.get_world(world_id)
        if not world:
            raise NotFoundError("World not found")
        return world

    async def _existing_stories(self, world_id: str) -> List[Dict[str, str]]:
        stories = await self.db.list_stories(world_id)
        return [{"title": s["title"], "description": s.get("description") or ""} for s in stories]

    # =========================================================================
    # Worlds
    # =========================================================================

    def submit_world_image(self, world: Dict[str, Any]) -> str:
        """Queue icon generation for a world and return the job id"""
        job = self.jobs.submit(JOB_WORLD_IMAGE, world["id"], lambda: self.media.world_image_job(world))
        return job.id

    async def generate_world(self) -> Dict[str, Any]:
        """
        Invent a new world and queue its icon.

        Returns:
            {"world": row, "imageJobId": "..."}
        """
        payload = await self.providers.text.generate_json(get_generate_world_prompt())
        draft = validate_payload(payload, WorldDraft, "world")

        world = await self.db.create_world({
            "name": draft.name,
            "display_name": draft.display_name,
            "description": draft.description,
            "theme": draft.theme,
            "is_published": False,
        })
        logger.info(f"🌍 World generated: {world['display_name']} ({world['id']})")
        return {"world": world, "imageJobId": self.submit_world_image(world)}

    async def regenerate_world_image(self, world_id: str) -> Dict[str, Any]:
        world = await self._require_world(world_id)
        return {"imageJobId": self.submit_world_image(world)}

    # =========================================================================
    # Pitches
    # =========================================================================

    async def _save_pitch(self, world_id: str, draft: StoryPitchDraft) -> Dict[str, Any]:
        return await self.db.create_pitch({
            "world_id": world_id,
            "title": draft.title,
            "description": draft.description,
            "outline": [entry.model_dump() for entry in draft.outline],
        })

    async def generate_pitches(self, world_id: str, count: Optional[int] = None) -> List[Dict[str, Any]]:
        """Brainstorm up to five story pitches that differ from existing stories"""
        world = await self._require_world(world_id)
        count = min(count or DEFAULT_PITCH_COUNT, MAX_PITCH_COUNT)

        prompt = get_story_pitches_prompt(
            world["display_name"], world["description"], count, await self._existing_stories(world_id)
        )
        payload = await self.providers.text.generate_json(prompt)
        drafts = validate_list(payload, StoryPitchDraft, "story pitches", key="pitches")

        pitches = [await self._save_pitch(world_id, draft) for draft in drafts[:count]]
        logger.info(f"💡 {len(pitches)} pitches for {world['display_name']}")
        return pitches

    async def outline_from_idea(self, world_id: str, idea: Optional[str]) -> Dict[str, Any]:
        """Turn a free-text idea into a single saved pitch"""
        if not idea or not idea.strip():
            raise ValidationError("Missing required field: idea")

        world = await self._require_world(world_id)
        prompt = get_outline_from_idea_prompt(
            world["display_name"], world["description"], idea.strip(), await self._existing_stories(world_id)
        )
        payload = await self.providers.text.generate_json(prompt)
        draft = validate_payload(payload, StoryPitchDraft, "story outline")
        return await self._save_pitch(world_id, draft)

    # =========================================================================
    # Stories
    # =========================================================================

    async def generate_story(
        self,
        world_id: str,
        title: Optional[str],
        description: Optional[str],
        outline: Optional[List[Dict[str, Any]]],
        pitch_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Generate and persist a full story from a pitch.

        Returns:
            {"story": story tree with chapters and segments, "musicJobId": "..."}

        Raises:
            NotFoundError: World does not exist
            ValidationError: Missing title or outline, or outline not numbered 1..N
            ProviderError, MalformedOutputError, SchemaMismatchError: bible or
                chapter generation failed
        """
        if not title or not outline:
            raise ValidationError("Missing required fields: title, outline")
        if [entry.get("chapter") for entry in outline] != list(range(1, len(outline) + 1)):
            raise ValidationError("Outline chapters must be numbered 1 to N in order")

        world = await self._require_world(world_id)
        start = time.time()
        if self.app_logger:
            self.app_logger.job_received("story", world_id, title)

        bible, bible_refs = await StoryBibleBuilder(self.providers.text).build(
            world, title, description or "", outline
        )

        story = await self.db.create_story({
            "world_id": world_id,
            "title": title,
            "description": description or "",
            "status": "generating",
            "total_chapters": len(outline),
            "story_bible": bible,
        })
        story_id = story["id"]

        references = []
        for i, ref in enumerate(bible_refs):
            references.append(await self.db.create_reference(reference_row(story_id, ref, i)))

        persisted_chapters: List[Dict[str, Any]] = []

        async def persist_chapter(chapter: GeneratedChapter):
            row = await self.db.create_chapter(chapter_row(story_id, chapter))
            row["segments"] = [await self.db.create_segment(seg) for seg in segment_rows(row["id"], chapter)]
            persisted_chapters.append(row)

        try:
            chapters = await self.chapter_generator.generate_all(
                world, title, description or "", outline, bible, references,
                on_chapter=persist_chapter, story_id=story_id,
            )
        except BrushQuestError as e:
            if self.app_logger:
                self.app_logger.job_failed("story", story_id,
                                           f"{e.message} after {len(persisted_chapters)}/{len(outline)} chapters")
            raise

        references = await self._extract_references(story, chapters, bible, references)
        await self._apply_storyboard(story, bible, references, persisted_chapters)

        await self.db.update_story(story_id, {"status": "draft"})
        if pitch_id:
            await self.db.mark_pitch_used(pitch_id)

        music_job = self.jobs.submit(JOB_STORY_MUSIC, story_id, lambda: self.media.story_music_job(story, world))

        if self.app_logger:
            self.app_logger.job_completed("story", story_id, time.time() - start)

        tree = await self.db.get_story_tree(story_id)
        return {"story": tree, "musicJobId": music_job.id}

    async def _extract_references(
        self,
        story: Dict[str, Any],
        chapters: List[GeneratedChapter],
        bible: Dict[str, Any],
        references: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """Add references found in the prose; failures leave the list unchanged"""
        try:
            extracted = await StoryboardBuilder(self.providers.text).extract_references(
                story, chapters, bible, references
            )
        except BrushQuestError as e:
            logger.warning(f"⚠️ Reference extraction skipped for {story['id']}: {e.message}")
            return references

        result = list(references)
        for ref in extracted:
            result.append(await self.db.create_reference(reference_row(story["id"], ref, len(result))))
        if extracted:
            logger.info(f"🔎 {len(extracted)} references extracted for {story['title']}")
        return result

    async def _apply_storyboard(
        self,
        story: Dict[str, Any],
        bible: Dict[str, Any],
        references: List[Dict[str, Any]],
        chapters: List[Dict[str, Any]]
    ):
        """Write per-segment staging; failures leave segments without a storyboard"""
        try:
            updates = await StoryboardBuilder(self.providers.text).build_storyboard(
                story, bible, references, chapters
            )
        except BrushQuestError as e:
            logger.warning(f"⚠️ Storyboard skipped for {story['id']}: {e.message}")
            return

        for segment_id, columns in updates.items():
            ids = list(columns.get("storyboard_character_ids") or [])
            if columns.get("storyboard_location_id"):
                ids.insert(0, columns["storyboard_location_id"])
            await self.db.update_segment(segment_id, {**columns, "reference_ids": ids})
        logger.info(f"🎬 Storyboard applied to {len(updates)} segments")
