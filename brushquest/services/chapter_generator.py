"""
Chapter/Segment Generator

Chapters are written strictly in order. Each prompt needs the chapter before
it (its cliffhanger and a summary of everything so far), so the loop carries
a ChapterFold accumulator from one iteration to the next.

Per chapter: pending -> requested (LLM call) -> parsed (JSON + schema) ->
decorated (brushing zones) -> persisted (caller's on_chapter callback).
A failure at any step aborts the remaining chapters.
"""

import logging
import random
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..config.limits import SEGMENTS_PER_CHAPTER, SEGMENT_DURATION_SECONDS
from ..models.drafts import ChapterDraft
from ..models.models import BrushingZone, DecoratedSegment, Expression, GeneratedChapter
from ..prompts.story import format_bible_section, get_write_chapter_prompt
from .errors import SchemaMismatchError
from .validation_service import validate_payload

logger = logging.getLogger(__name__)

BRUSHING_ZONES = [
    BrushingZone.TOP_LEFT,
    BrushingZone.TOP_RIGHT,
    BrushingZone.BOTTOM_LEFT,
    BrushingZone.BOTTOM_RIGHT,
    BrushingZone.TONGUE,
]

BRUSHING_PROMPTS = {
    BrushingZone.TOP_LEFT: ["Brush your top left teeth while we continue!", "Scrub those top left teeth nice and clean!"],
    BrushingZone.TOP_RIGHT: ["Now brush your top right teeth!", "Switch to the top right - keep brushing!"],
    BrushingZone.BOTTOM_LEFT: ["Move to your bottom left teeth!", "Bottom left now - keep going!"],
    BrushingZone.BOTTOM_RIGHT: ["Almost done! Brush your bottom right teeth!", "Bottom right teeth - nearly there!"],
    BrushingZone.TONGUE: ["Don't forget your tongue!", "Give your tongue a good brush!"],
}

# 0-based segment positions that cue the user to switch zones
PROMPTED_SEGMENTS = (1, 3, 4)

VALID_EXPRESSIONS = {e.value for e in Expression}


def _expression(value: Optional[str]) -> Expression:
    return Expression(value) if value in VALID_EXPRESSIONS else Expression.HAPPY


def decorate_chapter(
    draft: ChapterDraft,
    chapter_number: int,
    rng: Optional[random.Random] = None,
    is_last: bool = False
) -> GeneratedChapter:
    """
    Apply brushing zones, fixed durations and expression defaults.

    Zones cycle by segment index; only PROMPTED_SEGMENTS carry a zone and a
    user-facing prompt. Extra segments beyond the chapter length are dropped.
    The final chapter never ends on a cliffhanger.
    """
    rng = rng or random
    if len(draft.segments) < SEGMENTS_PER_CHAPTER:
        raise SchemaMismatchError(
            "chapter", f"expected {SEGMENTS_PER_CHAPTER} segments, got {len(draft.segments)}"
        )

    segments = []
    for idx, seg in enumerate(draft.segments[:SEGMENTS_PER_CHAPTER]):
        zone = BRUSHING_ZONES[idx % len(BRUSHING_ZONES)]
        prompted = idx in PROMPTED_SEGMENTS
        segments.append(DecoratedSegment(
            segment_order=idx + 1,
            text=seg.text,
            duration_seconds=SEGMENT_DURATION_SECONDS,
            brushing_zone=zone if prompted else None,
            brushing_prompt=rng.choice(BRUSHING_PROMPTS[zone]) if prompted else None,
            image_prompt=seg.image_prompt,
            child_pose=_expression(seg.child_expression),
            pet_pose=_expression(seg.pet_expression),
        ))

    return GeneratedChapter(
        chapter_number=chapter_number,
        title=draft.title,
        recap=draft.recap,
        cliffhanger="" if is_last else (draft.cliffhanger or ""),
        next_chapter_teaser=draft.next_chapter_teaser or "",
        segments=segments,
    )


class ChapterFold:
    """What chapter i needs from chapters 0..i-1"""
    def __init__(self):
        self.chapters: List[GeneratedChapter] = []
        self.cliffhanger: Optional[str] = None

    def push(self, chapter: GeneratedChapter) -> "ChapterFold":
        self.chapters.append(chapter)
        self.cliffhanger = chapter.cliffhanger
        return self


OnChapter = Callable[[GeneratedChapter], Awaitable[Any]]


class ChapterGenerator:
    """Writes a story's chapters one LLM call at a time"""

    def __init__(self, text_client, rng: Optional[random.Random] = None, app_logger=None):
        self.text_client = text_client
        self.rng = rng
        self.app_logger = app_logger

    async def generate_chapter(
        self,
        world: Dict[str, Any],
        title: str,
        description: str,
        outline_entry: Dict[str, Any],
        bible_section: str,
        fold: ChapterFold,
        is_first: bool,
        is_last: bool
    ) -> GeneratedChapter:
        prompt = get_write_chapter_prompt(
            world_name=world["display_name"],
            world_description=world["description"],
            story_title=title,
            story_description=description,
            chapter_outline=outline_entry,
            bible_section=bible_section,
            previous_chapters=fold.chapters,
            previous_cliffhanger=fold.cliffhanger,
            is_first=is_first,
            is_last=is_last,
        )
        payload = await self.text_client.generate_json(prompt)
        draft = validate_payload(payload, ChapterDraft, "chapter")
        return decorate_chapter(draft, outline_entry["chapter"], self.rng, is_last=is_last)

    async def generate_all(
        self,
        world: Dict[str, Any],
        title: str,
        description: str,
        outline: List[Dict[str, Any]],
        bible: Optional[Dict[str, Any]],
        references: List[Dict[str, Any]],
        on_chapter: Optional[OnChapter] = None,
        story_id: str = ""
    ) -> List[GeneratedChapter]:
        """
        Generate every chapter in outline order.

        Args:
            on_chapter: Awaited after each chapter is decorated, before the
                next one is requested (used to persist progressively)

        Returns:
            The generated chapters in order
        """
        bible_section = format_bible_section(bible, references)
        fold = ChapterFold()

        for i, entry in enumerate(outline):
            if self.app_logger:
                self.app_logger.generation_step(
                    f"Writing chapter {i + 1}/{len(outline)}", story_id, entry.get("title", "")
                )
            chapter = await self.generate_chapter(
                world, title, description, entry, bible_section, fold,
                is_first=(i == 0), is_last=(i == len(outline) - 1),
            )
            if on_chapter:
                await on_chapter(chapter)
            fold = fold.push(chapter)

        return fold.chapters
