"""
Unit tests for the chapter generator - zone decoration and in-order writing.

The text client is an AsyncMock returning canned chapter JSON, so the
cliffhanger hand-off between chapters can be checked from the prompts.

Run with: python -m pytest tests/test_chapter_generator.py -v
"""

import asyncio
import random
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushquest.config.limits import SEGMENT_DURATION_SECONDS, SEGMENTS_PER_CHAPTER
from brushquest.models.drafts import ChapterDraft
from brushquest.models.models import BrushingZone, Expression
from brushquest.services.chapter_generator import (
    BRUSHING_PROMPTS,
    ChapterGenerator,
    decorate_chapter,
)
from brushquest.services.errors import SchemaMismatchError


WORLD = {"display_name": "Crystal Caves", "description": "Glittering caverns"}


def chapter_payload(number: int, segments: int = 5, cliffhanger: str = None) -> dict:
    return {
        "chapterNumber": number,
        "title": f"Chapter {number}",
        "recap": None if number == 1 else "Last time...",
        "segments": [
            {
                "segmentOrder": i + 1,
                "text": f"[CHILD] and [PET] explore part {i + 1} of chapter {number}.",
                "imagePrompt": f"A cave scene {i + 1}",
                "childExpression": "excited",
                "petExpression": "giggling",
            }
            for i in range(segments)
        ],
        "cliffhanger": cliffhanger if cliffhanger is not None else f"What waits behind door {number}?",
        "nextChapterTeaser": "Next time...",
    }


class TestDecorateChapter:
    """Brushing zones, durations and expression defaults"""

    def setup_method(self):
        self.rng = random.Random(7)

    def test_zone_cycle_on_prompted_segments(self):
        draft = ChapterDraft.model_validate(chapter_payload(1))
        chapter = decorate_chapter(draft, 1, self.rng)

        zones = [seg.brushing_zone for seg in chapter.segments]
        assert zones == [None, BrushingZone.TOP_RIGHT, None, BrushingZone.BOTTOM_RIGHT, BrushingZone.TONGUE]

    def test_prompts_come_from_zone_pool(self):
        chapter = decorate_chapter(ChapterDraft.model_validate(chapter_payload(1)), 1, self.rng)
        for seg in chapter.segments:
            if seg.brushing_zone is None:
                assert seg.brushing_prompt is None
            else:
                assert seg.brushing_prompt in BRUSHING_PROMPTS[seg.brushing_zone]

    def test_fixed_duration_and_order(self):
        chapter = decorate_chapter(ChapterDraft.model_validate(chapter_payload(2)), 2, self.rng)
        assert [seg.segment_order for seg in chapter.segments] == [1, 2, 3, 4, 5]
        assert all(seg.duration_seconds == SEGMENT_DURATION_SECONDS for seg in chapter.segments)

    def test_unknown_expression_defaults_to_happy(self):
        chapter = decorate_chapter(ChapterDraft.model_validate(chapter_payload(1)), 1, self.rng)
        assert all(seg.child_pose == Expression.EXCITED for seg in chapter.segments)
        # "giggling" is not a sprite pose
        assert all(seg.pet_pose == Expression.HAPPY for seg in chapter.segments)

    def test_extra_segments_dropped(self):
        draft = ChapterDraft.model_validate(chapter_payload(1, segments=7))
        chapter = decorate_chapter(draft, 1, self.rng)
        assert len(chapter.segments) == SEGMENTS_PER_CHAPTER

    def test_outline_number_wins(self):
        draft = ChapterDraft.model_validate(chapter_payload(9))
        assert decorate_chapter(draft, 3, self.rng).chapter_number == 3

    def test_missing_cliffhanger_becomes_empty(self):
        payload = chapter_payload(1)
        payload["cliffhanger"] = None
        chapter = decorate_chapter(ChapterDraft.model_validate(payload), 1, self.rng)
        assert chapter.cliffhanger == ""


    def test_final_chapter_cliffhanger_dropped(self):
        draft = ChapterDraft.model_validate(chapter_payload(3, cliffhanger="But then... a roar!"))
        assert decorate_chapter(draft, 3, self.rng, is_last=True).cliffhanger == ""


class TestGenerateAll:
    """Chapters are requested in order, each seeing the previous cliffhanger"""

    OUTLINE = [
        {"chapter": 1, "title": "The Glow", "summary": "A light appears"},
        {"chapter": 2, "title": "The Door", "summary": "A door opens"},
        {"chapter": 3, "title": "Home", "summary": "All is well"},
    ]

    def setup_method(self):
        self.text_client = MagicMock()
        self.text_client.generate_json = AsyncMock(side_effect=[
            chapter_payload(1, cliffhanger="Will the glow fade?"),
            chapter_payload(2, cliffhanger="Who knocked on the door?"),
            chapter_payload(3, cliffhanger=""),
        ])
        self.generator = ChapterGenerator(self.text_client, rng=random.Random(1))

    def test_writes_every_chapter(self):
        chapters = asyncio.run(self.generator.generate_all(WORLD, "The Glow", "A story", self.OUTLINE, None, []))

        assert [ch.chapter_number for ch in chapters] == [1, 2, 3]
        assert sum(len(ch.segments) for ch in chapters) == len(self.OUTLINE) * SEGMENTS_PER_CHAPTER

    def test_last_chapter_ends_without_cliffhanger(self):
        self.text_client.generate_json.side_effect = [
            chapter_payload(1), chapter_payload(2), chapter_payload(3, cliffhanger="A new villain appears!"),
        ]
        chapters = asyncio.run(self.generator.generate_all(WORLD, "The Glow", "A story", self.OUTLINE, None, []))

        assert chapters[1].cliffhanger == "What waits behind door 2?"
        assert chapters[2].cliffhanger == ""

    def test_previous_cliffhanger_in_next_prompt(self):
        asyncio.run(self.generator.generate_all(WORLD, "The Glow", "A story", self.OUTLINE, None, []))

        prompts = [call.args[0] for call in self.text_client.generate_json.call_args_list]
        assert "Previous chapter ended with" not in prompts[0]
        assert 'Previous chapter ended with: "Will the glow fade?"' in prompts[1]
        assert 'Previous chapter ended with: "Who knocked on the door?"' in prompts[2]

    def test_previous_chapters_summarized(self):
        asyncio.run(self.generator.generate_all(WORLD, "The Glow", "A story", self.OUTLINE, None, []))

        third_prompt = self.text_client.generate_json.call_args_list[2].args[0]
        assert 'Chapter 1 "Chapter 1"' in third_prompt
        assert 'Chapter 2 "Chapter 2"' in third_prompt

    def test_on_chapter_called_before_next_request(self):
        seen = []

        async def on_chapter(chapter):
            seen.append((chapter.chapter_number, self.text_client.generate_json.await_count))

        asyncio.run(self.generator.generate_all(
            WORLD, "The Glow", "A story", self.OUTLINE, None, [], on_chapter=on_chapter
        ))
        assert seen == [(1, 1), (2, 2), (3, 3)]

    def test_failure_stops_remaining_chapters(self):
        short = chapter_payload(2, segments=3)
        self.text_client.generate_json = AsyncMock(side_effect=[chapter_payload(1), short, chapter_payload(3)])
        persisted = []

        async def on_chapter(chapter):
            persisted.append(chapter.chapter_number)

        with pytest.raises(SchemaMismatchError):
            asyncio.run(self.generator.generate_all(
                WORLD, "The Glow", "A story", self.OUTLINE, None, [], on_chapter=on_chapter
            ))
        assert persisted == [1]
        assert self.text_client.generate_json.await_count == 2
