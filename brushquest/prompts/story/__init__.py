"""
Story Prompts Package

This package contains prompts for the story generation pipeline:
- generate_world: A new world setting
- story_pitches: Pitch brainstorming and outline-from-idea
- story_bible: Cross-chapter consistency document
- write_chapter: One chapter of 5 narrated segments
- extract_references: Visual entities mentioned in the prose
- tag_references: Which references appear in which segment
- storyboard: Per-segment camera and staging plan
"""

from .generate_world import get_generate_world_prompt
from .story_pitches import get_story_pitches_prompt, get_outline_from_idea_prompt
from .story_bible import get_story_bible_prompt, format_outline
from .write_chapter import get_write_chapter_prompt, format_bible_section, format_previous_chapters
from .extract_references import get_extract_references_prompt
from .tag_references import get_tag_references_prompt
from .storyboard import get_storyboard_prompt

__all__ = [
    "get_generate_world_prompt",
    "get_story_pitches_prompt",
    "get_outline_from_idea_prompt",
    "get_story_bible_prompt",
    "format_outline",
    "get_write_chapter_prompt",
    "format_bible_section",
    "format_previous_chapters",
    "get_extract_references_prompt",
    "get_tag_references_prompt",
    "get_storyboard_prompt",
]
