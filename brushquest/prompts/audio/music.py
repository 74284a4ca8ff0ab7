"""
Background Music Prompts

Instrumental loops for worlds and stories, sent to the music generation endpoint.
"""

from typing import Optional


def get_world_music_prompt(world_name: str, world_description: str, theme: Optional[str]) -> str:
    return f"""Gentle, whimsical instrumental background music for a children's story world.
World: {world_name} - {world_description}
Theme: {theme or 'magical adventure'}
Style: Soft, enchanting, loopable background music suitable for ages 4-8. No vocals or lyrics.
Mood: Wonder, gentle excitement, cozy and safe feeling. Should work as ambient background for multiple stories.
Instruments: Light orchestral, soft piano, gentle strings, subtle chimes."""


def get_story_music_prompt(story_title: str, story_description: str, theme: Optional[str]) -> str:
    return f"""Gentle, whimsical instrumental music for a children's story.
Theme: {theme or 'magical adventure'}
Story: {story_title} - {story_description}
Style: Soft, enchanting, suitable for ages 4-8. No vocals or lyrics.
Mood: Wonder, gentle excitement, cozy and safe feeling.
Instruments: Light orchestral, soft piano, gentle strings, subtle chimes."""
