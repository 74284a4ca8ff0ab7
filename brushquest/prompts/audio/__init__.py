"""Audio Prompts Package"""

from .music import get_world_music_prompt, get_story_music_prompt

__all__ = ["get_world_music_prompt", "get_story_music_prompt"]
