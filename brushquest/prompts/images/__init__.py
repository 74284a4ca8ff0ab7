"""
Image Prompts Package

Prompts for every illustration the service produces:
- world_icon: Planet-style world icons
- scene: Segment illustrations with storyboard direction
- avatars: Child and pet portraits
- reference_sheet: NPC/object/location sheets and story covers
- sprite: Expression portraits for overlay compositing
- sticker: Collectible stickers
"""

from .styles import STYLE_PREFIX, PORTRAIT_STYLE, STICKER_STYLE
from .world_icon import get_world_icon_prompt, pick_world_icon
from .scene import (
    get_scene_prompt,
    build_scene_description,
    strip_main_characters,
    SHOT_DESCRIPTIONS,
    ANGLE_DESCRIPTIONS,
)
from .avatars import get_user_avatar_prompt, get_pet_avatar_prompt
from .reference_sheet import get_reference_sheet_prompt, get_cover_prompt
from .sprite import get_sprite_prompt
from .sticker import (
    get_sticker_prompt,
    get_themed_sticker_subject,
    get_custom_world_sticker_subject,
    WORLD_STICKER_THEMES,
    UNIVERSAL_STICKERS,
)

__all__ = [
    "STYLE_PREFIX",
    "PORTRAIT_STYLE",
    "STICKER_STYLE",
    "get_world_icon_prompt",
    "pick_world_icon",
    "get_scene_prompt",
    "build_scene_description",
    "strip_main_characters",
    "SHOT_DESCRIPTIONS",
    "ANGLE_DESCRIPTIONS",
    "get_user_avatar_prompt",
    "get_pet_avatar_prompt",
    "get_reference_sheet_prompt",
    "get_cover_prompt",
    "get_sprite_prompt",
    "get_sticker_prompt",
    "get_themed_sticker_subject",
    "get_custom_world_sticker_subject",
    "WORLD_STICKER_THEMES",
    "UNIVERSAL_STICKERS",
]
