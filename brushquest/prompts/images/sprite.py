"""
Expression Portrait (Sprite) Prompt
"""

from .styles import PORTRAIT_STYLE


def get_sprite_prompt(pose_prompt: str) -> str:
    """Prompt for one expression of an existing character; the avatar is sent as [Image 1]"""
    return f"""{PORTRAIT_STYLE}

REFERENCE CHARACTER IMAGE PROVIDED:
[Image 1] This is the character's established appearance. You MUST match their features EXACTLY.

EXPRESSION TO CREATE:
{pose_prompt}

CRITICAL REQUIREMENTS:
- The character must match the reference image EXACTLY in terms of:
  - Face shape, features, and expression style
  - Hair color, style, and design
  - Skin tone and overall coloring
  - Any distinctive features (ears, horns, etc. for pets)
- Create a PORTRAIT showing HEAD AND SHOULDERS ONLY (no full body!)
- The facial expression should clearly convey: {pose_prompt}
- The background MUST be pure white #FFFFFF (solid white, no gradients)
- Square composition, character centered
- Face should be the focal point, expressive and clear
- Clean edges suitable for circle mask overlay
- Maintain the whimsical children's book illustration style
- No text, labels, or watermarks"""
