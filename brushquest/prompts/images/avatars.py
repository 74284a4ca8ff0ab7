"""
Avatar Prompts

Portraits for the child (from an uploaded photo) and for pet companions.
"""

from typing import Optional

from .styles import STYLE_PREFIX


def get_user_avatar_prompt(child_name: str, child_age: Optional[int]) -> str:
    return f"""{STYLE_PREFIX}

Create a character portrait illustration of a child based on the attached photo.
The character should be named {child_name} and appear to be around {child_age} years old.

IMPORTANT:
- Maintain the child's key identifying features from the photo (hair color, eye color, skin tone, general face shape)
- Transform the realistic photo into the illustrated children's book style
- Show the character from chest up, centered in frame
- Give them a friendly, warm expression
- Use a simple, soft gradient background
- The character should look approachable and heroic, like a storybook protagonist
- No text or labels in the image"""


def get_pet_avatar_prompt(pet_name: str, pet_description: str, pet_personality: Optional[str]) -> str:
    return f"""{STYLE_PREFIX}

Create a character portrait illustration of a pet companion character.

Character: {pet_name}
Description: {pet_description}
Personality: {pet_personality or ''}

IMPORTANT:
- Show the full character, centered in frame
- Give them an expressive, friendly face that shows their personality
- Use a simple, soft gradient background
- The character should look like a lovable sidekick from a children's adventure story
- Make them visually distinct and memorable
- No text or labels in the image"""
