"""
Story Bible Prompt

The bible is written once per story, before any chapter, and is the source of
truth for tone, character roles, recurring visual assets and art direction.
"""

from typing import List, Dict, Any


def format_outline(outline: List[Dict[str, Any]]) -> str:
    return "\n".join(
        f'  Chapter {ch["chapter"]}: "{ch["title"]}" - {ch.get("summary", "")}'
        for ch in outline
    )


def get_story_bible_prompt(
    world_name: str,
    world_description: str,
    story_title: str,
    story_description: str,
    outline: List[Dict[str, Any]]
) -> str:
    """
    Generate the story bible prompt.

    Args:
        world_name: Display name of the world
        world_description: One-line world description
        story_title: Pitch title
        story_description: Pitch hook
        outline: [{"chapter", "title", "summary"}] chapter plan

    Returns:
        Prompt asking for a single JSON bible document
    """
    return f"""Create a comprehensive "Story Bible" for a children's adventure story (ages 4-8).

STORY DETAILS:
World: {world_name} - {world_description}
Title: "{story_title}"
Description: {story_description}

CHAPTER OUTLINE:
{format_outline(outline)}

The main characters are [CHILD] (the player's child, personalized at runtime) and [PET] (their magical companion, also personalized).

Create a Story Bible that will ensure CONSISTENCY across all {len(outline)} chapters for both the NARRATIVE and VISUAL elements. This bible will be referenced when writing each chapter AND when generating images.

Respond with ONLY this JSON structure:
{{
  "tone": "Describe the overall emotional tone (1 sentence)",
  "themes": ["theme1", "theme2", "theme3"],
  "narrativeStyle": "Describe the writing style and narrator voice",

  "childRole": "How [CHILD] behaves and grows in THIS specific story",
  "petRole": "How [PET] behaves and helps in THIS specific story",
  "characterDynamic": "How [CHILD] and [PET] interact and support each other",

  "visualAssets": {{
    "locations": [
      {{
        "name": "Location Name",
        "description": "Detailed visual description for image generation - colors, lighting, key features, atmosphere",
        "mood": "emotional quality of this place"
      }}
    ],
    "characters": [
      {{
        "name": "NPC Character Name (NOT [CHILD] or [PET])",
        "description": "Detailed visual appearance for consistent image generation",
        "personality": "2-3 word personality",
        "role": "their role in the story (e.g., 'wise mentor', 'comic relief', 'needs help')"
      }}
    ],
    "objects": [
      {{
        "name": "Important Object Name",
        "description": "Detailed visual description of the object - appearance, materials, special features"
      }}
    ]
  }},

  "colorPalette": "The dominant colors that should appear throughout the story's images",
  "lightingStyle": "Consistent lighting approach for all scenes",
  "artDirection": "Any additional visual style notes for consistency",

  "magicSystem": "How magic/fantasy elements work in this story (or null if not applicable)",
  "stakes": "What's at risk - why does this adventure matter?",
  "resolution": "Brief description of how the story resolves (for proper buildup)"
}}

IMPORTANT for visualAssets:
- locations: Include 2-4 key places that appear multiple times
- characters: Include NPCs (allies, mentors, creatures) that appear multiple times. Do NOT include [CHILD] or [PET].
- objects: Include 1-3 important items central to the plot (magical items, tools, treasures)

CRITICAL SAFETY REQUIREMENT for character descriptions:
- This is a children's app (ages 4-8). ALL characters must be described with appropriate clothing.
- For aquatic characters (mermaids, sea creatures): describe them wearing shirts, vests, or decorative chest coverings (like colorful scaled armor, seaweed wraps, coral jewelry covering the torso).
- Never describe characters as topless, bare-chested, or with exposed torsos.
- Think Disney/Pixar character design - always family-friendly.

Be specific and detailed - this bible will be the source of truth for the entire story!"""
