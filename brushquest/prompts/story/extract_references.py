"""
Reference Extraction Prompt

Reads the finished prose and lists the visual entities (NPCs, objects,
locations) that need reference sheets, beyond what the bible already named.
"""

from typing import List, Dict, Any, Optional

from ...config.limits import MAX_EXTRACTED_REFERENCES


def get_extract_references_prompt(
    story_title: str,
    story_description: str,
    segment_texts: List[str],
    cliffhangers: List[str],
    bible: Optional[Dict[str, Any]],
    existing_references: List[Dict[str, Any]]
) -> str:
    bible_context = ""
    if bible or existing_references:
        def joined(kind: str) -> str:
            return "; ".join(
                f"{r['name']} - {r['description']}" for r in existing_references if r["type"] == kind
            )

        style_lines = ""
        if bible:
            style_lines = f"Color Palette: {bible.get('colorPalette', '')}\nLighting Style: {bible.get('lightingStyle', '')}"

        bible_context = f"""
STORY BIBLE CONTEXT:
Locations: {joined('location')}
Characters: {joined('character')}
Objects: {joined('object')}
{style_lines}
"""

    story_text = "\n".join(segment_texts)
    cliffhanger_text = "\n".join(c for c in cliffhangers if c)
    limit = MAX_EXTRACTED_REFERENCES

    return f"""Analyze this children's story and extract visual elements that need CONSISTENT reference images for illustration.

STORY: "{story_title}" - {story_description}
{bible_context}
STORY TEXT:
{story_text}

CLIFFHANGERS:
{cliffhanger_text}

Extract the KEY VISUAL ELEMENTS that need to look consistent across different scenes.

DO NOT INCLUDE:
- [CHILD] or [PET] - these are the main characters handled separately
- Generic background elements (sky, grass, trees unless they're special)
- Single-use throwaway objects that only appear once

DO INCLUDE (up to {limit} total, prioritize by frequency in the story):
1. CHARACTERS: NPCs, creatures, allies, or antagonists that appear multiple times (e.g., "the wise owl", "the grumpy troll", "Queen Coral")
2. OBJECTS: Important items that appear in multiple scenes (e.g., "the magical toothbrush", "the glowing crystal", "the treasure map")
3. LOCATIONS: Specific places that are revisited (e.g., "the crystal cavern entrance", "the ancient bridge", "the meadow clearing")

For CHARACTERS, provide descriptions suitable for generating a CHARACTER REFERENCE SHEET (showing the character from multiple angles).

CRITICAL SAFETY REQUIREMENT: This is for a children's app (ages 4-8).
- ALL characters must be described wearing appropriate clothing covering their torso.
- For aquatic characters (mermaids, sea creatures, etc.): describe them wearing shirts, vests, decorative scaled armor, seaweed wraps, or coral jewelry that covers the chest.
- Never describe characters as topless or with exposed torsos.

Respond with ONLY a JSON array (max {limit} items, sorted by importance to the story):
[
  {{
    "type": "character",
    "name": "the wise owl",
    "description": "A large elderly owl with silver-grey feathers, wearing tiny round spectacles perched on its beak. Deep amber eyes that twinkle with wisdom. Slightly ruffled feathers suggesting age. Dignified posture. Soft, fluffy appearance suitable for children's illustration."
  }},
  {{
    "type": "location",
    "name": "the crystal cavern",
    "description": "A magical underground cave with walls covered in glowing purple and blue crystals. Soft bioluminescent light emanates from the crystals. Smooth stone floor with scattered smaller gems. Stalactites hang from the ceiling. Ethereal, mystical atmosphere with gentle sparkles in the air."
  }},
  {{
    "type": "object",
    "name": "the enchanted toothbrush",
    "description": "A magical toothbrush with a handle made of swirling rainbow-colored crystal. Soft golden bristles that emit a gentle glow. Small stars and sparkles float around it when activated. Child-sized, friendly appearance."
  }}
]

If the story has fewer meaningful visual elements, return fewer items. Quality over quantity."""
