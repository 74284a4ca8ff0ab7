"""
Storyboard Prompt

Plans camera work, locations and NPC appearances for every segment of a
finished story. [CHILD] and [PET] are composited later as portrait overlays,
so the storyboard only describes the background scene.
"""

from typing import List, Dict, Any


def get_storyboard_prompt(
    story_title: str,
    story_description: str,
    bible: Dict[str, Any],
    references: List[Dict[str, Any]],
    chapters: List[Dict[str, Any]]
) -> str:
    """
    Generate the storyboard prompt.

    Args:
        story_title: Story title
        story_description: Story hook
        bible: Persisted story bible document (camelCase keys)
        references: Persisted story references (with ids)
        chapters: [{"chapter_number", "title", "segments": [{"id", "segment_order", "text", "image_prompt"}]}]

    Returns:
        Prompt asking for a JSON array with one entry per segment
    """
    locations = [r for r in references if r["type"] == "location"]
    characters = [r for r in references if r["type"] == "character"]

    if locations:
        location_list = "\n".join(
            f'- "{loc["name"]}": {loc["description"]} (mood: {loc.get("mood") or "unspecified"})'
            for loc in locations
        )
    else:
        location_list = "No specific locations defined"

    if characters:
        character_list = "\n".join(
            f'- "{c["name"]}": {c["description"]} ({c.get("personality") or "unspecified"}, {c.get("role") or "unspecified"})'
            for c in characters
        )
    else:
        character_list = "No recurring NPCs defined"

    chapter_blocks = []
    for ch in chapters:
        segment_lines = "\n".join(
            f'  Segment {s["segment_order"]} [{s["id"]}]:\n    Text: "{s["text"]}"\n    Current Image Prompt: "{s.get("image_prompt") or "none"}"'
            for s in ch["segments"]
        )
        chapter_blocks.append(f'Chapter {ch["chapter_number"]}: "{ch["title"]}"\n{segment_lines}')
    story_structure = "\n\n".join(chapter_blocks)

    return f"""You are a storyboard artist for a children's animated story. Analyze the entire story and create a VISUAL STORYBOARD that plans camera work, locations, and character appearances for each segment.

STORY: "{story_title}"
{story_description}

VISUAL STYLE (from Story Bible):
- Color Palette: {bible.get('colorPalette') or 'Not specified'}
- Lighting: {bible.get('lightingStyle') or 'Not specified'}
- Art Direction: {bible.get('artDirection') or 'Not specified'}

AVAILABLE LOCATIONS (use these exact names when applicable):
{location_list}

AVAILABLE NPCs (use these exact names when they appear):
{character_list}

IMPORTANT - CHARACTER OVERLAY SYSTEM:
The [CHILD] and [PET] are rendered as SEPARATE sprite overlays on top of the background image.
They should NEVER be included in the storyboard planning because they are composited separately.
- Do NOT include [CHILD] or [PET] in the "characters" array
- Do NOT focus on [CHILD] or [PET] in the "visualFocus" field
- The storyboard plans ONLY the background scene and any NPCs

STORY STRUCTURE:
{story_structure}

Create a storyboard that:
1. VARIES camera shots and angles - avoid repetition between adjacent segments
2. Uses LOCATIONS from the Story Bible when the scene matches (use exact name or null if no match)
3. Only includes NPCs when they are ACTUALLY in that segment's text/scene
4. Creates visual FLOW - establishing shots for new locations, then closer shots for action/dialogue
5. Uses camera angles meaningfully (low-angle for heroic moments, high-angle for vulnerability, etc.)

SHOT TYPES:
- "wide": Full scene, shows environment and multiple characters
- "medium": Characters from waist up, good for dialogue and action
- "close-up": Face/upper body, emotional moments
- "extreme-close-up": Specific detail (object, expression)
- "over-shoulder": POV from behind one character looking at another/scene

CAMERA ANGLES:
- "eye-level": Neutral, standard view
- "low-angle": Looking up, makes subjects appear powerful/heroic
- "high-angle": Looking down, makes subjects appear small/vulnerable
- "birds-eye": Directly above, shows layout/geography
- "worms-eye": From ground looking up, dramatic
- "dutch-angle": Tilted, creates unease or dynamic action

Respond with ONLY a JSON array containing ALL segments:
[
  {{
    "segmentId": "uuid-here",
    "segmentOrder": 1,
    "chapterNumber": 1,
    "location": "the crystal cavern" or null,
    "characters": ["the wise owl"] or [],
    "shotType": "wide",
    "cameraAngle": "eye-level",
    "visualFocus": "The glowing crystals illuminating the cavern entrance",
    "continuityNote": "Establishing shot of new location"
  }},
  ...
]

IMPORTANT:
- Include EVERY segment from the story
- Use EXACT location/character names from the Story Bible
- Vary shots between adjacent segments (don't use same shot type twice in a row)
- "characters" = ONLY NPCs from the Story Bible that appear in the scene (NEVER [CHILD] or [PET])
- "visualFocus" = What the BACKGROUND image should emphasize (NEVER the child or pet - they are overlaid separately)"""
