"""
Reference Sheet and Cover Prompts

Reference sheets pin down how a recurring NPC, object or location looks so
every scene that includes it can be drawn consistently.
"""

from typing import Optional, Dict, Any, List

from .styles import STYLE_PREFIX


def format_style_guide(bible: Optional[Dict[str, Any]]) -> str:
    if not bible:
        return ""

    lines = ["STORY VISUAL STYLE GUIDE (maintain consistency):"]
    if bible.get("colorPalette"):
        lines.append(f"- Color Palette: {bible['colorPalette']}")
    if bible.get("lightingStyle"):
        lines.append(f"- Lighting: {bible['lightingStyle']}")
    if bible.get("artDirection"):
        lines.append(f"- Art Direction: {bible['artDirection']}")
    return "\n".join(lines) + "\n\n"


def get_reference_sheet_prompt(
    reference_type: str,
    name: str,
    description: str,
    bible: Optional[Dict[str, Any]] = None
) -> str:
    prompt = STYLE_PREFIX + "\n\n" + format_style_guide(bible)

    if reference_type == "character":
        prompt += f"""CREATE A CHARACTER REFERENCE SHEET for: "{name}"

CHARACTER DESCRIPTION:
{description}

REQUIREMENTS:
- Create a CHARACTER REFERENCE SHEET with FOUR views arranged in a 2x2 grid:
  - Top left: FRONT view (full body, facing camera)
  - Top right: SIDE view (full body, profile facing right)
  - Bottom left: BACK view (full body, facing away)
  - Bottom right: HEADSHOT (close-up of face/head, showing expression and details)
- Maintain EXACT consistency in design, colors, proportions, and details across all views
- The character should be on a simple, clean background (light gray or white gradient)
- Include subtle labels below/beside each view: "FRONT", "SIDE", "BACK", "HEADSHOT"
- The style should be suitable for children's book illustration
- Make the character expressive, friendly, and appealing to children ages 4-8
- Ensure the design is clear enough to be used as a reference for future illustrations

CRITICAL - NO TEXT except the view labels:
- Do NOT include the character's name in the image
- Do NOT include any other text, captions, or watermarks
- Only include the small view labels (FRONT, SIDE, BACK, HEADSHOT)"""
    elif reference_type == "location":
        prompt += f"""CREATE A LOCATION REFERENCE IMAGE for: "{name}"

LOCATION DESCRIPTION:
{description}

REQUIREMENTS:
- Create a beautiful, detailed establishing shot of this location
- The image should capture the key features, atmosphere, and mood described
- Use the story's color palette and lighting style for consistency
- The scene should feel inviting and suitable for a children's adventure story
- Include enough detail that this image can be used as a reference for scenes set in this location
- No characters should appear in this image - just the environment
- The composition should showcase the most distinctive elements of the location

CRITICAL - NO TEXT:
- Do NOT include ANY text, labels, signs, or writing in the image
- The image should be PURELY environmental artwork"""
    else:
        prompt += f"""CREATE AN OBJECT REFERENCE SHEET for: "{name}"

OBJECT DESCRIPTION:
{description}

REQUIREMENTS:
- Create an OBJECT REFERENCE SHEET with THREE views arranged in a row:
  - Left: FRONT view (facing camera directly)
  - Center: SIDE view (profile, facing right)
  - Right: BACK view (facing away from camera)
- Maintain EXACT consistency in design, colors, proportions, and details across all views
- The object should be on a simple, clean background (light gray or white gradient)
- Include subtle labels below each view: "FRONT", "SIDE", "BACK"
- The style should match children's book illustration - friendly and appealing
- Add subtle magical sparkles or glow if the object is magical/enchanted
- Ensure the design is clear enough to be used as a reference for future illustrations

CRITICAL - NO TEXT except the view labels:
- Do NOT include the object's name in the image
- Do NOT include any other text, captions, or watermarks
- Only include the small view labels (FRONT, SIDE, BACK)"""

    return prompt


def get_cover_prompt(
    story_title: str,
    story_description: Optional[str],
    reference_descriptions: List[str],
    bible: Optional[Dict[str, Any]] = None
) -> str:
    prompt = STYLE_PREFIX + "\n\n" + format_style_guide(bible)

    if reference_descriptions:
        prompt += "REFERENCE IMAGES PROVIDED (match this art style EXACTLY):\n" + "\n".join(reference_descriptions) + "\n\n"

    prompt += f"""CREATE A STORY COVER IMAGE:

Story Title: "{story_title}"
Story Description: {story_description or 'A magical adventure story'}

REQUIREMENTS:
- Create an eye-catching cover illustration that captures the story's essence
- The composition should be PORTRAIT oriented, suitable for a book cover
- Feature a dramatic or intriguing scene that hints at the adventure
- Include space at the top for the title (but DO NOT include any text in the image)
- Use vibrant, appealing colors that match the story's theme
- The image should make children excited to read the story
- Maintain the children's book illustration style from the reference images
- Create a sense of wonder and adventure

CRITICAL - NO TEXT:
- Do NOT include ANY text, letters, words, or typography in the image
- Do NOT write the title on the image
- Do NOT include any labels, captions, or watermarks
- The image should be PURELY illustrative with no written elements whatsoever
- Text will be added separately by the app - generate only artwork"""

    return prompt
