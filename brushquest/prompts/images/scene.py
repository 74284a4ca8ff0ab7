"""
Story Scene Prompt

Builds the layered prompt for a segment illustration: storyboard direction,
the story's visual style, the location and NPCs in frame, the attached
reference images, and finally the scene itself.

When neither the child nor the pet is requested the image is a background
plate; both are composited later as portrait overlays, so the prompt forbids
drawing them and swaps their placeholders for neutral wording.
"""

from typing import Optional, Dict, Any, List

from .styles import STYLE_PREFIX

SHOT_DESCRIPTIONS = {
    "wide": "WIDE SHOT - Show the full environment with characters small in frame. Establish the setting.",
    "medium": "MEDIUM SHOT - Characters from waist up. Good balance of character and environment.",
    "close-up": "CLOSE-UP - Focus on character face/upper body. Emotional, intimate framing.",
    "extreme-close-up": "EXTREME CLOSE-UP - Tight focus on a specific detail (object, expression, hands).",
    "over-shoulder": "OVER-SHOULDER SHOT - From behind one character, looking at another or at the scene.",
}

ANGLE_DESCRIPTIONS = {
    "eye-level": "EYE-LEVEL - Camera at subject height. Neutral, relatable perspective.",
    "low-angle": "LOW-ANGLE - Camera looking UP at subject. Makes them appear powerful, heroic, larger.",
    "high-angle": "HIGH-ANGLE - Camera looking DOWN at subject. Makes them appear small, vulnerable.",
    "birds-eye": "BIRD'S EYE - Directly from above. Shows geography, layout, patterns.",
    "worms-eye": "WORM'S EYE - From ground looking up. Dramatic, emphasizes scale.",
    "dutch-angle": "DUTCH ANGLE - Tilted frame. Creates unease, tension, or dynamic action.",
}


def strip_main_characters(text: str) -> str:
    """Replace [CHILD]/[PET] placeholders with neutral wording for background plates"""
    return text.replace("[CHILD]", "the young hero").replace("[PET]", "the companion")


def build_scene_description(
    prompt: Optional[str],
    segment_text: Optional[str],
    storyboard_focus: Optional[str],
    has_storyboard: bool,
    overlay_mode: bool
) -> Optional[str]:
    """
    Pick the scene text: manual prompt, storyboard context, or plain segment text.

    Returns None when there is nothing to illustrate.
    """
    clean = strip_main_characters if overlay_mode else (lambda t: t)

    if prompt:
        return clean(prompt)
    if has_storyboard and segment_text:
        description = f"Scene context: {clean(segment_text)}"
        if storyboard_focus:
            description += f"\n\nVisual emphasis: {clean(storyboard_focus)}"
        return description
    if segment_text:
        return f"Illustrate this scene: {clean(segment_text)}"
    return None


def _names_overlap(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return a == b or a in b or b in a


def find_location(
    locations: List[Dict[str, Any]],
    location_id: Optional[str],
    location_name: Optional[str]
) -> Optional[Dict[str, Any]]:
    """Look a location up by id first, then by overlapping name"""
    if location_id:
        for loc in locations:
            if loc.get("id") == location_id:
                return loc
    if location_name:
        for loc in locations:
            if _names_overlap(loc["name"], location_name):
                return loc
    return None


def find_characters(
    characters: List[Dict[str, Any]],
    character_ids: Optional[List[str]],
    character_names: Optional[List[str]]
) -> List[Dict[str, Any]]:
    found = [c for cid in (character_ids or []) for c in characters if c.get("id") == cid]
    if found:
        return found

    for name in character_names or []:
        match = next((c for c in characters if _names_overlap(c["name"], name)), None)
        if match and all(f["name"] != match["name"] for f in found):
            found.append(match)
    return found


def get_scene_prompt(
    scene_description: str,
    reference_descriptions: List[str],
    bible: Optional[Dict[str, Any]] = None,
    references: Optional[List[Dict[str, Any]]] = None,
    shot_type: Optional[str] = None,
    camera_angle: Optional[str] = None,
    visual_focus: Optional[str] = None,
    location_id: Optional[str] = None,
    location_name: Optional[str] = None,
    character_ids: Optional[List[str]] = None,
    character_names: Optional[List[str]] = None,
    include_user: bool = False,
    include_pet: bool = False,
    has_user_avatar: bool = False,
    has_pet_avatar: bool = False,
    child_name: Optional[str] = None,
    pet_name: Optional[str] = None,
    exclude: Optional[List[str]] = None
) -> str:
    """
    Assemble the full scene illustration prompt.

    Sections appear in a fixed order: style, storyboard direction, style guide,
    location, characters, reference images, main characters, exclusions, scene.
    """
    references = references or []
    overlay_mode = not include_user and not include_pet
    has_storyboard = bool(shot_type or location_name or camera_angle or visual_focus)

    prompt = STYLE_PREFIX + "\n\n"

    if has_storyboard:
        prompt += "=== STORYBOARD DIRECTION ===\n"
        if shot_type:
            prompt += f"SHOT: {SHOT_DESCRIPTIONS.get(shot_type, shot_type)}\n"
        if camera_angle:
            prompt += f"ANGLE: {ANGLE_DESCRIPTIONS.get(camera_angle, camera_angle)}\n"
        if visual_focus:
            prompt += f"VISUAL FOCUS: {visual_focus}\n"
        prompt += "\n"

    if bible:
        prompt += "=== VISUAL STYLE GUIDE ===\n"
        if bible.get("colorPalette"):
            prompt += f"Color Palette: {bible['colorPalette']}\n"
        if bible.get("lightingStyle"):
            prompt += f"Lighting: {bible['lightingStyle']}\n"
        if bible.get("artDirection"):
            prompt += f"Art Direction: {bible['artDirection']}\n"
        prompt += "\n"

    locations = [r for r in references if r["type"] == "location"]
    location = find_location(locations, location_id, location_name)
    if location:
        prompt += f"=== LOCATION: {location['name']} ===\n{location['description']}\n"
        if location.get("mood"):
            prompt += f"Mood: {location['mood']}\n"
        prompt += "\n"

    characters = [r for r in references if r["type"] == "character"]
    in_scene = find_characters(characters, character_ids, character_names)
    if in_scene:
        prompt += "=== CHARACTERS IN THIS SCENE ===\n"
        for char in in_scene:
            prompt += f"{char['name']}: {char['description']}\n"
        prompt += "\n"

    if reference_descriptions:
        prompt += "=== REFERENCE IMAGES ===\n" + "\n".join(reference_descriptions) + "\n\n"

    if include_user or include_pet:
        prompt += "=== MAIN CHARACTERS ===\n"
        if include_user:
            prompt += f"{child_name or 'The child'} MUST be clearly visible. "
            prompt += ("Match their appearance EXACTLY from the reference image.\n" if has_user_avatar
                       else "Show them as a friendly child protagonist.\n")
        if include_pet:
            prompt += f"{pet_name or 'The pet companion'} MUST be clearly visible. "
            prompt += ("Match their appearance EXACTLY from the reference image.\n" if has_pet_avatar
                       else "Show them as an adorable, friendly companion.\n")
        prompt += "\n"

    if exclude or overlay_mode:
        prompt += "=== DO NOT INCLUDE ===\n"
        prompt += "The following elements must NOT appear in this image:\n"
        if overlay_mode:
            prompt += "- NO children or child characters (they will be added as a separate overlay)\n"
            prompt += "- NO pets, animal companions, or sidekick creatures (they will be added as a separate overlay)\n"
            prompt += "- This is a BACKGROUND ONLY image - show only the environment, setting, and any NPCs\n"
        for item in exclude or []:
            prompt += f"- NO {item}\n"
        prompt += "\n"

    prompt += f"=== SCENE DESCRIPTION ===\n{scene_description}"
    return prompt
