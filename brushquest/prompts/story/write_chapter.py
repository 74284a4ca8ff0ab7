"""
Chapter Writing Prompt

One call per chapter. The prompt carries the story bible, a short summary of
every chapter already written, and the previous chapter's cliffhanger so the
new chapter picks up exactly where the last one stopped.
"""

from typing import List, Dict, Any, Optional

from ...config.limits import CHAPTER_SUMMARY_MAX_LENGTH, SEGMENTS_PER_CHAPTER


def _character_line(ref: Dict[str, Any]) -> str:
    personality = ref.get("personality")
    role = ref.get("role")
    if personality and role:
        detail = f" ({personality}, role: {role})"
    elif personality:
        detail = f" ({personality})"
    elif role:
        detail = f" (role: {role})"
    else:
        detail = ""
    return f"- {ref['name']}: {ref['description']}{detail}"


def format_bible_section(bible: Optional[Dict[str, Any]], references: List[Dict[str, Any]]) -> str:
    """Render the story bible and its references for chapter prompts"""
    if not bible:
        return ""

    locations = [r for r in references if r["type"] == "location"]
    characters = [r for r in references if r["type"] == "character"]

    location_lines = "\n".join(
        f"- {loc['name']}: {loc['description']}" + (f" (mood: {loc['mood']})" if loc.get("mood") else "")
        for loc in locations
    )
    character_lines = "\n".join(_character_line(c) for c in characters)
    magic_line = f"- Magic System: {bible['magicSystem']}" if bible.get("magicSystem") else ""

    return f"""
STORY BIBLE (maintain consistency with these elements throughout):
- Tone: {bible.get('tone', '')}
- Themes: {', '.join(bible.get('themes') or [])}
- Narrative Style: {bible.get('narrativeStyle', '')}
- [CHILD]'s Role: {bible.get('childRole', '')}
- [PET]'s Role: {bible.get('petRole', '')}
- Character Dynamic: {bible.get('characterDynamic', '')}
- Stakes: {bible.get('stakes', '')}
- Resolution Direction: {bible.get('resolution', '')}

KEY LOCATIONS (use these visual descriptions for image prompts):
{location_lines}

RECURRING CHARACTERS (maintain consistent appearances):
{character_lines}

VISUAL STYLE (apply to all image prompts):
- Color Palette: {bible.get('colorPalette', '')}
- Lighting: {bible.get('lightingStyle', '')}
- Art Direction: {bible.get('artDirection', '')}
{magic_line}
"""


def format_previous_chapters(previous_chapters: List[Any]) -> str:
    """Summarize written chapters as 'Chapter N "title": first words...'"""
    if not previous_chapters:
        return ""

    lines = []
    for ch in previous_chapters:
        text = " ".join(s.text for s in ch.segments)[:CHAPTER_SUMMARY_MAX_LENGTH]
        lines.append(f'- Chapter {ch.chapter_number} "{ch.title}": {text}...')
    return "\nPREVIOUS CHAPTERS SUMMARY:\n" + "\n".join(lines)


def get_write_chapter_prompt(
    world_name: str,
    world_description: str,
    story_title: str,
    story_description: str,
    chapter_outline: Dict[str, Any],
    bible_section: str,
    previous_chapters: List[Any],
    previous_cliffhanger: Optional[str],
    is_first: bool,
    is_last: bool
) -> str:
    """
    Generate the prompt for a single chapter.

    Args:
        world_name: Display name of the world
        world_description: One-line world description
        story_title: Story title
        story_description: Story hook
        chapter_outline: {"chapter", "title", "summary"} for this chapter
        bible_section: Pre-rendered output of format_bible_section
        previous_chapters: GeneratedChapter objects written so far
        previous_cliffhanger: Cliffhanger of the chapter just written, if any
        is_first: True for the opening chapter
        is_last: True for the final chapter

    Returns:
        Prompt asking for a single chapter JSON object
    """
    number = chapter_outline["chapter"]
    title = chapter_outline["title"]
    cliffhanger_line = f'Previous chapter ended with: "{previous_cliffhanger}"' if previous_cliffhanger is not None else ""

    opening = "Start with excitement!" if is_first else "Begin with brief recap."
    if is_last:
        ending = "End with happy conclusion that resolves the story stakes."
    else:
        ending = """End with an exciting cliffhanger that:
- Poses a QUESTION about what will happen next (e.g., "Will [CHILD] and [PET] reach the cave in time?" or "What could be making that strange sound?")
- Does NOT introduce new characters, actions, or events (no "Suddenly, a mysterious figure appeared...")
- Creates suspense by leaving an existing situation unresolved
- Makes the reader wonder about the outcome of the current scene"""

    recap_template = "null" if is_first else '"Brief recap"'
    cliffhanger_template = "" if is_last else "A question about what happens next (not a new event)"
    teaser_template = "The End!" if is_last else "Teaser..."

    return f"""Write Chapter {number} of a children's adventure story (ages 4-8).
Story: "{story_title}" - {story_description}
World: {world_name} - {world_description}
Chapter {number}: "{title}" - {chapter_outline.get('summary', '')}
{bible_section}{format_previous_chapters(previous_chapters)}
{cliffhanger_line}

Write exactly {SEGMENTS_PER_CHAPTER} segments (each ~15 seconds to read, 2-3 sentences, 40-60 words).
Use [CHILD] and [PET] as placeholders in the story text.

STORY QUALITY GUIDELINES:
- Focus on the adventure - do NOT mention brushing, teeth, or dental hygiene
- Avoid clichés: no "believed in themselves", "learned the real treasure was friendship"
- Make characters react in surprising but believable ways
- Include specific, vivid details rather than generic descriptions
- Show characters being clever, creative, or resourceful

IMPORTANT - [PET] DESCRIPTIONS:
The pet companion could be ANY type of creature (animal, robot, magical being, fish, etc.).
- NEVER use species-specific physical descriptions (no "wagged tail", "fuzzy nose", "flapped wings", "purred", etc.)
- ONLY describe [PET]'s expressions and emotions (smiled, looked excited, seemed worried, bounced happily)
- Use universal actions: "jumped", "bounced", "nodded", "looked at", "moved closer"
- AVOID: tail, fur, paws, wings, fins, antenna, or any body part references

{opening}
{ending}

IMPORTANT - CHARACTER EXPRESSION SYSTEM:
For each segment, provide character expressions (portrait overlays will be shown in corner circles):
- "childExpression": The child's facial expression. Options: "happy", "sad", "surprised", "worried", "determined", "excited", or null if child not featured in this segment.
- "petExpression": The pet's facial expression. Options: "happy", "sad", "surprised", "worried", "determined", "excited", or null if pet not featured in this segment.

Choose expressions that match the emotional content of each segment.

Respond with ONLY JSON:
{{"chapterNumber": {number}, "title": "{title}", "recap": {recap_template}, "segments": [{{"segmentOrder": 1, "text": "Story text...", "childExpression": "happy", "petExpression": "happy"}}, ...{SEGMENTS_PER_CHAPTER} segments], "cliffhanger": "{cliffhanger_template}", "nextChapterTeaser": "{teaser_template}"}}"""
