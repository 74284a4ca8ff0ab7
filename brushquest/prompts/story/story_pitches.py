"""
Story Pitch Prompts

Two entry points produce 5-chapter outlines for a world:
- get_story_pitches_prompt: several fresh ideas at once
- get_outline_from_idea_prompt: one outline built around an operator's idea

Both list the world's existing stories so new pitches do not repeat them.
"""

from typing import List, Dict


def _format_existing(existing_stories: List[Dict[str, str]]) -> str:
    return "\n".join(
        f'{i + 1}. "{s["title"]}" - {s.get("description") or ""}'
        for i, s in enumerate(existing_stories)
    )


def get_story_pitches_prompt(
    world_name: str,
    world_description: str,
    count: int,
    existing_stories: List[Dict[str, str]]
) -> str:
    """
    Generate the pitch brainstorming prompt.

    Args:
        world_name: Display name of the world
        world_description: One-line world description
        count: Number of pitches requested
        existing_stories: [{"title", "description"}] already in the world

    Returns:
        Prompt asking for a JSON array of pitches
    """
    existing_section = ""
    if existing_stories:
        existing_section = f"""
EXISTING STORIES IN THIS WORLD (generate stories that are DIFFERENT from these - avoid similar plots, themes, conflicts, and settings):
{_format_existing(existing_stories)}

IMPORTANT: Each new story must have a DISTINCT premise, different conflict type, and explore different aspects of the world. Avoid rehashing similar adventures."""

    return f"""Generate {count} unique story ideas for a children's adventure app (ages 4-8).
World: {world_name} - {world_description}
Each story: 5-chapter adventure with [CHILD] and [PET] as main characters.
{existing_section}

STORY VARIETY GUIDELINES:
- Focus on engaging adventures, mysteries, friendships, and discoveries
- Do NOT make stories about brushing teeth or dental hygiene (the app handles that separately)
- Avoid overused tropes: chosen one prophecies, "believe in yourself" lessons, predictable hero's journeys
- Instead explore: unexpected friendships, clever problem-solving, funny misunderstandings, creative collaborations, mysteries with surprising twists
- Each story should feel fresh and surprising, not formulaic
- Characters should have quirky personalities and genuine challenges

Respond with ONLY a JSON array:
[{{"title": "Story Title", "description": "1-2 sentence hook", "outline": [{{"chapter": 1, "title": "Ch Title", "summary": "Brief summary"}}, ...for all 5 chapters]}}]"""


def get_outline_from_idea_prompt(
    world_name: str,
    world_description: str,
    idea: str,
    existing_stories: List[Dict[str, str]]
) -> str:
    existing_section = ""
    if existing_stories:
        existing_section = f"""
EXISTING STORIES IN THIS WORLD (ensure this new story is DIFFERENT from these):
{_format_existing(existing_stories)}
"""

    return f"""Create a 5-chapter story outline based on this idea for a children's adventure app (ages 4-8).
World: {world_name} - {world_description}
User's idea: "{idea}"
Features [CHILD] and [PET] as main characters.
{existing_section}

STORY GUIDELINES:
- Focus on the adventure, not on brushing teeth (the app handles that separately)
- Avoid formulaic plots - surprise the reader with unexpected twists
- Characters should feel real with quirky traits, not just archetypes

Respond with ONLY a JSON object:
{{"title": "Story Title", "description": "1-2 sentence hook", "outline": [{{"chapter": 1, "title": "Ch Title", "summary": "Brief summary"}}, ...for all 5 chapters]}}"""
