"""
Pet Suggestion Prompt
"""

from typing import List, Dict


def get_suggest_pets_prompt(existing_pets: List[Dict[str, str]], count: int) -> str:
    """
    Generate the pet brainstorming prompt.

    Args:
        existing_pets: [{"display_name", "description", "story_personality"}] already in the catalogue
        count: Number of suggestions requested

    Returns:
        Prompt asking for a JSON array of pets
    """
    existing_list = ""
    if existing_pets:
        lines = "\n".join(
            f"- {p['display_name']}: {p.get('description') or ''} (personality: {p.get('story_personality') or ''})"
            for p in existing_pets
        )
        existing_list = f"\nExisting pets (make sure new pets are DISTINCT and DIFFERENT from these):\n{lines}"

    starter_rule = "one pet a starter (unlockCost: 0, isStarter: true) and the rest" if count > 2 else "them"

    return f"""Generate {count} unique, creative pet companion ideas for a children's toothbrushing story app (ages 4-8).

Each pet should be:
- A magical, fantastical, or whimsical creature that would appeal to children
- Have a distinct personality that would be fun in adventure stories
- Be visually interesting and memorable
- Different from typical pets (dogs, cats, etc. are too common - be creative!)
{existing_list}

For each pet, provide:
- name: A kebab-case unique identifier (e.g., "sparkle-dragon", "cloud-bunny")
- displayName: A friendly name kids would say (e.g., "Sparkle", "Cloudy")
- description: A short, magical 1-sentence description
- storyPersonality: 2-3 words describing how they act in stories (e.g., "brave and curious", "silly but wise")
- unlockCost: Points needed to unlock (0 for starter pets, 50-150 for unlockable ones)
- isStarter: true if this should be a free starter pet, false otherwise

Make {starter_rule} unlockable with varying costs.

Respond with ONLY a JSON array:
[{{"name": "kebab-case-name", "displayName": "Display Name", "description": "Magical description", "storyPersonality": "personality traits", "unlockCost": 0, "isStarter": true}}, ...]"""
