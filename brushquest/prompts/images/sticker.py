"""
Sticker Prompts and Themes
"""

from .styles import STICKER_STYLE

# Known worlds get hand-picked sticker motifs
WORLD_STICKER_THEMES = {
    "magical-forest": [
        {"icon": "a golden magical leaf with sparkles", "colors": "gold, emerald green, soft yellow"},
        {"icon": "a cute fairy with tiny wings", "colors": "pink, lavender, silver sparkles"},
        {"icon": "an enchanted acorn with a glowing center", "colors": "brown, amber, golden glow"},
        {"icon": "a friendly owl face", "colors": "brown, cream, golden eyes"},
        {"icon": "a magical mushroom with spots", "colors": "red, white, soft green"},
    ],
    "space-station": [
        {"icon": "a shooting star with a trail", "colors": "yellow, orange, deep blue"},
        {"icon": "a crescent moon with a cute face", "colors": "silver, pale yellow, deep purple"},
        {"icon": "a friendly rocket ship", "colors": "red, silver, orange flames"},
        {"icon": "a ringed planet", "colors": "purple, pink rings, stars"},
        {"icon": "a smiling alien face", "colors": "green, big black eyes, silver"},
    ],
    "underwater-kingdom": [
        {"icon": "a shimmering pearl in a shell", "colors": "white, pink, iridescent"},
        {"icon": "a beautiful spiral seashell", "colors": "coral pink, cream, peach"},
        {"icon": "a golden treasure coin", "colors": "gold, amber, shiny"},
        {"icon": "a cute clownfish", "colors": "orange, white, black stripes"},
        {"icon": "a friendly octopus", "colors": "purple, pink, big eyes"},
    ],
    "dinosaur-valley": [
        {"icon": "a dinosaur footprint", "colors": "brown, tan, earth tones"},
        {"icon": "a prehistoric fossil", "colors": "beige, amber, stone gray"},
        {"icon": "an erupting volcano badge", "colors": "red, orange, black"},
        {"icon": "a cute baby dinosaur egg", "colors": "cream, spots, cracking shell"},
        {"icon": "a friendly T-Rex face", "colors": "green, big teeth, happy eyes"},
    ],
    "pirate-cove": [
        {"icon": "a gold doubloon coin", "colors": "gold, amber, pirate skull"},
        {"icon": "a compass rose", "colors": "brass, red arrow, aged paper"},
        {"icon": "a rolled treasure map", "colors": "tan, red X marks, aged"},
        {"icon": "a pirate flag with cute skull", "colors": "black, white, red bandana"},
        {"icon": "a treasure chest overflowing", "colors": "brown, gold, jewels"},
    ],
}

# Reward stickers not tied to any world
UNIVERSAL_STICKERS = [
    {"icon": "a sparkling star badge", "colors": "gold, yellow, white sparkles"},
    {"icon": "a rainbow heart", "colors": "all rainbow colors, pink center"},
    {"icon": "a trophy cup", "colors": "gold, silver base, stars"},
    {"icon": "a thumbs up badge", "colors": "blue, white, yellow burst"},
    {"icon": "a smiley tooth", "colors": "white, pink gums, sparkle"},
]


def get_themed_sticker_subject(icon: str, colors: str) -> str:
    return f"{icon}. Use these colors: {colors}"


def get_custom_world_sticker_subject(world_name: str, world_description: str = "") -> str:
    if world_description:
        context = f'This sticker is for a world called "{world_name}" which is described as: {world_description}'
    else:
        context = f'This sticker is for a world called "{world_name}"'

    return f"""A cute collectible item or symbol that would fit in {world_name}.
{context}

Create something iconic and recognizable that a child would love to collect.
Use vibrant colors that match the world's theme.
Make it feel magical and special."""


def get_sticker_prompt(subject: str) -> str:
    return f"""{STICKER_STYLE}

Create a collectible sticker featuring: {subject}

REQUIREMENTS:
- Circular or badge-shaped design
- Bold clean outlines
- Vibrant kawaii style
- Slightly glossy/shiny appearance
- No text or words
- Simple clean background
- Should look like a prize/reward sticker"""
