"""
World Icon Prompt

Worlds are shown as small floating planets. The central motif comes from the
world's theme, or from keywords in its name and description.
"""

from typing import Optional

from .styles import STYLE_PREFIX

THEME_ICONS = {
    "magical-forest": "a majestic glowing tree with magical sparkles",
    "space": "a sleek futuristic spaceship with glowing engines",
    "underwater": "a beautiful coral castle with swimming fish",
    "dinosaurs": "a friendly dinosaur silhouette",
    "pirates": "a pirate ship with billowing sails",
}

# Checked in order; first keyword hit wins
KEYWORD_ICONS = [
    (("forest", "tree", "magic"), THEME_ICONS["magical-forest"]),
    (("space", "star", "galaxy", "rocket"), THEME_ICONS["space"]),
    (("underwater", "ocean", "sea", "fish"), THEME_ICONS["underwater"]),
    (("dinosaur", "dino", "prehistoric"), THEME_ICONS["dinosaurs"]),
    (("pirate", "ship", "treasure"), THEME_ICONS["pirates"]),
    (("castle", "kingdom"), "a majestic castle with towers and flags"),
    (("dragon",), "a friendly dragon curled around a glowing crystal"),
    (("fairy", "pixie"), "sparkling fairy wings with magical dust"),
    (("robot", "machine"), "a friendly robot with glowing eyes"),
    (("candy", "sweet"), "colorful candy swirls and lollipops"),
    (("cloud", "sky"), "fluffy clouds with a rainbow"),
    (("cave", "crystal", "gem"), "glowing crystals and gems"),
    (("jungle", "safari"), "tropical leaves with exotic birds"),
    (("snow", "ice", "winter"), "sparkling snowflakes and icicles"),
]

DEFAULT_ICON = "a magical glowing symbol representing the theme"


def pick_world_icon(world_name: str, world_description: str, theme: Optional[str] = None) -> str:
    """Choose the central motif for a world icon"""
    if theme and theme in THEME_ICONS:
        return THEME_ICONS[theme]

    haystack = f"{world_name} {world_description}".lower()
    for keywords, icon in KEYWORD_ICONS:
        if any(k in haystack for k in keywords):
            return icon
    return DEFAULT_ICON


def get_world_icon_prompt(world_name: str, world_description: str, theme: Optional[str] = None) -> str:
    central_image = pick_world_icon(world_name, world_description, theme)

    return f"""{STYLE_PREFIX}

Create a circular planet-like world icon for a children's app. This represents "{world_name}" - {world_description}.

REQUIREMENTS:
- The image should look like a floating spherical planet viewed from space
- The planet should have a gentle 3D spherical appearance with soft lighting from the top-left
- In the CENTER of the planet, feature: {central_image}
- The planet surface should have colors and textures that match the theme
- Add a soft glowing aura around the planet
- The background should be transparent or a very dark space-like gradient
- Style should be whimsical, magical, and appealing to children ages 4-8
- The planet should feel like a portal to an adventure world
- Use vibrant but soft colors
- NO text or labels in the image
- The central icon should be clearly visible and recognizable
- Add subtle sparkles or magical particles around the planet"""
