"""
Shared visual style prefixes

Every illustration prompt starts with one of these so the catalogue keeps a
single consistent look.
"""

# Story scenes, avatars, covers and reference sheets
STYLE_PREFIX = """Children's book illustration style, soft watercolor and digital art hybrid,
warm and inviting colors, gentle lighting, whimsical and magical atmosphere,
suitable for ages 4-8, no text in image, dreamlike quality,
Studio Ghibli inspired soft aesthetic, rounded friendly shapes,
pastel color palette with vibrant accents."""

# Expression portraits (white background, circle-masked in the app)
PORTRAIT_STYLE = """Children's book illustration style, soft watercolor and digital art hybrid,
PURE WHITE #FFFFFF BACKGROUND (critical - solid white background, no gradients or shadows),
PORTRAIT SHOT - shoulders up, head and upper chest only, NO full body,
centered face with clear expressive features, Studio Ghibli inspired soft aesthetic,
warm inviting colors, friendly approachable character design,
clean sharp edges suitable for circle masking."""

# Collectible stickers
STICKER_STYLE = """Cute collectible sticker design, flat illustration style with bold outlines,
vibrant saturated colors, kawaii aesthetic, slightly glossy appearance,
simple background or transparent, suitable for children ages 4-8,
no text in image, circular or badge-shaped composition,
playful and rewarding feel, like a prize or achievement badge."""
