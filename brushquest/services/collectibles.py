"""
Collectible Sticker Service

Generates reward stickers (world-themed, custom-world or universal), saves them
as published uncommon stickers, and picks weighted random collectibles for the
mystery chest.
"""

import logging
import random
import re
import time
from typing import Any, Dict, List, Optional

from ..config.limits import DEFAULT_STICKER_BATCH
from ..prompts.images import (
    UNIVERSAL_STICKERS,
    WORLD_STICKER_THEMES,
    get_custom_world_sticker_subject,
    get_sticker_prompt,
    get_themed_sticker_subject,
)

logger = logging.getLogger(__name__)

RARITY_WEIGHTS = {"common": 5, "uncommon": 3, "rare": 1}
RANDOM_SAMPLE_SIZE = 10


def icon_display_name(icon: str) -> str:
    """'a golden magical leaf' -> 'Golden Magical Leaf'"""
    stripped = re.sub(r"^an? ", "", icon, flags=re.IGNORECASE)
    return " ".join(word[:1].upper() + word[1:] for word in stripped.split(" "))


def to_collectible(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "type": row.get("type"),
        "name": row.get("name"),
        "displayName": row.get("display_name"),
        "description": row.get("description"),
        "imageUrl": row.get("image_url"),
        "rarity": row.get("rarity"),
        "worldId": row.get("world_id"),
        "petId": row.get("pet_id"),
        "isPublished": bool(row.get("is_published")),
        "createdAt": row.get("created_at"),
    }


class CollectibleService:
    """Sticker generation and mystery-chest selection"""

    def __init__(self, providers, db, rng: Optional[random.Random] = None):
        self.providers = providers
        self.db = db
        self.rng = rng or random.Random()

    async def _render(self, subject: str, sticker_id: str) -> str:
        image, mime_type = await self.providers.images.generate_image(get_sticker_prompt(subject), [])
        return await self.providers.blob.upload_image(f"stickers/{sticker_id}.png", image, mime_type)

    async def world_sticker(self, world_id: str, world_name: str, world_description: str = "") -> Dict[str, Any]:
        """Known worlds draw from their theme list; other worlds get a 'Treasure'"""
        timestamp = int(time.time() * 1000)
        themes = WORLD_STICKER_THEMES.get(world_id)

        if themes:
            theme = self.rng.choice(themes)
            sticker_id = f"{world_id}-sticker-{timestamp}"
            image_url = await self._render(get_themed_sticker_subject(theme["icon"], theme["colors"]), sticker_id)
            display_name = icon_display_name(theme["icon"])
        else:
            sticker_id = f"{world_id[:8]}-sticker-{timestamp}"
            image_url = await self._render(get_custom_world_sticker_subject(world_name, world_description), sticker_id)
            display_name = f"{world_name} Treasure"

        return {
            "name": sticker_id,
            "display_name": display_name,
            "description": f"A special sticker from {world_name}",
            "image_url": image_url,
            "world_id": world_id,
        }

    async def universal_sticker(self) -> Dict[str, Any]:
        theme = self.rng.choice(UNIVERSAL_STICKERS)
        sticker_id = f"universal-sticker-{int(time.time() * 1000)}"
        image_url = await self._render(get_themed_sticker_subject(theme["icon"], theme["colors"]), sticker_id)

        return {
            "name": sticker_id,
            "display_name": icon_display_name(theme["icon"]),
            "description": "A special reward sticker!",
            "image_url": image_url,
            "world_id": None,
        }

    async def generate_sticker(
        self,
        world_id: Optional[str] = None,
        world_name: Optional[str] = None,
        world_description: str = ""
    ) -> Dict[str, Any]:
        """Generate and save one sticker; world-themed when both world fields are given"""
        if world_id and world_name:
            sticker = await self.world_sticker(world_id, world_name, world_description)
        else:
            sticker = await self.universal_sticker()

        saved = await self.db.create_collectible({
            "type": "sticker",
            "rarity": "uncommon",
            "is_published": True,
            **sticker,
        })
        logger.info(f"Sticker saved: {saved['name']}")
        return saved

    async def generate_batch(
        self,
        world_id: Optional[str] = None,
        world_name: Optional[str] = None,
        count: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Generate several stickers one after another"""
        results = []
        for _ in range(count or DEFAULT_STICKER_BATCH):
            results.append(await self.generate_sticker(world_id, world_name))
        return results

    async def random_collectible(self, world_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Pick a published collectible for the mystery chest.

        Candidates from the current world come first, the rest in random order;
        the first ten are weighted common 5, uncommon 3, rare 1.
        """
        published = await self.db.list_collectibles({"is_published": True})
        if not published:
            return None

        self.rng.shuffle(published)
        published.sort(key=lambda c: 0 if world_id and c.get("world_id") == world_id else 1)
        sample = published[:RANDOM_SAMPLE_SIZE]

        weights = [RARITY_WEIGHTS.get(c.get("rarity"), 1) for c in sample]
        return self.rng.choices(sample, weights=weights, k=1)[0]
