"""
Unit tests for sticker generation and the mystery-chest pick.

Run with: python -m pytest tests/test_collectibles.py -v
"""

import asyncio
import random
import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushquest.prompts.images import WORLD_STICKER_THEMES
from brushquest.services.collectibles import (
    RANDOM_SAMPLE_SIZE,
    CollectibleService,
    icon_display_name,
    to_collectible,
)

from conftest import FakeDatabase, make_providers


class TestIconDisplayName:

    def test_strips_article_and_titles_words(self):
        assert icon_display_name("a golden magical leaf") == "Golden Magical Leaf"
        assert icon_display_name("an enchanted acorn") == "Enchanted Acorn"

    def test_keeps_inner_capitals(self):
        assert icon_display_name("a friendly T-Rex face") == "Friendly T-Rex Face"


class TestGenerateSticker:
    """World-themed, custom-world and universal stickers"""

    def setup_method(self):
        self.db = FakeDatabase()
        self.providers = make_providers()
        self.service = CollectibleService(self.providers, self.db, rng=random.Random(3))

    def test_known_world_uses_theme(self):
        sticker = asyncio.run(self.service.generate_sticker("magical-forest", "Magical Forest"))

        names = {icon_display_name(t["icon"]) for t in WORLD_STICKER_THEMES["magical-forest"]}
        assert sticker["display_name"] in names
        assert sticker["name"].startswith("magical-forest-sticker-")
        assert sticker["world_id"] == "magical-forest"
        assert sticker["image_url"].startswith("https://blob.test/stickers/magical-forest-sticker-")

    def test_saved_as_published_uncommon(self):
        sticker = asyncio.run(self.service.generate_sticker("magical-forest", "Magical Forest"))

        stored = self.db.tables["collectibles"][0]
        assert stored["id"] == sticker["id"]
        assert stored["type"] == "sticker"
        assert stored["rarity"] == "uncommon"
        assert stored["is_published"] is True

    def test_custom_world_gets_treasure(self):
        world_id = "0f3c2a9e-1111-2222-3333-444455556666"
        sticker = asyncio.run(self.service.generate_sticker(world_id, "Cloud Castle", "Castles in the sky"))

        assert sticker["display_name"] == "Cloud Castle Treasure"
        assert sticker["name"].startswith("0f3c2a9e-sticker-")
        assert sticker["description"] == "A special sticker from Cloud Castle"

    def test_universal_without_world(self):
        sticker = asyncio.run(self.service.generate_sticker())

        assert sticker["name"].startswith("universal-sticker-")
        assert sticker["world_id"] is None
        assert sticker["description"] == "A special reward sticker!"

    def test_world_id_alone_is_universal(self):
        sticker = asyncio.run(self.service.generate_sticker(world_id="magical-forest"))
        assert sticker["name"].startswith("universal-sticker-")

    def test_batch_default_count(self):
        stickers = asyncio.run(self.service.generate_batch())
        assert len(stickers) == 3
        assert self.providers.images.generate_image.await_count == 3


class TestRandomCollectible:
    """Current world first, ten candidates, rarity weights 5/3/1"""

    def setup_method(self):
        self.db = FakeDatabase()
        self.rng = MagicMock()
        self.rng.choices.side_effect = lambda seq, weights, k: [seq[0]]
        self.service = CollectibleService(make_providers(), self.db, rng=self.rng)

    def add(self, name, rarity="common", world_id=None, published=True):
        self.db._insert_sync("collectibles", {
            "type": "sticker", "name": name, "display_name": name, "image_url": f"/{name}.png",
            "rarity": rarity, "world_id": world_id, "is_published": published,
        })

    def test_none_when_empty(self):
        self.add("hidden", published=False)
        assert asyncio.run(self.service.random_collectible()) is None

    def test_current_world_first(self):
        self.add("elsewhere", world_id="space-station")
        self.add("here", world_id="magical-forest")
        self.add("anywhere")

        pick = asyncio.run(self.service.random_collectible("magical-forest"))
        assert pick["name"] == "here"

    def test_weights_by_rarity(self):
        self.add("c", rarity="common")
        self.add("u", rarity="uncommon")
        self.add("r", rarity="rare")

        asyncio.run(self.service.random_collectible())
        sample = self.rng.choices.call_args.args[0]
        weights = self.rng.choices.call_args.kwargs["weights"]
        assert {c["name"]: w for c, w in zip(sample, weights)} == {"c": 5, "u": 3, "r": 1}

    def test_sample_capped(self):
        for i in range(15):
            self.add(f"s{i}")

        asyncio.run(self.service.random_collectible())
        assert len(self.rng.choices.call_args.args[0]) == RANDOM_SAMPLE_SIZE


class TestToCollectible:

    def test_camel_case(self):
        data = to_collectible({
            "id": "c1", "type": "sticker", "name": "leaf", "display_name": "Leaf",
            "image_url": "/leaf.png", "rarity": "rare", "world_id": None, "is_published": 1,
        })
        assert data["displayName"] == "Leaf"
        assert data["imageUrl"] == "/leaf.png"
        assert data["isPublished"] is True
