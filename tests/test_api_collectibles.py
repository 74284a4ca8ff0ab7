"""
API tests for collectibles, the mystery chest, pose definitions and sprites.

Run with: python -m pytest tests/test_api_collectibles.py -v
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushquest.services.errors import ProviderError

ACCESSORY = {
    "type": "accessory",
    "name": "tiny-crown",
    "displayName": "Tiny Crown",
    "imageUrl": "https://img.test/crown.png",
    "rarity": "rare",
    "worldId": "magical-forest",
    "petId": "sparkle",
}


class TestCollectibles:

    def test_create_and_filter(self, client):
        response = client.post("/api/admin/collectibles", json=ACCESSORY)
        assert response.status_code == 201
        created = response.json()["collectible"]
        assert created["isPublished"] is True
        assert created["petId"] == "sparkle"

        client.post("/api/admin/collectibles", json={**ACCESSORY, "name": "leaf", "rarity": "common"})

        rare = client.get("/api/admin/collectibles?rarity=rare").json()["collectibles"]
        assert [c["name"] for c in rare] == ["tiny-crown"]

    def test_create_missing_fields(self, client):
        response = client.post("/api/admin/collectibles", json={"type": "sticker"})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: type, name, displayName, imageUrl"}

    def test_update_detaches_only_when_sent(self, client):
        collectible_id = client.post("/api/admin/collectibles", json=ACCESSORY).json()["collectible"]["id"]

        updated = client.put(f"/api/admin/collectibles/{collectible_id}", json={"worldId": None}).json()["collectible"]
        assert updated["worldId"] is None
        assert updated["petId"] == "sparkle"
        assert updated["rarity"] == "rare"

    def test_generate_sticker(self, client):
        response = client.post("/api/admin/collectibles", json={
            "action": "generate", "worldId": "space-station", "worldName": "Space Station",
        })
        assert response.status_code == 200
        sticker = response.json()["collectible"]
        assert sticker["type"] == "sticker"
        assert sticker["worldId"] == "space-station"

    def test_delete_missing(self, client):
        assert client.delete("/api/admin/collectibles/nope").status_code == 404


class TestMysteryChest:

    def test_nothing_published(self, client):
        response = client.get("/api/collectibles/random")
        assert response.status_code == 404
        assert response.json() == {"error": "No collectibles available"}

    def test_returns_a_published_collectible(self, client):
        client.post("/api/admin/collectibles", json=ACCESSORY)

        picked = client.get("/api/collectibles/random?worldId=magical-forest").json()["collectible"]
        assert picked["name"] == "tiny-crown"


class TestPoses:

    POSE = {
        "characterType": "pet",
        "poseKey": "sleepy",
        "displayName": "Sleepy",
        "generationPrompt": "Heavy eyelids, small yawn",
    }

    def test_create_replaces_by_key(self, client, fake_db):
        first = client.post("/api/admin/characters?entity=poses", json=self.POSE)
        assert first.status_code == 201

        client.post("/api/admin/characters?entity=poses", json={**self.POSE, "displayName": "Very Sleepy"})
        poses = client.get("/api/admin/characters?entity=poses&characterType=pet").json()["poses"]
        assert [p["displayName"] for p in poses] == ["Very Sleepy"]
        assert len(fake_db.tables["pose_definitions"]) == 1

    def test_invalid_character_type(self, client):
        response = client.post("/api/admin/characters?entity=poses", json={**self.POSE, "characterType": "robot"})
        assert response.status_code == 400

    def test_update_keeps_omitted_fields(self, client):
        pose_id = client.post("/api/admin/characters?entity=poses", json=self.POSE).json()["pose"]["id"]

        pose = client.put("/api/admin/characters?entity=poses", json={"id": pose_id, "isActive": False}).json()["pose"]
        assert pose["isActive"] is False
        assert pose["generationPrompt"] == self.POSE["generationPrompt"]

    def test_missing_entity(self, client):
        response = client.get("/api/admin/characters")
        assert response.status_code == 400
        assert response.json() == {"error": 'Missing or invalid entity parameter. Use "poses" or "sprites"'}


class TestSprites:

    def add_pose(self, client, key):
        client.post("/api/admin/characters?entity=poses", json={
            "characterType": "pet", "poseKey": key, "displayName": key.title(),
            "generationPrompt": f"A {key} face",
        })

    def test_generate_one(self, client):
        self.add_pose(client, "happy")

        response = client.post("/api/admin/characters?entity=sprites", json={
            "action": "generate", "ownerType": "pet", "ownerId": "sparkle",
            "poseKey": "happy", "sourceAvatarUrl": "https://img.test/sparkle.png",
        })
        sprite = response.json()["sprite"]
        assert sprite["generationStatus"] == "complete"
        assert sprite["spriteUrl"].startswith("https://blob.test/sprites/pet/sparkle/happy-")

    def test_unknown_pose(self, client):
        response = client.post("/api/admin/characters?entity=sprites", json={
            "action": "generate", "ownerType": "pet", "ownerId": "sparkle",
            "poseKey": "grumpy", "sourceAvatarUrl": "https://img.test/sparkle.png",
        })
        assert response.status_code == 404

    def test_generate_all_continues_past_failure(self, client, providers):
        self.add_pose(client, "happy")
        self.add_pose(client, "sad")
        providers.images.generate_image.side_effect = [
            ProviderError("gemini", "quota exceeded"),
            (b"png-bytes", "image/png"),
        ]

        results = client.post("/api/admin/characters?entity=sprites", json={
            "action": "generateAll", "ownerType": "pet", "ownerId": "sparkle",
            "sourceAvatarUrl": "https://img.test/sparkle.png",
        }).json()["results"]

        assert [(r["poseKey"], r["success"]) for r in results] == [("happy", False), ("sad", True)]
        assert "error" in results[0]

        merged = client.get("/api/admin/characters?entity=sprites&ownerType=pet&ownerId=sparkle").json()["sprites"]
        assert {s["poseKey"]: s["generationStatus"] for s in merged} == {"happy": "failed", "sad": "complete"}

    def test_public_sprites_need_owner(self, client):
        assert client.get("/api/sprites?ownerType=pet").status_code == 400

    def test_delete_sprites(self, client, fake_db):
        self.add_pose(client, "happy")
        client.post("/api/admin/characters?entity=sprites", json={
            "action": "generate", "ownerType": "pet", "ownerId": "sparkle",
            "poseKey": "happy", "sourceAvatarUrl": "https://img.test/sparkle.png",
        })

        client.delete("/api/admin/characters?entity=sprites&ownerType=pet&ownerId=sparkle")
        assert fake_db.tables["character_sprites"] == []
