"""
API tests for pets: public list, suggestions, approval and name audio.

Run with: python -m pytest tests/test_api_pets.py -v
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brushquest.services.errors import PersistenceError
from brushquest.services.pets import STATIC_PETS


def add_suggestion(fake_db, name="luna"):
    return fake_db._insert_sync("pet_suggestions", {
        "name": name,
        "display_name": name.title(),
        "description": "A glowing moth who loves bedtime",
        "story_personality": "gentle and wise",
        "unlock_cost": 50,
        "is_starter": False,
    })


class TestPublicPets:

    def test_built_in_pets_when_none_published(self, client, fake_db):
        fake_db._insert_sync("pets", {"name": "draft", "display_name": "Draft", "description": "d",
                                      "story_personality": "p", "is_published": False})

        pets = client.get("/api/pets").json()["pets"]
        assert [p["id"] for p in pets] == [p["id"] for p in STATIC_PETS]
        assert pets[0]["displayName"] == "Sparkle"
        assert pets[0]["isStarter"] is True

    def test_published_pets_replace_built_ins(self, client, fake_db):
        fake_db._insert_sync("pets", {"name": "luna", "display_name": "Luna", "description": "A moth",
                                      "story_personality": "gentle", "unlock_cost": 50, "is_published": True})

        pets = client.get("/api/pets").json()["pets"]
        assert [p["displayName"] for p in pets] == ["Luna"]
        assert pets[0]["unlockCost"] == 50


class TestSuggestions:

    def test_generate_saves_suggestions(self, client, providers, fake_db):
        providers.text.generate_json.return_value = {"pets": [
            {"name": "luna", "displayName": "Luna", "description": "A moth", "storyPersonality": "gentle"},
            {"name": "pip", "displayName": "Pip", "description": "A mouse", "storyPersonality": "bold",
             "unlockCost": 75},
        ]}

        response = client.post("/api/admin/pets", json={"action": "generate", "count": 2})
        assert response.status_code == 200
        assert [s["name"] for s in response.json()["suggestions"]] == ["luna", "pip"]
        assert len(fake_db.tables["pet_suggestions"]) == 2

        prompt = providers.text.generate_json.call_args.args[0]
        assert "Sparkle" in prompt

    def test_list_shows_pending_only(self, client, fake_db):
        pending = add_suggestion(fake_db, "luna")
        approved = add_suggestion(fake_db, "pip")
        fake_db._update_sync("pet_suggestions", {"id": approved["id"]}, {"is_approved": True})

        data = client.get("/api/admin/pets").json()
        assert [s["id"] for s in data["suggestions"]] == [pending["id"]]

    def test_approve_creates_pet(self, client, fake_db):
        suggestion = add_suggestion(fake_db)

        response = client.post(f"/api/admin/pets/{suggestion['id']}", json={"action": "approve"})
        assert response.status_code == 201
        pet = response.json()["pet"]
        assert pet["name"] == "luna"
        assert pet["story_personality"] == "gentle and wise"
        assert pet["unlock_cost"] == 50

    def test_second_approve_conflicts(self, client, fake_db):
        suggestion = add_suggestion(fake_db)

        client.post(f"/api/admin/pets/{suggestion['id']}", json={"action": "approve"})
        response = client.post(f"/api/admin/pets/{suggestion['id']}", json={"action": "approve"})

        assert response.status_code == 409
        assert response.json() == {"error": "Suggestion already approved"}
        assert len(fake_db.tables["pets"]) == 1

    def test_failed_insert_leaves_suggestion_pending(self, client, fake_db, monkeypatch):
        suggestion = add_suggestion(fake_db)
        monkeypatch.setattr(fake_db, "create_pet", AsyncMock(side_effect=PersistenceError("insert failed")))

        response = client.post(f"/api/admin/pets/{suggestion['id']}", json={"action": "approve"})
        assert response.status_code == 500
        assert fake_db.tables["pet_suggestions"][0]["is_approved"] == 0
        assert fake_db.tables["pets"] == []

        # A retry once the insert succeeds is not a conflict
        monkeypatch.undo()
        response = client.post(f"/api/admin/pets/{suggestion['id']}", json={"action": "approve"})
        assert response.status_code == 201
        assert len(fake_db.tables["pets"]) == 1

    def test_approve_missing(self, client):
        response = client.post("/api/admin/pets/nope", json={"action": "approve"})
        assert response.status_code == 404
        assert response.json() == {"error": "Suggestion not found"}

    def test_reject(self, client, fake_db):
        suggestion = add_suggestion(fake_db)

        response = client.post(f"/api/admin/pets/{suggestion['id']}", json={"action": "reject"})
        assert response.json() == {"success": True}
        assert fake_db.tables["pet_suggestions"] == []

    def test_invalid_action(self, client, fake_db):
        suggestion = add_suggestion(fake_db)
        response = client.post(f"/api/admin/pets/{suggestion['id']}", json={"action": "adopt"})
        assert response.status_code == 400


class TestPetCrud:

    BODY = {
        "name": "luna-moth",
        "displayName": "Luna",
        "description": "A glowing moth who loves bedtime",
        "storyPersonality": "gentle and wise",
        "unlockCost": 50,
    }

    def test_create(self, client):
        response = client.post("/api/admin/pets", json=self.BODY)
        assert response.status_code == 201
        assert response.json()["pet"]["display_name"] == "Luna"

    def test_create_missing_personality(self, client):
        body = {k: v for k, v in self.BODY.items() if k != "storyPersonality"}
        response = client.post("/api/admin/pets", json=body)
        assert response.status_code == 400

    def test_update_and_delete(self, client):
        pet_id = client.post("/api/admin/pets", json=self.BODY).json()["pet"]["id"]

        pet = client.put(f"/api/admin/pets/{pet_id}", json={"isPublished": True}).json()["pet"]
        assert pet["is_published"] is True
        assert pet["description"] == self.BODY["description"]

        assert client.delete(f"/api/admin/pets/{pet_id}").json() == {"success": True}
        assert client.get(f"/api/admin/pets/{pet_id}").status_code == 404


class TestPetAudio:

    def test_save_requires_url(self, client):
        response = client.post("/api/admin/pets", json={"action": "saveAudio", "petId": "sparkle"})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing petId or audioUrl"}

    def test_save_and_read_back(self, client):
        response = client.post("/api/admin/pets", json={
            "action": "saveAudio",
            "petId": "sparkle",
            "audioUrl": "https://blob.test/name-audio/pets/sparkle.mp3",
            "possessiveAudioUrl": "https://blob.test/name-audio/pets/sparkle-possessive.mp3",
        })
        assert response.status_code == 200
        assert response.json()["success"] is True

        # Saving again replaces the row
        client.post("/api/admin/pets", json={
            "action": "saveAudio", "petId": "sparkle", "audioUrl": "https://blob.test/v2.mp3",
        })

        data = client.get("/api/admin/pets?audio=true").json()
        assert data["petAudio"] == {"sparkle": "https://blob.test/v2.mp3"}
        assert data["petAudioPossessive"] == {
            "sparkle": "https://blob.test/name-audio/pets/sparkle-possessive.mp3"
        }
